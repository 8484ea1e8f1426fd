"""Dependency injection container."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from config_db.application.config_db import ClientFactory, ConfigDB
from config_db.infrastructure.config import Config, get_config
from config_db.infrastructure.logging import setup_logging
from config_db.infrastructure.metrics import MetricsRegistry, get_metrics
from config_db.infrastructure.tracing import setup_tracing
from config_db.ports.inbound import AccessStrategy

T = TypeVar("T")


class Container:
    """
    Simple dependency injection container.

    Supports singleton and factory registrations with lazy initialization.
    Factory results are cached, so every resolve() of a type returns the
    same instance until clear().
    """

    def __init__(self) -> None:
        """Initialize the container."""
        self._singletons: dict[type, Any] = {}
        self._factories: dict[type, Callable[[Container], Any]] = {}
        self._instances: dict[type, Any] = {}

    def register_singleton(self, interface: type[T], instance: T) -> None:
        """
        Register a singleton instance.

        Args:
            interface: The interface/type to register
            instance: The singleton instance
        """
        self._singletons[interface] = instance
        self._instances[interface] = instance

    def register_factory(
        self,
        interface: type[T],
        factory: Callable[[Container], T],
    ) -> None:
        """
        Register a factory function for lazy instantiation.

        Args:
            interface: The interface/type to register
            factory: Factory function that takes the container and returns an instance
        """
        self._factories[interface] = factory

    def resolve(self, interface: type[T]) -> T:
        """
        Resolve a dependency.

        Args:
            interface: The interface/type to resolve

        Returns:
            The resolved instance

        Raises:
            KeyError: If no registration exists for the interface
        """
        if interface in self._instances:
            return self._instances[interface]

        if interface in self._factories:
            instance = self._factories[interface](self)
            self._instances[interface] = instance
            return instance

        raise KeyError(f"No registration found for {interface}")

    def has(self, interface: type) -> bool:
        """Check if an interface is registered."""
        return (
            interface in self._singletons
            or interface in self._factories
            or interface in self._instances
        )

    def clear(self) -> None:
        """Clear all registrations and instances."""
        self._singletons.clear()
        self._factories.clear()
        self._instances.clear()


def build_container(
    config: Config | None = None,
    client_factory: ClientFactory | None = None,
    metrics: MetricsRegistry | None = None,
    configure_observability: bool = False,
) -> Container:
    """
    Build a container wired for the config store client.

    Registers Config and MetricsRegistry singletons and a lazy ConfigDB
    factory. The ConfigDB is created unconnected.

    Args:
        config: Configuration (global config if None)
        client_factory: Store client factory (Redis if None)
        metrics: Metrics registry (global registry if None)
        configure_observability: Also set up logging and tracing from config

    Returns:
        The wired container
    """
    config = config or get_config()
    container = Container()
    container.register_singleton(Config, config)
    container.register_singleton(MetricsRegistry, metrics or get_metrics())

    if configure_observability:
        setup_logging(config.observability.log_level, config.observability.log_format)
        setup_tracing(
            service_name=config.observability.otel_service_name,
            otlp_endpoint=config.observability.otel_endpoint,
        )

    container.register_factory(
        ConfigDB,
        lambda c: ConfigDB(
            config=c.resolve(Config),
            client_factory=client_factory,
            strategy=AccessStrategy(c.resolve(Config).connector.strategy),
            metrics=c.resolve(MetricsRegistry),
        ),
    )
    return container


# Global container instance
_container: Container | None = None


def get_container() -> Container:
    """Get the global container instance, building it on first use."""
    global _container
    if _container is None:
        _container = build_container()
    return _container


def reset_container() -> None:
    """Reset the global container (useful for testing)."""
    global _container
    if _container is not None:
        _container.clear()
    _container = None
