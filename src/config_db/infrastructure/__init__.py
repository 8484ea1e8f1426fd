"""Infrastructure layer - cross-cutting concerns."""

from config_db.infrastructure.config import Config, DatabaseSpec, get_config
from config_db.infrastructure.logging import setup_logging, get_logger
from config_db.infrastructure.metrics import setup_metrics, get_metrics, MetricsRegistry
from config_db.infrastructure.tracing import setup_tracing, get_tracer, trace_span

__all__ = [
    "Config",
    "DatabaseSpec",
    "get_config",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "trace_span",
]
