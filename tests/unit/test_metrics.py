"""Unit tests for the Prometheus metrics setup."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from prometheus_client import CollectorRegistry

from config_db import __version__
from config_db.infrastructure import metrics as metrics_module
from config_db.infrastructure.metrics import get_metrics, setup_metrics


@pytest.mark.unit
class TestSetupMetrics:
    """Test cases for setup_metrics."""

    def test_starts_scrape_endpoint(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The endpoint serves the given registry and the global registry is replaced."""
        monkeypatch.setattr(metrics_module, "_metrics", None)
        registry = CollectorRegistry(auto_describe=True)

        with patch.object(metrics_module, "start_http_server") as start:
            metrics = setup_metrics(port=9101, registry=registry)

        start.assert_called_once_with(9101, registry=registry)
        assert get_metrics() is metrics
        assert registry.get_sample_value("config_db_info", {"version": __version__}) == 1.0

    def test_metrics_land_in_given_registry(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(metrics_module, "_metrics", None)
        registry = CollectorRegistry(auto_describe=True)

        with patch.object(metrics_module, "start_http_server"):
            metrics = setup_metrics(registry=registry)
        metrics.scan_pages_total.inc(3)

        assert registry.get_sample_value("config_db_scan_pages_total") == 3.0
