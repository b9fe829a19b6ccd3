"""
Prometheus metrics for the outdated version alert service.

Defines and exposes metrics for:
- Alerts created, superseded and resolved
- Tech debt event emission outcomes
- Fan-out trigger latency

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    REGISTRY,
    Counter,
    Histogram,
    start_http_server,
)

from src.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for latency histograms (in seconds)
LATENCY_BUCKETS = (0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)


class MetricsCollector:
    """
    Prometheus metrics collector for the alert service.

    Usage:
        metrics = get_metrics()
        metrics.record_alert_created("TemplateVersion", superseded=1)
        metrics.record_notification("failed")
    """

    def __init__(self):
        """Initialize Prometheus metrics."""

        self.alerts_created = Counter(
            "version_alerts_created_total",
            "Total outdated version alerts created",
            ["type"],
        )

        self.alerts_superseded = Counter(
            "version_alerts_superseded_total",
            "Open alerts canceled because a newer alert replaced them",
            ["type"],
        )

        self.alerts_resolved = Counter(
            "version_alerts_resolved_total",
            "Alerts resolved by a service template update",
        )

        self.notifications = Counter(
            "version_alerts_notifications_total",
            "Tech debt events dispatched",
            ["status"],  # status: emitted, failed
        )

        self.trigger_latency = Histogram(
            "version_alerts_trigger_seconds",
            "Latency of alert fan-out triggers",
            ["trigger"],  # trigger: template, plugin
            buckets=LATENCY_BUCKETS,
        )

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to expose metrics on (default from settings)
        """
        settings = get_settings()
        port = port or settings.metrics_port

        start_http_server(port, registry=REGISTRY)
        logger.info(f"Prometheus metrics server started on port {port}")

    # Convenience methods

    def record_alert_created(self, alert_type: str, superseded: int = 0) -> None:
        self.alerts_created.labels(type=alert_type).inc()
        if superseded:
            self.alerts_superseded.labels(type=alert_type).inc(superseded)

    def record_alerts_resolved(self, count: int) -> None:
        if count:
            self.alerts_resolved.inc(count)

    def record_notification(self, status: str) -> None:
        self.notifications.labels(status=status).inc()


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
