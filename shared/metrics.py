"""
Shared metrics configuration for the declarative mock service.
"""

from typing import Dict, Any, Optional

from prometheus_client import Counter, Histogram, Info, CollectorRegistry, generate_latest


class MetricsCollector:
    """Centralized metrics collector for services."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        # Own registry per collector so several services can live in one process
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up metrics for the service."""

        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry
        )

        # Error metrics
        self._metrics["errors_total"] = Counter(
            "errors_total",
            "Total errors",
            ["error_type", "service"],
            registry=self.registry
        )

        # Mock engine metrics
        self._metrics["mock_resolutions_total"] = Counter(
            "mock_resolutions_total",
            "Total mock resolutions by outcome",
            ["method", "outcome"],
            registry=self.registry
        )

        self._metrics["resource_loads_total"] = Counter(
            "resource_loads_total",
            "Total resource loads from backing storage",
            ["outcome"],
            registry=self.registry
        )

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record HTTP request metrics."""
        self._metrics["http_requests_total"].labels(
            method=method,
            endpoint=endpoint,
            status_code=str(status_code)
        ).inc()

        self._metrics["http_request_duration_seconds"].labels(
            method=method,
            endpoint=endpoint
        ).observe(duration)

    def record_error(self, error_type: str):
        """Record error metrics."""
        self._metrics["errors_total"].labels(
            error_type=error_type,
            service=self.service_name
        ).inc()

    def record_resolution(self, method: str, outcome: str):
        """Record the outcome of a mock resolution (hit, not_found)."""
        self._metrics["mock_resolutions_total"].labels(
            method=method,
            outcome=outcome
        ).inc()

    def record_resource_load(self, outcome: str):
        """Record a backing-storage load (ok, error)."""
        self._metrics["resource_loads_total"].labels(outcome=outcome).inc()

    def export(self) -> bytes:
        """Render the collector's registry in Prometheus text format."""
        return generate_latest(self.registry)
