"""
Shared metrics configuration for the Promotion Rule Engine.
"""

from prometheus_client import Counter, Histogram, Gauge, Info, CollectorRegistry
from typing import Dict, Any, Optional


class MetricsCollector:
    """Centralized Prometheus metrics collector for services."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        # Service info
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

        # Health check metrics
        self._metrics["health_check_total"] = Counter(
            "health_check_total",
            "Total health check requests",
            ["status"],
            registry=self.registry
        )

        # Error metrics
        self._metrics["errors_total"] = Counter(
            "errors_total",
            "Total errors",
            ["error_type", "service"],
            registry=self.registry
        )

        if self.service_name == "promotions":
            self._setup_promotions_metrics()

    def _setup_promotions_metrics(self):
        """Set up promotion-engine metrics."""
        self._metrics["promotion_selections_total"] = Counter(
            "promotion_selections_total",
            "Total promotion selection attempts",
            ["outcome"],
            registry=self.registry
        )

        self._metrics["promotion_selection_duration_seconds"] = Histogram(
            "promotion_selection_duration_seconds",
            "Promotion selection duration in seconds",
            registry=self.registry
        )

        self._metrics["promotion_rules_loaded"] = Gauge(
            "promotion_rules_loaded",
            "Number of promotion rules currently in force",
            registry=self.registry
        )

        self._metrics["promotion_rule_reloads_total"] = Counter(
            "promotion_rule_reloads_total",
            "Total rule set loads",
            ["status"],
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

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

    def record_health_check(self, status: str):
        """Record health check metrics."""
        self._metrics["health_check_total"].labels(status=status).inc()

    def record_error(self, error_type: str, service: Optional[str] = None):
        """Record error metrics."""
        service_name = service or self.service_name
        self._metrics["errors_total"].labels(error_type=error_type, service=service_name).inc()

    def record_selection(self, hit: bool, duration: float):
        """Record a promotion selection attempt."""
        if "promotion_selections_total" not in self._metrics:
            return
        outcome = "hit" if hit else "miss"
        self._metrics["promotion_selections_total"].labels(outcome=outcome).inc()
        self._metrics["promotion_selection_duration_seconds"].observe(duration)

    def record_rule_load(self, success: bool, rule_count: int):
        """Record a rule set (re)load."""
        if "promotion_rule_reloads_total" not in self._metrics:
            return
        status = "success" if success else "failure"
        self._metrics["promotion_rule_reloads_total"].labels(status=status).inc()
        self._metrics["promotion_rules_loaded"].set(rule_count)


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
