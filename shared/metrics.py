"""
Shared metrics configuration for the Lisk access layer.
"""

from prometheus_client import Counter, Histogram, Info, CollectorRegistry
from typing import Dict, Any, Optional
import threading


class MetricsCollector:
    """Centralized Prometheus metrics for cache and resource operations."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry
        self._metrics: Dict[str, Any] = {}
        self._lock = threading.Lock()
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

        # Cache metrics
        self._metrics["cache_lookups_total"] = Counter(
            "cache_lookups_total",
            "Total cache lookups by result",
            ["result"],
            registry=self.registry
        )

        self._metrics["cache_writes_total"] = Counter(
            "cache_writes_total",
            "Total cache writes by outcome",
            ["outcome"],
            registry=self.registry
        )

        # Resource operation metrics
        self._metrics["resource_operations_total"] = Counter(
            "resource_operations_total",
            "Total resource operations by outcome",
            ["operation", "outcome"],
            registry=self.registry
        )

        self._metrics["resource_operation_duration_seconds"] = Histogram(
            "resource_operation_duration_seconds",
            "Resource operation duration in seconds",
            ["operation"],
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def record_cache_lookup(self, result: str):
        """Record a cache lookup (hit, miss, expired, corrupt)."""
        self.increment_counter("cache_lookups_total", result=result)

    def record_cache_write(self, outcome: str):
        """Record a cache write outcome."""
        self.increment_counter("cache_writes_total", outcome=outcome)

    def record_operation(self, operation: str, outcome: str, duration: float):
        """Record a finished resource operation."""
        self.increment_counter("resource_operations_total", operation=operation, outcome=outcome)
        self.observe_histogram("resource_operation_duration_seconds", duration, operation=operation)

    def increment_counter(self, metric_name: str, **labels):
        """Increment a counter metric."""
        with self._lock:
            if metric_name in self._metrics:
                self._metrics[metric_name].labels(**labels).inc()

    def observe_histogram(self, metric_name: str, value: float, **labels):
        """Observe a histogram metric."""
        with self._lock:
            if metric_name in self._metrics:
                self._metrics[metric_name].labels(**labels).observe(value)


_collectors: Dict[Any, MetricsCollector] = {}
_collectors_lock = threading.Lock()


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get the metrics collector for a service.

    One collector per service and registry; Prometheus rejects registering
    the same metric names twice.
    """
    key = (service_name, registry)
    with _collectors_lock:
        if key not in _collectors:
            _collectors[key] = MetricsCollector(service_name, registry)
        return _collectors[key]
