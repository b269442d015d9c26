"""
Prometheus metrics for the SWAPI Aggregator.
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, Info

# Upstream calls are slower than local request handling
UPSTREAM_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


class MetricsCollector:
    """Request, cache and upstream metrics on a private registry.

    Each collector owns its registry so several service instances (tests,
    scripts) can coexist in one process.
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else CollectorRegistry()

        Info("service", "Service information", registry=self.registry).info(
            {"service": service_name, "version": "1.0.0"}
        )

        self.http_requests = Counter(
            "http_requests_total",
            "HTTP requests handled",
            ["method", "endpoint", "status_code"],
            registry=self.registry,
        )
        self.http_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry,
        )
        self.health_checks = Counter(
            "health_check_total",
            "Health check results",
            ["status"],
            registry=self.registry,
        )
        self.errors = Counter(
            "errors_total",
            "Errors reported at the HTTP boundary",
            ["error_type"],
            registry=self.registry,
        )
        self.cache_hits = Counter(
            "cache_hits_total",
            "Read-through cache hits",
            ["cache_type"],
            registry=self.registry,
        )
        self.cache_misses = Counter(
            "cache_misses_total",
            "Read-through cache misses",
            ["cache_type"],
            registry=self.registry,
        )
        self.upstream_requests = Counter(
            "upstream_requests_total",
            "Upstream catalog requests",
            ["resource", "status"],
            registry=self.registry,
        )
        self.upstream_duration = Histogram(
            "upstream_request_duration_seconds",
            "Upstream catalog request duration in seconds",
            ["resource"],
            buckets=UPSTREAM_BUCKETS,
            registry=self.registry,
        )

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        self.http_requests.labels(method=method, endpoint=endpoint, status_code=str(status_code)).inc()
        self.http_duration.labels(method=method, endpoint=endpoint).observe(duration)

    def record_health_check(self, status: str):
        self.health_checks.labels(status=status).inc()

    def record_error(self, error_type: str):
        self.errors.labels(error_type=error_type).inc()

    def record_cache_lookup(self, cache_type: str, hit: bool):
        """Count a cache hit or miss for the key family ``cache_type``."""
        counter = self.cache_hits if hit else self.cache_misses
        counter.labels(cache_type=cache_type).inc()

    def record_upstream_request(self, resource: str, status: str, duration: float):
        """Count an upstream call; ``status`` is the HTTP status or ``"error"``."""
        self.upstream_requests.labels(resource=resource, status=status).inc()
        self.upstream_duration.labels(resource=resource).observe(duration)


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
