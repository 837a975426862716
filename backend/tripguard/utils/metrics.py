"""Prometheus metrics for provider calls and itinerary monitoring."""

from prometheus_client import Counter, Histogram

# Outbound provider calls (places, routes, detour selection)
provider_latency_ms = Histogram(
    "provider_latency_ms",
    "Provider call latency in milliseconds",
    ["provider", "outcome"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000],
)

provider_errors_total = Counter(
    "provider_errors_total",
    "Total provider call errors",
    ["provider", "reason"],
)

# Monitoring outcomes
itinerary_checks_total = Counter(
    "itinerary_checks_total",
    "Itinerary checks by classification",
    ["status"],
)

remedy_applications_total = Counter(
    "remedy_applications_total",
    "Remedy applications by kind and result",
    ["kind", "status"],
)


class PrometheusProviderMetrics:
    """Prometheus-based provider metrics implementation."""

    def record_latency(self, provider: str, outcome: str, latency_ms: float) -> None:
        """Record provider call latency."""
        provider_latency_ms.labels(provider=provider, outcome=outcome).observe(latency_ms)

    def inc_error(self, provider: str, reason: str) -> None:
        """Increment error counter."""
        provider_errors_total.labels(provider=provider, reason=reason).inc()


def record_check(status: str) -> None:
    itinerary_checks_total.labels(status=status).inc()


def record_remedy(kind: str, status: str) -> None:
    remedy_applications_total.labels(kind=kind, status=status).inc()
