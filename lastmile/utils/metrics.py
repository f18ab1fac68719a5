"""Prometheus metrics for intelligence fetches and searches."""

from prometheus_client import Counter, Histogram

# Fetch metrics
intel_fetch_latency_ms = Histogram(
    "intel_fetch_latency_ms",
    "Reasoning service fetch latency in milliseconds",
    ["stage", "outcome"],
    buckets=[100, 250, 500, 1000, 2000, 4000, 8000, 16000, 32000],
)

intel_fetch_errors_total = Counter(
    "intel_fetch_errors_total",
    "Total failed or degraded intelligence fetches",
    ["stage", "reason"],
)

# Search metrics
search_duration_seconds = Histogram(
    "search_duration_seconds",
    "End-to-end trip search duration in seconds",
    ["kind"],
    buckets=[0.5, 1, 2, 4, 8, 16, 32, 64],
)

searches_total = Counter(
    "searches_total",
    "Total trip searches by outcome",
    ["kind", "outcome"],
)

live_refresh_failures_total = Counter(
    "live_refresh_failures_total",
    "Total failed live-tracking refreshes",
)


class PrometheusIntelMetrics:
    """Prometheus-based metrics for the intelligence pipeline."""

    def record_fetch(self, stage: str, outcome: str, latency_ms: float) -> None:
        """Record fetch latency."""
        intel_fetch_latency_ms.labels(stage=stage, outcome=outcome).observe(latency_ms)

    def inc_fetch_error(self, stage: str, reason: str) -> None:
        """Increment fetch error counter."""
        intel_fetch_errors_total.labels(stage=stage, reason=reason).inc()

    def record_search(self, kind: str, outcome: str, duration_s: float | None = None) -> None:
        """Count a finished search and, if it has one, observe its duration."""
        searches_total.labels(kind=kind, outcome=outcome).inc()
        if duration_s is not None:
            search_duration_seconds.labels(kind=kind).observe(duration_s)

    def inc_live_failure(self) -> None:
        """Increment live refresh failure counter."""
        live_refresh_failures_total.inc()
