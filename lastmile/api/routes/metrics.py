"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint.

    Exposes all registered Prometheus metrics including:
    - intel_fetch_latency_ms{stage, outcome}
    - intel_fetch_errors_total{stage, reason}
    - search_duration_seconds{kind}
    - searches_total{kind, outcome}
    - live_refresh_failures_total
    """
    metrics_output = generate_latest()
    return Response(content=metrics_output, media_type=CONTENT_TYPE_LATEST)
