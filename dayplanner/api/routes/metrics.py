"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint.

    Exposes all registered Prometheus metrics including:
    - tool_latency_ms{tool, outcome}
    - tool_errors_total{tool, reason}
    - route_segments_total{outcome}
    - reconcile_passes_total{result}
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
