"""Health check endpoints.

- /health is a plain liveness probe
- /healthz reports the routing provider and its circuit breaker
"""

import json
from typing import Any

from fastapi import APIRouter, Response

from dayplanner.adapters.routes import TOOL_NAME
from dayplanner.config import Settings, get_settings
from dayplanner.tools.executor import BreakerState, get_breaker_registry

router = APIRouter()


def check_routing(settings: Settings) -> tuple[bool, str]:
    """Check the routing provider's circuit breaker.

    Returns:
        (is_ok, status_message)
    """
    api_key = settings.google_maps_api_key
    if not (api_key and api_key.get_secret_value()):
        return (True, "offline_estimates")

    breaker = get_breaker_registry().get_or_create(
        tool_name=TOOL_NAME,
        failure_threshold=settings.circuit_breaker_failures,
        window_seconds=settings.circuit_breaker_window_sec,
        half_open_seconds=settings.circuit_breaker_half_open_sec,
    )
    state = breaker.state
    if state == BreakerState.OPEN:
        return (False, "breaker_open")
    return (True, state.value)


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz() -> dict[str, Any] | Response:
    """Component health.

    An open routing breaker is reported as degraded: plans still build,
    with every segment at the default duration.

    Returns:
        200 with component status if routing is usable
        503 if the routing breaker is open
    """
    settings = get_settings()
    routing_ok, routing_status = check_routing(settings)

    response_body = {
        "status": "ok" if routing_ok else "degraded",
        "components": {
            "routing": routing_status,
            "venues": "not_checked",
        },
    }

    if not routing_ok:
        return Response(
            content=json.dumps(response_body),
            status_code=503,
            media_type="application/json",
        )

    return response_body
