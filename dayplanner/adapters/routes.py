"""Routing adapter using the Google Routes API v2 (computeRoutes)."""

import logging
import uuid
from functools import lru_cache

import httpx
from pydantic import BaseModel

from dayplanner.adapters.fixtures import HaversineRouteProvider
from dayplanner.adapters.provenance import provenance_for_http
from dayplanner.config import Settings
from dayplanner.models.common import Geo, TransportMode
from dayplanner.models.tool_results import RouteLeg
from dayplanner.planning.reconciler import RouteProvider
from dayplanner.tools.executor import ToolConfig, ToolContext, ToolExecutor, routing_tool_config
from dayplanner.utils.logging import StructuredToolLogger
from dayplanner.utils.metrics import PrometheusToolMetrics

logger = logging.getLogger(__name__)

TOOL_NAME = "routes.google"
FIELD_MASK = "routes.duration,routes.distanceMeters,routes.polyline.encodedPolyline"

# Planner modes -> Routes API travelMode
GOOGLE_TRAVEL_MODES = {
    TransportMode.walk: "WALK",
    TransportMode.drive: "DRIVE",
    TransportMode.public_transit: "TRANSIT",
    TransportMode.bicycle: "BICYCLE",
}


class RouteNotFoundError(Exception):
    """The provider answered but returned no route."""

    pass


class RouteRequest(BaseModel):
    """One computeRoutes call; doubles as the response cache key."""

    origin: Geo
    destination: Geo
    mode: TransportMode


def parse_duration(value: str) -> int:
    """Parse a protobuf duration string such as "754s" into whole seconds.

    Raises:
        ValueError: Not a seconds duration
    """
    if not value.endswith("s"):
        raise ValueError(f"Unexpected duration format: {value!r}")
    return round(float(value[:-1]))


def build_request_body(request: RouteRequest) -> dict[str, object]:
    """Build the computeRoutes JSON body for one segment."""
    travel_mode = GOOGLE_TRAVEL_MODES[request.mode]
    body: dict[str, object] = {
        "origin": {
            "location": {
                "latLng": {"latitude": request.origin.lat, "longitude": request.origin.lng}
            }
        },
        "destination": {
            "location": {
                "latLng": {
                    "latitude": request.destination.lat,
                    "longitude": request.destination.lng,
                }
            }
        },
        "travelMode": travel_mode,
        "computeAlternativeRoutes": False,
        "routeModifiers": {"avoidTolls": False, "avoidHighways": False, "avoidFerries": False},
        "languageCode": "en-US",
        "units": "METRIC",
    }
    # Traffic-aware routing is only accepted for driving
    if travel_mode == "DRIVE":
        body["routingPreference"] = "TRAFFIC_AWARE"
    return body


class GoogleRoutesProvider:
    """RouteProvider backed by the Google Routes API.

    Each call goes through the ToolExecutor, so it gets the hard timeout,
    the shared circuit breaker for "routes.google" and the response cache.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        executor: ToolExecutor,
        config: ToolConfig,
        client: httpx.AsyncClient | None = None,
        request_timeout_s: float = 2.0,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._executor = executor
        self._config = config
        self._client = client
        self._request_timeout_s = request_timeout_s

    async def compute_route(
        self, origin: Geo, destination: Geo, mode: TransportMode
    ) -> RouteLeg:
        """Compute one route.

        Raises:
            ToolTimeoutError: No answer within the hard timeout
            ToolCircuitOpenError: Too many recent failures
            ToolExecutionError: HTTP error, empty route list or bad payload
        """
        ctx = ToolContext(
            trace_id=uuid.uuid4().hex, tool_name=TOOL_NAME, source=f"tool.{TOOL_NAME}"
        )
        request = RouteRequest(origin=origin, destination=destination, mode=mode)
        result = await self._executor.execute(ctx, self._config, self._fetch, request)
        return result.value

    async def _fetch(self, request: RouteRequest) -> RouteLeg:
        headers = {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self._api_key,
            "X-Goog-FieldMask": FIELD_MASK,
        }

        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=self._request_timeout_s)
            close_client = True

        try:
            response = await client.post(
                self._base_url, json=build_request_body(request), headers=headers
            )
            response.raise_for_status()
            data = response.json()

            # Response structure: {routes: [{duration: "754s", distanceMeters, polyline: {...}}]}
            routes = data.get("routes") or []
            if not routes:
                raise RouteNotFoundError(f"No route found for {request.mode.value} segment")

            route = routes[0]
            return RouteLeg(
                mode=request.mode,
                origin=request.origin,
                destination=request.destination,
                duration_seconds=parse_duration(route["duration"]),
                distance_meters=route.get("distanceMeters", 0),
                encoded_path=route.get("polyline", {}).get("encodedPolyline", ""),
                provenance=provenance_for_http(source=TOOL_NAME, url=self._base_url),
            )
        finally:
            if close_client:
                await client.aclose()


@lru_cache
def get_routing_executor() -> ToolExecutor:
    """Executor shared by every routing call; owns the routing response cache."""
    return ToolExecutor(metrics=PrometheusToolMetrics(), logger=StructuredToolLogger())


@lru_cache
def get_offline_provider() -> HaversineRouteProvider:
    """Shared haversine provider used when no API key is configured."""
    logger.warning("GOOGLE_MAPS_API_KEY not set, using offline route estimates")
    return HaversineRouteProvider()


def get_route_provider(
    settings: Settings, client: httpx.AsyncClient | None = None
) -> RouteProvider:
    """Get the configured routing provider.

    Falls back to the offline haversine estimate when no Google Maps API
    key is configured.
    """
    api_key = settings.google_maps_api_key
    if not (api_key and api_key.get_secret_value()):
        return get_offline_provider()

    return GoogleRoutesProvider(
        api_key=api_key.get_secret_value(),
        base_url=settings.routes_base_url,
        executor=get_routing_executor(),
        config=routing_tool_config(settings),
        client=client,
        request_timeout_s=settings.routing_soft_timeout_ms / 1000,
    )
