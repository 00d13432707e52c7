"""Offline routing estimates for development and keyless deployments."""

import math

from dayplanner.adapters.provenance import provenance_for_estimate
from dayplanner.models.common import Geo, TransportMode
from dayplanner.models.tool_results import RouteLeg

EARTH_RADIUS_KM = 6371

# Mode speeds (km/h)
MODE_SPEEDS_KMH = {
    TransportMode.walk: 5.0,
    TransportMode.bicycle: 15.0,
    TransportMode.public_transit: 30.0,
    TransportMode.drive: 25.0,
}


def haversine_meters(origin: Geo, destination: Geo) -> float:
    """Great-circle distance between two points in meters."""
    lat1, lng1 = math.radians(origin.lat), math.radians(origin.lng)
    lat2, lng2 = math.radians(destination.lat), math.radians(destination.lng)

    dlat = lat2 - lat1
    dlng = lng2 - lng1

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    c = 2 * math.asin(math.sqrt(a))
    return EARTH_RADIUS_KM * c * 1000


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    chunks = []
    while value >= 0x20:
        chunks.append(chr((0x20 | (value & 0x1F)) + 63))
        value >>= 5
    chunks.append(chr(value + 63))
    return "".join(chunks)


def encode_polyline(points: list[Geo]) -> str:
    """Encode points in Google's encoded polyline format (precision 5)."""
    encoded = []
    prev_lat = prev_lng = 0
    for point in points:
        lat, lng = round(point.lat * 1e5), round(point.lng * 1e5)
        encoded.append(_encode_value(lat - prev_lat))
        encoded.append(_encode_value(lng - prev_lng))
        prev_lat, prev_lng = lat, lng
    return "".join(encoded)


class HaversineRouteProvider:
    """RouteProvider that estimates straight-line routes at per-mode speeds.

    Deterministic and never fails, so it is also the provider used in tests
    that need a successful reconciliation.
    """

    async def compute_route(
        self, origin: Geo, destination: Geo, mode: TransportMode
    ) -> RouteLeg:
        distance_m = haversine_meters(origin, destination)
        speed_kmh = MODE_SPEEDS_KMH.get(mode, 20.0)
        duration_seconds = int(distance_m / 1000 / speed_kmh * 3600)

        return RouteLeg(
            mode=mode,
            origin=origin,
            destination=destination,
            duration_seconds=duration_seconds,
            distance_meters=round(distance_m),
            encoded_path=encode_polyline([origin, destination]),
            provenance=provenance_for_estimate(
                "routes.haversine",
                f"{mode.value}_{origin.lat:.4f}_{origin.lng:.4f}",
            ),
        )
