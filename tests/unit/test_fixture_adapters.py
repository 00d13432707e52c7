"""Tests for the offline haversine route provider."""

import pytest

from dayplanner.adapters.fixtures import (
    MODE_SPEEDS_KMH,
    HaversineRouteProvider,
    encode_polyline,
    haversine_meters,
)
from dayplanner.models.common import Geo, TransportMode

LOUVRE = Geo(lat=48.8606, lng=2.3376)
ORSAY = Geo(lat=48.8600, lng=2.3266)


def test_haversine_distance() -> None:
    assert haversine_meters(LOUVRE, LOUVRE) == 0
    distance = haversine_meters(LOUVRE, ORSAY)
    assert 780 < distance < 840
    assert haversine_meters(ORSAY, LOUVRE) == pytest.approx(distance)


def test_encode_polyline_matches_reference_encoding() -> None:
    points = [Geo(lat=38.5, lng=-120.2), Geo(lat=40.7, lng=-120.95)]
    assert encode_polyline(points) == "_p~iF~ps|U_ulLnnqC"
    assert encode_polyline([]) == ""


@pytest.mark.asyncio
async def test_compute_route_uses_mode_speed() -> None:
    provider = HaversineRouteProvider()

    walk = await provider.compute_route(LOUVRE, ORSAY, TransportMode.walk)
    drive = await provider.compute_route(LOUVRE, ORSAY, TransportMode.drive)

    expected_walk = int(walk.distance_meters / 1000 / MODE_SPEEDS_KMH[TransportMode.walk] * 3600)
    assert abs(walk.duration_seconds - expected_walk) <= 1
    assert walk.duration_seconds > drive.duration_seconds
    assert walk.distance_meters == drive.distance_meters
    assert walk.mode == TransportMode.walk


@pytest.mark.asyncio
async def test_compute_route_is_deterministic() -> None:
    provider = HaversineRouteProvider()

    first = await provider.compute_route(LOUVRE, ORSAY, TransportMode.bicycle)
    second = await provider.compute_route(LOUVRE, ORSAY, TransportMode.bicycle)

    assert first.duration_seconds == second.duration_seconds
    assert first.encoded_path == second.encoded_path == encode_polyline([LOUVRE, ORSAY])


@pytest.mark.asyncio
async def test_estimate_provenance() -> None:
    provider = HaversineRouteProvider()
    leg = await provider.compute_route(LOUVRE, ORSAY, TransportMode.public_transit)

    assert leg.provenance.source == "tool.routes.haversine"
    assert leg.provenance.source_url.startswith("local://routes.haversine/public_transit_")
    assert leg.provenance.cache_hit is False
