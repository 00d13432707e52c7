"""Shared pytest fixtures for all test suites."""

from collections.abc import Iterator
from datetime import date

import pytest

from dayplanner.adapters.routes import get_offline_provider
from dayplanner.config import get_settings
from dayplanner.models.common import Geo
from dayplanner.models.itinerary import Itinerary, PlanConfig
from dayplanner.models.venue import Venue
from dayplanner.planning.builder import build_itinerary
from dayplanner.tools.executor import get_breaker_registry


@pytest.fixture
def plan_date() -> date:
    """A Monday."""
    return date(2026, 10, 19)


@pytest.fixture
def venues() -> list[Venue]:
    """Three geocoded Paris venues in visiting order."""
    return [
        Venue(id="louvre", title="Louvre", coordinates=Geo(lat=48.8606, lng=2.3376)),
        Venue(id="orsay", title="Musee d'Orsay", coordinates=Geo(lat=48.8600, lng=2.3266)),
        Venue(id="pompidou", title="Centre Pompidou", coordinates=Geo(lat=48.8607, lng=2.3522)),
    ]


@pytest.fixture
def itinerary(venues: list[Venue], plan_date: date) -> Itinerary:
    """[V1, T1, V2, T2, V3] with pending transits and default config."""
    return build_itinerary(venues, plan_date, PlanConfig())


@pytest.fixture(autouse=True)
def reset_shared_state() -> Iterator[None]:
    """Clear the breaker registry and cached settings around every test."""
    get_breaker_registry().clear()
    get_settings.cache_clear()
    get_offline_provider.cache_clear()
    yield
    get_breaker_registry().clear()
    get_settings.cache_clear()
    get_offline_provider.cache_clear()
