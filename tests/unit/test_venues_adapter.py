"""Tests for the exhibition catalogue adapter."""

import httpx
import pytest

from dayplanner.adapters.venues import VenueNotFoundError, fetch_venues, venue_from_exhibition

BASE_URL = "https://catalogue.test/"

EXHIBITIONS = {
    "louvre": {
        "title": "Mona Lisa Up Close",
        "description": "A closer look.",
        "location": {
            "name": "Louvre",
            "address": "Rue de Rivoli",
            "city": "Paris",
            "country": "France",
            "coordinates": {"lat": 48.8606, "lng": 2.3376},
        },
        "closedDays": ["Tuesday"],
        "websiteUrl": "https://louvre.example",
    },
    "orsay": {
        "title": "Impressionists",
        "location": {"name": "Musee d'Orsay", "city": "Paris"},
        "closedDay": "Monday",
        "ticketUrl": "https://orsay.example/tickets",
    },
}


def catalogue_handler(request: httpx.Request) -> httpx.Response:
    venue_id = request.url.path.rsplit("/", 1)[-1]
    if venue_id == "broken":
        return httpx.Response(500)
    if venue_id not in EXHIBITIONS:
        return httpx.Response(200, json={"success": False, "data": None})
    return httpx.Response(200, json={"success": True, "data": EXHIBITIONS[venue_id]})


def mock_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(catalogue_handler))


class TestVenueFromExhibition:
    def test_maps_location_and_urls(self) -> None:
        venue = venue_from_exhibition({**EXHIBITIONS["louvre"], "_id": "louvre"})

        assert venue.id == "louvre"
        assert venue.title == "Mona Lisa Up Close"
        assert venue.coordinates is not None
        assert venue.coordinates.lat == 48.8606
        assert venue.closed_weekdays == ["tuesday"]
        assert venue.location_label == "Louvre, Rue de Rivoli, Paris, France"
        assert venue.url == "https://louvre.example"

    def test_single_closed_day_and_ticket_url(self) -> None:
        venue = venue_from_exhibition({**EXHIBITIONS["orsay"], "_id": "orsay"})

        assert venue.closed_weekdays == ["monday"]
        assert venue.coordinates is None
        assert venue.url == "https://orsay.example/tickets"

    def test_free_text_closures_ignored(self) -> None:
        venue = venue_from_exhibition(
            {"_id": "x", "title": "X", "closedDays": ["Sunday", "Public holidays"]}
        )
        assert venue.closed_weekdays == ["sunday"]

    def test_missing_title_defaults(self) -> None:
        assert venue_from_exhibition({"id": "y"}).title == "Exhibition"


@pytest.mark.asyncio
async def test_fetch_venues_keeps_requested_order() -> None:
    async with mock_client() as client:
        venues = await fetch_venues(["orsay", "louvre"], BASE_URL, client=client)

    assert [venue.id for venue in venues] == ["orsay", "louvre"]


@pytest.mark.asyncio
async def test_fetch_venues_requests_catalogue_path() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return catalogue_handler(request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        await fetch_venues(["louvre"], BASE_URL, client=client)

    assert seen == ["https://catalogue.test/api/exhibitions/louvre"]


@pytest.mark.asyncio
async def test_fetch_venues_skips_missing_and_failed() -> None:
    async with mock_client() as client:
        venues = await fetch_venues(
            ["louvre", "unknown", "broken", "orsay"], BASE_URL, client=client
        )

    assert [venue.id for venue in venues] == ["louvre", "orsay"]


def test_not_found_error_lists_ids() -> None:
    error = VenueNotFoundError(["a", "b"])
    assert error.missing == ["a", "b"]
    assert str(error) == "Unknown venue id(s): a, b"
