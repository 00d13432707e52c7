"""Venue data source - exhibition records from the catalogue API."""

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import ValidationError

from dayplanner.models.common import Geo
from dayplanner.models.venue import WEEKDAYS, Venue

logger = logging.getLogger(__name__)


class VenueNotFoundError(Exception):
    """Requested venue ids that the catalogue could not supply."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Unknown venue id(s): {', '.join(missing)}")


def venue_from_exhibition(record: dict[str, Any]) -> Venue:
    """Map one catalogue exhibition record to a Venue.

    Raises:
        ValidationError: Record is missing required fields
    """
    location = record.get("location") or {}
    coords = location.get("coordinates") or {}
    coordinates = None
    if coords.get("lat") is not None and coords.get("lng") is not None:
        coordinates = Geo(lat=coords["lat"], lng=coords["lng"])

    closed = record.get("closedDays") or []
    if record.get("closedDay"):
        closed = [*closed, record["closedDay"]]

    return Venue(
        id=str(record.get("_id") or record.get("id") or ""),
        title=record.get("title") or "Exhibition",
        description=record.get("description") or "",
        location_name=location.get("name") or "",
        address=location.get("address") or "",
        city=location.get("city") or "",
        country=location.get("country") or "",
        coordinates=coordinates,
        # Free-text closure values ("Closed on holidays") are not weekday rules
        closed_weekdays=[day for day in closed if day.strip().lower() in WEEKDAYS],
        website_url=record.get("websiteUrl"),
        ticket_url=record.get("ticketUrl"),
    )


async def _fetch_one(client: httpx.AsyncClient, base_url: str, venue_id: str) -> Venue | None:
    url = f"{base_url.rstrip('/')}/api/exhibitions/{venue_id}"
    try:
        response = await client.get(url)
        response.raise_for_status()
        payload = response.json()
        if not payload.get("success") or not payload.get("data"):
            logger.warning(f"[fetch_venues] venue {venue_id} not returned by catalogue")
            return None
        return venue_from_exhibition({**payload["data"], "_id": venue_id})
    except (httpx.HTTPError, ValueError, ValidationError) as e:
        logger.warning(
            f"[fetch_venues] skipping venue {venue_id}",
            extra={"structured": {"venue_id": venue_id, "error_reason": type(e).__name__}},
        )
        return None


async def fetch_venues(
    venue_ids: Sequence[str],
    base_url: str,
    client: httpx.AsyncClient | None = None,
    timeout_s: float = 4.0,
) -> list[Venue]:
    """Fetch venues concurrently, keeping the requested order.

    Venues that cannot be fetched are skipped with a warning.

    Args:
        venue_ids: Catalogue ids in visiting order
        base_url: Catalogue base URL
        client: Optional httpx client (for testing with mocks)
        timeout_s: Per-request timeout when no client is given

    Returns:
        Venues that were found, in the order requested
    """
    close_client = False
    if client is None:
        client = httpx.AsyncClient(timeout=timeout_s)
        close_client = True

    try:
        results = await asyncio.gather(
            *(_fetch_one(client, base_url, venue_id) for venue_id in venue_ids)
        )
    finally:
        if close_client:
            await client.aclose()

    venues = [venue for venue in results if venue is not None]
    logger.info(f"[fetch_venues] requested={len(venue_ids)} found={len(venues)}")
    return venues
