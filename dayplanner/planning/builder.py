"""Initial itinerary construction from the user's selected venues."""

import logging
import uuid
from collections.abc import Sequence
from datetime import date

from dayplanner.models.common import TransportMode
from dayplanner.models.itinerary import Itinerary, ItineraryItem, PlanConfig, TransitItem, VisitItem
from dayplanner.models.venue import Venue
from dayplanner.planning.errors import InvalidItineraryError
from dayplanner.planning.timeutils import from_minutes, to_minutes

logger = logging.getLogger(__name__)

MIN_VENUES = 2


def new_item_id(prefix: str) -> str:
    """Generate an item id that stays stable across reorders."""
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def build_itinerary(
    venues: Sequence[Venue],
    plan_date: date,
    config: PlanConfig | None = None,
) -> Itinerary:
    """Build the initial visit/transit sequence for a day.

    Venues are kept in the order given; the builder never reorders. Each
    consecutive pair of visits gets a public-transit segment at the
    default duration, to be refined later by route reconciliation.

    Args:
        venues: Selected venues in visiting order
        plan_date: Calendar date of the plan
        config: Start time and default durations (defaults if omitted)

    Returns:
        Timestamped Itinerary

    Raises:
        InvalidItineraryError: Fewer than two venues, or a venue listed twice
    """
    config = config or PlanConfig()

    if len(venues) < MIN_VENUES:
        raise InvalidItineraryError(
            f"A day plan needs at least {MIN_VENUES} venues, got {len(venues)}"
        )

    seen: set[str] = set()
    for venue in venues:
        if venue.id in seen:
            raise InvalidItineraryError(f"Venue {venue.id} is listed more than once")
        seen.add(venue.id)

    items: list[ItineraryItem] = []
    cursor = to_minutes(config.start_time)

    for index, venue in enumerate(venues):
        visit_start = cursor
        cursor += config.visit_duration_minutes
        items.append(
            VisitItem(
                id=f"visit-{venue.id}",
                start_time=from_minutes(visit_start),
                end_time=from_minutes(cursor),
                venue=venue,
            )
        )

        if index < len(venues) - 1:
            transit_start = cursor
            cursor += config.default_transit_minutes
            items.append(
                TransitItem(
                    id=new_item_id("transit"),
                    start_time=from_minutes(transit_start),
                    end_time=from_minutes(cursor),
                    mode=TransportMode.public_transit,
                )
            )

    logger.info(
        f"[build_itinerary] date={plan_date.isoformat()} venues={len(venues)} items={len(items)}"
    )
    return Itinerary(date=plan_date, config=config, items=items)
