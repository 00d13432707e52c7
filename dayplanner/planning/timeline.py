"""Timeline recalculation - walks the sequence and restamps every item."""

from collections.abc import Sequence

from dayplanner.models.itinerary import (
    BREAK_DURATION_MINUTES,
    BreakItem,
    Itinerary,
    ItineraryItem,
    PlanConfig,
    TransitItem,
    VisitItem,
)
from dayplanner.planning.timeutils import from_minutes, to_minutes


def item_duration(item: ItineraryItem, config: PlanConfig) -> int:
    """Minutes an item occupies on the timeline.

    Transit segments without a computed duration use the configured
    default, so unresolved plans still render a full timeline.
    """
    if isinstance(item, VisitItem):
        return config.visit_duration_minutes
    if isinstance(item, TransitItem):
        if item.duration_minutes is not None:
            return item.duration_minutes
        return config.default_transit_minutes
    if isinstance(item, BreakItem):
        return BREAK_DURATION_MINUTES
    raise TypeError(f"Unknown itinerary item: {type(item).__name__}")


def retime_from(
    items: Sequence[ItineraryItem], index: int, config: PlanConfig
) -> list[ItineraryItem]:
    """Restamp items[index:], leaving earlier items as they are.

    The cursor starts at the end of items[index - 1], or at the configured
    start time when index is 0.

    Returns:
        New list; restamped items are copies, untouched items are shared
    """
    result = list(items)
    if index >= len(result):
        return result

    if index == 0:
        cursor = to_minutes(config.start_time)
    else:
        cursor = to_minutes(result[index - 1].end_time)

    for i in range(index, len(result)):
        item = result[i]
        start = cursor
        cursor += item_duration(item, config)
        result[i] = item.model_copy(
            update={"start_time": from_minutes(start), "end_time": from_minutes(cursor)}
        )

    return result


def recalculate(items: Sequence[ItineraryItem], config: PlanConfig) -> list[ItineraryItem]:
    """Restamp the whole sequence from the configured start time.

    Total and idempotent: safe to call after every mutation.
    """
    return retime_from(items, 0, config)


def recalculate_itinerary(itinerary: Itinerary) -> Itinerary:
    """Recalculate an itinerary and clear any pending manual overrides."""
    return itinerary.model_copy(
        update={
            "items": recalculate(itinerary.items, itinerary.config),
            "timeline_dirty": False,
        }
    )


def is_contiguous(items: Sequence[ItineraryItem]) -> bool:
    """Check that every item starts when the previous one ends."""
    return all(items[i + 1].start_time == items[i].end_time for i in range(len(items) - 1))
