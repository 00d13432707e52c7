"""Edit operations on a day plan.

Every function is pure: it returns a new Itinerary and never mutates its
input. All edits except set_note and set_item_time return a fully
recalculated timeline. Edits that change which items neighbour a transit
(move_item, set_mode) must be followed by a reconciliation pass; the
planning session takes care of that.
"""

from typing import Literal

from dayplanner.models.common import TransportMode
from dayplanner.models.itinerary import (
    BREAK_DURATION_MINUTES,
    DEFAULT_BREAK_NOTE,
    BreakItem,
    Itinerary,
    ItineraryItem,
    PlanConfig,
    TransitItem,
    VisitItem,
)
from dayplanner.planning.builder import new_item_id
from dayplanner.planning.errors import (
    InvalidItineraryError,
    ItemIndexError,
    NoteNotSupportedError,
    NotATransitItemError,
)
from dayplanner.planning.reconciler import clear_route
from dayplanner.planning.timeline import recalculate
from dayplanner.planning.timeutils import from_minutes, to_minutes

TimeField = Literal["start_time", "end_time"]


def _check_index(itinerary: Itinerary, index: int) -> None:
    if not 0 <= index < len(itinerary.items):
        raise ItemIndexError(index, len(itinerary.items))


def _with_items(itinerary: Itinerary, items: list[ItineraryItem]) -> Itinerary:
    return itinerary.model_copy(
        update={"items": recalculate(items, itinerary.config), "timeline_dirty": False}
    )


def reslot_transits(items: list[ItineraryItem]) -> list[ItineraryItem]:
    """Put transit segments back between visits after a reorder.

    Transits left dangling (first, last, or directly after another transit)
    are taken out and reused, in order, for any two visits that ended up
    adjacent. A new pending transit is created only when none is left to
    reuse; leftovers are dropped.
    """
    kept: list[ItineraryItem] = []
    spare: list[TransitItem] = []
    for item in items:
        if isinstance(item, TransitItem) and (not kept or isinstance(kept[-1], TransitItem)):
            spare.append(item)
            continue
        kept.append(item)

    trailing: list[TransitItem] = []
    while kept and isinstance(kept[-1], TransitItem):
        trailing.insert(0, kept.pop())  # type: ignore[arg-type]
    spare.extend(trailing)

    result: list[ItineraryItem] = []
    for item in kept:
        if isinstance(item, VisitItem) and result and isinstance(result[-1], VisitItem):
            if spare:
                result.append(spare.pop(0))
            else:
                result.append(
                    TransitItem(
                        id=new_item_id("transit"),
                        start_time=result[-1].end_time,
                        end_time=result[-1].end_time,
                    )
                )
        result.append(item)
    return result


def move_item(itinerary: Itinerary, from_index: int, to_index: int) -> Itinerary:
    """Move one item to a new position.

    The item is spliced out and reinserted at to_index, then transits are
    re-slotted so visits stay separated by travel segments. Item ids are
    preserved. Every transit loses its previous resolution, since its
    neighbours may have changed; the next reconciliation pass recomputes
    all of them.

    Raises:
        ItemIndexError: Either index is out of range
    """
    _check_index(itinerary, from_index)
    _check_index(itinerary, to_index)

    items = list(itinerary.items)
    moved = items.pop(from_index)
    items.insert(to_index, moved)
    items = [
        clear_route(item) if isinstance(item, TransitItem) else item
        for item in reslot_transits(items)
    ]
    return _with_items(itinerary, items)


def remove_item(itinerary: Itinerary, index: int) -> Itinerary:
    """Delete one item and recalculate.

    Transits whose neighbours change are not repaired here; the next
    reconciliation pass corrects them.
    """
    _check_index(itinerary, index)
    items = list(itinerary.items)
    del items[index]
    return _with_items(itinerary, items)


def add_break(itinerary: Itinerary, note: str = DEFAULT_BREAK_NOTE) -> Itinerary:
    """Append a break after the current last item.

    Raises:
        InvalidItineraryError: The itinerary is empty
    """
    if not itinerary.items:
        raise InvalidItineraryError("Cannot add a break to an empty itinerary")

    start = to_minutes(itinerary.items[-1].end_time)
    new_break = BreakItem(
        id=new_item_id("break"),
        start_time=from_minutes(start),
        end_time=from_minutes(start + BREAK_DURATION_MINUTES),
        note=note,
    )
    return _with_items(itinerary, [*itinerary.items, new_break])


def set_mode(itinerary: Itinerary, index: int, mode: TransportMode) -> Itinerary:
    """Change a transit's mode and drop its resolution.

    Raises:
        ItemIndexError: Index out of range
        NotATransitItemError: The item is not a transit
    """
    _check_index(itinerary, index)
    item = itinerary.items[index]
    if not isinstance(item, TransitItem):
        raise NotATransitItemError(f"Item {item.id} is a {item.kind}, not a transit")

    items = list(itinerary.items)
    items[index] = clear_route(item).model_copy(update={"mode": mode})
    return _with_items(itinerary, items)


def set_note(itinerary: Itinerary, index: int, text: str) -> Itinerary:
    """Replace the free-text note of a visit or break. Timing is unaffected.

    Raises:
        ItemIndexError: Index out of range
        NoteNotSupportedError: The item is a transit
    """
    _check_index(itinerary, index)
    item = itinerary.items[index]
    if isinstance(item, TransitItem):
        raise NoteNotSupportedError(f"Transit item {item.id} has no note")

    items = list(itinerary.items)
    items[index] = item.model_copy(update={"note": text})
    return itinerary.model_copy(update={"items": items})


def set_item_time(itinerary: Itinerary, index: int, field: TimeField, value: str) -> Itinerary:
    """Override one displayed time without cascading.

    This is a scratch edit: neighbouring items are not adjusted, so the
    timeline may stop being contiguous. The itinerary is flagged dirty
    until the next recalculation.

    Raises:
        ItemIndexError: Index out of range
        InvalidItineraryError: Unknown field or malformed time
    """
    _check_index(itinerary, index)
    if field not in ("start_time", "end_time"):
        raise InvalidItineraryError(f"Unknown time field {field!r}")
    try:
        to_minutes(value)
    except ValueError as e:
        raise InvalidItineraryError(str(e)) from e

    items = list(itinerary.items)
    items[index] = items[index].model_copy(update={field: value})
    return itinerary.model_copy(update={"items": items, "timeline_dirty": True})


def update_config(
    itinerary: Itinerary,
    *,
    start_time: str | None = None,
    visit_duration_minutes: int | None = None,
    default_transit_minutes: int | None = None,
) -> Itinerary:
    """Change the plan defaults and recalculate.

    Raises:
        InvalidItineraryError: The new values do not validate
    """
    changes = {
        key: value
        for key, value in {
            "start_time": start_time,
            "visit_duration_minutes": visit_duration_minutes,
            "default_transit_minutes": default_transit_minutes,
        }.items()
        if value is not None
    }
    try:
        config = PlanConfig.model_validate({**itinerary.config.model_dump(), **changes})
    except ValueError as e:
        raise InvalidItineraryError(str(e)) from e

    updated = itinerary.model_copy(update={"config": config})
    return _with_items(updated, list(updated.items))
