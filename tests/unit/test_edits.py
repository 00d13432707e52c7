"""Tests for pure edit operations."""

from datetime import UTC, datetime

import pytest

from dayplanner.models.common import Provenance, TransportMode
from dayplanner.models.itinerary import (
    DEFAULT_BREAK_NOTE,
    BreakItem,
    Itinerary,
    TransitItem,
    VisitItem,
)
from dayplanner.models.tool_results import RouteLeg
from dayplanner.planning.edits import (
    add_break,
    move_item,
    remove_item,
    reslot_transits,
    set_item_time,
    set_mode,
    set_note,
    update_config,
)
from dayplanner.planning.errors import (
    InvalidItineraryError,
    ItemIndexError,
    NoteNotSupportedError,
    NotATransitItemError,
)
from dayplanner.planning.reconciler import apply_route
from dayplanner.planning.timeline import is_contiguous
from dayplanner.planning.timeutils import format_total_duration


def resolved(itinerary: Itinerary) -> Itinerary:
    """Give every transit a 10-minute provider route."""
    items = [
        item.model_copy(
            update={"duration_minutes": 10, "distance_meters": 900, "path": "abc"}
        )
        if isinstance(item, TransitItem)
        else item
        for item in itinerary.items
    ]
    return itinerary.model_copy(update={"items": items})


class TestMoveItem:
    def test_last_visit_to_front_keeps_transits_between_visits(self, itinerary: Itinerary) -> None:
        v1, _, v2, _, v3 = itinerary.items

        result = move_item(itinerary, 4, 0)

        assert [item.kind for item in result.items] == [
            "visit",
            "transit",
            "visit",
            "transit",
            "visit",
        ]
        assert [result.items[i].id for i in (0, 2, 4)] == [v3.id, v1.id, v2.id]

    def test_transit_ids_are_reused(self, itinerary: Itinerary) -> None:
        before = {item.id for item in itinerary.transits()}
        after = {item.id for item in move_item(itinerary, 4, 0).transits()}
        assert after == before

    def test_clears_all_transit_resolutions(self, itinerary: Itinerary) -> None:
        result = move_item(resolved(itinerary), 4, 0)
        for transit in result.transits():
            assert transit.duration_minutes is None
            assert transit.distance_meters is None
            assert transit.path is None

    def test_recalculates_from_start(self, itinerary: Itinerary) -> None:
        result = move_item(resolved(itinerary), 0, 4)
        assert result.items[0].start_time == "09:00"
        assert result.items[-1].end_time == "13:00"
        assert is_contiguous(result.items)

    def test_first_visit_to_end(self, itinerary: Itinerary) -> None:
        v1, _, v2, _, v3 = itinerary.items
        result = move_item(itinerary, 0, 4)
        visits = [item.id for item in result.items if isinstance(item, VisitItem)]
        assert visits == [v2.id, v3.id, v1.id]
        assert isinstance(result.items[3], TransitItem)

    def test_same_position_is_noop_for_order(self, itinerary: Itinerary) -> None:
        result = move_item(itinerary, 2, 2)
        assert [item.id for item in result.items] == [item.id for item in itinerary.items]

    def test_new_transit_created_when_none_spare(self, itinerary: Itinerary) -> None:
        two_visits = remove_item(itinerary.model_copy(update={"items": itinerary.items[:3]}), 1)
        assert [item.kind for item in two_visits.items] == ["visit", "visit"]

        result = move_item(two_visits, 1, 0)

        assert [item.kind for item in result.items] == ["visit", "transit", "visit"]
        assert result.items[1].id.startswith("transit-")

    def test_out_of_range(self, itinerary: Itinerary) -> None:
        with pytest.raises(ItemIndexError):
            move_item(itinerary, 0, 5)
        with pytest.raises(IndexError):
            move_item(itinerary, -1, 0)


class TestReslotTransits:
    def test_keeps_break_between_visits(self, itinerary: Itinerary) -> None:
        v1, t1, v2 = itinerary.items[:3]
        pause = BreakItem(id="break-1", start_time="10:00", end_time="10:30")
        items = reslot_transits([v1, pause, v2, t1])
        assert [item.kind for item in items] == ["visit", "break", "visit"]

    def test_drops_consecutive_transits(self, itinerary: Itinerary) -> None:
        v1, t1, v2, t2, _ = itinerary.items
        items = reslot_transits([v1, t1, t2, v2])
        assert [item.id for item in items] == [v1.id, t1.id, v2.id]


class TestRemoveItem:
    def test_removes_and_recalculates(self, itinerary: Itinerary) -> None:
        result = remove_item(itinerary, 2)

        assert len(result.items) == 4
        assert itinerary.items[2].id not in {item.id for item in result.items}
        assert is_contiguous(result.items)
        assert result.items[-1].end_time == "12:00"

    def test_does_not_repair_transits(self, itinerary: Itinerary) -> None:
        result = remove_item(itinerary, 2)
        assert [item.kind for item in result.items] == ["visit", "transit", "transit", "visit"]

    def test_out_of_range(self, itinerary: Itinerary) -> None:
        with pytest.raises(ItemIndexError, match="out of range"):
            remove_item(itinerary, 5)


class TestAddBreak:
    def test_appends_thirty_minute_break(self, itinerary: Itinerary) -> None:
        result = add_break(itinerary)

        pause = result.items[-1]
        assert isinstance(pause, BreakItem)
        assert (pause.start_time, pause.end_time) == ("13:00", "13:30")
        assert pause.note == DEFAULT_BREAK_NOTE

    def test_custom_note(self, itinerary: Itinerary) -> None:
        assert add_break(itinerary, "Lunch").items[-1].note == "Lunch"

    def test_empty_itinerary_raises(self, itinerary: Itinerary) -> None:
        with pytest.raises(InvalidItineraryError):
            add_break(itinerary.model_copy(update={"items": []}))


class TestSetMode:
    def test_changes_mode_and_clears_route(self, itinerary: Itinerary) -> None:
        result = set_mode(resolved(itinerary), 1, TransportMode.walk)

        transit = result.items[1]
        assert isinstance(transit, TransitItem)
        assert transit.mode == TransportMode.walk
        assert transit.duration_minutes is None
        assert transit.distance_meters is None
        assert transit.path is None
        assert transit.last_error is None
        # Back to the default duration until the next pass
        assert transit.end_time == "10:30"

    def test_rejects_visit(self, itinerary: Itinerary) -> None:
        with pytest.raises(NotATransitItemError):
            set_mode(itinerary, 0, TransportMode.drive)

    def test_error_is_type_error(self, itinerary: Itinerary) -> None:
        with pytest.raises(TypeError):
            set_mode(itinerary, 2, TransportMode.drive)


class TestSetNote:
    def test_sets_visit_note_without_retiming(self, itinerary: Itinerary) -> None:
        result = set_note(itinerary, 0, "Buy tickets online")
        assert result.items[0].note == "Buy tickets online"
        assert result.items[0].start_time == itinerary.items[0].start_time

    def test_sets_break_note(self, itinerary: Itinerary) -> None:
        with_break = add_break(itinerary)
        result = set_note(with_break, 5, "Lunch at the cafe")
        assert result.items[5].note == "Lunch at the cafe"

    def test_rejects_transit(self, itinerary: Itinerary) -> None:
        with pytest.raises(NoteNotSupportedError):
            set_note(itinerary, 1, "nope")


class TestSetItemTime:
    def test_sets_field_without_cascading(self, itinerary: Itinerary) -> None:
        result = set_item_time(itinerary, 2, "start_time", "10:45")

        assert result.items[2].start_time == "10:45"
        assert result.items[2].end_time == "11:30"
        assert result.items[1].end_time == "10:30"
        assert result.timeline_dirty is True
        assert not is_contiguous(result.items)

    def test_invalid_value(self, itinerary: Itinerary) -> None:
        with pytest.raises(InvalidItineraryError):
            set_item_time(itinerary, 0, "end_time", "25:99")

    def test_invalid_field(self, itinerary: Itinerary) -> None:
        with pytest.raises(InvalidItineraryError):
            set_item_time(itinerary, 0, "duration", "10:00")  # type: ignore[arg-type]

    def test_next_structural_edit_clears_override(self, itinerary: Itinerary) -> None:
        dirty = set_item_time(itinerary, 2, "start_time", "10:45")
        result = add_break(dirty)
        assert result.timeline_dirty is False
        assert result.items[2].start_time == "10:30"

    def test_end_before_start_gives_signed_total(self, itinerary: Itinerary) -> None:
        result = set_item_time(itinerary, 4, "end_time", "08:30")

        assert result.total_minutes() == -30
        assert format_total_duration(result.total_minutes()) == "-0h 30m"


class TestUpdateConfig:
    def test_new_start_time_recalculates(self, itinerary: Itinerary) -> None:
        result = update_config(itinerary, start_time="10:00")
        assert result.config.start_time == "10:00"
        assert result.items[0].start_time == "10:00"
        assert result.items[-1].end_time == "14:00"

    def test_partial_update_keeps_other_values(self, itinerary: Itinerary) -> None:
        result = update_config(itinerary, visit_duration_minutes=45)
        assert result.config.start_time == "09:00"
        assert result.config.default_transit_minutes == 30
        assert result.items[0].end_time == "09:45"

    def test_resolved_transits_keep_their_duration(self, itinerary: Itinerary) -> None:
        result = update_config(resolved(itinerary), default_transit_minutes=5)
        assert result.items[1].end_time == "10:10"

    @pytest.mark.parametrize(
        "changes",
        [{"start_time": "9am"}, {"visit_duration_minutes": 0}, {"default_transit_minutes": -1}],
    )
    def test_invalid_values(self, itinerary: Itinerary, changes: dict) -> None:
        with pytest.raises(InvalidItineraryError):
            update_config(itinerary, **changes)


def test_edits_do_not_mutate_input(itinerary: Itinerary) -> None:
    before = itinerary.model_dump()
    move_item(itinerary, 4, 0)
    remove_item(itinerary, 1)
    add_break(itinerary)
    set_mode(itinerary, 1, TransportMode.drive)
    set_note(itinerary, 0, "x")
    set_item_time(itinerary, 0, "start_time", "08:00")
    update_config(itinerary, start_time="07:00")
    assert itinerary.model_dump() == before


def test_apply_route_rounds_up(itinerary: Itinerary) -> None:
    """Resolved transits are whole minutes, rounded up from provider seconds."""
    coords = itinerary.items[0].venue.coordinates
    leg = RouteLeg(
        mode=TransportMode.walk,
        origin=coords,
        destination=coords,
        duration_seconds=61,
        distance_meters=80,
        encoded_path="_p~iF~ps|U",
        provenance=Provenance(source="tool.routes.test", fetched_at=datetime.now(UTC)),
    )
    assert apply_route(itinerary.items[1], leg).duration_minutes == 2
