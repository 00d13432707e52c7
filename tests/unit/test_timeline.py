"""Tests for timeline recalculation, including seeded property checks."""

import random
from datetime import date

import pytest

from dayplanner.models.common import Geo
from dayplanner.models.itinerary import (
    BreakItem,
    Itinerary,
    ItineraryItem,
    PlanConfig,
    TransitItem,
    VisitItem,
)
from dayplanner.models.venue import Venue
from dayplanner.planning.timeline import (
    is_contiguous,
    item_duration,
    recalculate,
    recalculate_itinerary,
    retime_from,
)
from dayplanner.planning.timeutils import to_minutes


def generate_items(n: int, seed: int = 42) -> tuple[list[ItineraryItem], PlanConfig]:
    """Random mix of visits, transits and breaks with scrambled times."""
    rng = random.Random(seed)
    config = PlanConfig(
        start_time=f"{rng.randint(6, 11):02d}:{rng.choice([0, 15, 30, 45]):02d}",
        visit_duration_minutes=rng.randint(15, 120),
        default_transit_minutes=rng.randint(0, 45),
    )

    items: list[ItineraryItem] = []
    for i in range(n):
        start = f"{rng.randint(0, 20):02d}:{rng.randint(0, 59):02d}"
        kind = rng.choice(["visit", "transit", "break"])
        if kind == "visit":
            venue = Venue(id=f"v{i}", title=f"Venue {i}", coordinates=Geo(lat=0, lng=0))
            items.append(VisitItem(id=f"visit-{i}", start_time=start, end_time=start, venue=venue))
        elif kind == "transit":
            duration = rng.choice([None, rng.randint(1, 90)])
            items.append(
                TransitItem(
                    id=f"transit-{i}", start_time=start, end_time=start, duration_minutes=duration
                )
            )
        else:
            items.append(BreakItem(id=f"break-{i}", start_time=start, end_time=start))
    return items, config


class TestItemDuration:
    def test_visit_uses_config(self, itinerary: Itinerary) -> None:
        config = PlanConfig(visit_duration_minutes=75)
        assert item_duration(itinerary.items[0], config) == 75

    def test_pending_transit_uses_default(self, itinerary: Itinerary) -> None:
        config = PlanConfig(default_transit_minutes=12)
        assert item_duration(itinerary.items[1], config) == 12

    def test_resolved_transit_uses_own_duration(self, itinerary: Itinerary) -> None:
        transit = itinerary.items[1].model_copy(update={"duration_minutes": 7})
        assert item_duration(transit, PlanConfig()) == 7

    def test_zero_minute_transit(self, itinerary: Itinerary) -> None:
        transit = itinerary.items[1].model_copy(update={"duration_minutes": 0})
        assert item_duration(transit, PlanConfig()) == 0

    def test_break_is_thirty_minutes(self) -> None:
        item = BreakItem(id="break-1", start_time="12:00", end_time="12:00")
        assert item_duration(item, PlanConfig()) == 30


class TestRecalculate:
    def test_first_item_starts_at_config_start(self, itinerary: Itinerary) -> None:
        config = PlanConfig(start_time="08:30")
        items = recalculate(itinerary.items, config)
        assert items[0].start_time == "08:30"
        assert items[0].end_time == "09:30"

    def test_does_not_mutate_input(self, itinerary: Itinerary) -> None:
        before = [item.model_dump() for item in itinerary.items]
        recalculate(itinerary.items, PlanConfig(start_time="07:00"))
        assert [item.model_dump() for item in itinerary.items] == before

    def test_empty_sequence(self) -> None:
        assert recalculate([], PlanConfig()) == []

    def test_runs_past_midnight_without_wrapping(self, itinerary: Itinerary) -> None:
        items = recalculate(itinerary.items, PlanConfig(start_time="22:00"))
        assert items[-1].end_time == "26:00"

    def test_contiguity_and_duration_fidelity_for_random_sequences(self) -> None:
        for seed in [1, 10, 42, 100, 999, 12345]:
            items, config = generate_items(12, seed=seed)
            result = recalculate(items, config)

            assert result[0].start_time == config.start_time
            assert is_contiguous(result)
            for item in result:
                elapsed = to_minutes(item.end_time) - to_minutes(item.start_time)
                assert elapsed == item_duration(item, config)

    def test_idempotent(self) -> None:
        for seed in [3, 7, 2024]:
            items, config = generate_items(10, seed=seed)
            once = recalculate(items, config)
            twice = recalculate(once, config)
            assert [i.model_dump() for i in twice] == [i.model_dump() for i in once]

    def test_preserves_ids_and_order(self) -> None:
        items, config = generate_items(8, seed=5)
        assert [i.id for i in recalculate(items, config)] == [i.id for i in items]


class TestRetimeFrom:
    def test_leaves_earlier_items_untouched(self, itinerary: Itinerary) -> None:
        items = list(itinerary.items)
        items[3] = items[3].model_copy(update={"duration_minutes": 5})
        result = retime_from(items, 3, itinerary.config)

        assert result[:3] == items[:3]
        assert (result[3].start_time, result[3].end_time) == ("11:30", "11:35")
        assert (result[4].start_time, result[4].end_time) == ("11:35", "12:35")

    def test_index_zero_starts_from_config(self, itinerary: Itinerary) -> None:
        result = retime_from(itinerary.items, 0, PlanConfig(start_time="10:00"))
        assert result[0].start_time == "10:00"

    def test_index_past_end_is_noop(self, itinerary: Itinerary) -> None:
        assert retime_from(itinerary.items, 99, itinerary.config) == list(itinerary.items)


def test_recalculate_itinerary_clears_dirty_flag(itinerary: Itinerary) -> None:
    items = list(itinerary.items)
    items[2] = items[2].model_copy(update={"start_time": "15:00"})
    dirty = itinerary.model_copy(update={"items": items, "timeline_dirty": True})

    result = recalculate_itinerary(dirty)

    assert result.timeline_dirty is False
    assert result.items[2].start_time == "10:30"
    assert is_contiguous(result.items)


def test_total_minutes(itinerary: Itinerary) -> None:
    assert itinerary.total_minutes() == 240


def test_total_minutes_empty_raises() -> None:
    with pytest.raises(ValueError):
        Itinerary(date=date(2026, 1, 1)).total_minutes()
