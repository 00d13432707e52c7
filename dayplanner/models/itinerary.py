"""Itinerary models - the day plan and its items."""

from datetime import date
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from dayplanner.models.common import TransportMode
from dayplanner.models.venue import Venue
from dayplanner.planning.timeutils import to_minutes

BREAK_DURATION_MINUTES = 30
DEFAULT_BREAK_NOTE = "Coffee break"
ROUTE_FALLBACK_MESSAGE = "Could not calculate route. Using default time."
ROUTES_WARNING = "Some routes could not be calculated. Default travel times were used."


def _check_hhmm(v: str) -> str:
    to_minutes(v)
    return v


class _TimedItem(BaseModel):
    """Fields shared by every itinerary item."""

    id: str = Field(..., min_length=1)
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        """Ensure wall-clock fields parse as HH:MM."""
        return _check_hhmm(v)


class VisitItem(_TimedItem):
    """Scheduled stop at a venue."""

    kind: Literal["visit"] = "visit"
    venue: Venue
    note: str = ""


class TransitItem(_TimedItem):
    """Travel segment between two items.

    Either the route is resolved (duration, distance and path all set),
    pending (nothing set), or fell back to the default duration with
    last_error explaining why.
    """

    kind: Literal["transit"] = "transit"
    mode: TransportMode = TransportMode.public_transit
    duration_minutes: int | None = Field(default=None, ge=0)
    distance_meters: int | None = Field(default=None, ge=0)
    path: str | None = None
    last_error: str | None = None

    @model_validator(mode="after")
    def validate_resolution(self) -> "TransitItem":
        """Ensure route fields are consistent with each other."""
        has_route = self.distance_meters is not None or self.path is not None
        if has_route:
            if self.distance_meters is None or self.path is None or self.duration_minutes is None:
                raise ValueError("duration_minutes, distance_meters and path must be set together")
            if self.last_error is not None:
                raise ValueError("a resolved transit cannot carry last_error")
        elif self.last_error is not None and self.duration_minutes is None:
            raise ValueError("last_error requires the fallback duration_minutes")
        return self

    @property
    def is_resolved(self) -> bool:
        """True when the routing provider supplied this segment's route."""
        return self.distance_meters is not None and self.path is not None


class BreakItem(_TimedItem):
    """Fixed-length pause."""

    kind: Literal["break"] = "break"
    note: str = DEFAULT_BREAK_NOTE


ItineraryItem = Annotated[VisitItem | TransitItem | BreakItem, Field(discriminator="kind")]


class PlanConfig(BaseModel):
    """Defaults used whenever an item lacks a concrete duration."""

    start_time: str = "09:00"
    visit_duration_minutes: int = Field(default=60, gt=0)
    default_transit_minutes: int = Field(default=30, ge=0)

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v: str) -> str:
        """Ensure the start time parses as HH:MM."""
        return _check_hhmm(v)


class Itinerary(BaseModel):
    """Ordered day plan for a single date.

    timeline_dirty is set by manual time overrides and cleared by the
    next full recalculation; while it is set, adjacent items may not be
    contiguous.
    """

    date: date
    config: PlanConfig = Field(default_factory=PlanConfig)
    items: list[ItineraryItem] = Field(default_factory=list)
    timeline_dirty: bool = False

    def visits(self) -> list[VisitItem]:
        """Visit items in order."""
        return [item for item in self.items if isinstance(item, VisitItem)]

    def transits(self) -> list[TransitItem]:
        """Transit items in order."""
        return [item for item in self.items if isinstance(item, TransitItem)]

    def total_minutes(self) -> int:
        """Minutes from the first item's start to the last item's end.

        Raises:
            ValueError: If the itinerary is empty
        """
        if not self.items:
            raise ValueError("total duration is undefined for an empty itinerary")
        return to_minutes(self.items[-1].end_time) - to_minutes(self.items[0].start_time)


class ReconcileReport(BaseModel):
    """Outcome of one reconciliation pass."""

    attempted: int = 0
    resolved: int = 0
    fell_back: int = 0
    skipped: int = 0
    stale: bool = False

    @property
    def has_fallbacks(self) -> bool:
        """True if any segment used the default duration."""
        return self.fell_back > 0

    @property
    def warning(self) -> str | None:
        """Single aggregate notice for the whole pass."""
        return ROUTES_WARNING if self.has_fallbacks else None
