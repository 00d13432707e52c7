"""Violation models - problems found when checking an itinerary."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

# JSON-serializable value types for violation details
JsonValue = str | int | float | bool | None | dict[str, Any] | list[Any]


class ViolationSeverity(str, Enum):
    """Severity levels for itinerary problems."""

    ADVISORY = "advisory"
    BLOCKING = "blocking"


class ViolationKind(str, Enum):
    """Categories of itinerary checks."""

    OPENING = "opening"
    TIMING = "timing"


class Violation(BaseModel):
    """A problem detected in the current day plan.

    Violations are informational: the planner never reorders or drops
    items on its own, the user decides what to change.
    """

    kind: ViolationKind
    code: str  # Machine-usable short code, e.g., "VENUE_CLOSED"
    message: str  # Human-readable description (1-2 sentences)
    severity: ViolationSeverity
    affected_item_ids: list[str]  # ItineraryItem.id values
    details: dict[str, JsonValue] = Field(default_factory=dict)
