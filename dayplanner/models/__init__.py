"""Models package - re-exports for convenience."""

from dayplanner.models.common import Geo, Provenance, TransportMode
from dayplanner.models.export import CalendarEvent
from dayplanner.models.itinerary import (
    BREAK_DURATION_MINUTES,
    BreakItem,
    Itinerary,
    ItineraryItem,
    PlanConfig,
    ReconcileReport,
    TransitItem,
    VisitItem,
)
from dayplanner.models.tool_results import RouteLeg
from dayplanner.models.venue import Venue
from dayplanner.models.violations import Violation, ViolationKind, ViolationSeverity

__all__ = [
    # Common
    "Geo",
    "Provenance",
    "TransportMode",
    # Venue
    "Venue",
    # Itinerary
    "BREAK_DURATION_MINUTES",
    "BreakItem",
    "Itinerary",
    "ItineraryItem",
    "PlanConfig",
    "ReconcileReport",
    "TransitItem",
    "VisitItem",
    # Tool results
    "RouteLeg",
    # Export
    "CalendarEvent",
    # Violations
    "Violation",
    "ViolationKind",
    "ViolationSeverity",
]
