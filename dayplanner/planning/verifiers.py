"""Itinerary checks for venue opening days and day length."""

from dayplanner.models.itinerary import Itinerary
from dayplanner.models.violations import Violation, ViolationKind, ViolationSeverity
from dayplanner.planning.timeutils import to_minutes


def verify_opening_days(itinerary: Itinerary) -> list[Violation]:
    """Flag visits scheduled on a weekday their venue is closed.

    Args:
        itinerary: Day plan to check

    Returns:
        One BLOCKING violation per closed venue
    """
    weekday = itinerary.date.strftime("%A").lower()
    violations: list[Violation] = []

    for visit in itinerary.visits():
        if weekday not in visit.venue.closed_weekdays:
            continue
        violations.append(
            Violation(
                kind=ViolationKind.OPENING,
                code="VENUE_CLOSED",
                message=f"{visit.venue.title} is closed on {weekday.capitalize()}s.",
                severity=ViolationSeverity.BLOCKING,
                affected_item_ids=[visit.id],
                details={"venue_id": visit.venue.id, "weekday": weekday},
            )
        )

    return violations


def verify_day_length(itinerary: Itinerary, day_end_time: str) -> list[Violation]:
    """Flag a plan whose last item ends after the end of the day.

    Args:
        itinerary: Day plan to check
        day_end_time: Latest acceptable end time (HH:MM)

    Returns:
        List of violations (empty or single ADVISORY violation)
    """
    if not itinerary.items:
        return []

    last = itinerary.items[-1]
    overrun = to_minutes(last.end_time) - to_minutes(day_end_time)
    if overrun <= 0:
        return []

    return [
        Violation(
            kind=ViolationKind.TIMING,
            code="DAY_OVERRUN",
            message=f"The plan ends at {last.end_time}, after {day_end_time}.",
            severity=ViolationSeverity.ADVISORY,
            affected_item_ids=[last.id],
            details={
                "end_time": last.end_time,
                "day_end_time": day_end_time,
                "overrun_minutes": overrun,
            },
        )
    ]


def verify_timeline(itinerary: Itinerary) -> list[Violation]:
    """Report manual time overrides that have not been recalculated yet."""
    if not itinerary.timeline_dirty:
        return []

    return [
        Violation(
            kind=ViolationKind.TIMING,
            code="TIMELINE_DIRTY",
            message="Times were edited by hand; recalculate to make the timeline consistent.",
            severity=ViolationSeverity.ADVISORY,
            affected_item_ids=[],  # Affects the whole plan
        )
    ]


def verify_itinerary(itinerary: Itinerary, day_end_time: str) -> list[Violation]:
    """Run every itinerary check, blocking problems first."""
    violations = [
        *verify_opening_days(itinerary),
        *verify_day_length(itinerary, day_end_time),
        *verify_timeline(itinerary),
    ]
    return sorted(violations, key=lambda v: v.severity != ViolationSeverity.BLOCKING)
