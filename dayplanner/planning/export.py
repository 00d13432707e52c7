"""Export - calendar events, iCalendar text and the plain-text share summary.

Pure functions; nothing here touches the network or the clock unless a
timestamp is passed in.
"""

from collections.abc import Sequence
from datetime import date, datetime, time, timedelta
from urllib.parse import quote

from dayplanner.models.common import TransportMode
from dayplanner.models.export import CalendarEvent
from dayplanner.models.itinerary import BreakItem, Itinerary, TransitItem, VisitItem
from dayplanner.planning.timeutils import format_distance, format_duration, to_minutes

PRODID = "-//Reconnoitering//EN"
UID_DOMAIN = "reconnoitering.com"
DEFAULT_EVENT_TITLE = "Exhibition"
ICS_LINE_LIMIT = 75

MODE_LABELS = {
    TransportMode.walk: "Walking",
    TransportMode.drive: "Driving",
    TransportMode.public_transit: "Public Transport",
    TransportMode.bicycle: "Cycling",
}


def _at(plan_date: date, hhmm: str) -> datetime:
    # Hours may exceed 23; the timeline does not wrap at midnight
    return datetime.combine(plan_date, time()) + timedelta(minutes=to_minutes(hhmm))


def build_calendar_events(itinerary: Itinerary) -> list[CalendarEvent]:
    """One calendar event per visit; transits and breaks are not exported."""
    events = []
    for item in itinerary.visits():
        venue = item.venue
        description = venue.description
        if item.note:
            description = f"{item.note}\n\n{description}" if description else item.note

        events.append(
            CalendarEvent(
                title=venue.title or DEFAULT_EVENT_TITLE,
                description=description,
                location=venue.location_label,
                start=_at(itinerary.date, item.start_time),
                end=_at(itinerary.date, item.end_time),
                url=venue.url,
            )
        )
    return events


def escape_text(value: str) -> str:
    """Escape a TEXT property value (RFC 5545 section 3.3.11)."""
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def fold_line(line: str) -> list[str]:
    """Split a content line into 75-octet physical lines."""
    parts: list[str] = []
    current = ""
    for char in line:
        if len((current + char).encode("utf-8")) > ICS_LINE_LIMIT:
            parts.append(current)
            current = " "
        current += char
    parts.append(current)
    return parts


def _ics_datetime(value: datetime) -> str:
    return value.strftime("%Y%m%dT%H%M%S")


def render_ics(events: Sequence[CalendarEvent], *, stamp: datetime) -> str:
    """Render events as an iCalendar document.

    Event times are floating local times; the plan has no timezone. UIDs
    are derived from stamp and the event position, so rendering the same
    events with the same stamp gives identical output.

    Args:
        events: Calendar events in order
        stamp: Creation time (UTC) used for DTSTAMP and UIDs

    Returns:
        CRLF-delimited iCalendar text
    """
    stamp_text = stamp.strftime("%Y%m%dT%H%M%SZ")
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
    ]

    for index, event in enumerate(events):
        description = event.description
        if event.url:
            description = f"{description}\n\nMore Info: {event.url}"

        lines.extend(
            [
                "BEGIN:VEVENT",
                f"UID:{stamp_text}-{index}@{UID_DOMAIN}",
                f"DTSTAMP:{stamp_text}",
                f"DTSTART:{_ics_datetime(event.start)}",
                f"DTEND:{_ics_datetime(event.end)}",
                f"SUMMARY:{escape_text(event.title)}",
                f"DESCRIPTION:{escape_text(description)}",
                f"LOCATION:{escape_text(event.location)}",
            ]
        )
        if event.url:
            lines.append(f"URL:{event.url}")
        lines.append("END:VEVENT")

    lines.append("END:VCALENDAR")

    physical = [part for line in lines for part in fold_line(line)]
    return "\r\n".join(physical) + "\r\n"


def _visit_block(item: VisitItem) -> list[str]:
    lines = [
        f"{item.start_time} - {item.end_time}: {item.venue.title or DEFAULT_EVENT_TITLE}",
        f"  {item.venue.location_label}",
    ]
    if item.note:
        lines.append(f"  Note: {item.note}")
    return lines


def _transit_block(item: TransitItem) -> list[str]:
    detail = f"  {format_duration(item.duration_minutes)}"
    if item.distance_meters is not None:
        detail += f", {format_distance(item.distance_meters)}"
    if item.last_error:
        detail += f" ({item.last_error})"
    return [
        f"({item.start_time} - {item.end_time}) Travel via {MODE_LABELS[item.mode]}",
        detail,
    ]


def _break_block(item: BreakItem) -> list[str]:
    label = f"Break ({item.note})" if item.note else "Break"
    return [f"{item.start_time} - {item.end_time}: {label}"]


def build_share_summary(itinerary: Itinerary) -> str:
    """Plain-text itinerary for sharing or printing.

    Blocks are separated by exactly one blank line, with no blank line
    at the end.
    """
    blocks = []
    for item in itinerary.items:
        if isinstance(item, VisitItem):
            lines = _visit_block(item)
        elif isinstance(item, TransitItem):
            lines = _transit_block(item)
        else:
            lines = _break_block(item)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def build_mailto_link(title: str, body: str) -> str:
    """mailto: URL with an encoded subject and body and no recipient."""
    subject = quote(f"Exhibition Itinerary: {title}", safe="")
    return f"mailto:?subject={subject}&body={quote(body, safe='')}"


def itinerary_filename(plan_date: date) -> str:
    """Download filename for the exported calendar."""
    return f"reconnoitering_itinerary_{plan_date.isoformat()}.ics"
