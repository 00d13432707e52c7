"""Export models - calendar records produced from an itinerary."""

from datetime import datetime

from pydantic import BaseModel


class CalendarEvent(BaseModel):
    """One calendar entry per planned visit."""

    title: str
    description: str
    location: str
    start: datetime
    end: datetime
    url: str | None = None
