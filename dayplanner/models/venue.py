"""Venue models - exhibition records consumed by the planner."""

from pydantic import BaseModel, Field, field_validator

from dayplanner.models.common import Geo

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class Venue(BaseModel):
    """Exhibition/venue record as the planner sees it.

    Venues without coordinates are valid; their adjoining transit
    segments are never sent to the routing provider.
    """

    id: str = Field(..., min_length=1)
    title: str
    description: str = ""
    location_name: str = ""
    address: str = ""
    city: str = ""
    country: str = ""
    coordinates: Geo | None = None
    closed_weekdays: list[str] = Field(default_factory=list)
    website_url: str | None = None
    ticket_url: str | None = None

    @field_validator("closed_weekdays")
    @classmethod
    def normalize_weekdays(cls, v: list[str]) -> list[str]:
        """Lowercase weekday names and reject unknown ones."""
        normalized = [day.strip().lower() for day in v if day.strip()]
        unknown = [day for day in normalized if day not in WEEKDAYS]
        if unknown:
            raise ValueError(f"Unknown weekday(s): {', '.join(unknown)}")
        return normalized

    @property
    def url(self) -> str | None:
        """Website URL, falling back to the ticket URL."""
        return self.website_url or self.ticket_url

    @property
    def location_label(self) -> str:
        """Single-line location for calendar entries and summaries."""
        parts = [
            part.strip()
            for part in (self.location_name, self.address, self.city, self.country)
            if part and part.strip()
        ]
        return ", ".join(parts) if parts else "Location not specified"
