"""Common types and enums shared across all models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class Geo(BaseModel):
    """Geographic coordinates (WGS84)."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class TransportMode(str, Enum):
    """Transport mode for a transit segment."""

    walk = "walk"
    drive = "drive"
    public_transit = "public_transit"
    bicycle = "bicycle"


class Provenance(BaseModel):
    """Provenance metadata for tool results."""

    source: str  # Tool-specific identifier (e.g., "tool.routes.google", "tool.routes.haversine")
    ref_id: str | None = None
    source_url: str | None = None
    fetched_at: datetime
    cache_hit: bool | None = None
