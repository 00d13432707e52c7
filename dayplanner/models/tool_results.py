"""Tool result models - external data shapes."""

from pydantic import BaseModel, Field

from dayplanner.models.common import Geo, Provenance, TransportMode


class RouteLeg(BaseModel):
    """Route between two points as returned by a routing provider."""

    mode: TransportMode
    origin: Geo
    destination: Geo
    duration_seconds: int = Field(..., ge=0)
    distance_meters: int = Field(..., ge=0)
    encoded_path: str
    provenance: Provenance
