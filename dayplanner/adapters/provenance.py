"""Provenance helpers for provider adapters."""

from datetime import UTC, datetime

from dayplanner.models.common import Provenance


def provenance_for_estimate(source: str, ref_id: str | None = None) -> Provenance:
    """Create provenance for locally computed results (no network call).

    Args:
        source: Source identifier (e.g., "routes.haversine")
        ref_id: Optional reference (e.g., the transport mode used)

    Returns:
        Provenance with source=tool-specific string, fetched_at=now(UTC), cache_hit=False
    """
    return Provenance(
        source=f"tool.{source}",
        ref_id=f"{source}/{ref_id}" if ref_id else source,
        source_url=f"local://{source}/{ref_id}" if ref_id else f"local://{source}",
        fetched_at=datetime.now(UTC),
        cache_hit=False,
    )


def provenance_for_http(source: str, url: str, ref_id: str | None = None) -> Provenance:
    """Create provenance for HTTP-based results.

    Args:
        source: Source identifier (e.g., "routes.google", "venues.exhibitions")
        url: Full URL of the HTTP request
        ref_id: Upstream record id, when the response describes a single record

    Returns:
        Provenance with source=tool-specific string, fetched_at=now(UTC)
    """
    return Provenance(
        source=f"tool.{source}",
        ref_id=ref_id or source,
        source_url=url,
        fetched_at=datetime.now(UTC),
        cache_hit=False,
    )
