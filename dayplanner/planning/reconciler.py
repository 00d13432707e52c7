"""Route reconciliation - replaces default transit estimates with provider routes.

A pass walks the itinerary in order and resolves one transit segment at a
time. Each resolution (success or fallback) produces a new, re-timed item
sequence before the next segment is requested, so later items always show
times consistent with every segment resolved so far.
"""

import logging
import math
from collections.abc import Callable, Sequence
from typing import Protocol

from dayplanner.models.common import Geo, TransportMode
from dayplanner.models.itinerary import (
    ROUTE_FALLBACK_MESSAGE,
    Itinerary,
    ItineraryItem,
    PlanConfig,
    ReconcileReport,
    TransitItem,
    VisitItem,
)
from dayplanner.models.tool_results import RouteLeg
from dayplanner.planning.timeline import recalculate, retime_from
from dayplanner.utils.metrics import record_pass, record_segment

logger = logging.getLogger(__name__)

MIN_ITEMS_FOR_ROUTING = 3

# Called with the itinerary after each resolved segment and that segment's index
StepCallback = Callable[[Itinerary, int], None]


class RouteProvider(Protocol):
    """Routing collaborator consumed by the reconciler."""

    async def compute_route(
        self, origin: Geo, destination: Geo, mode: TransportMode
    ) -> RouteLeg:
        """Compute one route.

        Args:
            origin: Start coordinates
            destination: End coordinates
            mode: Transport mode, passed through unchanged

        Returns:
            RouteLeg with duration, distance and encoded path

        Raises:
            Exception: Any failure; the reconciler treats all of them alike
        """
        ...


def route_endpoints(items: Sequence[ItineraryItem], index: int) -> tuple[Geo, Geo] | None:
    """Coordinates bounding the transit at index, if it can be routed.

    A transit is routable only when both immediate neighbours are visits
    whose venues have coordinates.
    """
    if index <= 0 or index >= len(items) - 1:
        return None

    before, after = items[index - 1], items[index + 1]
    if not isinstance(before, VisitItem) or not isinstance(after, VisitItem):
        return None

    origin, destination = before.venue.coordinates, after.venue.coordinates
    if origin is None or destination is None:
        return None
    return origin, destination


def apply_route(item: TransitItem, leg: RouteLeg) -> TransitItem:
    """Store a provider route on a transit item."""
    return item.model_copy(
        update={
            "duration_minutes": math.ceil(leg.duration_seconds / 60),
            "distance_meters": leg.distance_meters,
            "path": leg.encoded_path,
            "last_error": None,
        }
    )


def apply_fallback(item: TransitItem, config: PlanConfig) -> TransitItem:
    """Store the default duration and the user-facing failure reason."""
    return item.model_copy(
        update={
            "duration_minutes": config.default_transit_minutes,
            "distance_meters": None,
            "path": None,
            "last_error": ROUTE_FALLBACK_MESSAGE,
        }
    )


def clear_route(item: TransitItem) -> TransitItem:
    """Return a transit item with no resolution, pending the next pass."""
    return item.model_copy(
        update={
            "duration_minutes": None,
            "distance_meters": None,
            "path": None,
            "last_error": None,
        }
    )


async def reconcile_routes(
    itinerary: Itinerary,
    provider: RouteProvider,
    *,
    on_step: StepCallback | None = None,
    is_current: Callable[[], bool] | None = None,
) -> tuple[Itinerary, ReconcileReport]:
    """Run one reconciliation pass over every transit segment.

    Segments are resolved strictly in sequence order. A provider failure is
    converted to the fallback duration with last_error set, and the pass
    moves on to the next segment. Transits not bounded by two geocoded
    visits are skipped without error.

    Args:
        itinerary: Itinerary to reconcile (not mutated)
        provider: Routing collaborator
        on_step: Called after every resolved segment with the new itinerary
        is_current: Checked before and after each provider call; once it
            returns False the pass stops and reports stale

    Returns:
        Tuple of (reconciled itinerary, pass report)
    """
    config = itinerary.config
    report = ReconcileReport()
    current = itinerary.model_copy(
        update={"items": recalculate(itinerary.items, config), "timeline_dirty": False}
    )

    if len(current.items) < MIN_ITEMS_FOR_ROUTING:
        return current, report

    for index in range(len(current.items)):
        item = current.items[index]
        if not isinstance(item, TransitItem):
            continue

        cleared = item.model_copy(update={"last_error": None})
        endpoints = route_endpoints(current.items, index)
        if endpoints is None:
            report.skipped += 1
            record_segment("skipped")
            if item.last_error is not None:
                items = list(current.items)
                items[index] = cleared
                current = current.model_copy(update={"items": items})
            continue

        if is_current is not None and not is_current():
            report.stale = True
            break

        origin, destination = endpoints
        report.attempted += 1
        try:
            leg = await provider.compute_route(origin, destination, item.mode)
        except Exception as e:
            logger.warning(
                f"[reconcile_routes] segment {item.id} fell back to default duration",
                extra={
                    "structured": {
                        "item_id": item.id,
                        "mode": item.mode.value,
                        "error_reason": type(e).__name__,
                    }
                },
            )
            resolved = apply_fallback(cleared, config)
            report.fell_back += 1
            record_segment("fallback")
        else:
            resolved = apply_route(cleared, leg)
            report.resolved += 1
            record_segment("resolved")

        if is_current is not None and not is_current():
            report.stale = True
            break

        items = list(current.items)
        items[index] = resolved
        current = current.model_copy(update={"items": retime_from(items, index, config)})
        if on_step is not None:
            on_step(current, index)

    if report.stale:
        record_pass("stale")
    elif report.has_fallbacks:
        record_pass("fallback")
    else:
        record_pass("clean")

    logger.info(
        f"[reconcile_routes] attempted={report.attempted} resolved={report.resolved} "
        f"fell_back={report.fell_back} skipped={report.skipped} stale={report.stale}"
    )
    return current, report
