"""Day plan endpoints - build, edit, reconcile and export itineraries.

The API is stateless: every request carries the full itinerary and every
response returns the new one. Within a request a PlannerSession sequences
the edit and the reconciliation pass that follows it.
"""

import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import UTC, date, datetime
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, ValidationError

from dayplanner.adapters.routes import get_route_provider
from dayplanner.adapters.venues import VenueNotFoundError, fetch_venues
from dayplanner.config import Settings, get_settings
from dayplanner.models.common import TransportMode
from dayplanner.models.export import CalendarEvent
from dayplanner.models.itinerary import DEFAULT_BREAK_NOTE, Itinerary, PlanConfig, ReconcileReport
from dayplanner.models.venue import Venue
from dayplanner.models.violations import Violation
from dayplanner.planning.builder import build_itinerary
from dayplanner.planning.edits import TimeField
from dayplanner.planning.errors import ItineraryError
from dayplanner.planning.export import (
    build_calendar_events,
    build_mailto_link,
    build_share_summary,
    itinerary_filename,
    render_ics,
)
from dayplanner.planning.reconciler import RouteProvider
from dayplanner.planning.session import PlannerSession
from dayplanner.planning.timeline import recalculate_itinerary
from dayplanner.planning.timeutils import format_total_duration
from dayplanner.planning.verifiers import verify_itinerary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/day-plans", tags=["day-plans"])

VenueFetcher = Callable[[Sequence[str]], Awaitable[list[Venue]]]


def get_provider(settings: Annotated[Settings, Depends(get_settings)]) -> RouteProvider:
    """Routing provider for this request."""
    return get_route_provider(settings)


def get_venue_fetcher(settings: Annotated[Settings, Depends(get_settings)]) -> VenueFetcher:
    """Venue lookup bound to the configured catalogue."""

    async def fetch(venue_ids: Sequence[str]) -> list[Venue]:
        return await fetch_venues(
            venue_ids, settings.venues_base_url, timeout_s=settings.venue_fetch_timeout_s
        )

    return fetch


class CreateDayPlanRequest(BaseModel):
    """Request body for POST /day-plans."""

    date: date
    venue_ids: list[str] = Field(..., min_length=2, description="Venue ids in visiting order")
    start_time: str | None = Field(None, description="Day start (HH:MM)")
    visit_duration_minutes: int | None = Field(None, gt=0)
    default_transit_minutes: int | None = Field(None, ge=0)


class ItineraryRequest(BaseModel):
    """Request body carrying an itinerary."""

    itinerary: Itinerary


class DayPlanResponse(BaseModel):
    """Itinerary plus everything the planner page displays around it."""

    itinerary: Itinerary
    total_duration: str
    warning: str | None = None
    violations: list[Violation] = Field(default_factory=list)


class MoveOperation(BaseModel):
    op: Literal["move"]
    from_index: int
    to_index: int


class RemoveOperation(BaseModel):
    op: Literal["remove"]
    index: int


class AddBreakOperation(BaseModel):
    op: Literal["add_break"]
    note: str = DEFAULT_BREAK_NOTE


class SetModeOperation(BaseModel):
    op: Literal["set_mode"]
    index: int
    mode: TransportMode


class SetNoteOperation(BaseModel):
    op: Literal["set_note"]
    index: int
    text: str


class SetTimeOperation(BaseModel):
    op: Literal["set_time"]
    index: int
    field: TimeField
    value: str


class UpdateConfigOperation(BaseModel):
    op: Literal["update_config"]
    start_time: str | None = None
    visit_duration_minutes: int | None = None
    default_transit_minutes: int | None = None


EditOperation = Annotated[
    MoveOperation
    | RemoveOperation
    | AddBreakOperation
    | SetModeOperation
    | SetNoteOperation
    | SetTimeOperation
    | UpdateConfigOperation,
    Field(discriminator="op"),
]


class EditRequest(BaseModel):
    """Request body for POST /day-plans/edit."""

    itinerary: Itinerary
    operation: EditOperation


class ExportRequest(BaseModel):
    """Request body for POST /day-plans/export."""

    itinerary: Itinerary
    title: str | None = Field(None, description="Email subject title (defaults to the date)")


class ExportResponse(BaseModel):
    """Calendar and sharing artifacts for one itinerary."""

    events: list[CalendarEvent]
    ics: str
    summary: str
    filename: str
    mailto: str


def _unprocessable(e: Exception) -> HTTPException:
    return HTTPException(status_code=422, detail=str(e))


def _plan_response(
    itinerary: Itinerary, settings: Settings, report: ReconcileReport | None = None
) -> DayPlanResponse:
    total = format_total_duration(itinerary.total_minutes()) if itinerary.items else "0h 0m"
    return DayPlanResponse(
        itinerary=itinerary,
        total_duration=total,
        warning=report.warning if report else None,
        violations=verify_itinerary(itinerary, settings.day_end_time),
    )


@router.post("", response_model=DayPlanResponse, status_code=status.HTTP_201_CREATED)
async def create_day_plan(
    request: CreateDayPlanRequest,
    settings: Annotated[Settings, Depends(get_settings)],
    provider: Annotated[RouteProvider, Depends(get_provider)],
    fetch: Annotated[VenueFetcher, Depends(get_venue_fetcher)],
) -> DayPlanResponse:
    """Build a day plan from venue ids and resolve its routes.

    Raises:
        HTTPException: 404 if any venue is unknown, 422 for invalid input
    """
    try:
        config = PlanConfig(
            start_time=request.start_time or settings.default_start_time,
            visit_duration_minutes=(
                request.visit_duration_minutes or settings.visit_duration_minutes
            ),
            default_transit_minutes=(
                request.default_transit_minutes
                if request.default_transit_minutes is not None
                else settings.default_transit_minutes
            ),
        )
    except ValidationError as e:
        raise _unprocessable(e) from e

    venues = await fetch(request.venue_ids)
    found = {venue.id for venue in venues}
    missing = [venue_id for venue_id in request.venue_ids if venue_id not in found]
    if missing:
        error = VenueNotFoundError(missing)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error)) from error

    try:
        itinerary = build_itinerary(venues, request.date, config)
    except ItineraryError as e:
        raise _unprocessable(e) from e

    session = PlannerSession(itinerary, provider)
    report = await session.reconcile()
    return _plan_response(session.itinerary, settings, report)


@router.post("/recalculate", response_model=DayPlanResponse)
async def recalculate_day_plan(
    request: ItineraryRequest,
    settings: Annotated[Settings, Depends(get_settings)],
) -> DayPlanResponse:
    """Restamp every item from the start time, discarding manual overrides."""
    return _plan_response(recalculate_itinerary(request.itinerary), settings)


@router.post("/reconcile", response_model=DayPlanResponse)
async def reconcile_day_plan(
    request: ItineraryRequest,
    settings: Annotated[Settings, Depends(get_settings)],
    provider: Annotated[RouteProvider, Depends(get_provider)],
) -> DayPlanResponse:
    """Run a route reconciliation pass."""
    session = PlannerSession(request.itinerary, provider)
    report = await session.reconcile()
    return _plan_response(session.itinerary, settings, report)


@router.post("/edit", response_model=DayPlanResponse)
async def edit_day_plan(
    request: EditRequest,
    settings: Annotated[Settings, Depends(get_settings)],
    provider: Annotated[RouteProvider, Depends(get_provider)],
) -> DayPlanResponse:
    """Apply one edit; moves and mode changes are followed by reconciliation.

    Raises:
        HTTPException: 422 for out-of-range indices or edits the item does not support
    """
    session = PlannerSession(request.itinerary, provider)
    op = request.operation
    report: ReconcileReport | None = None

    try:
        if isinstance(op, MoveOperation):
            report = await session.move_item(op.from_index, op.to_index)
        elif isinstance(op, RemoveOperation):
            session.remove_item(op.index)
        elif isinstance(op, AddBreakOperation):
            session.add_break(op.note)
        elif isinstance(op, SetModeOperation):
            report = await session.set_mode(op.index, op.mode)
        elif isinstance(op, SetNoteOperation):
            session.set_note(op.index, op.text)
        elif isinstance(op, SetTimeOperation):
            session.set_item_time(op.index, op.field, op.value)
        else:
            session.update_config(
                start_time=op.start_time,
                visit_duration_minutes=op.visit_duration_minutes,
                default_transit_minutes=op.default_transit_minutes,
            )
    except ItineraryError as e:
        raise _unprocessable(e) from e

    logger.info(f"[edit_day_plan] op={op.op} items={len(session.itinerary.items)}")
    return _plan_response(session.itinerary, settings, report)


@router.post("/export", response_model=ExportResponse)
async def export_day_plan(request: ExportRequest) -> ExportResponse:
    """Calendar file, share summary and mailto link for an itinerary."""
    itinerary = request.itinerary
    events = build_calendar_events(itinerary)
    summary = build_share_summary(itinerary)
    title = request.title or itinerary.date.isoformat()

    return ExportResponse(
        events=events,
        ics=render_ics(events, stamp=datetime.now(UTC)),
        summary=summary,
        filename=itinerary_filename(itinerary.date),
        mailto=build_mailto_link(title, summary),
    )
