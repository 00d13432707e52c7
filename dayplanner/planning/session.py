"""Planning session - owns one itinerary and sequences edits with reconciliation.

Every edit bumps the session revision. Edits that change the shape or timing
of the plan also bump the route revision. A reconciliation pass remembers the
route revision it started from and only commits its steps while that revision
is still current; once the plan changes under it the pass stops and its
remaining results are discarded. Note edits leave the route revision alone,
so a running pass keeps going and each step it commits picks up the latest
notes.
"""

import logging

from dayplanner.models.common import TransportMode
from dayplanner.models.itinerary import (
    DEFAULT_BREAK_NOTE,
    BreakItem,
    Itinerary,
    ReconcileReport,
    VisitItem,
)
from dayplanner.planning import edits
from dayplanner.planning.edits import TimeField
from dayplanner.planning.reconciler import RouteProvider, reconcile_routes
from dayplanner.planning.timeline import recalculate_itinerary

logger = logging.getLogger(__name__)


class PlannerSession:
    """In-memory day plan for one planning session."""

    def __init__(self, itinerary: Itinerary, provider: RouteProvider) -> None:
        self._itinerary = itinerary
        self._provider = provider
        self._revision = 0
        self._route_revision = 0
        self.last_report: ReconcileReport | None = None

    @property
    def itinerary(self) -> Itinerary:
        """Current committed itinerary."""
        return self._itinerary

    @property
    def revision(self) -> int:
        """Number of edits committed so far."""
        return self._revision

    def _commit(self, itinerary: Itinerary, *, structural: bool = True) -> Itinerary:
        self._revision += 1
        if structural:
            self._route_revision += 1
        self._itinerary = itinerary
        return itinerary

    def _with_current_notes(self, itinerary: Itinerary) -> Itinerary:
        """Copy notes committed mid-pass onto a pass result."""
        notes = {
            item.id: item.note
            for item in self._itinerary.items
            if isinstance(item, (VisitItem, BreakItem))
        }
        items = [
            item.model_copy(update={"note": notes[item.id]})
            if isinstance(item, (VisitItem, BreakItem))
            and item.id in notes
            and item.note != notes[item.id]
            else item
            for item in itinerary.items
        ]
        return itinerary.model_copy(update={"items": items})

    async def reconcile(self) -> ReconcileReport:
        """Run a reconciliation pass against the current itinerary.

        Intermediate steps are committed as they complete, so callers
        reading session.itinerary mid-pass see each resolved segment.
        """
        started_at = self._route_revision

        def is_current() -> bool:
            return self._route_revision == started_at

        def on_step(itinerary: Itinerary, index: int) -> None:
            if is_current():
                self._itinerary = self._with_current_notes(itinerary)

        result, report = await reconcile_routes(
            self._itinerary, self._provider, on_step=on_step, is_current=is_current
        )
        if report.stale:
            logger.info(
                f"[PlannerSession.reconcile] pass from route revision {started_at} superseded "
                f"by route revision {self._route_revision}"
            )
        else:
            self._itinerary = self._with_current_notes(result)
            self.last_report = report
        return report

    def recalculate(self) -> Itinerary:
        """Full recalculation; clears pending manual time overrides."""
        return self._commit(recalculate_itinerary(self._itinerary))

    async def move_item(self, from_index: int, to_index: int) -> ReconcileReport:
        """Reorder, then re-resolve every transit."""
        self._commit(edits.move_item(self._itinerary, from_index, to_index))
        return await self.reconcile()

    async def set_mode(self, index: int, mode: TransportMode) -> ReconcileReport:
        """Change a transit's mode, then re-resolve."""
        self._commit(edits.set_mode(self._itinerary, index, mode))
        return await self.reconcile()

    def remove_item(self, index: int) -> Itinerary:
        """Delete an item; transits are corrected by the next pass."""
        return self._commit(edits.remove_item(self._itinerary, index))

    def add_break(self, note: str = DEFAULT_BREAK_NOTE) -> Itinerary:
        """Append a break after the last item."""
        return self._commit(edits.add_break(self._itinerary, note))

    def set_note(self, index: int, text: str) -> Itinerary:
        """Replace a visit or break note; a running pass is not interrupted."""
        return self._commit(edits.set_note(self._itinerary, index, text), structural=False)

    def set_item_time(self, index: int, field: TimeField, value: str) -> Itinerary:
        """Scratch override of a displayed time; marks the timeline dirty."""
        return self._commit(edits.set_item_time(self._itinerary, index, field, value))

    def update_config(
        self,
        *,
        start_time: str | None = None,
        visit_duration_minutes: int | None = None,
        default_transit_minutes: int | None = None,
    ) -> Itinerary:
        """Change plan defaults and recalculate."""
        return self._commit(
            edits.update_config(
                self._itinerary,
                start_time=start_time,
                visit_duration_minutes=visit_duration_minutes,
                default_transit_minutes=default_transit_minutes,
            )
        )
