"""Service that applies proposals, edits, approvals and RSVPs to the event store."""

from __future__ import annotations

import datetime as dt
import logging

from campus_events.domain.bus import EventBus
from campus_events.domain.errors import (
    InvalidSubmission,
    NotFound,
    PolicyViolation,
    ScheduleConflict,
)
from campus_events.domain.events import (
    EventApproved,
    EventProposed,
    EventRejected,
    EventUpdated,
    RsvpRecorded,
)
from campus_events.domain.models import (
    ApprovalState,
    Club,
    Event,
    EventDraft,
    EventTimeSlot,
    Role,
    Viewer,
)
from campus_events.repos.memory import ClubRepository, EventRepository
from campus_events.services.conflicts import find_conflicts
from campus_events.services.policy import (
    apply_transition,
    can_edit,
    can_view,
    record_rsvp,
)

logger = logging.getLogger(__name__)


class EventLifecycle:
    """Orchestrates policy checks, conflict detection and bus notifications.

    Policy failures raise :class:`PolicyViolation`; clashing submissions raise
    :class:`ScheduleConflict` unless *block_conflicts* is False, in which case
    the clash is returned alongside the stored event.
    """

    def __init__(
        self,
        bus: EventBus,
        event_repo: EventRepository,
        club_repo: ClubRepository,
        block_conflicts: bool = True,
    ) -> None:
        self.bus = bus
        self.event_repo = event_repo
        self.club_repo = club_repo
        self.block_conflicts = block_conflicts

    def _get_event(self, event_id: str) -> Event:
        event = self.event_repo.get(event_id)
        if event is None:
            raise NotFound("Event", event_id)
        return event

    def _get_club(self, club_id: str) -> Club:
        club = self.club_repo.get(club_id)
        if club is None:
            raise NotFound("Club", club_id)
        return club

    def check_conflicts(
        self, slot: EventTimeSlot, exclude_id: str | None = None
    ) -> list[Event]:
        return find_conflicts(slot, self.event_repo.list_all(), exclude_id=exclude_id)

    def _guard_conflicts(self, conflicts: list[Event]) -> None:
        if conflicts and self.block_conflicts:
            raise ScheduleConflict(conflicts)

    # ------------------------------------------------------------------
    # Club admin actions
    # ------------------------------------------------------------------

    def propose(self, viewer: Viewer, draft: EventDraft) -> tuple[Event, list[Event]]:
        """Store a new pending event for the draft's club."""
        club = self._get_club(draft.club_id)
        if viewer.role != Role.CLUB_ADMIN or viewer.id not in club.admin_ids:
            raise PolicyViolation("Only admins of the club can create its events")

        conflicts = self.check_conflicts(draft.slot)
        self._guard_conflicts(conflicts)

        event = Event(
            **draft.model_dump(),
            club_name=club.name,
            approval_state=ApprovalState.PENDING,
        )
        self.event_repo.add(event)
        logger.info("club %s proposed event %s (%s)", club.id, event.id, event.name)
        self.bus.publish(EventProposed(event_id=event.id, actor_id=viewer.id))
        return event, conflicts

    def update(
        self, viewer: Viewer, event_id: str, draft: EventDraft
    ) -> tuple[Event, list[Event]]:
        """Replace an event's content; approval state and attendees are kept."""
        current = self._get_event(event_id)
        if not can_edit(viewer, current, self.club_repo.get(current.club_id)):
            raise PolicyViolation("Only admins of the owning club can edit this event")
        if draft.club_id != current.club_id:
            raise InvalidSubmission("An event cannot be moved to another club")
        if draft.max_attendees is not None and draft.max_attendees < len(current.attendee_ids):
            raise InvalidSubmission(
                f"max_attendees cannot be below the {len(current.attendee_ids)} current attendees"
            )

        conflicts = self.check_conflicts(draft.slot, exclude_id=event_id)
        self._guard_conflicts(conflicts)

        changes = draft.model_dump()
        changed_fields = sorted(k for k, v in changes.items() if getattr(current, k) != v)

        def _replace(stored: Event) -> Event:
            return Event.model_validate({**stored.model_dump(), **changes})

        replacement = self.event_repo.update(event_id, _replace)
        logger.info("event %s updated: %s", event_id, ", ".join(changed_fields) or "no changes")
        self.bus.publish(
            EventUpdated(event_id=event_id, actor_id=viewer.id, changed_fields=changed_fields)
        )
        return replacement, conflicts

    # ------------------------------------------------------------------
    # College admin actions
    # ------------------------------------------------------------------

    def approve(self, viewer: Viewer, event_id: str) -> tuple[Event, list[Event]]:
        """Approve a pending event; clashes are reported, not enforced."""
        approved = self.event_repo.update(
            event_id, lambda stored: apply_transition(viewer, stored, ApprovalState.APPROVED)
        )
        conflicts = self.check_conflicts(approved, exclude_id=event_id)
        logger.info("event %s approved by %s", event_id, viewer.id)
        self.bus.publish(EventApproved(event_id=event_id, actor_id=viewer.id))
        return approved, conflicts

    def reject(self, viewer: Viewer, event_id: str) -> Event:
        rejected = self.event_repo.update(
            event_id, lambda stored: apply_transition(viewer, stored, ApprovalState.REJECTED)
        )
        logger.info("event %s rejected by %s", event_id, viewer.id)
        self.bus.publish(EventRejected(event_id=event_id, actor_id=viewer.id))
        return rejected

    # ------------------------------------------------------------------
    # Student actions
    # ------------------------------------------------------------------

    def rsvp(self, viewer: Viewer, event_id: str, today: dt.date | None = None) -> Event:
        current = self._get_event(event_id)
        if not can_view(viewer, current, self.club_repo.get(current.club_id)):
            raise PolicyViolation("Event is not visible to this viewer")

        updated = self.event_repo.update(
            event_id, lambda stored: record_rsvp(viewer, stored, today)
        )
        logger.info("viewer %s registered for event %s", viewer.id, event_id)
        self.bus.publish(
            RsvpRecorded(
                event_id=event_id,
                viewer_id=viewer.id,
                attendee_count=len(updated.attendee_ids),
            )
        )
        return updated
