"""Domain event handlers, wired up at application startup."""

from __future__ import annotations

import logging

from campus_events.domain.bus import EventBus
from campus_events.domain.events import (
    ConflictDetected,
    EventApproved,
    EventProposed,
    EventRejected,
    EventUpdated,
    RsvpRecorded,
)
from campus_events.domain.models import TimelineEntry, TimelineEntryType
from campus_events.repos.memory import EventRepository, TimelineRepository
from campus_events.services.conflicts import find_conflicts

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires lifecycle handlers to the bus with access to the repositories."""

    def __init__(
        self,
        bus: EventBus,
        event_repo: EventRepository,
        timeline_repo: TimelineRepository,
    ) -> None:
        self.bus = bus
        self.event_repo = event_repo
        self.timeline_repo = timeline_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(EventProposed, self.on_event_proposed)
        self.bus.subscribe(EventUpdated, self.on_event_updated)
        self.bus.subscribe(EventApproved, self.on_event_approved)
        self.bus.subscribe(EventRejected, self.on_event_rejected)
        self.bus.subscribe(RsvpRecorded, self.on_rsvp_recorded)
        self.bus.subscribe(ConflictDetected, self.on_conflict_detected)

    def _check_conflicts(self, event_id: str) -> None:
        stored = self.event_repo.get(event_id)
        if stored is None:
            return
        conflicts = find_conflicts(
            stored, self.event_repo.list_all(), exclude_id=stored.id
        )
        if conflicts:
            self.bus.publish(
                ConflictDetected(
                    event_id=stored.id,
                    conflicting_event_ids=[c.id for c in conflicts],
                )
            )

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_event_proposed(self, event: EventProposed) -> None:
        if self.event_repo.get(event.event_id) is None:
            return

        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.PROPOSED,
                actor_id=event.actor_id,
            )
        )
        self._check_conflicts(event.event_id)

    def on_event_updated(self, event: EventUpdated) -> None:
        if self.event_repo.get(event.event_id) is None:
            return

        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.UPDATED,
                actor_id=event.actor_id,
                payload={"changed_fields": event.changed_fields},
            )
        )
        self._check_conflicts(event.event_id)

    def on_event_approved(self, event: EventApproved) -> None:
        if self.event_repo.get(event.event_id) is None:
            return

        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.APPROVED,
                actor_id=event.actor_id,
            )
        )
        # Approving over a clash is allowed, but it is recorded.
        self._check_conflicts(event.event_id)

    def on_event_rejected(self, event: EventRejected) -> None:
        if self.event_repo.get(event.event_id) is None:
            return

        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.REJECTED,
                actor_id=event.actor_id,
            )
        )

    def on_rsvp_recorded(self, event: RsvpRecorded) -> None:
        if self.event_repo.get(event.event_id) is None:
            return

        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.RSVP,
                actor_id=event.viewer_id,
                payload={"attendee_count": event.attendee_count},
            )
        )

    def on_conflict_detected(self, event: ConflictDetected) -> None:
        if self.event_repo.get(event.event_id) is None:
            return

        logger.warning(
            "event %s clashes with approved event(s) %s",
            event.event_id,
            ", ".join(event.conflicting_event_ids),
        )
        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.CONFLICT_DETECTED,
                payload={"conflicting_event_ids": event.conflicting_event_ids},
            )
        )
