"""Service for detecting venue schedule conflicts between events."""

from __future__ import annotations

from collections.abc import Iterable

from campus_events.domain.models import ApprovalState, Event, EventTimeSlot


def slots_overlap(a: EventTimeSlot, b: EventTimeSlot) -> bool:
    """Return True when two slots share a venue and date and their times intersect.

    Times are half-open ``[start, end)``, so an event ending at 16:00 does not
    clash with one starting at 16:00.
    """
    if a.location != b.location or a.date != b.date:
        return False
    return not (a.end_time <= b.start_time or a.start_time >= b.end_time)


def find_conflicts(
    candidate: EventTimeSlot,
    existing: Iterable[Event],
    exclude_id: str | None = None,
) -> list[Event]:
    """Return approved events in *existing* that clash with *candidate*.

    Pending and rejected events never block a slot. *exclude_id* drops the
    event being edited so a draft does not clash with its own stored version.
    Input order is preserved. The caller guarantees
    ``candidate.start_time < candidate.end_time``.
    """
    return [
        event
        for event in existing
        if event.id != exclude_id
        and event.approval_state == ApprovalState.APPROVED
        and slots_overlap(candidate, event)
    ]


def describe_conflicts(conflicts: list[Event]) -> str | None:
    """Build the warning shown next to a clashing slot, or None when clear."""
    if not conflicts:
        return None
    return f"Schedule conflict with: {', '.join(event.name for event in conflicts)}"
