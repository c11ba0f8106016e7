"""Visibility and approval rules for campus events.

Every check is a total function of the values passed in: no repository
access, no ambient session state. Callers turn a ``False`` into a disabled
control or an access-denied response.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable, Mapping

from campus_events.domain.errors import PolicyViolation
from campus_events.domain.models import (
    ApprovalState,
    Club,
    Event,
    Role,
    Viewer,
    Visibility,
)

_TERMINAL_STATES = frozenset({ApprovalState.APPROVED, ApprovalState.REJECTED})


def is_club_admin(viewer: Viewer, event: Event, club: Club | None) -> bool:
    """True when *viewer* administers the club that owns *event*."""
    return club is not None and club.id == event.club_id and viewer.id in club.admin_ids


def _is_member(viewer: Viewer, event: Event, club: Club | None) -> bool:
    return event.club_id in viewer.club_ids or is_club_admin(viewer, event, club)


def can_view(viewer: Viewer, event: Event, club: Club | None) -> bool:
    """Decide whether *viewer* may see *event*.

    Unapproved events are visible only to the owning club's admins and to
    college admins.
    """
    match viewer.role:
        case Role.COLLEGE_ADMIN:
            return True
        case Role.STUDENT | Role.CLUB_ADMIN:
            pass

    approved = event.approval_state == ApprovalState.APPROVED
    match event.visibility:
        case Visibility.OPEN:
            return approved or is_club_admin(viewer, event, club)
        case Visibility.CLUB_ONLY:
            return _is_member(viewer, event, club) and (
                approved or is_club_admin(viewer, event, club)
            )


def can_edit(viewer: Viewer, event: Event, club: Club | None) -> bool:
    """Only an admin of the owning club may change event content."""
    match viewer.role:
        case Role.CLUB_ADMIN:
            return is_club_admin(viewer, event, club)
        case Role.STUDENT | Role.COLLEGE_ADMIN:
            return False


def can_transition_approval(
    viewer: Viewer, event: Event, new_state: ApprovalState
) -> bool:
    """Approval moves one way: pending to approved or rejected, by a college admin."""
    match viewer.role:
        case Role.COLLEGE_ADMIN:
            return (
                event.approval_state == ApprovalState.PENDING
                and new_state in _TERMINAL_STATES
            )
        case Role.STUDENT | Role.CLUB_ADMIN:
            return False


def _rsvp_blocker(viewer: Viewer, event: Event, today: dt.date) -> str | None:
    if event.approval_state != ApprovalState.APPROVED:
        return "Event is not approved"
    if today > event.date:
        return "Event has already taken place"
    if event.is_full:
        return "This event is full"
    if viewer.id in event.attendee_ids:
        return "Already registered for this event"
    return None


def can_rsvp(viewer: Viewer, event: Event, today: dt.date | None = None) -> bool:
    """A student may RSVP once to an approved, upcoming event with free seats."""
    match viewer.role:
        case Role.STUDENT:
            return _rsvp_blocker(viewer, event, today or dt.date.today()) is None
        case Role.CLUB_ADMIN | Role.COLLEGE_ADMIN:
            return False


def rsvp_denial_reason(
    viewer: Viewer, event: Event, today: dt.date | None = None
) -> str | None:
    """Explain why :func:`can_rsvp` is False, or return None when it is True."""
    if viewer.role != Role.STUDENT:
        return "Only students can RSVP"
    return _rsvp_blocker(viewer, event, today or dt.date.today())


# ---------------------------------------------------------------------------
# Helpers built on the checks above
# ---------------------------------------------------------------------------


def visible_events(
    viewer: Viewer, events: Iterable[Event], clubs: Mapping[str, Club]
) -> list[Event]:
    """Filter *events* down to the ones *viewer* may see, keeping order."""
    return [event for event in events if can_view(viewer, event, clubs.get(event.club_id))]


def apply_transition(viewer: Viewer, event: Event, new_state: ApprovalState) -> Event:
    """Return the replacement event in *new_state*, or raise PolicyViolation."""
    if not can_transition_approval(viewer, event, new_state):
        raise PolicyViolation(
            f"Cannot move event from {event.approval_state} to {new_state}"
        )
    return event.model_copy(update={"approval_state": new_state})


def record_rsvp(viewer: Viewer, event: Event, today: dt.date | None = None) -> Event:
    """Return the replacement event with *viewer* attending, or raise PolicyViolation."""
    reason = rsvp_denial_reason(viewer, event, today)
    if reason is not None:
        raise PolicyViolation(reason)
    return event.model_copy(update={"attendee_ids": event.attendee_ids | {viewer.id}})
