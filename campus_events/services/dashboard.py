"""Read-side helpers that assemble the role-specific dashboards."""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable, Mapping

from campus_events.domain.models import (
    ApprovalState,
    Club,
    ClubAdminDashboard,
    CollegeAdminDashboard,
    CollegeAdminStats,
    ConflictReport,
    Event,
    PendingReview,
    StudentDashboard,
    Viewer,
)
from campus_events.services.conflicts import describe_conflicts, find_conflicts
from campus_events.services.policy import visible_events


def filter_events(
    events: Iterable[Event],
    q: str | None = None,
    location: str | None = None,
    club_id: str | None = None,
) -> list[Event]:
    """Apply the search box and the location/club selectors.

    *q* matches name or description, case-insensitively.
    """
    needle = q.lower() if q else None
    return [
        event
        for event in events
        if (needle is None or needle in event.name.lower() or needle in event.description.lower())
        and (location is None or event.location == location)
        and (club_id is None or event.club_id == club_id)
    ]


def split_by_date(
    events: Iterable[Event], today: dt.date
) -> tuple[list[Event], list[Event]]:
    """Return ``(upcoming, past)``; an event dated today counts as upcoming."""
    upcoming: list[Event] = []
    past: list[Event] = []
    for event in events:
        (upcoming if event.date >= today else past).append(event)
    return upcoming, past


def student_dashboard(
    viewer: Viewer,
    events: Iterable[Event],
    clubs: Mapping[str, Club],
    today: dt.date,
    q: str | None = None,
    location: str | None = None,
    club_id: str | None = None,
) -> StudentDashboard:
    visible = filter_events(visible_events(viewer, events, clubs), q, location, club_id)
    upcoming, past = split_by_date(visible, today)
    club_names = [
        clubs[cid].name for cid in sorted(viewer.club_ids) if cid in clubs
    ]
    return StudentDashboard(club_names=club_names, upcoming=upcoming, past=past)


def club_admin_dashboard(
    viewer: Viewer, events: Iterable[Event], clubs: Mapping[str, Club], today: dt.date
) -> ClubAdminDashboard:
    managed = [club for club in clubs.values() if viewer.id in club.admin_ids]
    managed_ids = {club.id for club in managed}
    own = [event for event in events if event.club_id in managed_ids]
    upcoming, past = split_by_date(own, today)
    return ClubAdminDashboard(
        clubs=managed,
        upcoming_approved=[e for e in upcoming if e.approval_state == ApprovalState.APPROVED],
        pending=[e for e in own if e.approval_state == ApprovalState.PENDING],
        past=past,
    )


def college_admin_dashboard(events: Iterable[Event]) -> CollegeAdminDashboard:
    events = list(events)
    pending = [e for e in events if e.approval_state == ApprovalState.PENDING]
    approved = [e for e in events if e.approval_state == ApprovalState.APPROVED]

    reviews = []
    for event in pending:
        conflicts = find_conflicts(event, events, exclude_id=event.id)
        reviews.append(
            PendingReview(
                event=event,
                conflicts=ConflictReport(
                    conflicts=conflicts, warning=describe_conflicts(conflicts)
                ),
            )
        )

    return CollegeAdminDashboard(
        stats=CollegeAdminStats(
            total_events=len(events),
            pending_events=len(pending),
            approved_events=len(approved),
            total_attendees=sum(len(e.attendee_ids) for e in events),
        ),
        pending=reviews,
        approved=approved,
    )
