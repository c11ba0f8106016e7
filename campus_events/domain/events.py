"""Domain events emitted during the campus event lifecycle."""

from __future__ import annotations

from pydantic import BaseModel


class EventProposed(BaseModel):
    """Fired when a club admin submits a new event for approval."""

    event_id: str
    actor_id: str


class EventUpdated(BaseModel):
    """Fired when a club admin edits an existing event."""

    event_id: str
    actor_id: str
    changed_fields: list[str]


class EventApproved(BaseModel):
    event_id: str
    actor_id: str


class EventRejected(BaseModel):
    event_id: str
    actor_id: str


class RsvpRecorded(BaseModel):
    """Fired when a student registers attendance."""

    event_id: str
    viewer_id: str
    attendee_count: int


class ConflictDetected(BaseModel):
    """Fired when an event overlaps approved events at the same venue and date."""

    event_id: str
    conflicting_event_ids: list[str]
