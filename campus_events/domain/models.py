"""Domain models for the campus events system."""

from __future__ import annotations

import datetime as dt
import uuid
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Role(StrEnum):
    STUDENT = "student"
    CLUB_ADMIN = "club_admin"
    COLLEGE_ADMIN = "college_admin"


class Visibility(StrEnum):
    OPEN = "open"
    CLUB_ONLY = "club_only"


class ApprovalState(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Venue(StrEnum):
    MAIN_AUDITORIUM = "Main Auditorium"
    COMPUTER_LAB_A = "Computer Lab A"
    COMPUTER_LAB_B = "Computer Lab B"
    SEMINAR_HALL_1 = "Seminar Hall 1"
    SEMINAR_HALL_2 = "Seminar Hall 2"
    ART_GALLERY = "Art Gallery"
    STUDENT_CENTER = "Student Center"
    LIBRARY_CONFERENCE_ROOM = "Library Conference Room"
    OUTDOOR_AMPHITHEATER = "Outdoor Amphitheater"
    SPORTS_COMPLEX = "Sports Complex"


class TimelineEntryType(StrEnum):
    PROPOSED = "proposed"
    UPDATED = "updated"
    CONFLICT_DETECTED = "conflict_detected"
    APPROVED = "approved"
    REJECTED = "rejected"
    RSVP = "rsvp"


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class EventTimeSlot(BaseModel):
    """Where and when an event takes place."""

    model_config = ConfigDict(frozen=True)

    location: Venue
    date: dt.date
    start_time: dt.time
    end_time: dt.time


class Event(EventTimeSlot):
    """A club event. Stored events are replaced, never mutated."""

    id: str = Field(default_factory=_new_id)
    club_id: str
    club_name: str = ""
    name: str
    description: str = ""
    visibility: Visibility = Visibility.OPEN
    approval_state: ApprovalState = ApprovalState.PENDING
    max_attendees: int | None = Field(default=None, gt=0)
    attendee_ids: frozenset[str] = frozenset()
    permission_letter_url: str | None = None
    created_at: dt.datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _check_event(self) -> Event:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.max_attendees is not None and len(self.attendee_ids) > self.max_attendees:
            raise ValueError("attendee_ids exceeds max_attendees")
        return self

    @property
    def is_full(self) -> bool:
        return self.max_attendees is not None and len(self.attendee_ids) >= self.max_attendees


class Club(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    description: str = ""
    admin_ids: frozenset[str] = frozenset()
    member_ids: frozenset[str] = frozenset()


class Viewer(BaseModel):
    """The identity a policy decision is made for."""

    model_config = ConfigDict(frozen=True)

    id: str
    role: Role
    club_ids: frozenset[str] = frozenset()


class User(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    email: str
    role: Role
    club_ids: frozenset[str] = frozenset()

    def as_viewer(self) -> Viewer:
        return Viewer(id=self.id, role=self.role, club_ids=self.club_ids)


class TimelineEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    event_id: str
    timestamp: dt.datetime = Field(default_factory=_utcnow)
    type: TimelineEntryType
    actor_id: str | None = None
    payload: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    """Self-service sign-up. College admin accounts are never self-registered."""

    name: str = Field(min_length=1)
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=1)
    role: Role = Role.STUDENT
    club_ids: frozenset[str] = frozenset()

    @model_validator(mode="after")
    def _check_role(self) -> RegisterRequest:
        if self.role == Role.COLLEGE_ADMIN:
            raise ValueError("college_admin accounts cannot be registered")
        return self


class EventDraft(BaseModel):
    """Event content submitted by a club admin."""

    club_id: str
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    location: Venue
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    visibility: Visibility = Visibility.OPEN
    max_attendees: int | None = Field(default=None, gt=0)
    permission_letter_url: str | None = None

    @model_validator(mode="after")
    def _end_after_start(self) -> EventDraft:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    @property
    def slot(self) -> EventTimeSlot:
        return EventTimeSlot(
            location=self.location,
            date=self.date,
            start_time=self.start_time,
            end_time=self.end_time,
        )


class ConflictCheckRequest(BaseModel):
    slot: EventTimeSlot
    exclude_id: str | None = None

    @model_validator(mode="after")
    def _end_after_start(self) -> ConflictCheckRequest:
        if self.slot.end_time <= self.slot.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class ConflictReport(BaseModel):
    conflicts: list[Event] = Field(default_factory=list)
    warning: str | None = None


class EventPermissions(BaseModel):
    can_view: bool
    can_edit: bool
    can_approve: bool
    can_reject: bool
    can_rsvp: bool


class ApprovalResponse(BaseModel):
    event: Event
    conflicts: ConflictReport


class SubmissionResponse(BaseModel):
    event: Event
    conflicts: ConflictReport


class PendingReview(BaseModel):
    event: Event
    conflicts: ConflictReport


class StudentDashboard(BaseModel):
    club_names: list[str] = Field(default_factory=list)
    upcoming: list[Event] = Field(default_factory=list)
    past: list[Event] = Field(default_factory=list)


class ClubAdminDashboard(BaseModel):
    clubs: list[Club] = Field(default_factory=list)
    upcoming_approved: list[Event] = Field(default_factory=list)
    pending: list[Event] = Field(default_factory=list)
    past: list[Event] = Field(default_factory=list)


class CollegeAdminStats(BaseModel):
    total_events: int
    pending_events: int
    approved_events: int
    total_attendees: int


class CollegeAdminDashboard(BaseModel):
    stats: CollegeAdminStats
    pending: list[PendingReview] = Field(default_factory=list)
    approved: list[Event] = Field(default_factory=list)
