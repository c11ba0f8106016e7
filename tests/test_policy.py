"""Tests for the visibility, edit, approval and RSVP rules."""

from __future__ import annotations

from datetime import date, time
from itertools import product

import pytest

from campus_events.domain.errors import PolicyViolation
from campus_events.domain.models import (
    ApprovalState,
    Club,
    Event,
    Role,
    Venue,
    Viewer,
    Visibility,
)
from campus_events.services.policy import (
    apply_transition,
    can_edit,
    can_rsvp,
    can_transition_approval,
    can_view,
    record_rsvp,
    rsvp_denial_reason,
    visible_events,
)

_TODAY = date(2024, 10, 1)

TECH_CLUB = Club(
    id="club1",
    name="Tech Club",
    admin_ids=frozenset({"u2"}),
    member_ids=frozenset({"u1", "u4"}),
)
PHOTO_CLUB = Club(
    id="club3",
    name="Photography Club",
    admin_ids=frozenset({"u9"}),
    member_ids=frozenset({"u4"}),
)

STUDENT = Viewer(id="u1", role=Role.STUDENT, club_ids=frozenset({"club1"}))
CLUB_ADMIN = Viewer(id="u2", role=Role.CLUB_ADMIN, club_ids=frozenset({"club1"}))
COLLEGE_ADMIN = Viewer(id="u3", role=Role.COLLEGE_ADMIN)


def _make_event(**overrides) -> Event:
    defaults = dict(
        name="JavaScript Workshop",
        club_id="club1",
        location=Venue.COMPUTER_LAB_A,
        date=date(2024, 10, 15),
        start_time=time(14),
        end_time=time(16),
        visibility=Visibility.OPEN,
        approval_state=ApprovalState.APPROVED,
    )
    defaults.update(overrides)
    return Event(**defaults)


# ---------------------------------------------------------------------------
# can_view
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("visibility", "state"), list(product(Visibility, ApprovalState))
)
def test_college_admin_sees_everything(visibility, state):
    event = _make_event(visibility=visibility, approval_state=state, club_id="club3")
    assert can_view(COLLEGE_ADMIN, event, PHOTO_CLUB) is True


def test_open_approved_event_visible_to_any_student():
    outsider = Viewer(id="u7", role=Role.STUDENT)
    assert can_view(outsider, _make_event(), TECH_CLUB) is True


@pytest.mark.parametrize("state", [ApprovalState.PENDING, ApprovalState.REJECTED])
def test_unapproved_open_event_hidden_from_students(state):
    event = _make_event(approval_state=state)
    assert can_view(STUDENT, event, TECH_CLUB) is False


def test_unapproved_event_visible_to_owning_club_admin():
    pending = _make_event(approval_state=ApprovalState.PENDING)
    club_only = _make_event(
        approval_state=ApprovalState.PENDING, visibility=Visibility.CLUB_ONLY
    )
    assert can_view(CLUB_ADMIN, pending, TECH_CLUB) is True
    assert can_view(CLUB_ADMIN, club_only, TECH_CLUB) is True


def test_unapproved_event_hidden_from_other_club_admin():
    other_admin = Viewer(id="u9", role=Role.CLUB_ADMIN, club_ids=frozenset({"club3"}))
    pending = _make_event(approval_state=ApprovalState.PENDING)
    assert can_view(other_admin, pending, TECH_CLUB) is False


def test_club_only_event_needs_membership():
    event = _make_event(visibility=Visibility.CLUB_ONLY)
    outsider = Viewer(id="u7", role=Role.STUDENT, club_ids=frozenset({"club2"}))
    assert can_view(STUDENT, event, TECH_CLUB) is True
    assert can_view(outsider, event, TECH_CLUB) is False


def test_pending_club_only_event_hidden_from_members():
    event = _make_event(
        visibility=Visibility.CLUB_ONLY, approval_state=ApprovalState.PENDING
    )
    assert can_view(STUDENT, event, TECH_CLUB) is False


def test_club_only_visibility_follows_membership_and_approval():
    """A non-member never sees a club-only event; joining reveals it once approved."""
    student = Viewer(id="u1", role=Role.STUDENT, club_ids=frozenset({"club1"}))
    event = _make_event(
        club_id="club3",
        visibility=Visibility.CLUB_ONLY,
        approval_state=ApprovalState.PENDING,
    )
    assert can_view(student, event, PHOTO_CLUB) is False

    approved = event.model_copy(update={"approval_state": ApprovalState.APPROVED})
    assert can_view(student, approved, PHOTO_CLUB) is False

    joined = student.model_copy(update={"club_ids": student.club_ids | {"club3"}})
    club = PHOTO_CLUB.model_copy(update={"member_ids": PHOTO_CLUB.member_ids | {"u1"}})
    assert can_view(joined, approved, club) is True


def test_visible_events_keeps_order():
    events = [
        _make_event(name="A"),
        _make_event(name="B", approval_state=ApprovalState.PENDING),
        _make_event(name="C", visibility=Visibility.CLUB_ONLY),
    ]
    clubs = {"club1": TECH_CLUB}
    assert [e.name for e in visible_events(STUDENT, events, clubs)] == ["A", "C"]


# ---------------------------------------------------------------------------
# can_edit
# ---------------------------------------------------------------------------


def test_only_owning_club_admin_can_edit():
    event = _make_event()
    assert can_edit(CLUB_ADMIN, event, TECH_CLUB) is True
    assert can_edit(STUDENT, event, TECH_CLUB) is False
    assert can_edit(COLLEGE_ADMIN, event, TECH_CLUB) is False


def test_club_admin_cannot_edit_another_clubs_event():
    event = _make_event(club_id="club3")
    assert can_edit(CLUB_ADMIN, event, PHOTO_CLUB) is False
    # A mismatched club record does not grant access either.
    assert can_edit(CLUB_ADMIN, event, TECH_CLUB) is False


# ---------------------------------------------------------------------------
# can_transition_approval
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("new_state", [ApprovalState.APPROVED, ApprovalState.REJECTED])
def test_college_admin_decides_pending_events(new_state):
    event = _make_event(approval_state=ApprovalState.PENDING)
    assert can_transition_approval(COLLEGE_ADMIN, event, new_state) is True


def test_pending_is_not_a_target_state():
    event = _make_event(approval_state=ApprovalState.PENDING)
    assert can_transition_approval(COLLEGE_ADMIN, event, ApprovalState.PENDING) is False


@pytest.mark.parametrize(
    ("viewer", "current", "new_state"),
    list(
        product(
            [STUDENT, CLUB_ADMIN, COLLEGE_ADMIN],
            [ApprovalState.APPROVED, ApprovalState.REJECTED],
            list(ApprovalState),
        )
    ),
)
def test_decided_events_never_transition(viewer, current, new_state):
    event = _make_event(approval_state=current)
    assert can_transition_approval(viewer, event, new_state) is False


@pytest.mark.parametrize("viewer", [STUDENT, CLUB_ADMIN])
def test_only_college_admin_transitions(viewer):
    event = _make_event(approval_state=ApprovalState.PENDING)
    assert can_transition_approval(viewer, event, ApprovalState.APPROVED) is False


def test_apply_transition_returns_replacement():
    event = _make_event(approval_state=ApprovalState.PENDING)
    approved = apply_transition(COLLEGE_ADMIN, event, ApprovalState.APPROVED)

    assert approved.approval_state == ApprovalState.APPROVED
    assert approved.id == event.id
    assert event.approval_state == ApprovalState.PENDING

    with pytest.raises(PolicyViolation):
        apply_transition(COLLEGE_ADMIN, approved, ApprovalState.REJECTED)


# ---------------------------------------------------------------------------
# can_rsvp
# ---------------------------------------------------------------------------


def test_student_can_rsvp_to_upcoming_event():
    assert can_rsvp(STUDENT, _make_event(), today=_TODAY) is True


def test_rsvp_on_the_event_day_is_allowed():
    event = _make_event()
    assert can_rsvp(STUDENT, event, today=event.date) is True


def test_rsvp_closed_after_event_date():
    assert can_rsvp(STUDENT, _make_event(), today=date(2024, 10, 16)) is False


@pytest.mark.parametrize("viewer", [CLUB_ADMIN, COLLEGE_ADMIN])
def test_admins_cannot_rsvp(viewer):
    assert can_rsvp(viewer, _make_event(), today=_TODAY) is False
    assert rsvp_denial_reason(viewer, _make_event(), today=_TODAY) == "Only students can RSVP"


def test_rsvp_requires_approval():
    event = _make_event(approval_state=ApprovalState.PENDING)
    assert can_rsvp(STUDENT, event, today=_TODAY) is False


def test_rsvp_closed_when_full():
    event = _make_event(max_attendees=2, attendee_ids=frozenset({"u4", "u5"}))
    assert can_rsvp(STUDENT, event, today=_TODAY) is False
    assert rsvp_denial_reason(STUDENT, event, today=_TODAY) == "This event is full"


def test_unbounded_event_never_fills():
    event = _make_event(attendee_ids=frozenset(f"s{i}" for i in range(500)))
    assert can_rsvp(STUDENT, event, today=_TODAY) is True


def test_second_rsvp_by_same_viewer_denied():
    event = _make_event(max_attendees=10)
    attending = record_rsvp(STUDENT, event, today=_TODAY)

    assert STUDENT.id in attending.attendee_ids
    assert can_rsvp(STUDENT, attending, today=_TODAY) is False
    with pytest.raises(PolicyViolation, match="Already registered"):
        record_rsvp(STUDENT, attending, today=_TODAY)


def test_last_seat_fills_event():
    event = _make_event(max_attendees=1)
    attending = record_rsvp(STUDENT, event, today=_TODAY)
    other = Viewer(id="u8", role=Role.STUDENT)

    assert attending.is_full
    assert can_rsvp(other, attending, today=_TODAY) is False
