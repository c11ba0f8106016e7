"""Tests for the venue conflict-detection service."""

from datetime import date, time

import pytest

from campus_events.domain.models import ApprovalState, Event, EventTimeSlot, Venue
from campus_events.services.conflicts import (
    describe_conflicts,
    find_conflicts,
    slots_overlap,
)

_DAY = date(2024, 10, 15)


def _make_event(
    start: time,
    end: time,
    name: str = "Existing",
    location: Venue = Venue.COMPUTER_LAB_A,
    day: date = _DAY,
    state: ApprovalState = ApprovalState.APPROVED,
    **overrides,
) -> Event:
    return Event(
        name=name,
        club_id="club1",
        location=location,
        date=day,
        start_time=start,
        end_time=end,
        approval_state=state,
        **overrides,
    )


def _slot(start: time, end: time, location: Venue = Venue.COMPUTER_LAB_A, day: date = _DAY):
    return EventTimeSlot(location=location, date=day, start_time=start, end_time=end)


def test_empty_collection_has_no_conflicts():
    assert find_conflicts(_slot(time(10), time(11)), []) == []


def test_no_overlap():
    """Events that don't overlap should not be returned as conflicts."""
    existing = [_make_event(time(8), time(9))]
    assert find_conflicts(_slot(time(10), time(11)), existing) == []


@pytest.mark.parametrize(
    ("existing_span", "candidate_span"),
    [
        pytest.param((time(9), time(10, 30)), (time(10), time(11)), id="partial-start"),
        pytest.param((time(10, 30), time(12)), (time(10), time(11)), id="partial-end"),
        pytest.param((time(9), time(12)), (time(10), time(11)), id="candidate-nested"),
        pytest.param((time(10, 15), time(10, 45)), (time(10), time(11)), id="existing-nested"),
        pytest.param((time(10), time(11)), (time(10), time(11)), id="identical"),
    ],
)
def test_overlapping_intervals_conflict(existing_span, candidate_span):
    existing = [_make_event(*existing_span)]
    conflicts = find_conflicts(_slot(*candidate_span), existing)
    assert conflicts == existing


@pytest.mark.parametrize(
    ("existing_span", "candidate_span"),
    [
        pytest.param((time(9), time(10)), (time(10), time(11)), id="existing-ends-at-start"),
        pytest.param((time(11), time(12)), (time(10), time(11)), id="existing-starts-at-end"),
    ],
)
def test_exact_boundary_no_conflict(existing_span, candidate_span):
    """Abutting [start, end) intervals touch but do not overlap."""
    existing = [_make_event(*existing_span)]
    assert find_conflicts(_slot(*candidate_span), existing) == []


def test_other_venue_or_date_never_conflicts():
    existing = [
        _make_event(time(10), time(11), location=Venue.COMPUTER_LAB_B),
        _make_event(time(10), time(11), day=date(2024, 10, 16)),
    ]
    assert find_conflicts(_slot(time(10), time(11)), existing) == []


@pytest.mark.parametrize("state", [ApprovalState.PENDING, ApprovalState.REJECTED])
def test_unapproved_events_are_ignored(state):
    existing = [_make_event(time(10), time(11), state=state)]
    assert find_conflicts(_slot(time(10), time(11)), existing) == []


def test_exclude_id_skips_the_event_being_edited():
    own = _make_event(time(10), time(11), name="Own")
    other = _make_event(time(10, 30), time(11, 30), name="Other")

    conflicts = find_conflicts(own, [own, other], exclude_id=own.id)

    assert conflicts == [other]
    assert own not in find_conflicts(_slot(time(10), time(11)), [own], exclude_id=own.id)


def test_results_keep_input_order():
    first = _make_event(time(9), time(11), name="First")
    second = _make_event(time(10), time(12), name="Second")
    third = _make_event(time(10, 30), time(10, 45), name="Third")

    assert find_conflicts(_slot(time(10), time(11)), [third, first, second]) == [
        third,
        first,
        second,
    ]


def test_slots_overlap_is_symmetric():
    a = _slot(time(9), time(10, 30))
    b = _slot(time(10), time(11))
    assert slots_overlap(a, b) and slots_overlap(b, a)


def test_describe_conflicts():
    assert describe_conflicts([]) is None
    events = [
        _make_event(time(9), time(10), name="JavaScript Workshop"),
        _make_event(time(9), time(10), name="Hack Night"),
    ]
    assert describe_conflicts(events) == "Schedule conflict with: JavaScript Workshop, Hack Night"


def test_computer_lab_booking_scenario():
    """Overlapping the 14:00-16:00 workshop clashes; starting at 16:00 abuts it."""
    workshop = _make_event(time(14), time(16), name="JavaScript Workshop")
    unrelated = _make_event(time(9), time(11), name="Morning Lab")
    existing = [unrelated, workshop]

    assert find_conflicts(_slot(time(15), time(17)), existing) == [workshop]
    assert find_conflicts(_slot(time(16), time(18)), existing) == []
