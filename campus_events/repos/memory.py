"""In-memory repositories for clubs, users, events and their timelines."""

from __future__ import annotations

import datetime as dt
import threading
from typing import Callable

from campus_events.domain.errors import AlreadyExists, NotFound
from campus_events.domain.models import (
    ApprovalState,
    Club,
    Event,
    Role,
    TimelineEntry,
    User,
    Venue,
    Visibility,
)


class EventRepository:
    """Dict-backed store for Event instances, keyed by id.

    Events are immutable; :meth:`update` swaps in a replacement under a lock
    so a check-then-replace on one event cannot interleave with another.
    """

    def __init__(self) -> None:
        self._store: dict[str, Event] = {}
        self._lock = threading.Lock()

    def add(self, event: Event) -> None:
        with self._lock:
            self._store[event.id] = event

    def get(self, event_id: str) -> Event | None:
        return self._store.get(event_id)

    def list_all(self) -> list[Event]:
        return list(self._store.values())

    def update(self, event_id: str, change: Callable[[Event], Event]) -> Event:
        """Replace an event with ``change(current)`` atomically.

        Exceptions raised by *change* leave the stored event untouched.
        """
        with self._lock:
            current = self._store.get(event_id)
            if current is None:
                raise NotFound("Event", event_id)
            replacement = change(current)
            self._store[event_id] = replacement
            return replacement

    def clear(self) -> None:
        with self._lock:
            self._store.clear()


class ClubRepository:
    """Dict-backed store for Club instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Club] = {}
        self._lock = threading.Lock()

    def add(self, club: Club) -> None:
        with self._lock:
            self._store[club.id] = club

    def get(self, club_id: str) -> Club | None:
        return self._store.get(club_id)

    def list_all(self) -> list[Club]:
        return list(self._store.values())

    def as_mapping(self) -> dict[str, Club]:
        """Snapshot of clubs keyed by id, for policy checks over many events."""
        return dict(self._store)

    def add_member(self, club_id: str, user_id: str) -> Club:
        with self._lock:
            club = self._store.get(club_id)
            if club is None:
                raise NotFound("Club", club_id)
            club = club.model_copy(update={"member_ids": club.member_ids | {user_id}})
            self._store[club_id] = club
            return club

    def clear(self) -> None:
        with self._lock:
            self._store.clear()


class UserRepository:
    """Dict-backed store for User instances, keyed by id.

    Emails are unique, compared case-insensitively.
    """

    def __init__(self) -> None:
        self._store: dict[str, User] = {}
        self._lock = threading.Lock()

    def add(self, user: User) -> None:
        with self._lock:
            self._store[user.id] = user

    def register(self, user: User) -> User:
        """Store a new user, refusing an email that is already taken."""
        with self._lock:
            if self.find_by_email(user.email) is not None:
                raise AlreadyExists("User", user.email)
            self._store[user.id] = user
            return user

    def get(self, user_id: str) -> User | None:
        return self._store.get(user_id)

    def find_by_email(self, email: str) -> User | None:
        for user in list(self._store.values()):
            if user.email.lower() == email.lower():
                return user
        return None

    def join_club(self, user_id: str, club_id: str) -> User:
        with self._lock:
            user = self._store.get(user_id)
            if user is None:
                raise NotFound("User", user_id)
            user = user.model_copy(update={"club_ids": user.club_ids | {club_id}})
            self._store[user_id] = user
            return user

    def clear(self) -> None:
        with self._lock:
            self._store.clear()


class TimelineRepository:
    """List-backed store for TimelineEntry instances."""

    def __init__(self) -> None:
        self._entries: list[TimelineEntry] = []

    def add(self, entry: TimelineEntry) -> None:
        self._entries.append(entry)

    def list_for_event(self, event_id: str) -> list[TimelineEntry]:
        return sorted(
            [e for e in self._entries if e.event_id == event_id],
            key=lambda e: e.timestamp,
        )

    def clear(self) -> None:
        self._entries.clear()


# ---------------------------------------------------------------------------
# Seed data: the campus fixtures the dashboards were built against
# ---------------------------------------------------------------------------


def seed_clubs(repo: ClubRepository) -> None:
    repo.add(
        Club(
            id="club1",
            name="Tech Club",
            description="A club for technology enthusiasts",
            admin_ids=frozenset({"2"}),
            member_ids=frozenset({"1", "4", "5"}),
        )
    )
    repo.add(
        Club(
            id="club2",
            name="Drama Society",
            description="For students passionate about theater and performing arts",
            admin_ids=frozenset({"6"}),
            member_ids=frozenset({"1", "7", "8"}),
        )
    )
    repo.add(
        Club(
            id="club3",
            name="Photography Club",
            description="Capturing moments and creating memories",
            admin_ids=frozenset({"9"}),
            member_ids=frozenset({"4", "5", "7"}),
        )
    )
    repo.add(
        Club(
            id="club4",
            name="Music Society",
            description="For music lovers and performers",
            admin_ids=frozenset({"10"}),
            member_ids=frozenset({"1", "8", "9"}),
        )
    )


def seed_users(repo: UserRepository) -> None:
    repo.add(
        User(
            id="1",
            name="John Doe",
            email="student@college.edu",
            role=Role.STUDENT,
            club_ids=frozenset({"club1", "club2"}),
        )
    )
    repo.add(
        User(
            id="2",
            name="Jane Smith",
            email="clubadmin@college.edu",
            role=Role.CLUB_ADMIN,
            club_ids=frozenset({"club1"}),
        )
    )
    repo.add(
        User(id="3", name="Admin User", email="admin@college.edu", role=Role.COLLEGE_ADMIN)
    )


def seed_events(repo: EventRepository) -> None:
    repo.add(
        Event(
            id="1",
            name="JavaScript Workshop",
            description=(
                "Learn the fundamentals of JavaScript programming with hands-on "
                "exercises and real-world examples."
            ),
            club_id="club1",
            club_name="Tech Club",
            location=Venue.COMPUTER_LAB_A,
            date=dt.date(2024, 10, 15),
            start_time=dt.time(14, 0),
            end_time=dt.time(16, 0),
            visibility=Visibility.OPEN,
            permission_letter_url="/documents/tech-workshop-permission.pdf",
            approval_state=ApprovalState.APPROVED,
            attendee_ids=frozenset({"1", "4", "5"}),
            max_attendees=30,
        )
    )
    repo.add(
        Event(
            id="2",
            name="Annual Drama Performance",
            description=(
                "Join us for our annual drama performance featuring classic and "
                "contemporary plays."
            ),
            club_id="club2",
            club_name="Drama Society",
            location=Venue.MAIN_AUDITORIUM,
            date=dt.date(2024, 10, 20),
            start_time=dt.time(18, 0),
            end_time=dt.time(21, 0),
            visibility=Visibility.OPEN,
            permission_letter_url="/documents/drama-performance-permission.pdf",
            approval_state=ApprovalState.APPROVED,
            attendee_ids=frozenset({"1", "7", "8", "9"}),
            max_attendees=200,
        )
    )
    repo.add(
        Event(
            id="3",
            name="Photography Exhibition",
            description="Showcase your best photographs in our annual exhibition.",
            club_id="club3",
            club_name="Photography Club",
            location=Venue.ART_GALLERY,
            date=dt.date(2024, 10, 25),
            start_time=dt.time(10, 0),
            end_time=dt.time(17, 0),
            visibility=Visibility.CLUB_ONLY,
            permission_letter_url="/documents/photo-exhibition-permission.pdf",
            approval_state=ApprovalState.PENDING,
            attendee_ids=frozenset({"4", "5"}),
            max_attendees=50,
        )
    )
    repo.add(
        Event(
            id="4",
            name="React Advanced Concepts",
            description=(
                "Deep dive into advanced React concepts including hooks, context, "
                "and performance optimization."
            ),
            club_id="club1",
            club_name="Tech Club",
            location=Venue.COMPUTER_LAB_B,
            date=dt.date(2024, 10, 18),
            start_time=dt.time(15, 0),
            end_time=dt.time(17, 30),
            visibility=Visibility.CLUB_ONLY,
            approval_state=ApprovalState.PENDING,
            attendee_ids=frozenset({"1"}),
            max_attendees=25,
        )
    )
    repo.add(
        Event(
            id="5",
            name="Open Mic Night",
            description="Show off your musical talents at our monthly open mic night.",
            club_id="club4",
            club_name="Music Society",
            location=Venue.STUDENT_CENTER,
            date=dt.date(2024, 10, 22),
            start_time=dt.time(19, 0),
            end_time=dt.time(22, 0),
            visibility=Visibility.OPEN,
            permission_letter_url="/documents/open-mic-permission.pdf",
            approval_state=ApprovalState.APPROVED,
            attendee_ids=frozenset({"1", "8", "9", "10"}),
            max_attendees=100,
        )
    )
