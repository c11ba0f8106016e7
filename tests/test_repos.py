"""Tests for the in-memory repositories."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from campus_events.domain.errors import AlreadyExists, NotFound
from campus_events.domain.models import Club, Role, User
from campus_events.repos.memory import ClubRepository, UserRepository


def test_concurrent_joins_keep_every_member():
    clubs = ClubRepository()
    clubs.add(Club(id="club1", name="Tech Club"))
    user_ids = [str(n) for n in range(200)]

    with ThreadPoolExecutor(max_workers=16) as pool:
        list(pool.map(lambda uid: clubs.add_member("club1", uid), user_ids))

    assert clubs.get("club1").member_ids == frozenset(user_ids)


def test_concurrent_club_joins_for_one_user():
    users = UserRepository()
    users.add(User(id="1", name="John Doe", email="student@college.edu", role=Role.STUDENT))
    club_ids = [f"club{n}" for n in range(200)]

    with ThreadPoolExecutor(max_workers=16) as pool:
        list(pool.map(lambda cid: users.join_club("1", cid), club_ids))

    assert users.get("1").club_ids == frozenset(club_ids)


def test_register_refuses_taken_email():
    users = UserRepository()
    first = users.register(User(name="Priya", email="priya@college.edu", role=Role.STUDENT))

    with pytest.raises(AlreadyExists):
        users.register(User(name="Other", email="PRIYA@college.edu", role=Role.STUDENT))

    assert users.find_by_email("priya@college.edu") == first


def test_unknown_ids_raise_not_found():
    with pytest.raises(NotFound):
        ClubRepository().add_member("club99", "1")
    with pytest.raises(NotFound):
        UserRepository().join_club("ghost", "club1")
