"""Exceptions raised by the service layer and translated by the API routes."""

from __future__ import annotations

from campus_events.domain.models import Event


class CampusEventsError(Exception):
    """Base class for domain errors."""


class NotFound(CampusEventsError):
    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind} not found")
        self.kind = kind
        self.identifier = identifier


class PolicyViolation(CampusEventsError):
    """The viewer is not allowed to perform the requested action."""


class ScheduleConflict(CampusEventsError):
    """A submission overlaps approved events at the same venue and date."""

    def __init__(self, conflicts: list[Event]) -> None:
        names = ", ".join(event.name for event in conflicts)
        super().__init__(f"Schedule conflict with: {names}")
        self.conflicts = conflicts


class InvalidSubmission(CampusEventsError):
    """Submitted event content is inconsistent with the stored event."""


class AlreadyExists(CampusEventsError):
    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind} already exists")
        self.kind = kind
        self.identifier = identifier
