"""FastAPI application: entry point for the campus events service."""

from __future__ import annotations

import datetime as dt
import logging

from fastapi import Depends, FastAPI, Header, HTTPException

from campus_events.domain.bus import EventBus
from campus_events.domain.errors import (
    AlreadyExists,
    InvalidSubmission,
    NotFound,
    PolicyViolation,
    ScheduleConflict,
)
from campus_events.domain.handlers import HandlerRegistry
from campus_events.domain.models import (
    ApprovalResponse,
    ApprovalState,
    Club,
    ClubAdminDashboard,
    CollegeAdminDashboard,
    ConflictCheckRequest,
    ConflictReport,
    Event,
    EventDraft,
    EventPermissions,
    LoginRequest,
    RegisterRequest,
    Role,
    StudentDashboard,
    SubmissionResponse,
    TimelineEntry,
    User,
    Venue,
    Viewer,
)
from campus_events.repos.memory import (
    ClubRepository,
    EventRepository,
    TimelineRepository,
    UserRepository,
    seed_clubs,
    seed_events,
    seed_users,
)
from campus_events.services import dashboard
from campus_events.services.conflicts import describe_conflicts
from campus_events.services.lifecycle import EventLifecycle
from campus_events.services.policy import (
    can_edit,
    can_rsvp,
    can_transition_approval,
    can_view,
    visible_events,
)
from campus_events.settings import get_settings

settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Campus Events Service")

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
event_repo = EventRepository()
club_repo = ClubRepository()
user_repo = UserRepository()
timeline_repo = TimelineRepository()

handler_registry = HandlerRegistry(
    bus=event_bus,
    event_repo=event_repo,
    timeline_repo=timeline_repo,
)
lifecycle = EventLifecycle(
    bus=event_bus,
    event_repo=event_repo,
    club_repo=club_repo,
    block_conflicts=settings.block_conflicting_submissions,
)

if settings.seed_fixtures:
    seed_clubs(club_repo)
    seed_users(user_repo)
    seed_events(event_repo)


# ── Helpers ───────────────────────────────────────────────────────────


def current_viewer(x_viewer_id: str | None = Header(default=None)) -> Viewer:
    """Resolve the ``X-Viewer-Id`` header to a Viewer."""
    if not x_viewer_id:
        raise HTTPException(status_code=401, detail="X-Viewer-Id header required")
    user = user_repo.get(x_viewer_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown viewer")
    return user.as_viewer()


def _require_role(viewer: Viewer, role: Role) -> None:
    if viewer.role != role:
        raise HTTPException(status_code=403, detail=f"Only {role} viewers can do this")


def _get_event(event_id: str) -> Event:
    event = event_repo.get(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _get_visible_event(event_id: str, viewer: Viewer) -> Event:
    event = _get_event(event_id)
    if not can_view(viewer, event, club_repo.get(event.club_id)):
        raise HTTPException(status_code=403, detail="Event is not visible to this viewer")
    return event


def _http_error(exc: Exception, policy_status: int = 403) -> HTTPException:
    if isinstance(exc, NotFound):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ScheduleConflict):
        return HTTPException(
            status_code=409,
            detail={
                "message": str(exc),
                "conflicting_event_ids": [e.id for e in exc.conflicts],
            },
        )
    if isinstance(exc, InvalidSubmission):
        return HTTPException(status_code=422, detail=str(exc))
    return HTTPException(status_code=policy_status, detail=str(exc))


def _report(conflicts: list[Event]) -> ConflictReport:
    return ConflictReport(conflicts=conflicts, warning=describe_conflicts(conflicts))


# ── Session & reference data ──────────────────────────────────────────


@app.post("/login", response_model=User)
def login(body: LoginRequest) -> User:
    """Mocked credential check against the fixture users."""
    user = user_repo.find_by_email(body.email)
    if user is None or body.password != settings.mock_password:
        logger.info("failed login for %s", body.email)
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return user


@app.post("/register", response_model=User, status_code=201)
def register(body: RegisterRequest) -> User:
    """Mocked sign-up: the account logs in with the shared mock password.

    Students are added to the members of every club they pick.
    """
    for club_id in body.club_ids:
        if club_repo.get(club_id) is None:
            raise _http_error(NotFound("Club", club_id))
    user = User(name=body.name, email=body.email, role=body.role, club_ids=body.club_ids)
    try:
        user_repo.register(user)
    except AlreadyExists as exc:
        raise HTTPException(status_code=409, detail="Email is already registered") from exc
    if user.role == Role.STUDENT:
        for club_id in user.club_ids:
            club_repo.add_member(club_id, user.id)
    logger.info("registered %s user %s", user.role, user.id)
    return user


@app.get("/venues", response_model=list[str])
def list_venues() -> list[str]:
    return [venue.value for venue in Venue]


@app.get("/clubs", response_model=list[Club])
def list_clubs() -> list[Club]:
    return club_repo.list_all()


@app.post("/clubs/{club_id}/join", response_model=Club)
def join_club(club_id: str, viewer: Viewer = Depends(current_viewer)) -> Club:
    """Add the student to a club's members."""
    _require_role(viewer, Role.STUDENT)
    try:
        club = club_repo.add_member(club_id, viewer.id)
        user_repo.join_club(viewer.id, club_id)
    except NotFound as exc:
        raise _http_error(exc) from exc
    return club


# ── Events ────────────────────────────────────────────────────────────


@app.get("/events", response_model=list[Event])
def list_events(
    q: str | None = None,
    location: Venue | None = None,
    club_id: str | None = None,
    viewer: Viewer = Depends(current_viewer),
) -> list[Event]:
    """Return the events the viewer may see, optionally filtered."""
    events = visible_events(viewer, event_repo.list_all(), club_repo.as_mapping())
    return dashboard.filter_events(events, q=q, location=location, club_id=club_id)


@app.get("/events/{event_id}", response_model=Event)
def get_event(event_id: str, viewer: Viewer = Depends(current_viewer)) -> Event:
    return _get_visible_event(event_id, viewer)


@app.get("/events/{event_id}/permissions", response_model=EventPermissions)
def get_permissions(
    event_id: str,
    today: dt.date | None = None,
    viewer: Viewer = Depends(current_viewer),
) -> EventPermissions:
    """Flags the detail view uses to enable or hide its controls.

    Hidden events answer 403, as on the detail route.
    """
    event = _get_visible_event(event_id, viewer)
    club = club_repo.get(event.club_id)
    return EventPermissions(
        can_view=can_view(viewer, event, club),
        can_edit=can_edit(viewer, event, club),
        can_approve=can_transition_approval(viewer, event, ApprovalState.APPROVED),
        can_reject=can_transition_approval(viewer, event, ApprovalState.REJECTED),
        can_rsvp=can_rsvp(viewer, event, today),
    )


@app.post("/events", response_model=SubmissionResponse, status_code=201)
def create_event(
    body: EventDraft, viewer: Viewer = Depends(current_viewer)
) -> SubmissionResponse:
    """Submit a new event for college admin review."""
    try:
        event, conflicts = lifecycle.propose(viewer, body)
    except (NotFound, PolicyViolation, ScheduleConflict) as exc:
        raise _http_error(exc) from exc
    return SubmissionResponse(event=event, conflicts=_report(conflicts))


@app.put("/events/{event_id}", response_model=SubmissionResponse)
def update_event(
    event_id: str, body: EventDraft, viewer: Viewer = Depends(current_viewer)
) -> SubmissionResponse:
    try:
        event, conflicts = lifecycle.update(viewer, event_id, body)
    except (NotFound, PolicyViolation, ScheduleConflict, InvalidSubmission) as exc:
        raise _http_error(exc) from exc
    return SubmissionResponse(event=event, conflicts=_report(conflicts))


@app.post("/conflicts/check", response_model=ConflictReport)
def check_conflicts(
    body: ConflictCheckRequest, viewer: Viewer = Depends(current_viewer)
) -> ConflictReport:
    """Report approved events clashing with a slot, as the form types it in."""
    return _report(lifecycle.check_conflicts(body.slot, exclude_id=body.exclude_id))


@app.post("/events/{event_id}/approve", response_model=ApprovalResponse)
def approve_event(
    event_id: str, viewer: Viewer = Depends(current_viewer)
) -> ApprovalResponse:
    """Approve a pending event. Clashes come back as a warning."""
    try:
        event, conflicts = lifecycle.approve(viewer, event_id)
    except (NotFound, PolicyViolation) as exc:
        raise _http_error(exc) from exc
    return ApprovalResponse(event=event, conflicts=_report(conflicts))


@app.post("/events/{event_id}/reject", response_model=Event)
def reject_event(event_id: str, viewer: Viewer = Depends(current_viewer)) -> Event:
    try:
        return lifecycle.reject(viewer, event_id)
    except (NotFound, PolicyViolation) as exc:
        raise _http_error(exc) from exc


@app.post("/events/{event_id}/rsvp", response_model=Event)
def rsvp_event(
    event_id: str,
    today: dt.date | None = None,
    viewer: Viewer = Depends(current_viewer),
) -> Event:
    """Register the student's attendance.

    Pass *today* to control the date used for the past-event check.
    """
    try:
        return lifecycle.rsvp(viewer, event_id, today)
    except (NotFound, PolicyViolation) as exc:
        raise _http_error(exc, policy_status=400) from exc


@app.get("/events/{event_id}/timeline", response_model=list[TimelineEntry])
def get_timeline(
    event_id: str, viewer: Viewer = Depends(current_viewer)
) -> list[TimelineEntry]:
    event = _get_visible_event(event_id, viewer)
    return timeline_repo.list_for_event(event.id)


# ── Dashboards ────────────────────────────────────────────────────────


@app.get("/dashboard/student", response_model=StudentDashboard)
def student_dashboard(
    today: dt.date | None = None,
    q: str | None = None,
    location: Venue | None = None,
    club_id: str | None = None,
    viewer: Viewer = Depends(current_viewer),
) -> StudentDashboard:
    _require_role(viewer, Role.STUDENT)
    return dashboard.student_dashboard(
        viewer,
        event_repo.list_all(),
        club_repo.as_mapping(),
        today or dt.date.today(),
        q=q,
        location=location,
        club_id=club_id,
    )


@app.get("/dashboard/club-admin", response_model=ClubAdminDashboard)
def club_admin_dashboard(
    today: dt.date | None = None, viewer: Viewer = Depends(current_viewer)
) -> ClubAdminDashboard:
    _require_role(viewer, Role.CLUB_ADMIN)
    return dashboard.club_admin_dashboard(
        viewer, event_repo.list_all(), club_repo.as_mapping(), today or dt.date.today()
    )


@app.get("/dashboard/college-admin", response_model=CollegeAdminDashboard)
def college_admin_dashboard(
    viewer: Viewer = Depends(current_viewer),
) -> CollegeAdminDashboard:
    _require_role(viewer, Role.COLLEGE_ADMIN)
    return dashboard.college_admin_dashboard(event_repo.list_all())
