from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from supabase import Client

from engagement_engine.auth import AuthContext, has_permission, require_permission
from engagement_engine.auth.permissions import ANALYTICS_READ, EVENTS_READ_ANY
from engagement_engine.config import settings
from engagement_engine.db import get_supabase
from engagement_engine.domain.errors import (
    AnalyticsInputError,
    analytics_error_detail,
    analytics_error_http_status,
)
from engagement_engine.domain.funnel import build_extended_funnel_data, build_funnel_data
from engagement_engine.domain.snapshot import build_analytics_snapshot
from engagement_engine.domain.velocity import build_velocity_data
from engagement_engine.models.analytics import (
    AnalyticsSnapshot,
    EventAnalyticsResponse,
    FunnelData,
    InviteStats,
    ResponseBucket,
    RSVPStats,
    VelocityData,
)
from engagement_engine.observability import record_analytics_view, record_rejected_input


router = APIRouter(prefix="/api/events", tags=["analytics"])

RSVP_RESPONSES = ("yes", "maybe", "no")
PAGE_VIEW_EVENT = "page_view"
FORM_STARTED_EVENT = "rsvp_form_started"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _reference_time(as_of: datetime | None) -> datetime:
    """The single "now" every builder in a request is computed against."""
    if as_of is None:
        return _utcnow()
    if as_of.tzinfo is None:
        return as_of.replace(tzinfo=timezone.utc)
    return as_of.astimezone(timezone.utc)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _resolve_lookback(lookback_days: int | None) -> int:
    resolved = lookback_days if lookback_days is not None else settings.analytics_default_lookback_days
    if resolved < 1 or resolved > settings.analytics_max_lookback_days:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"lookback_days must be between 1 and {settings.analytics_max_lookback_days}",
        )
    return resolved


def _get_event_for_auth(db: Client, auth: AuthContext, event_id: str) -> dict[str, Any]:
    query = (
        db.table("events")
        .select("id, owner_user_id, start_at")
        .eq("id", event_id)
        .is_("deleted_at", "null")
    )
    if not has_permission(auth, EVENTS_READ_ANY):
        query = query.eq("owner_user_id", auth.user_id)
    result = query.execute()
    if not result.data:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return result.data[0]


def _load_rsvp_rows(db: Client, event_id: str) -> list[dict[str, Any]]:
    return (
        db.table("rsvps")
        .select("response, guest_count, responded_at")
        .eq("event_id", event_id)
        .execute()
        .data
        or []
    )


def _load_invite_rows(db: Client, event_id: str) -> list[dict[str, Any]]:
    return db.table("invites").select("opened_at").eq("event_id", event_id).execute().data or []


def _rsvp_stats_from_rows(rows: list[dict[str, Any]]) -> RSVPStats:
    counts = {key: 0 for key in RSVP_RESPONSES}
    guests = {key: 0 for key in RSVP_RESPONSES}
    for row in rows:
        response = (row.get("response") or "").strip().lower()
        if response not in counts:
            continue
        counts[response] += 1
        guests[response] += int(row.get("guest_count") or 0)
    return RSVPStats(**{key: ResponseBucket(count=counts[key], guests=guests[key]) for key in RSVP_RESPONSES})


def _invite_stats_from_rows(rows: list[dict[str, Any]]) -> InviteStats:
    return InviteStats(
        total=len(rows),
        opened=len([row for row in rows if row.get("opened_at")]),
    )


def _rsvp_timestamps_from_rows(rows: list[dict[str, Any]]) -> list[Any]:
    return [row.get("responded_at") for row in rows]


def _load_unique_sessions(db: Client, event_id: str) -> dict[str, int]:
    rows = (
        db.table("analytics_events")
        .select("type, session_id")
        .eq("event_id", event_id)
        .execute()
        .data
        or []
    )
    sessions: dict[str, set[str]] = {PAGE_VIEW_EVENT: set(), FORM_STARTED_EVENT: set()}
    for row in rows:
        event_type = row.get("type")
        if event_type in sessions and row.get("session_id"):
            sessions[event_type].add(row["session_id"])
    return {event_type: len(ids) for event_type, ids in sessions.items()}


def _build_funnel(db: Client, event_id: str, invites: InviteStats, responded: int, extended: bool) -> FunnelData:
    if not extended:
        return build_funnel_data(invites.total, invites.opened, responded)
    sessions = _load_unique_sessions(db, event_id)
    return build_extended_funnel_data(
        invites.total,
        invites.opened,
        sessions[PAGE_VIEW_EVENT],
        sessions[FORM_STARTED_EVENT],
        responded,
    )


def _rejected(view: str, event_id: str, request: Request, exc: AnalyticsInputError) -> HTTPException:
    record_rejected_input(
        view,
        event_id=event_id,
        field=exc.field,
        message=str(exc),
        request_id=_request_id(request),
    )
    return HTTPException(
        status_code=analytics_error_http_status(exc),
        detail=analytics_error_detail(view=view, exc=exc),
    )


@router.get("/{event_id}/analytics/snapshot", response_model=AnalyticsSnapshot)
async def get_event_snapshot(
    event_id: str,
    request: Request,
    as_of: datetime | None = Query(None),
    auth: AuthContext = Depends(require_permission(ANALYTICS_READ)),
    db: Client = Depends(get_supabase),
):
    event = _get_event_for_auth(db, auth, event_id)
    reference = _reference_time(as_of)
    try:
        snapshot = build_analytics_snapshot(
            _rsvp_stats_from_rows(_load_rsvp_rows(db, event_id)),
            _invite_stats_from_rows(_load_invite_rows(db, event_id)),
            event.get("start_at"),
            reference,
        )
    except AnalyticsInputError as exc:
        raise _rejected("snapshot", event_id, request, exc) from exc

    record_analytics_view("snapshot", event_id=event_id, reference_time=reference, request_id=_request_id(request))
    return snapshot


@router.get("/{event_id}/analytics/funnel", response_model=FunnelData)
async def get_event_funnel(
    event_id: str,
    request: Request,
    extended: bool = Query(False),
    auth: AuthContext = Depends(require_permission(ANALYTICS_READ)),
    db: Client = Depends(get_supabase),
):
    _get_event_for_auth(db, auth, event_id)
    invites = _invite_stats_from_rows(_load_invite_rows(db, event_id))
    responded = len(_load_rsvp_rows(db, event_id))
    funnel = _build_funnel(db, event_id, invites, responded, extended)
    record_analytics_view(
        "funnel",
        event_id=event_id,
        reference_time=_utcnow(),
        request_id=_request_id(request),
        extended=extended,
    )
    return funnel


@router.get("/{event_id}/analytics/velocity", response_model=VelocityData)
async def get_event_velocity(
    event_id: str,
    request: Request,
    lookback_days: int | None = Query(None),
    as_of: datetime | None = Query(None),
    auth: AuthContext = Depends(require_permission(ANALYTICS_READ)),
    db: Client = Depends(get_supabase),
):
    _get_event_for_auth(db, auth, event_id)
    window = _resolve_lookback(lookback_days)
    reference = _reference_time(as_of)
    try:
        timestamps = _rsvp_timestamps_from_rows(_load_rsvp_rows(db, event_id))
        velocity = build_velocity_data(timestamps, reference, window)
    except AnalyticsInputError as exc:
        raise _rejected("velocity", event_id, request, exc) from exc

    record_analytics_view(
        "velocity",
        event_id=event_id,
        reference_time=reference,
        request_id=_request_id(request),
        lookback_days=window,
        total_rsvps=velocity.total_rsvps,
    )
    return velocity


@router.get("/{event_id}/analytics", response_model=EventAnalyticsResponse)
async def get_event_analytics(
    event_id: str,
    request: Request,
    lookback_days: int | None = Query(None),
    extended: bool = Query(False),
    as_of: datetime | None = Query(None),
    auth: AuthContext = Depends(require_permission(ANALYTICS_READ)),
    db: Client = Depends(get_supabase),
):
    event = _get_event_for_auth(db, auth, event_id)
    window = _resolve_lookback(lookback_days)
    reference = _reference_time(as_of)
    rsvp_rows = _load_rsvp_rows(db, event_id)
    invites = _invite_stats_from_rows(_load_invite_rows(db, event_id))
    try:
        snapshot = build_analytics_snapshot(
            _rsvp_stats_from_rows(rsvp_rows),
            invites,
            event.get("start_at"),
            reference,
        )
        velocity = build_velocity_data(_rsvp_timestamps_from_rows(rsvp_rows), reference, window)
    except AnalyticsInputError as exc:
        raise _rejected("combined", event_id, request, exc) from exc
    funnel = _build_funnel(db, event_id, invites, len(rsvp_rows), extended)

    record_analytics_view(
        "combined",
        event_id=event_id,
        reference_time=reference,
        request_id=_request_id(request),
        lookback_days=window,
        extended=extended,
    )
    return EventAnalyticsResponse(event_id=event_id, snapshot=snapshot, funnel=funnel, velocity=velocity)
