from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status
from supabase import Client

from engagement_engine.config import settings
from engagement_engine.db import get_supabase
from engagement_engine.models.tracking import TrackEventRequest, TrackEventResponse
from engagement_engine.observability import incr_metric, log_event


router = APIRouter(prefix="/api/analytics", tags=["tracking"])


@router.post("/track", response_model=TrackEventResponse, status_code=status.HTTP_201_CREATED)
async def track_page_event(
    data: TrackEventRequest,
    request: Request,
    db: Client = Depends(get_supabase),
):
    """Record an anonymous event-page interaction. These rows feed the extended funnel."""
    request_id = getattr(request.state, "request_id", None)
    event_result = (
        db.table("events")
        .select("id, published_at")
        .eq("id", data.event_id)
        .is_("deleted_at", "null")
        .execute()
    )
    if not event_result.data:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    event = event_result.data[0]

    if settings.environment == "production" and not event.get("published_at"):
        incr_metric("analytics.track.rejected", reason="unpublished")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Event not published")

    insert_result = db.table("analytics_events").insert(
        {
            "event_id": data.event_id,
            "type": data.type,
            "session_id": data.session_id,
            "data": data.data,
        }
    ).execute()
    if not insert_result.data:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to record analytics event")
    created = insert_result.data[0]

    incr_metric("analytics.track.events", type=data.type)
    log_event(
        "analytics_event_tracked",
        request_id=request_id,
        event_id=data.event_id,
        type=data.type,
        session_id=data.session_id,
    )
    return TrackEventResponse(id=str(created["id"]))
