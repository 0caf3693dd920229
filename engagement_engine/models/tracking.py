from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


TrackEventType = Literal[
    "page_view",
    "rsvp_form_started",
    "rsvp_form_abandoned",
    "rsvp_form_submitted",
    "section_viewed",
]


class TrackEventRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    event_id: str = Field(min_length=1)
    type: TrackEventType
    session_id: str = Field(min_length=1)
    data: dict[str, Any] | None = None


class TrackEventResponse(BaseModel):
    id: str
