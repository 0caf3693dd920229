from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from engagement_engine.domain.stages import FunnelStageName


VelocityTrend = Literal["accelerating", "steady", "slowing"]


class AnalyticsRecord(BaseModel):
    """Immutable output record serialized with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ResponseBucket(BaseModel):
    model_config = ConfigDict(frozen=True)

    count: int = Field(0, ge=0)
    guests: int = Field(0, ge=0)


class RSVPStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    yes: ResponseBucket = Field(default_factory=ResponseBucket)
    maybe: ResponseBucket = Field(default_factory=ResponseBucket)
    no: ResponseBucket = Field(default_factory=ResponseBucket)


class InviteStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = Field(0, ge=0)
    opened: int = Field(0, ge=0)


class AnalyticsSnapshot(AnalyticsRecord):
    total_yes: int
    total_maybe: int
    total_no: int
    total_responses: int
    total_invites: int
    invites_opened: int
    response_rate: int
    open_rate: int
    expected_attendance: int
    days_until_event: int | None = None
    event_date: str
    last_updated: str


class FunnelStage(AnalyticsRecord):
    name: FunnelStageName
    label: str
    count: int
    percentage: int


class FunnelDropoff(AnalyticsRecord):
    from_stage: FunnelStageName = Field(alias="from")
    to_stage: FunnelStageName = Field(alias="to")
    lost: int
    rate: int


class FunnelData(AnalyticsRecord):
    stages: tuple[FunnelStage, ...]
    dropoffs: tuple[FunnelDropoff, ...]
    total_invited: int
    total_responded: int
    overall_conversion_rate: int


class DailyCount(AnalyticsRecord):
    date: str
    count: int
    cumulative: int


class MomentumData(AnalyticsRecord):
    current_7_days: int = Field(alias="current7Days")
    previous_7_days: int = Field(alias="previous7Days")
    trend: VelocityTrend
    percent_change: int


class VelocityData(AnalyticsRecord):
    daily: tuple[DailyCount, ...]
    momentum: MomentumData
    total_rsvps: int
    first_rsvp_date: str | None = None
    last_rsvp_date: str | None = None


class EventAnalyticsResponse(AnalyticsRecord):
    event_id: str
    snapshot: AnalyticsSnapshot
    funnel: FunnelData
    velocity: VelocityData
