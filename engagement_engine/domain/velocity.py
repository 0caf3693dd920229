from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta
from typing import Iterable

from engagement_engine.domain.errors import AnalyticsInputError
from engagement_engine.domain.rates import round_half_up
from engagement_engine.domain.timestamps import (
    Instant,
    day_key,
    end_of_day,
    parse_instant,
    start_of_day,
)
from engagement_engine.models.analytics import (
    DailyCount,
    MomentumData,
    VelocityData,
    VelocityTrend,
)


DEFAULT_LOOKBACK_DAYS = 30
MOMENTUM_WINDOW = timedelta(days=7)
TREND_THRESHOLD = 10


def determine_trend(percent_change: int) -> VelocityTrend:
    if percent_change > TREND_THRESHOLD:
        return "accelerating"
    if percent_change < -TREND_THRESHOLD:
        return "slowing"
    return "steady"


def calculate_momentum(current_7_days: int, previous_7_days: int) -> MomentumData:
    """Compare the trailing week of RSVPs to the week before it.

    With no previous activity the change is a fixed sentinel: 100 when the
    current week has RSVPs, 0 when both weeks are empty.
    """
    if previous_7_days > 0:
        percent_change = round_half_up(100 * (current_7_days - previous_7_days), previous_7_days)
    elif current_7_days > 0:
        percent_change = 100
    else:
        percent_change = 0

    return MomentumData(
        current_7_days=current_7_days,
        previous_7_days=previous_7_days,
        trend=determine_trend(percent_change),
        percent_change=percent_change,
    )


def _parse_all(timestamps: Iterable[Instant]) -> list[datetime]:
    parsed: list[datetime] = []
    for index, value in enumerate(timestamps):
        parsed.append(parse_instant(value, field=f"timestamps[{index}]"))
    return parsed


def build_daily_counts(
    timestamps: Iterable[Instant],
    start_date: Instant,
    end_date: Instant,
) -> list[DailyCount]:
    """One entry per UTC calendar day from start_date to end_date inclusive.

    Days without RSVPs are zero-filled; ``cumulative`` only counts timestamps
    that fall inside the range.
    """
    per_day = Counter(day_key(dt) for dt in _parse_all(timestamps))

    current = start_of_day(parse_instant(start_date, field="start_date"))
    end = end_of_day(parse_instant(end_date, field="end_date"))

    daily: list[DailyCount] = []
    cumulative = 0
    while current <= end:
        key = day_key(current)
        count = per_day.get(key, 0)
        cumulative += count
        daily.append(DailyCount(date=key, count=count, cumulative=cumulative))
        current += timedelta(days=1)

    return daily


def _empty_velocity() -> VelocityData:
    return VelocityData(
        daily=(),
        momentum=calculate_momentum(0, 0),
        total_rsvps=0,
        first_rsvp_date=None,
        last_rsvp_date=None,
    )


def build_velocity_data(
    timestamps: Iterable[Instant],
    reference_date: Instant,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
) -> VelocityData:
    """Daily RSVP series for the ``lookback_days`` ending on the reference day, plus momentum.

    Momentum always compares (ref - 7d, ref] against (ref - 14d, ref - 7d],
    whatever the display window.
    """
    if isinstance(lookback_days, bool) or not isinstance(lookback_days, int) or lookback_days < 1:
        raise AnalyticsInputError("lookback_days", f"lookback_days must be a positive integer, got {lookback_days!r}")

    reference = parse_instant(reference_date, field="reference_date")
    ordered = sorted(_parse_all(timestamps))
    if not ordered:
        return _empty_velocity()

    window_end = end_of_day(reference)
    window_start = start_of_day(reference - timedelta(days=lookback_days - 1))
    daily = build_daily_counts(ordered, window_start, window_end)

    current_start = reference - MOMENTUM_WINDOW
    previous_start = current_start - MOMENTUM_WINDOW
    current_7_days = 0
    previous_7_days = 0
    for dt in ordered:
        if current_start < dt <= reference:
            current_7_days += 1
        elif previous_start < dt <= current_start:
            previous_7_days += 1

    return VelocityData(
        daily=tuple(daily),
        momentum=calculate_momentum(current_7_days, previous_7_days),
        total_rsvps=len(ordered),
        first_rsvp_date=day_key(ordered[0]),
        last_rsvp_date=day_key(ordered[-1]),
    )
