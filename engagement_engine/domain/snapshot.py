from __future__ import annotations

from datetime import timedelta

from engagement_engine.domain.rates import percentage
from engagement_engine.domain.timestamps import Instant, iso_instant, parse_instant
from engagement_engine.models.analytics import AnalyticsSnapshot, InviteStats, RSVPStats


_ONE_DAY = timedelta(days=1)


def calculate_response_rate(total_responses: int, total_invites: int) -> int:
    return percentage(total_responses, total_invites)


def calculate_open_rate(invites_opened: int, total_invites: int) -> int:
    return percentage(invites_opened, total_invites)


def calculate_days_until_event(event_date: Instant, now: Instant) -> int | None:
    """Whole days left until the event, rounded up; None once the event has started."""
    remaining = parse_instant(event_date, field="event_date") - parse_instant(now, field="now")
    if remaining <= timedelta(0):
        return None
    return -(-remaining // _ONE_DAY)


def build_analytics_snapshot(
    rsvp_stats: RSVPStats,
    invite_stats: InviteStats,
    event_date: Instant,
    now: Instant,
) -> AnalyticsSnapshot:
    event_at = parse_instant(event_date, field="event_date")
    reference = parse_instant(now, field="now")

    total_yes = rsvp_stats.yes.count
    total_maybe = rsvp_stats.maybe.count
    total_no = rsvp_stats.no.count
    total_responses = total_yes + total_maybe + total_no

    return AnalyticsSnapshot(
        total_yes=total_yes,
        total_maybe=total_maybe,
        total_no=total_no,
        total_responses=total_responses,
        total_invites=invite_stats.total,
        invites_opened=invite_stats.opened,
        response_rate=calculate_response_rate(total_responses, invite_stats.total),
        open_rate=calculate_open_rate(invite_stats.opened, invite_stats.total),
        expected_attendance=rsvp_stats.yes.guests,
        days_until_event=calculate_days_until_event(event_at, reference),
        event_date=iso_instant(event_at),
        last_updated=iso_instant(reference),
    )
