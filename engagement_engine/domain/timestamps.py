from __future__ import annotations

from datetime import date, datetime, time, timezone

from engagement_engine.domain.errors import AnalyticsInputError


Instant = datetime | date | str

END_OF_DAY = time(23, 59, 59, 999000)


def parse_instant(value: Instant, *, field: str = "timestamp") -> datetime:
    """Coerce a datetime, date or ISO-8601 string to an aware UTC datetime.

    Naive values are read as UTC. Anything else raises AnalyticsInputError.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as exc:
            raise AnalyticsInputError(field, f"Unparsable {field}: {value!r}") from exc
    else:
        raise AnalyticsInputError(field, f"Unsupported {field} type: {type(value).__name__}")

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def day_key(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).date().isoformat()


def start_of_day(dt: datetime) -> datetime:
    return datetime.combine(dt.astimezone(timezone.utc).date(), time.min, tzinfo=timezone.utc)


def end_of_day(dt: datetime) -> datetime:
    return datetime.combine(dt.astimezone(timezone.utc).date(), END_OF_DAY, tzinfo=timezone.utc)


def iso_instant(dt: datetime) -> str:
    """Millisecond-precision UTC instant with a Z suffix, e.g. 2025-06-15T18:00:00.000Z."""
    utc = dt.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")
