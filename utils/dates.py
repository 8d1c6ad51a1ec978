"""
Date arithmetic for rental durations.

All timestamps inside the engine are naive UTC. Aware values (e.g. ISO strings
with a "Z" suffix or an offset) are converted to UTC and stripped of tzinfo on
the way in, so naive and aware inputs can be compared safely.

Counts are whole elapsed units (truncated), matching how a rental of
"3 days and 5 hours" is billed as 3 days.
"""

from datetime import date, datetime, time, timezone

from dateutil.relativedelta import relativedelta


def parse_timestamp(value: datetime | date | str) -> datetime:
    """Coerce an ISO-8601 string, date or datetime into a naive UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise TypeError(f"Unsupported timestamp value: {value!r}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def utc_now() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def whole_hours(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // 3600)


def whole_days(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // 86400)


def whole_weeks(start: datetime, end: datetime) -> int:
    return whole_days(start, end) // 7


def is_last_day_of_month(value: datetime) -> bool:
    return (value + relativedelta(days=1)).day == 1


def whole_months(start: datetime, end: datetime) -> int:
    """Full calendar months between two timestamps (end after start)."""
    if end <= start:
        return 0
    delta = relativedelta(end, start)
    months = delta.years * 12 + delta.months
    # Jan 31 -> Feb 28 counts as a full month, whatever the time of day.
    if is_last_day_of_month(end) and start.day > end.day:
        months = (end.year - start.year) * 12 + (end.month - start.month)
    return months
