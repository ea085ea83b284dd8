from datetime import datetime, time, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Normalize to UTC; naive values are read as server-local time."""
    if value.tzinfo is None:
        value = value.astimezone()
    return value.astimezone(timezone.utc)


def local_midnight(day) -> datetime:
    # the offset is resolved for midnight itself, not copied from another instant
    return to_utc(datetime.combine(day, time.min))


def today_bounds(now: datetime | None = None) -> tuple[datetime, datetime]:
    """Return ``[start_of_today, start_of_tomorrow)`` in UTC for the server-local day."""
    today = (now or utcnow()).astimezone().date()
    return local_midnight(today), local_midnight(today + timedelta(days=1))
