from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; everything we store is UTC
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def month_start(now: datetime | None = None) -> datetime:
    """1st of the current month at local midnight, expressed in UTC."""
    local = (now or utcnow()).astimezone()
    start = local.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return start.astimezone(timezone.utc)


def to_millis(dt: datetime) -> int:
    return int(as_utc(dt).timestamp() * 1000)
