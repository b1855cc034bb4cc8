from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from launchpal.auth.models import User
from launchpal.usage.models import UsageRecord
from launchpal.shared.errors import QuotaExceeded
from launchpal.shared.logging import get_logger
from launchpal.shared.timeutil import as_utc, month_start, utcnow

logger = get_logger("usage")

ENDPOINT_COSTS: dict[str, float] = {
    "products.create": 0.10,
    "launches.schedule": 0.05,
    "launches.getMetrics": 0.02,
    "platforms.connect": 0.01,
    "platforms.trending": 0.01,
}
DEFAULT_COST = 0.01

def resolve_cost(endpoint: str, cost: float | None = None) -> float:
    if cost is not None:
        return cost
    return ENDPOINT_COSTS.get(endpoint, DEFAULT_COST)

def _totals(
    db: Session, user_id: str, start: datetime, end: datetime | None = None
) -> tuple[int, float, int]:
    stmt = select(
        func.coalesce(func.sum(UsageRecord.requests), 0),
        func.coalesce(func.sum(UsageRecord.cost), 0.0),
        func.count(UsageRecord.id),
    ).where(UsageRecord.user_id == user_id, UsageRecord.timestamp >= start)
    if end is not None:
        stmt = stmt.where(UsageRecord.timestamp < end)
    row = db.execute(stmt).one()
    return int(row[0]), float(row[1]), int(row[2])

def _monthly_totals(db: Session, user_id: str) -> tuple[int, float, int]:
    return _totals(db, user_id, month_start())

def track_usage(db: Session, user: User, endpoint: str, cost: float | None = None) -> UsageRecord:
    """
    Append a usage record, then enforce the monthly request ceiling.

    The record is committed BEFORE the check, so the call that crosses the
    limit is still recorded and then denied with QuotaExceeded.
    """
    rec = UsageRecord(
        user_id=user.id,
        endpoint=endpoint,
        method="CALL",
        requests=1,
        cost=resolve_cost(endpoint, cost),
        timestamp=utcnow(),
    )
    db.add(rec)
    db.commit()
    db.refresh(rec)

    total_requests, _, _ = _monthly_totals(db, user.id)
    if total_requests > user.monthly_requests:
        logger.warning(
            f"quota exceeded on {endpoint}: {total_requests}/{user.monthly_requests}",
            extra={"user_id": user.id, "endpoint": endpoint},
        )
        raise QuotaExceeded(f"Monthly request limit exceeded ({user.monthly_requests})")
    return rec

def usage_stats(
    db: Session, user: User, start: datetime | None = None, end: datetime | None = None
) -> dict:
    """Totals for [start, end). Defaults to month-to-date."""
    start = as_utc(start) if start else month_start()
    end = as_utc(end) if end else None
    total_requests, total_cost, entries = _totals(db, user.id, start, end)
    return {
        "start": start,
        "end": end,
        "total_requests": total_requests,
        "total_cost": round(total_cost, 4),
        "entries": entries,
    }
