from datetime import datetime

from sqlalchemy import select, desc
from sqlalchemy.orm import Session

from launchpal.auth.models import User
from launchpal.launches.models import Launch
from launchpal.launches.schemas import LaunchCreate
from launchpal.products.models import Product
from launchpal.products.service import get_product
from launchpal.platforms.service import adapter_for
from launchpal.analytics.service import SqlMetricsStore, record_sample
from launchpal.shared.errors import NotFound, InvalidLaunchTransition
from launchpal.shared.logging import get_logger
from launchpal.shared.timeutil import as_utc, utcnow
from launchpal.usage.service import track_usage

logger = get_logger("launches")

# forward-only; completed and failed are terminal
ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    "draft": frozenset({"scheduled"}),
    "scheduled": frozenset({"active", "failed"}),
    "active": frozenset({"completed", "failed"}),
    "completed": frozenset(),
    "failed": frozenset(),
}

def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())

async def schedule_launch(db: Session, user: User, payload: LaunchCreate) -> Launch:
    track_usage(db, user, "launches.schedule")
    product = get_product(db, user.id, payload.productId)
    when = as_utc(payload.scheduledAt)

    async with adapter_for(db, user.id, product.platform) as adapter:
        result = await adapter.schedule_launch(product.platform_id, when)

    launch = Launch(
        user_id=user.id,
        product_id=product.id,
        platform=product.platform,
        platform_launch_id=result["id"],
        scheduled_at=when,
        status="scheduled",
    )
    launch.options = payload.options
    db.add(launch)
    db.commit()
    db.refresh(launch)
    logger.info(
        f"launch {launch.id} scheduled for {when.isoformat()}",
        extra={"user_id": user.id, "platform": product.platform},
    )
    return launch

def get_launch(db: Session, user_id: str, launch_id: str) -> Launch:
    launch = db.get(Launch, launch_id)
    if not launch or launch.user_id != user_id:
        raise NotFound("Launch not found")
    return launch

def list_launches(db: Session, user_id: str, status: str | None = None) -> list[Launch]:
    stmt = select(Launch).where(Launch.user_id == user_id)
    if status:
        stmt = stmt.where(Launch.status == status)
    return list(db.scalars(stmt.order_by(desc(Launch.scheduled_at))).all())

def _transition(db: Session, launch: Launch, status: str) -> Launch:
    if not can_transition(launch.status, status):
        raise InvalidLaunchTransition(f"Cannot move launch from {launch.status} to {status}")
    launch.status = status
    db.commit()
    db.refresh(launch)
    return launch

def update_status(db: Session, user_id: str, launch_id: str, status: str) -> Launch:
    launch = get_launch(db, user_id, launch_id)
    return _transition(db, launch, status)

def cancel_launch(db: Session, user_id: str, launch_id: str) -> Launch:
    """Abandon a launch that has not started yet. It ends as failed."""
    launch = get_launch(db, user_id, launch_id)
    if launch.status != "scheduled":
        raise InvalidLaunchTransition(f"Only scheduled launches can be cancelled (status: {launch.status})")
    launch = _transition(db, launch, "failed")
    logger.info(f"launch {launch.id} cancelled", extra={"user_id": user_id, "platform": launch.platform})
    return launch

async def _collect(db: Session, user_id: str, launch: Launch) -> dict:
    product = db.get(Product, launch.product_id)
    if not product:
        raise NotFound("Product not found")
    # the stubbed platform launch id is local-only; the post id is what the platform knows
    async with adapter_for(db, user_id, launch.platform) as adapter:
        metrics = await adapter.get_launch_metrics(product.platform_id)

    sample = record_sample(
        SqlMetricsStore(db),
        user_id=user_id,
        product_id=product.id,
        launch_id=launch.id,
        votes=int(metrics.get("votes") or 0),
        comments=int(metrics.get("comments") or 0),
        rank=metrics.get("rank"),
    )
    return {
        "launchId": launch.id,
        "votes": sample.votes,
        "comments": sample.comments,
        "rank": sample.rank,
        "engagement": metrics.get("engagement", 0.0),
        "velocity": sample.velocity,
        "timestamp": as_utc(sample.timestamp),
    }

async def get_launch_metrics(db: Session, user: User, launch_id: str) -> dict:
    track_usage(db, user, "launches.getMetrics")
    launch = get_launch(db, user.id, launch_id)
    return await _collect(db, user.id, launch)

# ---- job entry points (run once per invocation) ----

def execute_due_launches(db: Session, now: datetime | None = None) -> list[str]:
    """Move every scheduled launch whose time has come to active."""
    now = as_utc(now or utcnow())
    due = db.scalars(
        select(Launch).where(Launch.status == "scheduled", Launch.scheduled_at <= now)
    ).all()
    started = []
    for launch in due:
        launch.status = "active"
        started.append(launch.id)
    db.commit()
    if started:
        logger.info(f"activated {len(started)} due launches")
    return started

async def collect_active_metrics(db: Session) -> int:
    """Snapshot metrics for every active launch. Not metered."""
    active = db.scalars(select(Launch).where(Launch.status == "active")).all()
    collected = 0
    for launch in active:
        try:
            await _collect(db, launch.user_id, launch)
            collected += 1
        except Exception as e:
            db.rollback()
            logger.error(
                f"metrics collection failed for launch {launch.id}: {e}",
                extra={"user_id": launch.user_id, "platform": launch.platform},
            )
    return collected
