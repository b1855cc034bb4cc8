# launchpal/scheduler/jobs.py
"""
Interval jobs that activate due launches and snapshot metrics for active
ones. Each job body runs once per invocation; the scheduler only decides
when to invoke.
"""

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from launchpal.shared.config import settings
from launchpal.shared.db import SessionLocal
from launchpal.shared.logging import get_logger
from launchpal.launches.service import execute_due_launches, collect_active_metrics

logger = get_logger("scheduler")

scheduler = AsyncIOScheduler()


async def run_due_launches_job():
    db = SessionLocal()
    try:
        started = execute_due_launches(db)
        logger.info(f"Due launch sweep complete. Activated: {len(started)}")
    except Exception as e:
        logger.error(f"Due launch sweep failed: {e}")
    finally:
        db.close()


async def collect_metrics_job():
    db = SessionLocal()
    try:
        collected = await collect_active_metrics(db)
        logger.info(f"Metrics collection complete. Snapshots: {collected}")
    except Exception as e:
        logger.error(f"Metrics collection failed: {e}")
    finally:
        db.close()


def start_scheduler():
    """Configure and start the scheduler."""
    if not settings.SCHEDULER_ENABLED:
        logger.info("Scheduler disabled via config")
        return

    scheduler.add_job(
        run_due_launches_job,
        "interval",
        minutes=settings.SCHEDULER_LAUNCH_INTERVAL_MIN,
        id="run_due_launches",
        replace_existing=True,
    )
    scheduler.add_job(
        collect_metrics_job,
        "interval",
        minutes=settings.SCHEDULER_METRICS_INTERVAL_MIN,
        id="collect_active_metrics",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started. Launch sweep every {settings.SCHEDULER_LAUNCH_INTERVAL_MIN} min, "
        f"metrics every {settings.SCHEDULER_METRICS_INTERVAL_MIN} min"
    )


def stop_scheduler():
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
