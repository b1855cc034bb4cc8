"""
Launch analytics over the persisted metric history.

Snapshots are keyed by owner + product. Velocity is votes/hour since the
previous snapshot, engagement is comments per vote.
"""
import json
import statistics
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from launchpal.analytics.models import LaunchMetric
from launchpal.shared.timeutil import as_utc, utcnow

CSV_HEADER = "Timestamp,Votes,Comments,Velocity,Engagement"

OPTIMAL_TIMINGS: Dict[str, Dict[str, Any]] = {
    "US": {
        "day": "Tuesday",
        "time": "12:01 AM PST",
        "timezone": "America/Los_Angeles",
        "reason": "Product Hunt resets at midnight PST. Tuesday has highest engagement.",
        "avgVotes": 450,
        "successRate": 68,
    },
    "EU": {
        "day": "Tuesday",
        "time": "09:00 AM GMT",
        "timezone": "Europe/London",
        "reason": "Catches both EU morning and US late night audiences.",
        "avgVotes": 380,
        "successRate": 62,
    },
    "ASIA": {
        "day": "Tuesday",
        "time": "09:00 AM JST",
        "timezone": "Asia/Tokyo",
        "reason": "Optimal for APAC region with spillover to EU/US.",
        "avgVotes": 320,
        "successRate": 58,
    },
    "GLOBAL": {
        "day": "Tuesday",
        "time": "12:01 AM PST",
        "timezone": "UTC",
        "reason": "Best overall coverage across all time zones.",
        "avgVotes": 400,
        "successRate": 65,
    },
}


class SqlMetricsStore:
    """Append-only metric history backed by the launch_metrics table."""

    def __init__(self, db: Session):
        self.db = db

    def append(self, metric: LaunchMetric) -> LaunchMetric:
        self.db.add(metric)
        self.db.commit()
        self.db.refresh(metric)
        return metric

    def history(self, user_id: str, product_id: str) -> List[LaunchMetric]:
        stmt = (
            select(LaunchMetric)
            .where(LaunchMetric.user_id == user_id, LaunchMetric.product_id == product_id)
            .order_by(LaunchMetric.timestamp, LaunchMetric.id)
        )
        return list(self.db.scalars(stmt).all())

    def latest(self, user_id: str, product_id: str) -> Optional[LaunchMetric]:
        stmt = (
            select(LaunchMetric)
            .where(LaunchMetric.user_id == user_id, LaunchMetric.product_id == product_id)
            .order_by(LaunchMetric.timestamp.desc(), LaunchMetric.id.desc())
            .limit(1)
        )
        return self.db.scalars(stmt).first()


def engagement_ratio(votes: int, comments: int) -> float:
    return comments / max(votes, 1)


def vote_velocity(prev: Optional[LaunchMetric], votes: int, now: datetime) -> float:
    if prev is None:
        return 0.0
    hours = (as_utc(now) - as_utc(prev.timestamp)).total_seconds() / 3600
    if hours <= 0:
        return 0.0
    return (votes - prev.votes) / hours


def record_sample(
    store: SqlMetricsStore,
    user_id: str,
    product_id: str,
    votes: int,
    comments: int,
    rank: Optional[int] = None,
    launch_id: Optional[str] = None,
    views: Optional[int] = None,
    now: Optional[datetime] = None,
) -> LaunchMetric:
    now = now or utcnow()
    prev = store.latest(user_id, product_id)
    metric = LaunchMetric(
        user_id=user_id,
        product_id=product_id,
        launch_id=launch_id,
        votes=votes,
        comments=comments,
        views=views,
        rank=rank,
        velocity=vote_velocity(prev, votes, now),
        engagement=engagement_ratio(votes, comments),
        timestamp=now,
    )
    return store.append(metric)


def metric_to_dict(m: LaunchMetric) -> Dict[str, Any]:
    return {
        "timestamp": as_utc(m.timestamp).isoformat(),
        "votes": m.votes,
        "comments": m.comments,
        "rank": m.rank,
        "velocity": m.velocity,
        "engagement": m.engagement,
    }


def predict_performance(history: List[LaunchMetric], hours_ahead: int = 24) -> Dict[str, int]:
    if len(history) < 2:
        return {"predictedVotes": 0, "predictedRank": 999, "confidence": 0}

    velocities = [m.velocity for m in history]
    avg_velocity = sum(velocities) / len(velocities)
    predicted_votes = round(history[-1].votes + avg_velocity * hours_ahead)

    if predicted_votes < 100:
        predicted_rank = 20
    elif predicted_votes < 200:
        predicted_rank = 10
    elif predicted_votes < 400:
        predicted_rank = 5
    elif predicted_votes < 600:
        predicted_rank = 3
    else:
        predicted_rank = 1

    # population standard deviation of the velocity series
    spread = statistics.pstdev(velocities)
    confidence = max(0.0, min(100.0, 100 - spread * 10))
    return {
        "predictedVotes": predicted_votes,
        "predictedRank": predicted_rank,
        "confidence": round(confidence),
    }


def optimal_launch_time(target_audience: str = "GLOBAL") -> Dict[str, Any]:
    return dict(OPTIMAL_TIMINGS.get(target_audience.upper(), OPTIMAL_TIMINGS["GLOBAL"]))


def generate_report(product, history: List[LaunchMetric]) -> Dict[str, Any]:
    peak_hour = "N/A"
    max_velocity = 0.0
    for m in history:
        if m.velocity > max_velocity:
            max_velocity = m.velocity
            peak_hour = as_utc(m.timestamp).strftime("%H:%M UTC")

    last = history[-1] if history else None
    return {
        "productId": product.id,
        "productName": product.name,
        "votes": last.votes if last else 0,
        "comments": last.comments if last else 0,
        "rank": last.rank if last and last.rank is not None else 999,
        "peakHour": peak_hour,
        "samples": len(history),
        "timeline": [metric_to_dict(m) for m in history],
    }


def export_metrics(history: List[LaunchMetric], fmt: str = "json") -> str:
    if fmt == "json":
        return json.dumps([metric_to_dict(m) for m in history], indent=2)
    rows = [
        f"{as_utc(m.timestamp).isoformat()},{m.votes},{m.comments},{m.velocity:.2f},{m.engagement:.3f}"
        for m in history
    ]
    return CSV_HEADER + "\n" + "\n".join(rows)


# ---- launch planning ----

STRATEGY_TIMINGS: Dict[str, Dict[str, Any]] = {
    "US": {"day": "Tuesday", "hour": 12, "timezone": "America/Los_Angeles"},
    "EU": {"day": "Tuesday", "hour": 9, "timezone": "Europe/London"},
    "ASIA": {"day": "Tuesday", "hour": 9, "timezone": "Asia/Tokyo"},
    "GLOBAL": {"day": "Tuesday", "hour": 12, "timezone": "UTC"},
}

BASE_CHANNELS = ("twitter", "linkedin", "slack")

LAUNCH_CHECKLIST: List[str] = [
    "Product name and tagline optimized",
    "Compelling product description written",
    "High-quality gallery images prepared (1270x760px)",
    "Product website live and functional",
    "Hunter identified and contacted",
    "Launch day and time scheduled",
    "Social media posts prepared",
    "Email list notified",
    "Team members ready to support",
    "FAQ and common questions prepared",
    "Competitor analysis completed",
    "Press kit ready",
    "Analytics tracking set up",
    "Community outreach planned",
    "Post-launch follow-up scheduled",
]


def promotion_channels(description: str) -> List[str]:
    channels = list(BASE_CHANNELS)
    text = (description or "").lower()
    if "developer" in text:
        channels += ["hackernews", "reddit"]
    if "design" in text:
        channels += ["dribbble", "behance"]
    return channels


def promotion_messages(product) -> Dict[str, str]:
    link = product.url or product.website
    return {
        "twitter": (
            f"🚀 We just launched {product.name} on @ProductHunt!\n\n"
            f"{product.tagline}\n\n"
            f"Check it out and support us: {link}\n\n"
            "#ProductHunt #StartUp #Launch"
        ),
        "linkedin": (
            f"Excited to announce that {product.name} is now live on Product Hunt! 🎉\n\n"
            f"{product.description}\n\n"
            f"We'd love your support and feedback: {link}"
        ),
        "slack": (
            f"Hey team! We're live on Product Hunt with {product.name}! 🚀\n"
            f"{product.tagline}\n"
            f"Your support would mean the world: {link}"
        ),
    }


def launch_strategy(product, target_audience: str = "GLOBAL") -> Dict[str, Any]:
    """Timing, promotion channels with ready-made posts, and engagement rules."""
    timing = STRATEGY_TIMINGS.get(target_audience.upper(), STRATEGY_TIMINGS["GLOBAL"])
    return {
        "productId": product.id,
        "timing": dict(timing),
        "promotion": {
            "channels": promotion_channels(product.description),
            "messages": promotion_messages(product),
        },
        "engagement": {"replyToComments": True, "thankVoters": True, "updateInterval": 30},
    }


def launch_checklist() -> List[str]:
    return list(LAUNCH_CHECKLIST)
