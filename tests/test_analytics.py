from datetime import datetime, timedelta, timezone

import pytest

from launchpal.analytics.models import LaunchMetric
from launchpal.analytics.service import (
    SqlMetricsStore,
    export_metrics,
    generate_report,
    launch_checklist,
    launch_strategy,
    optimal_launch_time,
    predict_performance,
    promotion_channels,
    record_sample,
)
from launchpal.auth.service import register_user

T0 = datetime(2030, 1, 7, 8, 0, tzinfo=timezone.utc)


@pytest.fixture()
def owner(db):
    return register_user(db, "analyst@example.com", "s3cret-pass")


def test_velocity_and_engagement(db, owner):
    store = SqlMetricsStore(db)
    first = record_sample(store, owner.id, "p1", votes=10, comments=5, now=T0)
    assert first.velocity == 0
    assert first.engagement == 0.5

    second = record_sample(store, owner.id, "p1", votes=70, comments=7, now=T0 + timedelta(hours=2))
    assert second.velocity == pytest.approx(30.0)

    # other products and owners keep separate histories
    record_sample(store, owner.id, "p2", votes=999, comments=0, now=T0)
    assert [m.votes for m in store.history(owner.id, "p1")] == [10, 70]


def test_zero_votes_engagement(db, owner):
    m = record_sample(SqlMetricsStore(db), owner.id, "p1", votes=0, comments=3, now=T0)
    assert m.engagement == 3


def test_prediction_needs_two_samples():
    assert predict_performance([]) == {"predictedVotes": 0, "predictedRank": 999, "confidence": 0}
    one = [LaunchMetric(votes=10, comments=0, velocity=5.0)]
    assert predict_performance(one)["predictedRank"] == 999


def test_prediction_with_steady_velocity():
    history = [
        LaunchMetric(votes=100, comments=0, velocity=10.0),
        LaunchMetric(votes=120, comments=0, velocity=10.0),
    ]
    # 120 + 10/h * 24h
    assert predict_performance(history, 24) == {"predictedVotes": 360, "predictedRank": 5, "confidence": 100}


def test_prediction_confidence_drops_with_spread():
    history = [
        LaunchMetric(votes=500, comments=0, velocity=0.0),
        LaunchMetric(votes=600, comments=0, velocity=4.0),
    ]
    result = predict_performance(history, 10)
    assert result["predictedVotes"] == 620
    assert result["predictedRank"] == 1
    assert result["confidence"] == 80


def test_optimal_timing_table():
    assert optimal_launch_time("US")["avgVotes"] == 450
    assert optimal_launch_time("eu")["time"] == "09:00 AM GMT"
    assert optimal_launch_time("ASIA")["successRate"] == 58
    assert optimal_launch_time("MARS")["timezone"] == "UTC"


def test_report_and_export(db, owner):
    store = SqlMetricsStore(db)
    record_sample(store, owner.id, "p1", votes=10, comments=1, rank=12, now=T0)
    record_sample(store, owner.id, "p1", votes=40, comments=4, rank=6, now=T0 + timedelta(hours=1))
    history = store.history(owner.id, "p1")

    class _Product:
        id = "p1"
        name = "Shipit"

    report = generate_report(_Product(), history)
    assert report["votes"] == 40
    assert report["rank"] == 6
    assert report["peakHour"] == "09:00 UTC"
    assert len(report["timeline"]) == 2

    csv = export_metrics(history, "csv").splitlines()
    assert csv[0] == "Timestamp,Votes,Comments,Velocity,Engagement"
    assert csv[2].endswith(",40,4,30.00,0.100")
    assert '"votes": 40' in export_metrics(history, "json")


def test_promotion_channels_follow_description():
    assert promotion_channels("A todo app") == ["twitter", "linkedin", "slack"]
    assert promotion_channels("Design tools for developers") == [
        "twitter", "linkedin", "slack", "hackernews", "reddit", "dribbble", "behance"
    ]
    assert promotion_channels(None) == ["twitter", "linkedin", "slack"]


def test_launch_strategy():
    class _Product:
        id = "p1"
        name = "Shipit"
        tagline = "Ship launches on time"
        description = "Launch planner for developer teams"
        url = None
        website = "https://shipit.example.com"

    strategy = launch_strategy(_Product(), "eu")
    assert strategy["productId"] == "p1"
    assert strategy["timing"] == {"day": "Tuesday", "hour": 9, "timezone": "Europe/London"}
    assert "hackernews" in strategy["promotion"]["channels"]
    messages = strategy["promotion"]["messages"]
    assert set(messages) == {"twitter", "linkedin", "slack"}
    assert "https://shipit.example.com" in messages["twitter"]
    assert "Launch planner for developer teams" in messages["linkedin"]
    assert strategy["engagement"]["updateInterval"] == 30

    assert launch_strategy(_Product(), "MARS")["timing"]["timezone"] == "UTC"


def test_checklist_is_a_copy():
    items = launch_checklist()
    assert len(items) == 15
    items.clear()
    assert len(launch_checklist()) == 15
