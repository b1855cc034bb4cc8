from datetime import timedelta

import pytest
from sqlalchemy import func, select

from launchpal.auth.models import User
from launchpal.usage.models import UsageRecord
from launchpal.usage.service import resolve_cost, track_usage, usage_stats
from launchpal.shared.errors import QuotaExceeded
from launchpal.shared.timeutil import month_start, utcnow


def _seed(db, user_id, n, at=None):
    for _ in range(n):
        db.add(UsageRecord(user_id=user_id, endpoint="seed", cost=0.01, timestamp=at or utcnow()))
    db.commit()


def _count(db, user_id):
    return db.scalar(select(func.count(UsageRecord.id)).where(UsageRecord.user_id == user_id))


def test_cost_table():
    assert resolve_cost("products.create") == 0.10
    assert resolve_cost("launches.schedule") == 0.05
    assert resolve_cost("launches.getMetrics") == 0.02
    assert resolve_cost("platforms.connect") == 0.01
    assert resolve_cost("something.else") == 0.01
    assert resolve_cost("products.create", cost=0.5) == 0.5


def test_hundredth_request_passes_and_next_is_denied_but_recorded(client, db, connected, auth):
    _, user = auth
    # connect already used 1 of 100
    _seed(db, user["id"], 98)
    payload = {
        "platform": "producthunt",
        "name": "Quota",
        "tagline": "Right at the edge",
        "description": "",
        "website": "https://quota.example.com",
    }

    r = client.post("/api/products", json=payload, headers=connected)
    assert r.status_code == 201
    assert _count(db, user["id"]) == 100

    r = client.post("/api/products", json=payload, headers=connected)
    assert r.status_code == 429
    assert r.json()["error"] == "Monthly request limit exceeded (100)"
    assert _count(db, user["id"]) == 101


def test_track_usage_raises_after_write(client, db, auth):
    _, public = auth
    user = db.get(User, public["id"])
    _seed(db, user.id, 100)
    with pytest.raises(QuotaExceeded):
        track_usage(db, user, "launches.schedule")
    assert _count(db, user.id) == 101
    stats = usage_stats(db, user)
    assert stats["total_requests"] == 101
    assert stats["total_cost"] == pytest.approx(1.05)


def test_usage_endpoint_shape(client, connected, product):
    r = client.get("/api/usage", headers=connected)
    assert r.status_code == 200
    body = r.json()
    assert body["totalRequests"] == 2
    assert body["totalCost"] == pytest.approx(0.11)
    assert body["remaining"] == 98
    assert body["subscription"] == "free"
    assert body["limits"] == {"monthlyRequests": 100, "platforms": 1, "products": 3}


def test_last_month_does_not_count_toward_quota(client, db, auth):
    _, public = auth
    user = db.get(User, public["id"])
    _seed(db, user.id, 150, at=month_start() - timedelta(seconds=1))

    track_usage(db, user, "launches.schedule")
    assert usage_stats(db, user)["total_requests"] == 1
    assert _count(db, user.id) == 151


def test_usage_for_a_date_range(client, db, auth):
    headers, public = auth
    start = month_start()
    _seed(db, public["id"], 5, at=start - timedelta(days=3))
    _seed(db, public["id"], 2)

    body = client.get("/api/usage", headers=headers).json()
    assert body["totalRequests"] == 2

    params = {
        "startDate": (start - timedelta(days=10)).isoformat(),
        "endDate": start.isoformat(),
    }
    body = client.get("/api/usage", params=params, headers=headers).json()
    assert body["totalRequests"] == 5
    assert body["totalCost"] == pytest.approx(0.05)
    # remaining still reflects this month's quota
    assert body["remaining"] == 98


def test_usage_range_must_be_ordered(client, auth):
    headers, _ = auth
    params = {"startDate": "2030-02-01T00:00:00Z", "endDate": "2030-01-01T00:00:00Z"}
    assert client.get("/api/usage", params=params, headers=headers).status_code == 400
