import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "test")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from launchpal.main import app
from launchpal.shared.db import Base, get_db
from launchpal.platforms.registry import ADAPTERS
from launchpal.platforms.adapters.base import PlatformAdapter, ProductDraft
from launchpal.platforms.adapters.producthunt import engagement_score


class FakeProductHunt(PlatformAdapter):
    """Records calls instead of talking to Product Hunt."""

    platform_id = "producthunt"
    created: list = []
    metrics = {"votes": 120, "comments": 30, "rank": 4}

    async def authenticate(self, force: bool = False) -> str:
        return "fake-token"

    async def create_product(self, draft: ProductDraft):
        FakeProductHunt.created.append(draft)
        n = len(FakeProductHunt.created)
        return {"platform_id": f"post_{n}", "url": f"https://www.producthunt.com/posts/product-{n}"}

    async def schedule_launch(self, platform_product_id: str, when: datetime):
        return {"id": f"ph_launch_{platform_product_id}", "status": "scheduled"}

    async def get_launch_metrics(self, platform_launch_id: str):
        votes, comments = self.metrics["votes"], self.metrics["comments"]
        return {**self.metrics, "engagement": engagement_score(votes, comments)}

    async def get_trending(self, period: str = "day", limit: int = 10):
        return [
            {"id": str(i), "name": f"Tool {i}", "tagline": f"Tagline {i}", "votes": 100 - i, "comments": i}
            for i in range(1, limit + 1)
        ]


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(engine):
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    def _get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def fake_ph(monkeypatch):
    FakeProductHunt.created = []
    FakeProductHunt.metrics = {"votes": 120, "comments": 30, "rank": 4}
    monkeypatch.setitem(ADAPTERS, "producthunt", FakeProductHunt)
    return FakeProductHunt


def _register(client, email="maker@example.com", password="s3cret-pass"):
    r = client.post("/auth/register", json={"email": email, "password": password, "name": "Maker"})
    assert r.status_code == 201, r.text
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    body = r.json()
    return {"Authorization": f"Bearer {body['token']}"}, body["user"]


@pytest.fixture()
def auth(client):
    """Headers + public user dict for a freshly registered free-plan user."""
    return _register(client)


@pytest.fixture()
def other_auth(client):
    return _register(client, email="rival@example.com")


@pytest.fixture()
def connected(client, auth, fake_ph):
    headers, _ = auth
    r = client.post("/api/platforms/producthunt/connect", json={"accessToken": "ph-token"}, headers=headers)
    assert r.status_code == 200, r.text
    return headers


@pytest.fixture()
def product(client, connected):
    r = client.post(
        "/api/products",
        json={
            "platform": "producthunt",
            "name": "Shipit",
            "tagline": "Ship launches on time",
            "description": "Launch planner",
            "website": "https://shipit.example.com",
            "topics": ["productivity"],
        },
        headers=connected,
    )
    assert r.status_code == 201, r.text
    return r.json()
