import json
from datetime import datetime, timezone

import httpx
import pytest

from launchpal.platforms.adapters.base import ProductDraft
from launchpal.platforms.adapters.producthunt import ProductHuntAdapter, engagement_score
from launchpal.shared.errors import PlatformAPIError

TOKEN_URL = "https://api.producthunt.com/v2/oauth/token"
GRAPHQL_URL = "https://api.producthunt.com/v2/api/graphql"

DRAFT = ProductDraft(
    name="Shipit",
    tagline="Ship launches on time",
    description="Launch planner",
    website="https://shipit.example.com",
)


def make_adapter(handler, credentials=None):
    calls = []

    def _record(request: httpx.Request):
        calls.append(request)
        return handler(request)

    adapter = ProductHuntAdapter(
        credentials or {"clientId": "cid", "clientSecret": "secret"},
        transport=httpx.MockTransport(_record),
    )
    return adapter, calls


def ph_api(graphql_data=None, graphql_status=200, errors=None):
    def handler(request: httpx.Request):
        if str(request.url) == TOKEN_URL:
            return httpx.Response(200, json={"access_token": "ph-access"})
        assert str(request.url) == GRAPHQL_URL
        assert request.headers["Authorization"] == "Bearer ph-access"
        body = {"data": graphql_data}
        if errors:
            body["errors"] = errors
        return httpx.Response(graphql_status, json=body)

    return handler


def test_engagement_formula():
    assert engagement_score(100, 25) == 1.5


@pytest.mark.asyncio
async def test_authenticate_memoizes_token():
    adapter, calls = make_adapter(ph_api())
    async with adapter:
        assert await adapter.authenticate() == "ph-access"
        assert await adapter.authenticate() == "ph-access"
        assert len(calls) == 1
        await adapter.authenticate(force=True)
        assert len(calls) == 2
    sent = json.loads(calls[0].content)
    assert sent["grant_type"] == "client_credentials"


@pytest.mark.asyncio
async def test_static_access_token_skips_exchange():
    def handler(request):
        assert str(request.url) == GRAPHQL_URL
        assert request.headers["Authorization"] == "Bearer from-login"
        return httpx.Response(200, json={"data": {"post": {"votesCount": 3, "commentsCount": 1, "rank": None}}})

    adapter, calls = make_adapter(handler, {"accessToken": "from-login"})
    async with adapter:
        metrics = await adapter.get_launch_metrics("42")
    assert len(calls) == 1
    assert metrics == {"votes": 3, "comments": 1, "rank": None, "engagement": 0.05}


@pytest.mark.asyncio
async def test_create_product_builds_post_url():
    adapter, calls = make_adapter(ph_api({"createPost": {"id": 987, "slug": "shipit", "url": "ignored"}}))
    async with adapter:
        result = await adapter.create_product(DRAFT)
    assert result == {"platform_id": "987", "url": "https://www.producthunt.com/posts/shipit"}
    variables = json.loads(calls[-1].content)["variables"]["input"]
    assert variables["url"] == "https://shipit.example.com"


@pytest.mark.asyncio
async def test_graphql_errors_raise():
    adapter, _ = make_adapter(ph_api(errors=[{"message": "Name has already been taken"}]))
    async with adapter:
        with pytest.raises(PlatformAPIError) as exc:
            await adapter.create_product(DRAFT)
    assert "Name has already been taken" in exc.value.message


@pytest.mark.asyncio
async def test_http_error_raises_with_status():
    adapter, _ = make_adapter(ph_api(graphql_status=500))
    async with adapter:
        with pytest.raises(PlatformAPIError) as exc:
            await adapter.get_launch_metrics("1")
    assert exc.value.upstream_status == 500


@pytest.mark.asyncio
async def test_failed_token_exchange():
    adapter, _ = make_adapter(lambda request: httpx.Response(401, json={"error": "invalid_client"}))
    async with adapter:
        with pytest.raises(PlatformAPIError):
            await adapter.authenticate()


@pytest.mark.asyncio
async def test_schedule_launch_is_local():
    def handler(request):
        raise AssertionError("schedule_launch must not call Product Hunt")

    adapter, calls = make_adapter(handler)
    async with adapter:
        result = await adapter.schedule_launch("987", datetime(2030, 1, 1, tzinfo=timezone.utc))
    assert calls == []
    assert result["id"].startswith("ph_launch_")
    assert result["status"] == "scheduled"


@pytest.mark.asyncio
async def test_trending_uses_period_order():
    edges = [{"node": {"id": 1, "name": "A", "tagline": "a", "url": "u", "votesCount": 9, "commentsCount": 2}}]
    adapter, calls = make_adapter(ph_api({"posts": {"edges": edges}}))
    async with adapter:
        items = await adapter.get_trending("week", 5)
    assert items == [{"id": "1", "name": "A", "tagline": "a", "url": "u", "votes": 9, "comments": 2}]
    assert json.loads(calls[-1].content)["variables"] == {"first": 5, "order": "WEEKLY_RANK"}
