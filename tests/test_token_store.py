import json

import httpx
import pytest
from fastapi.testclient import TestClient

from launchpal.mcp.local_auth import create_auth_app
from launchpal.mcp.token_store import TokenStore, build_token, now_ms
from launchpal.shared.errors import PlatformAPIError


def token_endpoint(status=200, body=None, seen=None):
    def handler(request: httpx.Request):
        if seen is not None:
            seen.append(json.loads(request.content))
        return httpx.Response(status, json=body or {})

    return httpx.MockTransport(handler)


def test_build_token_stamps_expiry():
    token = build_token({"access_token": "a", "expires_in": 60}, created_at=1_000)
    assert token["created_at"] == 1_000
    assert token["expires_at"] == 61_000
    assert "expires_at" not in build_token({"access_token": "a"})


def test_missing_or_corrupt_file_means_logged_out(tmp_path):
    store = TokenStore(tmp_path / "tokens.json")
    assert store.load() is None
    assert store.info() == {"authenticated": False}

    store.path.write_text("{not json", encoding="utf-8")
    assert store.load() is None
    assert store.clear() is True
    assert store.clear() is False


@pytest.mark.asyncio
async def test_valid_token_is_returned_as_is(tmp_path):
    store = TokenStore(tmp_path / "tokens.json")
    store.save(build_token({"access_token": "fresh", "expires_in": 3600}))
    assert await store.get_access_token() == "fresh"
    assert store.info()["authenticated"] is True


@pytest.mark.asyncio
async def test_expired_without_refresh_token(tmp_path):
    store = TokenStore(tmp_path / "tokens.json")
    store.save({"access_token": "old", "created_at": 0, "expires_at": now_ms() - 1})
    assert await store.get_access_token() is None
    assert store.info()["authenticated"] is False


@pytest.mark.asyncio
async def test_expired_token_is_refreshed(tmp_path):
    seen = []
    store = TokenStore(
        tmp_path / "tokens.json",
        client_id="cid",
        client_secret="secret",
        transport=token_endpoint(body={"access_token": "new", "expires_in": 7200}, seen=seen),
    )
    store.save({"access_token": "old", "refresh_token": "r1", "created_at": 0, "expires_at": now_ms() - 1})

    assert await store.get_access_token() == "new"
    assert seen == [
        {"client_id": "cid", "client_secret": "secret", "grant_type": "refresh_token", "refresh_token": "r1"}
    ]
    saved = store.load()
    assert saved["refresh_token"] == "r1"
    assert saved["expires_at"] > now_ms()


@pytest.mark.asyncio
async def test_refresh_failure_raises(tmp_path):
    store = TokenStore(tmp_path / "tokens.json", transport=token_endpoint(status=400, body={"error": "invalid_grant"}))
    store.save({"access_token": "old", "refresh_token": "r1", "created_at": 0, "expires_at": now_ms() - 1})
    with pytest.raises(PlatformAPIError):
        await store.get_access_token()


@pytest.mark.asyncio
async def test_wait_for_token_times_out(tmp_path):
    store = TokenStore(tmp_path / "tokens.json")
    assert await store.wait_for_token(timeout=0.05, interval=0.01) is None


def test_login_callback_writes_token_file(tmp_path):
    seen = []
    store = TokenStore(tmp_path / "tokens.json")
    app = create_auth_app(
        store,
        client_id="cid",
        client_secret="secret",
        redirect_uri="http://localhost:8080/callback",
        state="s1",
        transport=token_endpoint(body={"access_token": "ph", "scope": "public private write"}, seen=seen),
    )
    client = TestClient(app)

    r = client.get("/auth", follow_redirects=False)
    assert r.status_code == 302
    assert "state=s1" in r.headers["location"]
    assert "scope=public+private+write" in r.headers["location"]

    assert client.get("/callback", params={"code": "c", "state": "forged"}).status_code == 400
    assert store.load() is None

    r = client.get("/callback", params={"code": "c", "state": "s1"})
    assert r.status_code == 200
    assert seen[0]["grant_type"] == "authorization_code"
    assert store.load()["access_token"] == "ph"
