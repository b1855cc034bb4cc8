from datetime import timedelta
from urllib.parse import parse_qs, urlparse

import pytest

from launchpal.oauth.models import AuthorizationCode
from launchpal.oauth.service import pkce_challenge
from launchpal.shared.timeutil import utcnow

REDIRECT = "http://localhost:9999/callback"
VERIFIER = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"


def test_pkce_challenge_matches_rfc7636_example():
    assert pkce_challenge(VERIFIER) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"


@pytest.fixture()
def oauth_client(client):
    r = client.post("/oauth/register", json={"client_name": "Desktop Agent", "redirect_uris": [REDIRECT]})
    assert r.status_code == 201, r.text
    body = r.json()
    assert "client_secret" not in body
    return body


def _authorize(client, client_id, scope="read write", state="xyz"):
    r = client.post(
        "/oauth/authorize",
        data={
            "client_id": client_id,
            "redirect_uri": REDIRECT,
            "state": state,
            "scope": scope,
            "code_challenge": pkce_challenge(VERIFIER),
            "code_challenge_method": "S256",
            "email": "maker@example.com",
            "password": "s3cret-pass",
            "consent": "yes",
        },
        follow_redirects=False,
    )
    assert r.status_code == 302, r.text
    location = urlparse(r.headers["location"])
    assert f"{location.scheme}://{location.netloc}{location.path}" == REDIRECT
    query = parse_qs(location.query)
    assert query["state"] == [state]
    return query["code"][0]


def _exchange(client, client_id, code, verifier=VERIFIER, **extra):
    return client.post(
        "/oauth/token",
        data={
            "grant_type": "authorization_code",
            "code": code,
            "client_id": client_id,
            "code_verifier": verifier,
            "redirect_uri": REDIRECT,
            **extra,
        },
    )


def test_consent_page(client, oauth_client):
    r = client.get(
        "/oauth/authorize",
        params={
            "client_id": oauth_client["client_id"],
            "redirect_uri": REDIRECT,
            "state": "abc",
            "code_challenge": pkce_challenge(VERIFIER),
            "code_challenge_method": "S256",
        },
    )
    assert r.status_code == 200
    assert "Desktop Agent" in r.text
    assert 'name="state" value="abc"' in r.text


@pytest.mark.parametrize(
    "overrides",
    [
        {"client_id": "unknown"},
        {"redirect_uri": "https://evil.example.com/cb"},
        {"code_challenge_method": "plain"},
        {"code_challenge": ""},
    ],
)
def test_bad_authorize_requests_never_redirect(client, oauth_client, overrides):
    params = {
        "client_id": oauth_client["client_id"],
        "redirect_uri": REDIRECT,
        "code_challenge": pkce_challenge(VERIFIER),
        "code_challenge_method": "S256",
        **overrides,
    }
    r = client.get("/oauth/authorize", params=params, follow_redirects=False)
    assert r.status_code == 400
    assert "location" not in r.headers


def test_bad_credentials_rerender_consent(client, auth, oauth_client):
    r = client.post(
        "/oauth/authorize",
        data={
            "client_id": oauth_client["client_id"],
            "redirect_uri": REDIRECT,
            "code_challenge": pkce_challenge(VERIFIER),
            "email": "maker@example.com",
            "password": "wrong",
            "consent": "yes",
        },
        follow_redirects=False,
    )
    assert r.status_code == 401
    assert "Invalid email or password" in r.text


def test_code_exchange_is_single_use(client, auth, oauth_client):
    client_id = oauth_client["client_id"]
    code = _authorize(client, client_id)

    r = _exchange(client, client_id, code, verifier="wrong-verifier-" + "x" * 30)
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_grant"

    r = _exchange(client, client_id, code)
    assert r.status_code == 200
    assert r.headers["cache-control"] == "no-store"
    tokens = r.json()
    assert tokens["token_type"] == "Bearer"
    assert tokens["scope"] == "read write"
    assert tokens["refresh_token"]

    r = _exchange(client, client_id, code)
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_grant"

    r = client.get("/api/usage", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert r.status_code == 200


def test_expired_code(client, db, auth, oauth_client):
    client_id = oauth_client["client_id"]
    code = _authorize(client, client_id)
    row = db.get(AuthorizationCode, code)
    row.expires_at = utcnow() - timedelta(seconds=1)
    db.commit()

    r = _exchange(client, client_id, code)
    assert r.status_code == 400
    assert "expired" in r.json()["error_description"]


def test_code_is_bound_to_client(client, auth, oauth_client):
    code = _authorize(client, oauth_client["client_id"])
    other = client.post("/oauth/register", json={"client_name": "Other", "redirect_uris": [REDIRECT]}).json()
    assert _exchange(client, other["client_id"], code).status_code == 400


def test_refresh_grant(client, auth, oauth_client):
    client_id = oauth_client["client_id"]
    tokens = _exchange(client, client_id, _authorize(client, client_id)).json()

    r = client.post(
        "/oauth/token",
        json={"grant_type": "refresh_token", "refresh_token": tokens["refresh_token"], "client_id": client_id},
    )
    assert r.status_code == 200
    assert r.json()["access_token"]

    # a refresh token is not an access token
    r = client.get("/api/usage", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
    assert r.status_code == 401

    r = client.post(
        "/oauth/token",
        data={"grant_type": "refresh_token", "refresh_token": tokens["access_token"], "client_id": client_id},
    )
    assert r.json()["error"] == "invalid_grant"


def test_read_scope_cannot_write(client, auth, oauth_client):
    client_id = oauth_client["client_id"]
    tokens = _exchange(client, client_id, _authorize(client, client_id, scope="read")).json()
    headers = {"Authorization": f"Bearer {tokens['access_token']}"}
    assert client.get("/api/products", headers=headers).status_code == 200
    r = client.post("/api/platforms/producthunt/connect", json={}, headers=headers)
    assert r.status_code == 403


def test_unsupported_grant_type(client, oauth_client):
    r = client.post("/oauth/token", data={"grant_type": "password", "client_id": oauth_client["client_id"]})
    assert r.status_code == 400
    assert r.json()["error"] == "unsupported_grant_type"


def test_confidential_client_needs_secret(client, auth):
    reg = client.post(
        "/oauth/register",
        json={"client_name": "Server", "redirect_uris": [REDIRECT], "token_endpoint_auth_method": "client_secret_post"},
    ).json()
    assert reg["client_secret"]
    code = _authorize(client, reg["client_id"])

    r = _exchange(client, reg["client_id"], code, client_secret="wrong")
    assert r.status_code == 401
    assert r.json()["error"] == "invalid_client"

    r = _exchange(client, reg["client_id"], code, client_secret=reg["client_secret"])
    assert r.status_code == 200


def test_discovery(client):
    meta = client.get("/.well-known/oauth-authorization-server").json()
    assert meta["code_challenge_methods_supported"] == ["S256"]
    assert meta["grant_types_supported"] == ["authorization_code", "refresh_token"]
    assert meta["token_endpoint"].endswith("/oauth/token")
    assert meta["scopes_supported"] == ["read", "write"]


@pytest.mark.parametrize("verifier", ["é" * 43, "short", "x" * 129, "has space " + "x" * 40])
def test_malformed_verifier_is_invalid_grant(client, auth, oauth_client, verifier):
    client_id = oauth_client["client_id"]
    code = _authorize(client, client_id)

    r = _exchange(client, client_id, code, verifier=verifier)
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_grant"

    # the code survives a bad verifier
    assert _exchange(client, client_id, code).status_code == 200


@pytest.mark.parametrize(
    "body",
    [b"{not json", b'["grant_type"]', b'"authorization_code"'],
)
def test_token_rejects_non_object_json(client, oauth_client, body):
    r = client.post("/oauth/token", content=body, headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_request"
