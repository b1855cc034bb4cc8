"""
Authorization-code + PKCE (S256) and refresh-token grants.

Codes are single use: the exchange flips ``consumed_at`` with a conditional
UPDATE, so of two concurrent exchanges only one can win.
"""
import base64
import hashlib
import hmac
import re
import secrets
from datetime import timedelta
from typing import Any, Dict, Optional

from jose import JWTError
from sqlalchemy import update
from sqlalchemy.orm import Session

from launchpal.auth.models import User
from launchpal.auth.service import _hash, _verify
from launchpal.oauth.models import OAuthClient, AuthorizationCode
from launchpal.shared.auth import FULL_SCOPES, create_token, decode_token
from launchpal.shared.config import settings
from launchpal.shared.errors import (
    OAuthError,
    InvalidClient,
    InvalidGrant,
    InvalidScope,
    UnsupportedGrantType,
)
from launchpal.shared.logging import get_logger
from launchpal.shared.timeutil import as_utc, utcnow

logger = get_logger("oauth")

SUPPORTED_GRANTS = ("authorization_code", "refresh_token")

# RFC 7636 section 4.1 unreserved characters, 43-128 long
CODE_VERIFIER_RE = re.compile(r"[A-Za-z0-9\-._~]{43,128}")


def pkce_challenge(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


# ---- clients ----

def register_client(
    db: Session,
    name: str,
    redirect_uris: list[str],
    confidential: bool = False,
    scope: Optional[str] = None,
) -> tuple[OAuthClient, Optional[str]]:
    """Returns the client and, for confidential clients, the one-time plaintext secret."""
    secret = secrets.token_urlsafe(32) if confidential else None
    client = OAuthClient(
        client_id=secrets.token_hex(16),
        client_secret_hash=_hash(secret) if secret else None,
        name=name,
        scope=normalize_scope(scope, settings.OAUTH_DEFAULT_SCOPES),
    )
    client.redirect_uris = redirect_uris
    db.add(client)
    db.commit()
    db.refresh(client)
    logger.info(f"registered oauth client {client.client_id} ({name})")
    return client, secret


def get_client(db: Session, client_id: str | None) -> Optional[OAuthClient]:
    if not client_id:
        return None
    return db.get(OAuthClient, client_id)


def authenticate_client(db: Session, client_id: str | None, client_secret: str | None) -> OAuthClient:
    client = get_client(db, client_id)
    if not client:
        raise InvalidClient("unknown client")
    if client.is_confidential and not (client_secret and _verify(client_secret, client.client_secret_hash)):
        raise InvalidClient("client authentication failed")
    return client


def normalize_scope(requested: str | None, allowed: str) -> str:
    allowed_set = set(allowed.split())
    if not requested or not requested.strip():
        return " ".join(sorted(allowed_set))
    req = set(requested.split())
    unknown = req - allowed_set
    if unknown:
        raise InvalidScope(f"scope not allowed: {' '.join(sorted(unknown))}")
    return " ".join(sorted(req))


# ---- authorization endpoint ----

def validate_authorize_request(
    db: Session,
    client_id: str | None,
    redirect_uri: str | None,
    code_challenge: str | None,
    code_challenge_method: str | None,
    scope: str | None,
) -> tuple[OAuthClient, str]:
    """Checks everything needed before showing consent. Never redirects on failure."""
    client = get_client(db, client_id)
    if not client:
        raise OAuthError("Unknown client_id")
    if not redirect_uri or redirect_uri not in client.redirect_uris:
        raise OAuthError("redirect_uri is not registered for this client")
    if not code_challenge:
        raise OAuthError("code_challenge is required")
    if (code_challenge_method or "S256") != "S256":
        raise OAuthError("Only S256 code_challenge_method is supported")
    return client, normalize_scope(scope, client.scope)


def issue_code(
    db: Session,
    user: User,
    client: OAuthClient,
    redirect_uri: str,
    scope: str,
    code_challenge: str,
    code_challenge_method: str = "S256",
) -> str:
    code = secrets.token_urlsafe(32)
    db.add(
        AuthorizationCode(
            code=code,
            client_id=client.client_id,
            user_id=user.id,
            scope=scope,
            redirect_uri=redirect_uri,
            code_challenge=code_challenge,
            code_challenge_method=code_challenge_method,
            expires_at=utcnow() + timedelta(seconds=settings.OAUTH_CODE_TTL_SECONDS),
        )
    )
    db.commit()
    logger.info(f"issued authorization code for client {client.client_id}", extra={"user_id": user.id})
    return code


# ---- token endpoint ----

def _token_response(user_id: str, client_id: str, scope: str, with_refresh: bool) -> Dict[str, Any]:
    extra = {"client_id": client_id}
    out: Dict[str, Any] = {
        "access_token": create_token(sub=user_id, typ="access", scope=scope, extra=extra),
        "token_type": "Bearer",
        "expires_in": settings.JWT_EXPIRE_MIN * 60,
        "scope": scope,
    }
    if with_refresh:
        out["refresh_token"] = create_token(
            sub=user_id,
            typ="refresh",
            scope=scope,
            extra=extra,
            minutes=settings.OAUTH_REFRESH_EXPIRE_DAYS * 24 * 60,
        )
    return out


def exchange_code(
    db: Session,
    client: OAuthClient,
    code: str | None,
    code_verifier: str | None,
    redirect_uri: str | None = None,
) -> Dict[str, Any]:
    row = db.get(AuthorizationCode, code) if code else None
    if not row or row.client_id != client.client_id:
        raise InvalidGrant("authorization code is invalid")
    if row.consumed_at is not None:
        raise InvalidGrant("authorization code has already been used")
    if as_utc(row.expires_at) <= utcnow():
        raise InvalidGrant("authorization code has expired")
    if redirect_uri and redirect_uri != row.redirect_uri:
        raise InvalidGrant("redirect_uri does not match")
    if not isinstance(code_verifier, str) or not CODE_VERIFIER_RE.fullmatch(code_verifier):
        raise InvalidGrant("code_verifier is malformed")
    if not hmac.compare_digest(pkce_challenge(code_verifier), row.code_challenge):
        raise InvalidGrant("code_verifier does not match code_challenge")

    claimed = db.execute(
        update(AuthorizationCode)
        .where(AuthorizationCode.code == row.code, AuthorizationCode.consumed_at.is_(None))
        .values(consumed_at=utcnow())
    )
    db.commit()
    if claimed.rowcount != 1:
        raise InvalidGrant("authorization code has already been used")

    logger.info(f"authorization code exchanged by {client.client_id}", extra={"user_id": row.user_id})
    return _token_response(row.user_id, client.client_id, row.scope, with_refresh=True)


def refresh_access_token(db: Session, client: OAuthClient, refresh_token: str | None) -> Dict[str, Any]:
    if not refresh_token:
        raise InvalidGrant("refresh_token is required")
    try:
        payload = decode_token(refresh_token)
    except JWTError:
        raise InvalidGrant("refresh token is invalid or expired")
    if payload.get("typ") != "refresh" or payload.get("client_id") != client.client_id:
        raise InvalidGrant("refresh token was not issued to this client")
    user_id = payload.get("sub")
    if not user_id or not db.get(User, user_id):
        raise InvalidGrant("refresh token subject no longer exists")
    scope = payload.get("scope") or " ".join(sorted(FULL_SCOPES))
    return _token_response(user_id, client.client_id, scope, with_refresh=False)


def token(db: Session, params: Dict[str, Any]) -> Dict[str, Any]:
    grant_type = params.get("grant_type")
    if grant_type not in SUPPORTED_GRANTS:
        raise UnsupportedGrantType(f"grant_type {grant_type!r} is not supported")

    client = authenticate_client(db, params.get("client_id"), params.get("client_secret"))
    if grant_type == "authorization_code":
        return exchange_code(
            db,
            client,
            params.get("code"),
            params.get("code_verifier"),
            params.get("redirect_uri"),
        )
    return refresh_access_token(db, client, params.get("refresh_token"))


def discovery_metadata(base_url: str | None = None) -> Dict[str, Any]:
    issuer = (base_url or settings.PUBLIC_BASE_URL).rstrip("/")
    return {
        "issuer": issuer,
        "authorization_endpoint": f"{issuer}/oauth/authorize",
        "token_endpoint": f"{issuer}/oauth/token",
        "registration_endpoint": f"{issuer}/oauth/register",
        "response_types_supported": ["code"],
        "grant_types_supported": list(SUPPORTED_GRANTS),
        "code_challenge_methods_supported": ["S256"],
        "token_endpoint_auth_methods_supported": ["client_secret_post", "none"],
        "scopes_supported": sorted(FULL_SCOPES),
    }
