# launchpal/shared/auth.py
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError  # python-jose[cryptography]
from sqlalchemy.orm import Session

from launchpal.shared.config import settings
from launchpal.shared.db import get_db
from launchpal.shared.errors import Unauthorized, Forbidden

bearer = HTTPBearer(auto_error=False, scheme_name="bearerAuth")

API_KEY_PREFIX = "lp_"
FULL_SCOPES = frozenset({"read", "write"})

def create_token(
    sub: str,
    typ: str = "access",
    scope: str | None = None,
    extra: Optional[Dict[str, Any]] = None,
    minutes: Optional[int] = None,
) -> str:
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=minutes or settings.JWT_EXPIRE_MIN)
    payload: Dict[str, Any] = {
        "sub": sub,
        "typ": typ,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    if scope is not None:
        payload["scope"] = scope
    if settings.JWT_ISS:
        payload["iss"] = settings.JWT_ISS
    if settings.JWT_AUD:
        payload["aud"] = settings.JWT_AUD
    if extra:
        payload.update(extra)
    return jwt.encode(payload, settings.JWT_KEY, algorithm=settings.JWT_ALG)

def create_access_token(sub: str, scope: str | None = None, extra: Optional[Dict[str, Any]] = None) -> str:
    """Login session token; no scope claim means full access."""
    return create_token(sub=sub, typ="access", scope=scope, extra=extra)

def decode_token(token: str) -> Dict[str, Any]:
    """Raises JWTError on any signature, expiry, audience or issuer problem."""
    return jwt.decode(
        token,
        settings.JWT_KEY,
        algorithms=[settings.JWT_ALG],
        audience=settings.JWT_AUD,
        issuer=settings.JWT_ISS,
        options={
            "verify_aud": bool(settings.JWT_AUD),
            "verify_iss": bool(settings.JWT_ISS),
        },
    )

def get_principal(
    creds: HTTPAuthorizationCredentials = Depends(bearer),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    from launchpal.auth.models import User

    if not creds:
        raise Unauthorized("missing bearer token")

    token = creds.credentials

    # User API keys are accepted as bearer tokens too
    if token.startswith(API_KEY_PREFIX):
        user = db.query(User).filter(User.api_key == token).first()
        if not user:
            raise Unauthorized("invalid api key")
        return {"user": user, "scopes": FULL_SCOPES, "mode": "api_key"}

    try:
        payload = decode_token(token)
    except JWTError as e:
        raise Unauthorized(f"invalid token: {e}")

    if payload.get("typ", "access") != "access":
        raise Unauthorized("invalid token: not an access token")
    sub = payload.get("sub")
    if not sub:
        raise Unauthorized("invalid token: missing sub")

    user = db.get(User, sub)
    if not user:
        raise Unauthorized("invalid token: unknown user")

    scope = payload.get("scope")
    scopes = frozenset(scope.split()) if scope is not None else FULL_SCOPES
    mode = "oauth" if payload.get("client_id") else "jwt"
    return {"user": user, "scopes": scopes, "mode": mode}

def get_user(principal: Dict[str, Any] = Depends(get_principal)):
    return principal["user"]

def require_scope(scope: str):
    """
    Dependency factory: resolves the user and checks an OAuth scope.
    Login tokens and API keys carry every scope.
    """
    def _dep(principal: Dict[str, Any] = Depends(get_principal)):
        if scope not in principal["scopes"]:
            raise Forbidden(f"token lacks required scope: {scope}")
        return principal["user"]
    return _dep
