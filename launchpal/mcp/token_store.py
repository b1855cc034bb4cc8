"""Product Hunt token file used by the local login helper.

File shape: ``{access_token, token_type, scope, created_at, expires_at?,
refresh_token?}`` with times in epoch milliseconds. A missing file means
"not authenticated".
"""
import asyncio
import json
import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional

import httpx

from launchpal.mcp.config import mcp_settings
from launchpal.shared.errors import PlatformAPIError
from launchpal.shared.logging import get_logger

logger = get_logger("mcp.tokens", stream=sys.stderr)


def now_ms() -> int:
    return int(time.time() * 1000)


def build_token(response: Dict[str, Any], created_at: Optional[int] = None) -> Dict[str, Any]:
    """Stamp an OAuth token response with created_at / expires_at."""
    created_at = created_at or now_ms()
    token = {**response, "created_at": created_at}
    if response.get("expires_in"):
        token["expires_at"] = created_at + int(response["expires_in"]) * 1000
    else:
        token.pop("expires_at", None)
    return token


class TokenStore:
    def __init__(
        self,
        path: Optional[str | Path] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.path = Path(path or mcp_settings.LAUNCHPAL_TOKEN_PATH)
        self.client_id = client_id if client_id is not None else mcp_settings.PRODUCTHUNT_CLIENT_ID
        self.client_secret = client_secret if client_secret is not None else mcp_settings.PRODUCTHUNT_CLIENT_SECRET
        self._transport = transport

    def load(self) -> Optional[Dict[str, Any]]:
        # re-read on every call; the login helper writes from another thread
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except json.JSONDecodeError:
            logger.warning(f"token file {self.path} is not valid JSON; treating as logged out")
            return None

    def save(self, token: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(token, indent=2), encoding="utf-8")

    def clear(self) -> bool:
        try:
            self.path.unlink()
            return True
        except FileNotFoundError:
            return False

    @staticmethod
    def is_expired(token: Dict[str, Any], at: Optional[int] = None) -> bool:
        expires_at = token.get("expires_at")
        return bool(expires_at) and expires_at < (at or now_ms())

    async def refresh(self, token: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=mcp_settings.HTTP_TIMEOUT_SECONDS, transport=self._transport) as client:
            try:
                resp = await client.post(
                    mcp_settings.PRODUCTHUNT_TOKEN_URL,
                    json={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "grant_type": "refresh_token",
                        "refresh_token": token["refresh_token"],
                    },
                )
            except httpx.RequestError as e:
                raise PlatformAPIError(f"Product Hunt token refresh failed: {e}") from e
        if resp.status_code >= 400:
            raise PlatformAPIError(f"Product Hunt token refresh failed (HTTP {resp.status_code})", resp.status_code)

        data = resp.json()
        # providers may omit the refresh token on rotation; keep the old one
        data.setdefault("refresh_token", token["refresh_token"])
        refreshed = build_token(data)
        self.save(refreshed)
        logger.info("Product Hunt token refreshed")
        return refreshed

    async def get_access_token(self) -> Optional[str]:
        token = self.load()
        if not token:
            return None
        if self.is_expired(token):
            if not token.get("refresh_token"):
                return None
            token = await self.refresh(token)
        return token.get("access_token")

    def info(self) -> Dict[str, Any]:
        token = self.load()
        if not token:
            return {"authenticated": False}
        expired = self.is_expired(token)
        return {
            "authenticated": not expired or bool(token.get("refresh_token")),
            "expired": expired,
            "expiresAt": token.get("expires_at"),
            "createdAt": token.get("created_at"),
            "scopes": token.get("scope"),
        }

    async def wait_for_token(self, timeout: float = 60, interval: float = 1.0) -> Optional[str]:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while loop.time() < deadline:
            token = await self.get_access_token()
            if token:
                return token
            await asyncio.sleep(interval)
        return None
