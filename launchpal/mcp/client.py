# launchpal/mcp/client.py

import sys
from typing import Any, Dict, Optional

import httpx

from launchpal.mcp.config import mcp_settings
from launchpal.mcp.errors import ToolError, INVALID_REQUEST
from launchpal.shared.logging import get_logger

logger = get_logger("mcp.client", stream=sys.stderr)

AUTH_FAILED = "Authentication failed. Please check your API key."
RATE_LIMITED = "Rate limit exceeded. Please upgrade your plan or wait."


class LaunchPalAPI:
    """Async HTTP client for the LaunchPal REST API.

    Holds the bearer token for the session: the API key from config until
    ``login`` swaps in a session JWT.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or mcp_settings.LAUNCHPAL_API_URL).rstrip("/")
        self.token: Optional[str] = api_key if api_key is not None else mcp_settings.LAUNCHPAL_API_KEY
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=mcp_settings.HTTP_TIMEOUT_SECONDS,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    # ── Core Request Method ──

    async def request(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        auth: bool = True,
    ) -> Any:
        client = await self._get_client()
        headers = {}
        if auth and self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            resp = await client.request(method, path, json=json, params=params, headers=headers)
        except httpx.RequestError as e:
            raise ToolError(f"LaunchPal API unreachable: {e}") from e

        logger.debug(f"{method} {path} -> {resp.status_code}")
        if resp.status_code == 401:
            raise ToolError(AUTH_FAILED, INVALID_REQUEST)
        if resp.status_code == 429:
            raise ToolError(RATE_LIMITED, INVALID_REQUEST)
        if resp.status_code >= 400:
            raise ToolError(self._error_message(resp))
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        try:
            body = resp.json()
        except ValueError:
            return resp.text or f"HTTP {resp.status_code}"
        if isinstance(body, dict):
            return str(body.get("error") or body.get("detail") or f"HTTP {resp.status_code}")
        return f"HTTP {resp.status_code}"

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Optional[Any] = None) -> Any:
        return await self.request("POST", path, json=json)

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        data = await self.request("POST", "/auth/login", json={"email": email, "password": password}, auth=False)
        self.token = data["token"]
        return data
