"""Local browser login against Product Hunt.

A small FastAPI app served by uvicorn on a background thread. The
``/callback`` route exchanges the authorization code and writes the token
file that the MCP tools read.
"""
import secrets
import sys
import threading
from html import escape
from typing import Optional
from urllib.parse import urlencode

import httpx
import uvicorn
from fastapi import FastAPI, Query
from fastapi.responses import HTMLResponse, RedirectResponse

from launchpal.mcp.config import mcp_settings
from launchpal.mcp.token_store import TokenStore, build_token
from launchpal.shared.logging import get_logger

logger = get_logger("mcp.local_auth", stream=sys.stderr)

PH_SCOPES = "public private write"

_PAGE = """<!DOCTYPE html><html><head><title>{title}</title>
<style>
body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 600px; margin: 100px auto; padding: 20px; }}
.status {{ padding: 15px; border-radius: 8px; margin-bottom: 20px; }}
.ok {{ background: #d4edda; color: #155724; }}
.no {{ background: #f8d7da; color: #721c24; }}
.button {{ display: inline-block; padding: 12px 24px; background: #da552f; color: white; text-decoration: none; border-radius: 6px; }}
</style></head><body>{body}</body></html>"""


def _page(title: str, body: str, status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(_PAGE.format(title=escape(title), body=body), status_code=status_code)


def create_auth_app(
    store: TokenStore,
    client_id: Optional[str] = None,
    client_secret: Optional[str] = None,
    redirect_uri: Optional[str] = None,
    state: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    client_id = client_id or mcp_settings.PRODUCTHUNT_CLIENT_ID
    client_secret = client_secret or mcp_settings.PRODUCTHUNT_CLIENT_SECRET
    redirect_uri = redirect_uri or mcp_settings.AUTH_REDIRECT_URI
    auth_state = state or secrets.token_hex(32)

    app = FastAPI(title="LaunchPal Product Hunt Login", docs_url=None, redoc_url=None)

    @app.get("/", response_class=HTMLResponse)
    async def index():
        if await store.get_access_token():
            body = (
                "<h1>LaunchPal Authentication</h1>"
                '<div class="status ok">You are authenticated with Product Hunt</div>'
                '<a class="button" href="/logout">Logout</a> <a class="button" href="/status">View Status</a>'
            )
        else:
            body = (
                "<h1>LaunchPal Authentication</h1>"
                '<div class="status no">Not authenticated. Please login to continue.</div>'
                '<a class="button" href="/auth">Login with Product Hunt</a>'
            )
        return _page("LaunchPal - Product Hunt Authentication", body)

    @app.get("/auth")
    def start_auth():
        query = urlencode(
            {
                "client_id": client_id,
                "redirect_uri": redirect_uri,
                "response_type": "code",
                "scope": PH_SCOPES,
                "state": auth_state,
            }
        )
        return RedirectResponse(f"{mcp_settings.PRODUCTHUNT_AUTHORIZE_URL}?{query}", status_code=302)

    @app.get("/callback", response_class=HTMLResponse)
    async def callback(code: str | None = Query(None), state: str | None = Query(None)):
        if state != auth_state:
            return _page("Authentication Failed", "<p>Invalid state parameter</p>", 400)
        if not code:
            return _page("Authentication Failed", "<p>No authorization code received</p>", 400)

        async with httpx.AsyncClient(timeout=mcp_settings.HTTP_TIMEOUT_SECONDS, transport=transport) as client:
            try:
                resp = await client.post(
                    mcp_settings.PRODUCTHUNT_TOKEN_URL,
                    json={
                        "client_id": client_id,
                        "client_secret": client_secret,
                        "redirect_uri": redirect_uri,
                        "grant_type": "authorization_code",
                        "code": code,
                    },
                )
            except httpx.RequestError as e:
                logger.error(f"Token exchange failed: {e}")
                return _page("Authentication Failed", "<p>Authentication failed. Please try again.</p>", 500)

        if resp.status_code >= 400:
            logger.error(f"Token exchange failed (HTTP {resp.status_code})")
            return _page("Authentication Failed", "<p>Authentication failed. Please try again.</p>", 500)

        store.save(build_token(resp.json()))
        logger.info("Product Hunt login complete")
        return _page(
            "Authentication Successful",
            "<h1>Authentication Successful!</h1><p>You're now connected to Product Hunt</p>"
            "<p>You can now close this window and return to LaunchPal MCP.</p>",
        )

    @app.get("/logout")
    def logout():
        store.clear()
        return RedirectResponse("/", status_code=302)

    @app.get("/status")
    def status():
        info = store.info()
        return {
            "authenticated": info["authenticated"],
            "hasToken": store.load() is not None,
            "tokenCreatedAt": info.get("createdAt"),
            "tokenExpiresAt": info.get("expiresAt"),
            "scopes": info.get("scopes"),
        }

    return app


class LocalAuthServer:
    """Runs the login app on 127.0.0.1 in a daemon thread."""

    def __init__(self, store: TokenStore, port: Optional[int] = None):
        self.port = port or mcp_settings.AUTH_PORT
        self.app = create_auth_app(store)
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def url(self) -> str:
        return f"http://localhost:{self.port}"

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        config = uvicorn.Config(self.app, host="127.0.0.1", port=self.port, log_level="warning")
        self._server = uvicorn.Server(config)
        self._thread = threading.Thread(target=self._server.run, name="launchpal-auth", daemon=True)
        self._thread.start()
        logger.info(f"Auth server listening on {self.url}")

    def stop(self) -> None:
        if self._server:
            self._server.should_exit = True
        if self._thread:
            self._thread.join(timeout=5)
        self._server = None
        self._thread = None
