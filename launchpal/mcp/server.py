"""
LaunchPal MCP Server
====================
MCP tools over stdio. Every tool call is validated against its JSON Schema,
then mapped onto the LaunchPal REST API and rendered as a short text summary.

Usage:
    launchpal-mcp

    # Against a local API with an API key
    LAUNCHPAL_API_URL=http://localhost:8000 LAUNCHPAL_API_KEY=lp_... launchpal-mcp
"""

import asyncio
import sys
import webbrowser
from typing import Any, Awaitable, Callable, Dict, List, Optional

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError

from launchpal.mcp.client import LaunchPalAPI
from launchpal.mcp.config import mcp_settings
from launchpal.mcp.errors import ToolError, INVALID_PARAMS, METHOD_NOT_FOUND
from launchpal.mcp.local_auth import LocalAuthServer
from launchpal.mcp.registry import PROMPTS, tool_listing
from launchpal.mcp.schema_validator import require_valid
from launchpal.mcp.token_store import TokenStore, now_ms
from launchpal.shared.errors import LaunchPalError
from launchpal.shared.logging import get_logger

logger = get_logger("mcp.server", stream=sys.stderr)

SERVER_NAME = "launchpal-mcp"
SERVER_VERSION = "2.0.0"


class LaunchPalMCPServer:
    """Tool and prompt handlers. Transport-free; see ``create_server``."""

    def __init__(
        self,
        api: Optional[LaunchPalAPI] = None,
        tokens: Optional[TokenStore] = None,
        open_browser: Callable[[str], Any] = webbrowser.open,
    ):
        self.api = api or LaunchPalAPI()
        self.tokens = tokens or TokenStore()
        self.open_browser = open_browser
        self.auth_server: Optional[LocalAuthServer] = None
        self.tools: Dict[str, Callable[[Dict], Awaitable[str]]] = {
            "authenticate": self.tool_authenticate,
            "connect_platform": self.tool_connect_platform,
            "list_platforms": self.tool_list_platforms,
            "create_product": self.tool_create_product,
            "schedule_launch": self.tool_schedule_launch,
            "get_launch_metrics": self.tool_get_launch_metrics,
            "cancel_launch": self.tool_cancel_launch,
            "track_launch": self.tool_track_launch,
            "generate_launch_report": self.tool_generate_launch_report,
            "optimize_launch_time": self.tool_optimize_launch_time,
            "create_launch_strategy": self.tool_create_launch_strategy,
            "launch_checklist": self.tool_launch_checklist,
            "get_trending": self.tool_get_trending,
            "check_usage": self.tool_check_usage,
            "login_producthunt": self.tool_login_producthunt,
            "logout_producthunt": self.tool_logout_producthunt,
            "check_auth_status": self.tool_check_auth_status,
        }

    # ── Tools: LaunchPal API ──

    async def tool_authenticate(self, args: Dict) -> str:
        data = await self.api.login(args["email"], args["password"])
        user = data.get("user") or {}
        return (
            f"Successfully authenticated. API Key: {user.get('apiKey')}\n"
            f"Subscription: {user.get('subscription') or 'free'}"
        )

    async def tool_connect_platform(self, args: Dict) -> str:
        platform = args["platform"]
        credentials = args.get("credentials")
        if not credentials and platform == "producthunt":
            token = await self.tokens.get_access_token()
            if not token:
                raise ToolError(
                    "No credentials provided. Use login_producthunt first or pass credentials.",
                    INVALID_PARAMS,
                )
            credentials = {"accessToken": token}
        data = await self.api.post(f"/api/platforms/{platform}/connect", credentials or {})
        return data.get("message") or f"Connected to {platform}"

    async def tool_list_platforms(self, args: Dict) -> str:
        platforms = await self.api.get("/api/platforms")
        lines = "\n".join(
            f"{p['name']} ({p['id']}): {'✓ Connected' if p.get('connected') else '✗ Not connected'}"
            for p in platforms
        )
        return f"Available platforms:\n{lines}"

    async def tool_create_product(self, args: Dict) -> str:
        data = await self.api.post("/api/products", args)
        return f"Product created successfully!\nID: {data['id']}\nURL: {data.get('url')}"

    async def tool_schedule_launch(self, args: Dict) -> str:
        data = await self.api.post("/api/launches", args)
        return f"Launch scheduled!\nID: {data['id']}\nScheduled for: {data['scheduledAt']}"

    async def tool_get_launch_metrics(self, args: Dict) -> str:
        m = await self.api.get(f"/api/launches/{args['launchId']}/metrics")
        return (
            f"Launch Metrics:\nVotes: {m.get('votes')}\nComments: {m.get('comments')}\n"
            f"Rank: {m.get('rank')}\nEngagement: {m.get('engagement')}"
        )

    async def tool_cancel_launch(self, args: Dict) -> str:
        data = await self.api.post(f"/api/launches/{args['launchId']}/cancel")
        return f"Launch {data['id']} cancelled.\nStatus: {data['status']}"

    async def tool_track_launch(self, args: Dict) -> str:
        launch_id = args["launchId"]
        hours = args.get("hoursAhead") or 24
        m = await self.api.get(f"/api/launches/{launch_id}/metrics")
        analytics = await self.api.get(f"/api/launches/{launch_id}/analytics", params={"hoursAhead": hours})
        p = analytics["prediction"]
        return (
            f"Launch Tracking:\nVotes: {m.get('votes')}\nComments: {m.get('comments')}\n"
            f"Rank: {m.get('rank')}\nVelocity: {m.get('velocity')} votes/h\n\n"
            f"Prediction ({hours}h):\n- Votes: {p['predictedVotes']}\n"
            f"- Rank: #{p['predictedRank']}\n- Confidence: {p['confidence']}%"
        )

    async def tool_generate_launch_report(self, args: Dict) -> str:
        params = {"audience": args.get("targetAudience") or "GLOBAL"}
        analytics = await self.api.get(f"/api/launches/{args['launchId']}/analytics", params=params)
        r, p, t = analytics["report"], analytics["prediction"], analytics["optimalTiming"]
        return (
            f"Launch Report: {r.get('productName')}\n\n"
            f"Votes: {r['votes']}\nComments: {r['comments']}\nRank: #{r['rank']}\n"
            f"Peak hour: {r['peakHour']}\nSamples: {r['samples']}\n\n"
            f"Prediction (24h): {p['predictedVotes']} votes, rank #{p['predictedRank']}, "
            f"{p['confidence']}% confidence\n"
            f"Next time: {t['day']} {t['time']}"
        )

    async def tool_optimize_launch_time(self, args: Dict) -> str:
        t = await self.api.get("/api/analytics/timing", params={"audience": args["targetAudience"]})
        return (
            f"Optimal Launch Time:\n\nDay: {t['day']}\nTime: {t['time']} ({t['timezone']})\n"
            f"Reason: {t['reason']}\n\nHistorical Performance:\n"
            f"- Average votes at this time: {t['avgVotes']}\n- Success rate: {t['successRate']}%"
        )

    async def tool_create_launch_strategy(self, args: Dict) -> str:
        params = {"audience": args.get("targetAudience") or "GLOBAL"}
        s = await self.api.get(f"/api/analytics/strategy/{args['productId']}", params=params)
        timing = s["timing"]
        channels = ", ".join(s["promotion"]["channels"])
        posts = "\n\n".join(f"[{channel}]\n{msg}" for channel, msg in s["promotion"]["messages"].items())
        return (
            f"Launch Strategy:\n\nTiming: {timing['day']} {timing['hour']:02d}:00 ({timing['timezone']})\n"
            f"Channels: {channels}\n"
            f"Engagement: reply to comments, thank voters, update every "
            f"{s['engagement']['updateInterval']} minutes\n\n{posts}"
        )

    async def tool_launch_checklist(self, args: Dict) -> str:
        data = await self.api.get("/api/analytics/checklist")
        return "Launch Checklist:\n" + "\n".join(f"☐ {item}" for item in data["items"])

    async def tool_get_trending(self, args: Dict) -> str:
        platform = args["platform"]
        products = await self.api.get(
            "/api/trending", params={"platform": platform, "period": args.get("period") or "day"}
        )
        lines = "\n".join(
            f"{i}. {p.get('name')} - {p.get('tagline')}" for i, p in enumerate(products[:10], start=1)
        )
        return f"Trending on {platform}:\n{lines}"

    async def tool_check_usage(self, args: Dict) -> str:
        usage = await self.api.get("/api/usage", params=args or None)
        return (
            f"API Usage:\nRequests: {usage['totalRequests']}/{usage['limits']['monthlyRequests']}\n"
            f"Cost: ${usage['totalCost']}\nSubscription: {usage['subscription']}"
        )

    # ── Tools: local Product Hunt login ──

    async def tool_login_producthunt(self, args: Dict) -> str:
        if not (mcp_settings.PRODUCTHUNT_CLIENT_ID and mcp_settings.PRODUCTHUNT_CLIENT_SECRET):
            raise ToolError("PRODUCTHUNT_CLIENT_ID and PRODUCTHUNT_CLIENT_SECRET must be set to login")
        if self.auth_server is None:
            self.auth_server = LocalAuthServer(self.tokens)
        self.auth_server.start()
        self.open_browser(self.auth_server.url)

        token = await self.tokens.wait_for_token(mcp_settings.LOGIN_TIMEOUT_SECONDS)
        if token:
            return "✅ Successfully authenticated with Product Hunt! You can now use all features."
        return "❌ Authentication timed out. Please try again."

    async def tool_logout_producthunt(self, args: Dict) -> str:
        self.tokens.clear()
        return "Successfully logged out from Product Hunt."

    async def tool_check_auth_status(self, args: Dict) -> str:
        info = self.tokens.info()
        if not info["authenticated"]:
            return "❌ Not authenticated. Use login_producthunt to authenticate."
        expires_at = info.get("expiresAt")
        if info.get("expired"):
            expires_in = "expired, will refresh"
        elif expires_at:
            expires_in = f"{round((expires_at - now_ms()) / 1000 / 60)} minutes"
        else:
            expires_in = "Never"
        return f"✅ Authenticated\nScopes: {info.get('scopes') or 'N/A'}\nExpires in: {expires_in}"

    # ── Prompts ──

    def get_prompt(self, name: str, args: Optional[Dict[str, str]]) -> types.GetPromptResult:
        if name != "launch_strategy":
            raise ToolError(f"Unknown prompt: {name}", METHOD_NOT_FOUND)
        args = args or {}
        prompt = (
            f"Create a comprehensive launch strategy for a {args.get('product_type')} "
            f"targeting {args.get('target_audience')}. Include platform selection, "
            "timing, messaging, and engagement tactics."
        )
        return types.GetPromptResult(
            messages=[types.PromptMessage(role="user", content=types.TextContent(type="text", text=prompt))]
        )

    # ── Dispatch ──

    async def call_tool(self, name: str, arguments: Dict) -> str:
        require_valid(name, arguments)
        handler = self.tools.get(name)
        if handler is None:
            raise ToolError(f"Unknown tool: {name}", METHOD_NOT_FOUND)
        try:
            return await handler(arguments)
        except LaunchPalError as e:
            raise ToolError(e.message) from e

    async def close(self):
        await self.api.close()
        if self.auth_server:
            self.auth_server.stop()


def create_server(app: Optional[LaunchPalMCPServer] = None) -> Server:
    """Wire the handlers onto an MCP server, ready to run on any transport."""
    app = app or LaunchPalMCPServer()
    server = Server(SERVER_NAME, version=SERVER_VERSION)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return [
            types.Tool(name=t["name"], description=t["description"], inputSchema=t["inputSchema"])
            for t in tool_listing()
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
        # raised errors reach the client as isError results
        try:
            text = await app.call_tool(name, arguments or {})
        except McpError as e:
            logger.info(f"{name} failed: {e.error.message}")
            raise
        except Exception as e:
            logger.error(f"{name} crashed: {e}", exc_info=e)
            raise
        return [types.TextContent(type="text", text=text)]

    @server.list_prompts()
    async def list_prompts() -> List[types.Prompt]:
        return [
            types.Prompt(
                name=p["name"],
                description=p["description"],
                arguments=[types.PromptArgument(**a) for a in p["arguments"]],
            )
            for p in PROMPTS
        ]

    @server.get_prompt()
    async def get_prompt(name: str, arguments: Optional[Dict[str, str]]) -> types.GetPromptResult:
        return app.get_prompt(name, arguments)

    return server


async def run_stdio(app: Optional[LaunchPalMCPServer] = None, stdin=None, stdout=None):
    """Serve on stdin/stdout until the client hangs up.

    ``stdin``/``stdout`` default to the process streams.
    """
    app = app or LaunchPalMCPServer()
    server = create_server(app)
    logger.info(f"LaunchPal MCP server starting (API: {app.api.base_url}, tools: {len(app.tools)})")
    try:
        async with stdio_server(stdin, stdout) as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        await app.close()


def main():
    if mcp_settings.DEBUG:
        logger.setLevel("DEBUG")
    asyncio.run(run_stdio())


if __name__ == "__main__":
    main()
