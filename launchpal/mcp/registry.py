from typing import TypedDict

class ToolMeta(TypedDict, total=False):
    name: str
    description: str
    input_schema: dict    # JSON Schema for the tool arguments

class PromptMeta(TypedDict):
    name: str
    description: str
    arguments: list[dict]

PLATFORM_IDS = ["producthunt", "hackernews", "reddit", "indiehackers"]
AUDIENCES = ["US", "EU", "ASIA", "GLOBAL"]

_EMPTY = {"type": "object", "properties": {}, "additionalProperties": False}

TOOLS: list[ToolMeta] = [
    # -------- Account ----------
    {
        "name": "authenticate",
        "description": "Authenticate with LaunchPal API using email and password",
        "input_schema": {
            "type": "object",
            "properties": {
                "email": {"type": "string", "description": "Your LaunchPal account email"},
                "password": {"type": "string", "description": "Your LaunchPal account password"},
            },
            "required": ["email", "password"],
        },
    },
    {
        "name": "check_usage",
        "description": "Check your API usage and limits",
        "input_schema": {
            "type": "object",
            "properties": {
                "startDate": {"type": "string", "description": "ISO 8601 start of the usage period (inclusive)"},
                "endDate": {"type": "string", "description": "ISO 8601 end of the usage period (exclusive)"},
            },
        },
    },

    # -------- Platforms ----------
    {
        "name": "connect_platform",
        "description": "Connect a launch platform (Product Hunt, Hacker News, etc.)",
        "input_schema": {
            "type": "object",
            "properties": {
                "platform": {"type": "string", "enum": PLATFORM_IDS, "description": "Platform to connect"},
                "credentials": {
                    "type": "object",
                    "description": "Platform-specific credentials. Omit for producthunt to reuse the browser login token.",
                },
            },
            "required": ["platform"],
        },
    },
    {
        "name": "list_platforms",
        "description": "List available launch platforms and their connection status",
        "input_schema": _EMPTY,
    },
    {
        "name": "get_trending",
        "description": "Get trending products from a platform",
        "input_schema": {
            "type": "object",
            "properties": {
                "platform": {"type": "string", "description": "Platform to get trending from"},
                "period": {"type": "string", "enum": ["day", "week", "month"], "description": "Time period for trending"},
            },
            "required": ["platform"],
        },
    },

    # -------- Products / Launches ----------
    {
        "name": "create_product",
        "description": "Create a product on a connected platform",
        "input_schema": {
            "type": "object",
            "properties": {
                "platform": {"type": "string", "description": "Target platform for the product"},
                "name": {"type": "string", "minLength": 1, "description": "Product name"},
                "tagline": {"type": "string", "minLength": 1, "description": "Product tagline"},
                "description": {"type": "string", "description": "Product description"},
                "website": {"type": "string", "description": "Product website URL"},
                "media": {"type": "array", "items": {"type": "string"}, "description": "Array of media URLs"},
                "topics": {"type": "array", "items": {"type": "string"}, "description": "Product topics/categories"},
            },
            "required": ["platform", "name", "tagline", "description", "website"],
        },
    },
    {
        "name": "schedule_launch",
        "description": "Schedule a product launch",
        "input_schema": {
            "type": "object",
            "properties": {
                "productId": {"type": "string", "description": "Product ID to launch"},
                "scheduledAt": {"type": "string", "description": "ISO 8601 date string for launch time"},
                "options": {"type": "object", "description": "Platform-specific launch options"},
            },
            "required": ["productId", "scheduledAt"],
        },
    },
    {
        "name": "get_launch_metrics",
        "description": "Get metrics for a launch",
        "input_schema": {
            "type": "object",
            "properties": {"launchId": {"type": "string", "description": "Launch ID"}},
            "required": ["launchId"],
        },
    },
    {
        "name": "cancel_launch",
        "description": "Cancel a scheduled launch before it goes live",
        "input_schema": {
            "type": "object",
            "properties": {"launchId": {"type": "string", "description": "Launch ID"}},
            "required": ["launchId"],
        },
    },
    {
        "name": "track_launch",
        "description": "Take a metrics snapshot of a launch and predict where it ends up",
        "input_schema": {
            "type": "object",
            "properties": {
                "launchId": {"type": "string", "description": "Launch ID"},
                "hoursAhead": {"type": "integer", "minimum": 1, "maximum": 168, "description": "Prediction horizon in hours"},
            },
            "required": ["launchId"],
        },
    },
    {
        "name": "generate_launch_report",
        "description": "Summarize a launch: votes, comments, rank, peak hour and prediction",
        "input_schema": {
            "type": "object",
            "properties": {
                "launchId": {"type": "string", "description": "Launch ID"},
                "targetAudience": {"type": "string", "enum": AUDIENCES, "description": "Audience for the timing advice"},
            },
            "required": ["launchId"],
        },
    },

    # -------- Planning ----------
    {
        "name": "optimize_launch_time",
        "description": "Best day and hour to launch for a target audience",
        "input_schema": {
            "type": "object",
            "properties": {
                "category": {"type": "string", "description": "Product category"},
                "targetAudience": {"type": "string", "enum": AUDIENCES, "description": "Primary audience region"},
            },
            "required": ["targetAudience"],
        },
    },
    {
        "name": "create_launch_strategy",
        "description": "Timing, promotion channels and ready-made posts for a product",
        "input_schema": {
            "type": "object",
            "properties": {
                "productId": {"type": "string", "description": "Product ID"},
                "targetAudience": {"type": "string", "enum": AUDIENCES, "description": "Primary audience region"},
            },
            "required": ["productId"],
        },
    },
    {
        "name": "launch_checklist",
        "description": "Pre-launch checklist",
        "input_schema": _EMPTY,
    },

    # -------- Local Product Hunt login ----------
    {
        "name": "login_producthunt",
        "description": "Open browser to login to Product Hunt",
        "input_schema": _EMPTY,
    },
    {
        "name": "logout_producthunt",
        "description": "Logout from Product Hunt",
        "input_schema": _EMPTY,
    },
    {
        "name": "check_auth_status",
        "description": "Check Product Hunt authentication status",
        "input_schema": _EMPTY,
    },
]

PROMPTS: list[PromptMeta] = [
    {
        "name": "launch_strategy",
        "description": "Get a comprehensive launch strategy for your product",
        "arguments": [
            {"name": "product_type", "description": "Type of product (SaaS, mobile app, hardware, etc.)", "required": True},
            {"name": "target_audience", "description": "Primary target audience", "required": True},
        ],
    },
]

def get_tool(name: str) -> ToolMeta | None:
    return next((t for t in TOOLS if t.get("name") == name), None)

def tool_listing() -> list[dict]:
    """Tool descriptors in MCP wire shape."""
    return [
        {"name": t["name"], "description": t["description"], "inputSchema": t["input_schema"]}
        for t in TOOLS
    ]
