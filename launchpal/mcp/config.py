# launchpal/mcp/config.py
from pydantic import BaseModel
import os

class MCPSettings(BaseModel):
    # REST API the tools call
    LAUNCHPAL_API_URL: str = os.getenv("LAUNCHPAL_API_URL", "https://launch.getfoundry.app")
    LAUNCHPAL_API_KEY: str | None = os.getenv("LAUNCHPAL_API_KEY")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))

    # Local Product Hunt login helper
    LAUNCHPAL_TOKEN_PATH: str = os.getenv("LAUNCHPAL_TOKEN_PATH", ".auth/tokens.json")
    AUTH_PORT: int = int(os.getenv("AUTH_PORT", "8080"))
    AUTH_REDIRECT_URI: str = os.getenv("AUTH_REDIRECT_URI", "http://localhost:8080/callback")
    LOGIN_TIMEOUT_SECONDS: int = int(os.getenv("LOGIN_TIMEOUT_SECONDS", "120"))
    PRODUCTHUNT_CLIENT_ID: str = os.getenv("PRODUCTHUNT_CLIENT_ID", "")
    PRODUCTHUNT_CLIENT_SECRET: str = os.getenv("PRODUCTHUNT_CLIENT_SECRET", "")
    PRODUCTHUNT_AUTHORIZE_URL: str = os.getenv("PRODUCTHUNT_AUTHORIZE_URL", "https://www.producthunt.com/v2/oauth/authorize")
    PRODUCTHUNT_TOKEN_URL: str = os.getenv("PRODUCTHUNT_TOKEN_URL", "https://api.producthunt.com/v2/oauth/token")

mcp_settings = MCPSettings()
