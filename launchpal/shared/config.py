# launchpal/shared/config.py
from pydantic import BaseModel
import os

class Settings(BaseModel):
    ENV: str = os.getenv("ENV", "dev")
    DATABASE_URL: str | None = os.getenv("DATABASE_URL")
    PUBLIC_BASE_URL: str = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:8080,https://launch.getfoundry.app")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # JWT settings (login + OAuth bearer tokens)
    JWT_KEY: str = os.getenv("JWT_KEY", "dev-secret")
    JWT_ALG: str = os.getenv("JWT_ALG", "HS256")
    JWT_ISS: str | None = os.getenv("JWT_ISS")
    JWT_AUD: str | None = os.getenv("JWT_AUD")
    JWT_EXPIRE_MIN: int = int(os.getenv("JWT_EXPIRE_MIN", "60"))

    # OAuth authorization server
    OAUTH_CODE_TTL_SECONDS: int = int(os.getenv("OAUTH_CODE_TTL_SECONDS", "600"))
    OAUTH_REFRESH_EXPIRE_DAYS: int = int(os.getenv("OAUTH_REFRESH_EXPIRE_DAYS", "30"))
    OAUTH_DEFAULT_SCOPES: str = os.getenv("OAUTH_DEFAULT_SCOPES", "read write")

    # Product Hunt
    PRODUCTHUNT_API_URL: str = os.getenv("PRODUCTHUNT_API_URL", "https://api.producthunt.com/v2/api/graphql")
    PRODUCTHUNT_TOKEN_URL: str = os.getenv("PRODUCTHUNT_TOKEN_URL", "https://api.producthunt.com/v2/oauth/token")
    PRODUCTHUNT_POST_URL: str = os.getenv("PRODUCTHUNT_POST_URL", "https://www.producthunt.com/posts")
    HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))

    # Background jobs (off by default; an external trigger usually drives them)
    SCHEDULER_ENABLED: bool = os.getenv("SCHEDULER_ENABLED", "false").lower() == "true"
    SCHEDULER_LAUNCH_INTERVAL_MIN: int = int(os.getenv("SCHEDULER_LAUNCH_INTERVAL_MIN", "1"))
    SCHEDULER_METRICS_INTERVAL_MIN: int = int(os.getenv("SCHEDULER_METRICS_INTERVAL_MIN", "30"))

    # Billing
    BILLING_CHECKOUT_URL: str = os.getenv("BILLING_CHECKOUT_URL", "https://checkout.stripe.com/mock")
    BILLING_WEBHOOK_SECRET: str | None = os.getenv("BILLING_WEBHOOK_SECRET")

settings = Settings()
