# launchpal/main.py

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi

from launchpal.shared.config import settings
from launchpal.shared.db import Base, engine
from launchpal.shared.errors import (
    LaunchPalError,
    OAuthError,
    launchpal_error_handler,
    oauth_error_handler,
    global_exception_handler,
)
from launchpal.shared.logging import get_logger
from launchpal.shared.middleware import RequestTrackingMiddleware
from launchpal.scheduler.jobs import start_scheduler, stop_scheduler

# import models so they register with Base.metadata
from launchpal.auth import models as auth_models  # noqa: F401
from launchpal.usage import models as usage_models  # noqa: F401
from launchpal.platforms import models as platforms_models  # noqa: F401
from launchpal.products import models as products_models  # noqa: F401
from launchpal.launches import models as launches_models  # noqa: F401
from launchpal.analytics import models as analytics_models  # noqa: F401
from launchpal.oauth import models as oauth_models  # noqa: F401

# Routers Import
from launchpal.auth.api import router as auth_router
from launchpal.billing.api import router as billing_router
from launchpal.usage.api import router as usage_router
from launchpal.platforms.api import router as platforms_router
from launchpal.products.api import router as products_router
from launchpal.launches.api import router as launches_router
from launchpal.oauth.api import router as oauth_router
from launchpal.analytics.api import router as analytics_router

logger = get_logger("main")

TAGS_METADATA = [
    {"name": "Auth", "description": "Register, login, API keys"},
    {"name": "OAuth", "description": "Authorization code + PKCE for third-party clients"},
    {"name": "Platforms", "description": "Connect launch platforms, trending lists"},
    {"name": "Products", "description": "Products created on connected platforms"},
    {"name": "Launches", "description": "Schedule launches, status, cancel, metrics, analytics"},
    {"name": "Analytics", "description": "Launch timing, strategy, checklist"},
    {"name": "Usage", "description": "Metering, month-to-date or by date range"},
    {"name": "Billing", "description": "Plans, checkout, subscription"},
    {"name": "Health", "description": "Service health"},
]

PUBLIC_PATHS = {
    "/healthz",
    "/auth/register",
    "/auth/login",
    "/billing/plans",
    "/billing/webhook",
    "/oauth/authorize",
    "/oauth/token",
    "/oauth/register",
    "/.well-known/oauth-authorization-server",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info(f"LaunchPal starting up (env: {settings.ENV})")
    Base.metadata.create_all(bind=engine)
    start_scheduler()
    yield
    stop_scheduler()
    logger.info("LaunchPal shut down")


app = FastAPI(
    title="LaunchPal",
    version="2.0.0",
    description="Schedule and track product launches across platforms.",
    openapi_tags=TAGS_METADATA,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestTrackingMiddleware)

app.add_exception_handler(OAuthError, oauth_error_handler)
app.add_exception_handler(LaunchPalError, launchpal_error_handler)
app.add_exception_handler(Exception, global_exception_handler)


@app.get("/healthz", tags=["Health"])
def healthz():
    return {"ok": True}


# Mount feature routers
app.include_router(auth_router)
app.include_router(oauth_router)
app.include_router(platforms_router)
app.include_router(products_router)
app.include_router(launches_router)
app.include_router(analytics_router)
app.include_router(usage_router)
app.include_router(billing_router)


# --- Custom OpenAPI: add bearerAuth as the default for everything but the public routes ---
def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
        tags=TAGS_METADATA,
    )
    schema.setdefault("components", {}).setdefault("securitySchemes", {})
    schema["components"]["securitySchemes"]["bearerAuth"] = {
        "type": "http",
        "scheme": "bearer",
        "bearerFormat": "JWT or lp_ API key",
    }
    for path, ops in schema.get("paths", {}).items():
        if path in PUBLIC_PATHS:
            continue
        for op in ops.values():
            op.setdefault("security", [{"bearerAuth": []}])
    app.openapi_schema = schema
    return app.openapi_schema

app.openapi = custom_openapi


def run():
    """Console entry point: serve the API with uvicorn."""
    import os
    import uvicorn

    uvicorn.run(
        "launchpal.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=settings.ENV == "dev",
    )
