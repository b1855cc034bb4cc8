from fastapi import Request
from fastapi.responses import JSONResponse

from launchpal.shared.logging import get_logger

logger = get_logger("errors")


class LaunchPalError(Exception):
    """Base exception for the application"""
    status_code = 400
    code = "bad_request"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFound(LaunchPalError):
    status_code = 404
    code = "not_found"


class Unauthorized(LaunchPalError):
    status_code = 401
    code = "unauthorized"


class Forbidden(LaunchPalError):
    status_code = 403
    code = "forbidden"


class PlatformNotConnected(LaunchPalError):
    code = "platform_not_connected"


class UnsupportedPlatform(LaunchPalError):
    code = "unsupported_platform"


class QuotaExceeded(LaunchPalError):
    status_code = 429
    code = "quota_exceeded"


class PlatformAPIError(LaunchPalError):
    """Raised when a launch platform returns a non-success response."""
    status_code = 502
    code = "platform_api_error"

    def __init__(self, message: str, upstream_status: int = 0):
        self.upstream_status = upstream_status
        super().__init__(message)


class ProductHasLaunches(LaunchPalError):
    status_code = 409
    code = "product_has_launches"


class InvalidLaunchTransition(LaunchPalError):
    status_code = 409
    code = "invalid_launch_transition"


# ---- OAuth family: rendered the RFC 6749 way ----

class OAuthError(LaunchPalError):
    code = "invalid_request"


class InvalidGrant(OAuthError):
    code = "invalid_grant"


class InvalidClient(OAuthError):
    status_code = 401
    code = "invalid_client"


class UnsupportedGrantType(OAuthError):
    code = "unsupported_grant_type"


class InvalidScope(OAuthError):
    code = "invalid_scope"


async def launchpal_error_handler(request: Request, exc: LaunchPalError):
    request_id = getattr(request.state, "request_id", "unknown")
    logger.info(
        f"{type(exc).__name__}: {exc.message}",
        extra={"request_id": request_id, "endpoint": request.url.path, "status_code": exc.status_code},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "code": exc.code, "request_id": request_id},
    )


async def oauth_error_handler(request: Request, exc: OAuthError):
    logger.info(f"oauth error {exc.code}: {exc.message}", extra={"endpoint": request.url.path})
    headers = {"Cache-Control": "no-store"}
    if isinstance(exc, InvalidClient):
        headers["WWW-Authenticate"] = "Basic"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "error_description": exc.message},
        headers=headers,
    )


async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler. Hides internal error details outside dev.
    """
    from launchpal.shared.config import settings

    request_id = getattr(request.state, "request_id", "unknown")
    logger.error(
        "Unhandled exception occurred",
        extra={"request_id": request_id, "endpoint": request.url.path},
        exc_info=exc,
    )
    detail = str(exc) if settings.ENV == "dev" else "An unexpected error occurred."
    return JSONResponse(
        status_code=500,
        content={"error": detail, "code": "internal_error", "request_id": request_id},
    )
