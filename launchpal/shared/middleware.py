import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from launchpal.shared.logging import get_logger

logger = get_logger("http")


class RequestTrackingMiddleware(BaseHTTPMiddleware):
    """
    Adds a correlation ID (X-Request-ID) and logs request timing.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id
        start_time = time.time()

        response = await call_next(request)

        process_time = (time.time() - start_time) * 1000
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(round(process_time, 2))
        logger.info(
            "Request completed",
            extra={
                "request_id": request_id,
                "endpoint": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": round(process_time, 2),
            },
        )
        return response
