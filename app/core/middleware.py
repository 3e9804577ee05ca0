"""
Middleware for request logging and tracking
"""
import uuid
import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from app.core.logging_config import get_logger, request_id_context

logger = get_logger(__name__)

# Paths that are polled often and not worth a log line
QUIET_PATHS = {"/", "/health", "/health/detailed", "/docs", "/openapi.json", "/redoc"}

class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag every request with an ID, echo it back and log the outcome"""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_context.set(request_id)

        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception:
            duration = time.time() - start_time
            logger.error(
                f"{request.method} {request.url.path} - Exception - {duration:.3f}s",
                exc_info=True
            )
            raise
        finally:
            request_id_context.reset(token)

        duration = time.time() - start_time
        response.headers["X-Request-ID"] = request_id

        path = request.url.path
        if path not in QUIET_PATHS:
            status_code = response.status_code
            if status_code >= 500:
                log = logger.error
            elif status_code >= 400:
                log = logger.warning
            else:
                log = logger.info
            log(
                f"{request.method} {path} - {status_code} - {duration:.3f}s",
                extra={"request_id": request_id}
            )

        return response
