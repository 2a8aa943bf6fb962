import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

QUIET_PATHS = frozenset({"/api/health"})


class LoggingMiddleware(BaseHTTPMiddleware):
    """One line per API request: method, path, status, duration and client host."""

    def __init__(self, app, slow_request_seconds: float = 2.0):
        super().__init__(app)
        self.slow_request_seconds = slow_request_seconds

    async def dispatch(self, request: Request, call_next):
        start = time.monotonic()
        response = await call_next(request)
        elapsed = time.monotonic() - start

        if response.status_code >= 500:
            level = logging.ERROR
        elif elapsed >= self.slow_request_seconds:
            level = logging.WARNING
        elif request.url.path in QUIET_PATHS:
            level = logging.DEBUG
        else:
            level = logging.INFO

        logger.log(
            level,
            "%s %s -> %s (%.3fs) client=%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
            request.client.host if request.client else "-",
        )
        return response
