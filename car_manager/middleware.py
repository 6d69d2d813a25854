"""
Middleware components for request handling and logging.

Provides middleware for request tracing, logging, static file caching
and performance monitoring.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .logging_config import clear_request_id, get_logger, set_request_id

logger = get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for request and response logging.

    Binds a request ID (taken from the X-Request-ID header or generated) to
    every log line emitted while the request is handled and echoes it back
    in the response headers.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_id(request.headers.get("X-Request-ID"))

        start_time = time.perf_counter()

        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            query_params=str(request.query_params),
            client_host=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start_time) * 1000
            response.headers["X-Request-ID"] = request_id

            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )

            return response
        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                duration_ms=round(duration_ms, 2),
                error=str(exc),
            )
            raise
        finally:
            clear_request_id()


class StaticFileCacheMiddleware(BaseHTTPMiddleware):
    """
    Middleware for adding cache-control headers to static files.
    """

    # Cache durations for different file types (in seconds)
    CACHE_DURATIONS = {
        ".css": 86400,  # 1 day
        ".js": 86400,  # 1 day
        ".png": 604800,  # 7 days
        ".jpg": 604800,  # 7 days
        ".svg": 604800,  # 7 days
        ".ico": 604800,  # 7 days
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        path = request.url.path
        if path.startswith("/static/"):
            for ext, duration in self.CACHE_DURATIONS.items():
                if path.endswith(ext):
                    response.headers["Cache-Control"] = f"public, max-age={duration}"
                    response.headers["Vary"] = "Accept-Encoding"
                    break
            else:
                response.headers["Cache-Control"] = "public, max-age=3600"

        return response


class PerformanceMonitoringMiddleware(BaseHTTPMiddleware):
    """
    Middleware for monitoring request performance.

    Logs a warning for requests exceeding the configured threshold.
    """

    def __init__(
        self,
        app: ASGIApp,
        slow_request_threshold_ms: float = 1000.0,
    ) -> None:
        """
        Initialize performance monitoring middleware.

        Args:
            app: ASGI application instance
            slow_request_threshold_ms: Threshold in milliseconds for slow requests
        """
        super().__init__(app)
        self.slow_request_threshold_ms = slow_request_threshold_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        if duration_ms > self.slow_request_threshold_ms:
            logger.warning(
                "Slow request detected",
                method=request.method,
                path=request.url.path,
                duration_ms=round(duration_ms, 2),
                threshold_ms=self.slow_request_threshold_ms,
            )

        return response
