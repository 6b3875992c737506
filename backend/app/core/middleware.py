"""
Academia Pro - HTTP Middleware

Request correlation and timing, security headers and body size limits.
"""

import time
from typing import Callable, Set
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse
from starlette.types import ASGIApp

from app.core.logging_config import logger, bind_context, clear_context, generate_request_id


# Probes and docs are not worth a log line per hit
QUIET_PATHS: Set[str] = {
    "/",
    "/health",
    "/api/v1/health",
    "/api/v1/health/live",
    "/api/v1/health/ready",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/favicon.ico",
}

SLOW_REQUEST_THRESHOLD_MS = 1000


def is_quiet_path(path: str) -> bool:
    return path in QUIET_PATHS


def status_log_level(status_code: int) -> str:
    if status_code >= 500:
        return "error"
    if status_code >= 400:
        return "warning"
    return "info"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Correlates and times every request.

    Honours an incoming X-Request-ID (the mobile apps send one per sync) and
    echoes it with X-Response-Time. The acting user and school are bound to
    the log context later, by the auth dependencies, so completion lines carry
    the tenant.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        bind_context(request_id=request_id)

        path = request.url.path
        quiet = is_quiet_path(path)
        started = time.perf_counter()

        if not quiet:
            logger.debug(
                f"→ {request.method} {path}",
                extra={
                    "http_method": request.method,
                    "http_path": path,
                    "client_ip": request.client.host if request.client else "unknown",
                    "user_agent": request.headers.get("user-agent", ""),
                }
            )

        try:
            response = await call_next(request)
        except Exception as exc:
            duration_ms = (time.perf_counter() - started) * 1000
            logger.error(
                f"✗ {request.method} {path} - {type(exc).__name__} ({duration_ms:.2f}ms)",
                exc_info=True,
                extra={"http_method": request.method, "http_path": path, "duration_ms": duration_ms}
            )
            raise
        else:
            duration_ms = (time.perf_counter() - started) * 1000
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

            if not quiet:
                getattr(logger, status_log_level(response.status_code))(
                    f"← {request.method} {path} - {response.status_code} ({duration_ms:.2f}ms)",
                    extra={
                        "http_method": request.method,
                        "http_path": path,
                        "http_status": response.status_code,
                        "duration_ms": duration_ms,
                    }
                )
                if duration_ms > SLOW_REQUEST_THRESHOLD_MS:
                    logger.log_performance(f"{request.method} {path}", duration_ms,
                                           threshold_ms=SLOW_REQUEST_THRESHOLD_MS)
            return response
        finally:
            clear_context()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Headers applied to every response; student records must never be cached"""

    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Cache-Control": "no-store",
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for header, value in self.HEADERS.items():
            response.headers.setdefault(header, value)
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Rejects bodies over max_size bytes with 413 before they are read"""

    def __init__(self, app: ASGIApp, max_size: int = 10 * 1024 * 1024):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_size:
            logger.warning(
                f"Request body too large: {content_length} bytes (max: {self.max_size}) on {request.url.path}"
            )
            return JSONResponse(
                status_code=413,
                content={
                    "success": False,
                    "error": {
                        "code": "PAYLOAD_TOO_LARGE",
                        "message": f"Request body exceeds {self.max_size // 1024 // 1024}MB",
                        "details": {"max_size": self.max_size},
                    },
                }
            )
        return await call_next(request)


__all__ = [
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "RequestSizeLimitMiddleware",
    "is_quiet_path",
]
