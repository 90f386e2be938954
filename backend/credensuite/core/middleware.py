"""
CredenSuite - HTTP middleware: request context and logging, security headers, body size cap
"""

import time
from typing import Callable, Dict, Tuple

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from credensuite.core.logging_config import (
    bind_request_context,
    clear_request_context,
    generate_request_id,
    logger,
)

REQUEST_ID_HEADER = "X-Request-ID"
ACTOR_HEADER = "X-Actor-Email"

QUIET_PATHS = frozenset({"/", "/health", "/favicon.ico", "/docs", "/redoc", "/openapi.json"})
QUIET_PREFIXES: Tuple[str, ...] = ("/uploads/", "/api/v1/health")


def should_skip_logging(path: str) -> bool:
    """Health checks, docs and static uploads are not logged per request"""
    return path in QUIET_PATHS or path.startswith(QUIET_PREFIXES)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Binds the request id and forwarded actor to the logging context, logs one
    line per request and returns ``X-Request-ID`` / ``X-Response-Time``.
    """

    def __init__(self, app: ASGIApp, slow_request_ms: float = 1000):
        super().__init__(app)
        self.slow_request_ms = slow_request_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
        bind_request_context(request_id=request_id, actor=request.headers.get(ACTOR_HEADER, ""))
        path = request.url.path
        quiet = should_skip_logging(path)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.log_error_with_context(
                exc,
                f"{request.method} {path}",
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise
        else:
            duration_ms = (time.perf_counter() - started) * 1000
            response.headers[REQUEST_ID_HEADER] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
            if not quiet:
                logger.log_request(
                    request.method,
                    path,
                    response.status_code,
                    duration_ms,
                    client_ip=request.client.host if request.client else None,
                )
                if duration_ms > self.slow_request_ms:
                    logger.warning(f"Slow request {request.method} {path}: {duration_ms:.0f}ms")
            return response
        finally:
            clear_request_context()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Hardening headers on every response. The badge HTML preview may be framed
    by the admin UI on the same origin; everything else may not be framed.
    """

    COMMON_HEADERS: Dict[str, str] = {
        "X-Content-Type-Options": "nosniff",
        "Referrer-Policy": "strict-origin-when-cross-origin",
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers.update(self.COMMON_HEADERS)
        if request.url.path.endswith("/id-card.html"):
            response.headers["Content-Security-Policy"] = "frame-ancestors 'self'"
        else:
            response.headers["X-Frame-Options"] = "DENY"
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Rejects bodies whose declared Content-Length exceeds ``max_size`` with 413"""

    def __init__(self, app: ASGIApp, max_size: int = 10 * 1024 * 1024):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_size:
            logger.warning(
                f"Rejected {declared}-byte body on {request.url.path} (limit {self.max_size})",
                extra={"event_type": "request_too_large", "http_path": request.url.path},
            )
            return JSONResponse(
                status_code=413,
                content={
                    "success": False,
                    "error": {
                        "code": "REQUEST_TOO_LARGE",
                        "message": f"Request body exceeds {self.max_size} bytes",
                        "details": {"max_size": self.max_size},
                    },
                },
            )
        return await call_next(request)


__all__ = [
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "RequestSizeLimitMiddleware",
    "should_skip_logging",
    "ACTOR_HEADER",
    "REQUEST_ID_HEADER",
]
