"""
Rate Limiting for the CredenSuite API
=====================================
Implements rate limiting using slowapi with in-memory storage.

Only the badge PDF endpoint is limited: every call launches a headless
Chromium, which is by far the most expensive operation the service performs.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from credensuite.core.config import settings
from credensuite.core.logging_config import logger


def get_client_identifier(request: Request) -> str:
    """
    Get rate limit key for the caller.

    Priority:
    1. Actor email forwarded by the auth gateway
    2. IP address
    """
    actor = request.headers.get("X-Actor-Email")
    if actor:
        return f"actor:{actor.lower()}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_client_identifier,
    enabled=settings.RATE_LIMIT_ENABLED,
    storage_uri="memory://",
    strategy="fixed-window",
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """
    Custom handler for rate limit exceeded errors.

    Returns the standard error envelope with a Retry-After header.
    """
    logger.warning(
        f"[RateLimit] Exceeded for {get_client_identifier(request)}: {exc.detail}",
        extra={"event_type": "rate_limit_exceeded", "http_path": request.url.path},
    )

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": {
                "code": "RATE_LIMIT_EXCEEDED",
                "message": "Too many requests. Please slow down.",
                "details": {"limit": str(exc.detail)},
            },
        },
        headers={"Retry-After": "60"},
    )


def pdf_rate_limit():
    """Rate limit for badge PDF generation (PDF_RATE_LIMIT, default 30/min)"""
    return limiter.limit(settings.PDF_RATE_LIMIT, key_func=get_client_identifier)
