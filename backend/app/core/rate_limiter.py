"""
Rate limiting (slowapi)

Counters live in Redis when REDIS_URL is set, otherwise in process memory.
Authenticated callers are keyed by user id, anonymous ones by client address.
Login endpoints (web, mobile and biometric) share a stricter per-address limit.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.logging_config import logger


LOGIN_LIMIT = "5/minute"
RETRY_AFTER_SECONDS = 60

# user_role values set on request.state by the auth dependency
ROLE_TIERS = {
    "super_admin": "admin",
    "school_admin": "staff",
    "staff": "staff",
    "student": "portal",
    "parent": "portal",
}


def get_user_identifier(request: Request) -> str:
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_remote_address(request)}"


def get_rate_limit_tier(request: Request) -> str:
    return ROLE_TIERS.get(getattr(request.state, "user_role", None), "anonymous")


limiter = Limiter(
    key_func=get_user_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute", f"{settings.RATE_LIMIT_PER_HOUR}/hour"],
    storage_uri=settings.rate_limit_storage_uri,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """429 in the standard error envelope, with Retry-After"""
    logger.warning(
        f"[RateLimit] {get_user_identifier(request)} exceeded {exc.detail} on {request.url.path}",
        extra={"event_type": "rate_limit_exceeded", "http_path": request.url.path}
    )
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": {
                "code": "RATE_LIMIT_EXCEEDED",
                "message": "Too many requests. Please slow down.",
                "details": {
                    "limit": str(exc.detail),
                    "retry_after_seconds": RETRY_AFTER_SECONDS,
                    "tier": get_rate_limit_tier(request),
                },
            },
        },
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )


def auth_rate_limit():
    """Per-address limit for credential endpoints"""
    return limiter.limit(LOGIN_LIMIT, key_func=get_remote_address)
