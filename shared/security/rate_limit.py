"""
Rate limiting using slowapi (in-memory storage, keyed by client IP).
Protects login and public order endpoints from abuse.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from shared.config.settings import settings
from shared.utils.exceptions import RateLimitError

# Create limiter instance using client IP as key
limiter = Limiter(key_func=get_remote_address)

LOGIN_RATE_LIMIT = f"{settings.login_rate_limit}/minute"
PUBLIC_ORDER_RATE_LIMIT = f"{settings.public_order_rate_limit}/minute"
PUBLIC_READ_RATE_LIMIT = "100/minute"

# Every limit above is per minute
RETRY_AFTER_SECONDS = 60


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with a Retry-After header. The error logs the offending client."""
    error = RateLimitError(
        RETRY_AFTER_SECONDS,
        path=request.url.path,
        ip_address=get_remote_address(request),
        limit=str(exc.detail),
    )
    return JSONResponse(
        status_code=error.status_code,
        content={"detail": error.detail},
        headers=error.headers,
    )
