"""Rate limiting middleware using SlowAPI."""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import settings

logger = logging.getLogger(__name__)


def get_user_key(request: Request) -> str:
    """Extract user identifier for rate limiting.

    Uses session user_id if authenticated, otherwise falls back to IP address.
    """
    # Set by the get_current_session dependency
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return f"user:{user_id}"

    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_user_key,
    storage_uri=settings.rate_limit_storage_uri,
    default_limits=[f"{settings.rate_limit_general_per_minute}/minute"],
    headers_enabled=True,  # Include X-RateLimit-* headers in responses
    enabled=settings.rate_limit_enabled,
)


def rate_limit_chat():
    """Decorator for the tutor chat endpoint."""
    return limiter.limit(f"{settings.rate_limit_chat_per_minute}/minute")


def rate_limit_upload():
    """Decorator for PDF uploads (extraction is CPU heavy)."""
    return limiter.limit(f"{settings.rate_limit_upload_per_hour}/hour")
