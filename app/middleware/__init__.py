"""Request validation and protection middleware."""

from app.middleware.csrf import CSRFProtectionMiddleware
from app.middleware.rate_limit import get_user_key, limiter, rate_limit_chat, rate_limit_upload
from app.middleware.size_limit import RequestSizeLimitMiddleware

__all__ = [
    "CSRFProtectionMiddleware",
    "RequestSizeLimitMiddleware",
    "get_user_key",
    "limiter",
    "rate_limit_chat",
    "rate_limit_upload",
]
