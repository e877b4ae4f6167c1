"""Origin checking for state-changing requests."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.config import settings

logger = logging.getLogger(__name__)

UNSAFE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class CSRFProtectionMiddleware(BaseHTTPMiddleware):
    """Reject cookie-authenticated writes coming from origins we do not serve.

    Requests without an Origin header (same-origin navigations, non-browser
    clients) pass through.
    """

    def __init__(self, app, allowed_origins: list[str] | None = None):
        super().__init__(app)
        self.allowed_origins = set(
            settings.cors_origins if allowed_origins is None else allowed_origins
        )

    async def dispatch(self, request: Request, call_next):
        if request.method in UNSAFE_METHODS:
            origin = request.headers.get("origin")
            if origin and origin not in self.allowed_origins:
                logger.warning(f"Blocked {request.method} {request.url.path} from origin {origin}")
                return JSONResponse(
                    status_code=403,
                    content={"detail": "CSRF validation failed: invalid origin"},
                )
        return await call_next(request)
