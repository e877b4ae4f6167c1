"""Request body size limit middleware."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.config import settings

logger = logging.getLogger(__name__)

# Routes that accept multipart PDF bodies
UPLOAD_PATHS = ("/api/documents",)


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject oversized bodies using the Content-Length header.

    PDF uploads get the large ceiling. Every other route carries small
    JSON payloads and gets ``max_json_size``.
    """

    def __init__(
        self,
        app,
        max_size: int | None = None,
        max_json_size: int | None = None,
        upload_paths: tuple[str, ...] = UPLOAD_PATHS,
    ):
        super().__init__(app)
        self.max_size = max_size or settings.max_request_size_bytes
        self.max_json_size = max_json_size or settings.max_json_request_size_bytes
        self.upload_paths = upload_paths

    def limit_for(self, request: Request) -> int:
        if request.method == "POST" and request.url.path.rstrip("/") in self.upload_paths:
            return self.max_size
        return self.max_json_size

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if not content_length:
            return await call_next(request)

        try:
            size = int(content_length)
        except ValueError:
            # Malformed header, let the server reject it
            return await call_next(request)

        limit = self.limit_for(request)
        if size > limit:
            logger.warning(
                f"Rejected {request.method} {request.url.path}: "
                f"{size} bytes exceeds limit of {limit}"
            )
            return JSONResponse(
                status_code=413,
                content={"detail": f"Request body exceeds maximum size of {limit} bytes"},
            )

        return await call_next(request)
