import logging
from typing import Iterable

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class OriginAllowListMiddleware(BaseHTTPMiddleware):
    """Rejects browser requests whose Origin is not on the allow-list.

    Requests without an Origin header (curl, server-to-server) pass through.
    CORSMiddleware still adds the response headers for allowed origins.
    """

    def __init__(self, app, allowed_origins: Iterable[str]):
        super().__init__(app)
        self.allowed_origins = set(allowed_origins)

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("origin")
        if origin is not None and origin not in self.allowed_origins:
            logger.warning(f"Rejected request from origin {origin!r} to {request.url.path}")
            return JSONResponse(status_code=403, content={"error": "Not allowed by CORS"})
        return await call_next(request)
