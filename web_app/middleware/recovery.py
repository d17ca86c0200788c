"""Recovery middleware."""

import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from typing import Callable

from ..errors import error_response, INTERNAL_ERROR, INTERNAL_MESSAGE


class RecoveryMiddleware(BaseHTTPMiddleware):
    """Turn any unhandled exception into a 500 so the server keeps serving."""

    def __init__(self, app, logger: logging.Logger = None):
        super().__init__(app)
        self.logger = logger or logging.getLogger("url_shortener.web")

    async def dispatch(self, request: Request, call_next: Callable):
        try:
            return await call_next(request)
        except Exception:
            self.logger.exception(
                f"Unhandled error in {request.method} {request.url.path}",
                extra={"request_id": getattr(request.state, "request_id", None)},
            )
            return error_response(500, INTERNAL_ERROR, INTERNAL_MESSAGE)
