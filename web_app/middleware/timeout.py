"""Request timeout middleware."""

import asyncio
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from typing import Callable

from ..errors import error_response


class TimeoutMiddleware(BaseHTTPMiddleware):
    """Answer 504 when a request runs longer than ``timeout_seconds``."""

    def __init__(self, app, timeout_seconds: float = 60, logger: logging.Logger = None):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds
        self.logger = logger or logging.getLogger("url_shortener.web")

    async def dispatch(self, request: Request, call_next: Callable):
        try:
            return await asyncio.wait_for(call_next(request), self.timeout_seconds)
        except asyncio.TimeoutError:
            self.logger.warning(
                f"Request timed out after {self.timeout_seconds}s: {request.method} {request.url.path}",
                extra={"request_id": getattr(request.state, "request_id", None)},
            )
            return error_response(504, "timeout", "request timed out")
