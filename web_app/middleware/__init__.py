"""Middleware for URL shortener web app."""

from .logging import LoggingMiddleware
from .recovery import RecoveryMiddleware
from .request_id import RequestIDMiddleware, REQUEST_ID_HEADER
from .timeout import TimeoutMiddleware

__all__ = [
    "LoggingMiddleware",
    "RecoveryMiddleware",
    "RequestIDMiddleware",
    "REQUEST_ID_HEADER",
    "TimeoutMiddleware",
]
