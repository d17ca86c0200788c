"""Core business logic for URL shortener."""

from .shortcode import ShortCodeGenerator
from .service import URLShortenerService, URLPage
from .sweeper import ExpiredURLSweeper

__version__ = "1.0.0"

__all__ = ["ShortCodeGenerator", "URLShortenerService", "URLPage", "ExpiredURLSweeper"]
