"""Database layer for URL shortener."""

from .base import URLShortenerDBBase
from .postgres import URLShortenerPostgres
from .models import ShortURL, utc_now

__all__ = ["URLShortenerDBBase", "URLShortenerPostgres", "ShortURL", "utc_now"]
