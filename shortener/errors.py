"""Domain errors for URL shortener.

Every failure the engine can report is one of the classes below. The HTTP
layer maps each of them to a fixed status code and error token, so new kinds
must also be registered in ``web_app/errors.py``.
"""

from typing import Optional


class ShortenerError(Exception):
    """Base class for all URL shortener errors."""

    default_message = "url shortener error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ShortURLNotFoundError(ShortenerError):
    """No record exists for the requested short code."""

    default_message = "url not found"


class ShortURLExpiredError(ShortenerError):
    """The record exists but its expiry has passed (redirect reads only)."""

    default_message = "url has expired"


class InvalidInputError(ShortenerError):
    """Malformed caller input."""

    default_message = "invalid input"


class InvalidURLError(InvalidInputError):
    """The original URL is not an absolute http(s) URL with a host."""

    default_message = "invalid url"


class InvalidShortCodeError(InvalidInputError):
    """A custom short code has the wrong length or characters."""

    default_message = "invalid short code"


class ShortCodeAlreadyExistsError(ShortenerError):
    """The short code is already taken (unique constraint violation)."""

    default_message = "short code already exists"


class GenerationExhaustedError(ShortenerError):
    """No free short code was found within the attempt budget."""

    default_message = "failed to generate a unique short code"


class CodeGenerationError(ShortenerError):
    """The secure random source failed or ran dry."""

    default_message = "failed to generate random code"


class StoreUnavailableError(ShortenerError):
    """The database could not be reached or did not answer in time."""

    default_message = "database unavailable"


class StorageError(ShortenerError):
    """Any other database failure."""

    default_message = "database error"
