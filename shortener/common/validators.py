"""Validation utilities for URL shortener."""

import re
from urllib.parse import urlparse
from typing import Tuple


SHORT_CODE_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")

MIN_SHORT_CODE_LENGTH = 3
MAX_SHORT_CODE_LENGTH = 20


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a URL.

    Args:
        url: The URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required"

    # urlparse strips these before parsing, so check the raw string
    if any(ord(ch) < 0x20 or ord(ch) == 0x7f for ch in url):
        return False, "URL must not contain control characters"

    if url != url.strip():
        return False, "URL must not start or end with whitespace"

    try:
        result = urlparse(url)
        # hostname and port raise on malformed netlocs such as "[::1" or ":99999"
        host = result.hostname
        result.port
    except ValueError as e:
        return False, f"Invalid URL format: {e}"

    if result.scheme not in ("http", "https"):
        return False, "URL must use http or https protocol"

    if not host:
        return False, "URL must have a valid host"

    if any(ch.isspace() for ch in result.netloc):
        return False, "URL host must not contain whitespace"

    return True, ""


def is_valid_short_code(
    short_code: str,
    min_length: int = MIN_SHORT_CODE_LENGTH,
    max_length: int = MAX_SHORT_CODE_LENGTH,
) -> Tuple[bool, str]:
    """Validate a custom short code.

    Args:
        short_code: The short code to validate
        min_length: Minimum length for short code
        max_length: Maximum length for short code

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not short_code or not isinstance(short_code, str):
        return False, "Short code is required"

    if len(short_code) < min_length:
        return False, f"Short code must be at least {min_length} characters"

    if len(short_code) > max_length:
        return False, f"Short code must be at most {max_length} characters"

    # Only allow alphanumeric characters, hyphens, and underscores
    if not SHORT_CODE_PATTERN.fullmatch(short_code):
        return False, "Short code can only contain letters, numbers, hyphens, and underscores"

    return True, ""
