"""Short code generation utilities."""

import secrets
import string
from typing import Callable, Optional

from .errors import CodeGenerationError


class ShortCodeGenerator:
    """Generate random short codes for URLs.

    Each symbol comes from one byte of a cryptographically secure source.
    Bytes at or above 248 (the largest multiple of 62 that fits in a byte)
    are discarded so that ``byte % 62`` is uniform over the alphabet.
    """

    # Base62 characters (alphanumeric, case-sensitive)
    BASE62_CHARS = string.ascii_letters + string.digits  # a-zA-Z0-9

    REJECTION_THRESHOLD = 256 - (256 % len(BASE62_CHARS))

    # Upper bound on refills when many bytes get rejected in a row
    MAX_DRAWS = 16

    def __init__(
        self,
        default_length: int = 7,
        random_bytes: Optional[Callable[[int], bytes]] = None,
    ):
        """Initialize short code generator.

        Args:
            default_length: Default length for generated codes
            random_bytes: Source of secure random bytes (defaults to secrets.token_bytes)
        """
        if default_length <= 0:
            raise ValueError(f"default_length must be positive, got {default_length}")

        self.default_length = default_length
        self.random_bytes = random_bytes or secrets.token_bytes

    def generate_random(self, length: Optional[int] = None) -> str:
        """Generate a random short code.

        Args:
            length: Length of the code (uses default if not specified)

        Returns:
            Code of exactly ``length`` characters from ``BASE62_CHARS``

        Raises:
            ValueError: If length is not positive
            CodeGenerationError: If the random source fails or runs dry
        """
        length = self.default_length if length is None else length
        if length <= 0:
            raise ValueError(f"length must be positive, got {length}")

        base = len(self.BASE62_CHARS)
        symbols = []

        for _ in range(self.MAX_DRAWS):
            missing = length - len(symbols)
            # Draw a little extra so one batch usually survives rejection
            for byte in self._draw(missing + missing // 4 + 1):
                if byte >= self.REJECTION_THRESHOLD:
                    continue
                symbols.append(self.BASE62_CHARS[byte % base])
                if len(symbols) == length:
                    return "".join(symbols)

        raise CodeGenerationError("random source yielded too few usable bytes")

    def _draw(self, count: int) -> bytes:
        try:
            data = self.random_bytes(count)
        except Exception as e:
            raise CodeGenerationError(f"random source unavailable: {e}") from e

        if not data or len(data) < count:
            raise CodeGenerationError("random source exhausted")

        return data
