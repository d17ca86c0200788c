"""Business logic service for URL shortener."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from .shortcode import ShortCodeGenerator
from .database.base import URLShortenerDBBase
from .database.models import ShortURL, utc_now
from .common.validators import is_valid_url, is_valid_short_code
from .errors import (
    GenerationExhaustedError,
    InvalidInputError,
    InvalidShortCodeError,
    InvalidURLError,
    ShortURLExpiredError,
    ShortURLNotFoundError,
)


DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass
class URLPage:
    """One window of the URL listing plus the full table count."""

    urls: List[ShortURL]
    total: int
    limit: int
    offset: int


def normalize_pagination(limit: Optional[int], offset: Optional[int]) -> Tuple[int, int]:
    """Clamp a requested page window.

    A missing or non-positive limit becomes the default page size, a limit
    above the maximum is capped, and a negative offset becomes zero.
    """
    if limit is None or limit <= 0:
        limit = DEFAULT_PAGE_SIZE
    elif limit > MAX_PAGE_SIZE:
        limit = MAX_PAGE_SIZE

    if offset is None or offset < 0:
        offset = 0

    return limit, offset


class URLShortenerService:
    """Service layer for URL shortening business logic."""

    def __init__(
        self,
        db: URLShortenerDBBase,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
        max_collision_attempts: int = 10,
        default_ttl_seconds: int = 0,
        health_check_timeout_seconds: float = 2.0,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize URL shortener service.

        Args:
            db: Database instance
            short_code_generator: Optional short code generator
            logger: Optional logger
            max_collision_attempts: Candidates tried before giving up on generation
            default_ttl_seconds: TTL applied when a request gives none (0 = never expire)
            health_check_timeout_seconds: Bound on the database ping
            clock: Source of the current time (defaults to UTC now)
        """
        self.db = db
        self.generator = short_code_generator or ShortCodeGenerator()
        self.logger = logger or logging.getLogger(__name__)
        self.max_collision_attempts = max_collision_attempts
        self.default_ttl_seconds = default_ttl_seconds
        self.health_check_timeout_seconds = health_check_timeout_seconds
        self.clock = clock or utc_now

    async def create_short_url(
        self,
        original_url: str,
        custom_code: Optional[str] = None,
        ttl_seconds: Optional[int] = None,
    ) -> ShortURL:
        """Create a new short URL.

        Args:
            original_url: The original long URL
            custom_code: Optional custom short code
            ttl_seconds: Optional lifetime in seconds (non-positive means use the default)

        Returns:
            The persisted record with its id

        Raises:
            InvalidURLError: If the URL is malformed
            InvalidShortCodeError: If the custom code is malformed
            InvalidInputError: If the ttl puts the expiry out of range
            ShortCodeAlreadyExistsError: If the code is already taken
            GenerationExhaustedError: If no free code was found
        """
        is_valid, error = is_valid_url(original_url)
        if not is_valid:
            self.logger.debug(f"Rejected URL {original_url!r}: {error}")
            raise InvalidURLError()

        if custom_code:
            is_valid, error = is_valid_short_code(custom_code)
            if not is_valid:
                self.logger.debug(f"Rejected short code {custom_code!r}: {error}")
                raise InvalidShortCodeError()

        created_at = self.clock()
        expires_at = self._compute_expiry(created_at, ttl_seconds)

        short_code = custom_code or await self._generate_unique_short_code()
        short_url = ShortURL(
            short_code=short_code,
            original_url=original_url,
            created_at=created_at,
            expires_at=expires_at,
        )

        # The unique constraint is the final authority: a racing insert of the
        # same code surfaces here as ShortCodeAlreadyExistsError.
        short_url = await self.db.create_short_url(short_url)

        self.logger.info(
            f"Created short URL: {short_code} -> {original_url} "
            f"(expires_at={short_url.expires_at.isoformat() if short_url.expires_at else None})"
        )
        return short_url

    async def resolve_redirect(self, short_code: str) -> ShortURL:
        """Look up a short code for redirecting and count the access.

        The access update is best-effort: if it fails the error is logged and
        the record is still returned.

        Args:
            short_code: The short code to lookup

        Returns:
            The record (with the updated count when tracking succeeded)

        Raises:
            ShortURLNotFoundError: If no such code exists
            ShortURLExpiredError: If the record has expired
        """
        short_url = await self.db.get_by_short_code(short_code)
        if short_url is None:
            self.logger.warning(f"Short code not found: {short_code}")
            raise ShortURLNotFoundError()

        now = self.clock()
        if short_url.is_expired(now):
            self.logger.warning(f"Attempted to access expired URL: {short_code}")
            raise ShortURLExpiredError()

        try:
            new_count = await self.db.record_access(short_url.id, now)
        except Exception as e:
            self.logger.error(f"Failed to update access count for {short_code}: {e!r}")
        else:
            if new_count is None:
                self.logger.warning(f"Short code deleted before access was recorded: {short_code}")
            else:
                short_url.access_count = new_count
                short_url.last_accessed = now

        self.logger.debug(f"Redirecting {short_code} -> {short_url.original_url}")
        return short_url

    async def get_url_info(self, short_code: str) -> ShortURL:
        """Get complete information about a short URL.

        Never changes the record and ignores expiry.

        Raises:
            ShortURLNotFoundError: If no such code exists
        """
        short_url = await self.db.get_by_short_code(short_code)
        if short_url is None:
            raise ShortURLNotFoundError()

        self.logger.debug(f"Retrieved URL info for {short_code}")
        return short_url

    async def delete_short_url(self, short_code: str) -> None:
        """Delete a short URL.

        Raises:
            ShortURLNotFoundError: If no such code exists
        """
        if not await self.db.delete_short_url(short_code):
            raise ShortURLNotFoundError()

        self.logger.info(f"Deleted short URL: {short_code}")

    async def list_urls(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> URLPage:
        """List URLs newest first.

        Args:
            limit: Page size (clamped to 1..100, default 20)
            offset: Records to skip (negative becomes 0)

        Returns:
            The page with the effective limit/offset and the full table count
        """
        limit, offset = normalize_pagination(limit, offset)

        urls = await self.db.list_urls(limit, offset)
        total = await self.db.count_urls()

        return URLPage(urls=urls, total=total, limit=limit, offset=offset)

    async def cleanup_expired(self, now: Optional[datetime] = None) -> int:
        """Delete all records that expired before ``now``.

        Returns:
            Number of deleted records
        """
        return await self.db.delete_expired(now or self.clock())

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        db_healthy = await self.db.health_check(timeout=self.health_check_timeout_seconds)

        return {
            "database": db_healthy,
            "overall": db_healthy,
        }

    async def _generate_unique_short_code(self) -> str:
        """Generate a short code not currently in the store.

        The existence probe only cuts down on failed inserts. Two requests
        can still pick the same free code; the insert settles it.

        Raises:
            GenerationExhaustedError: If every attempt collided
        """
        for attempt in range(1, self.max_collision_attempts + 1):
            code = self.generator.generate_random()

            if not await self.db.short_code_exists(code):
                if attempt > 1:
                    self.logger.debug(f"Generated code after {attempt} attempts: {code}")
                return code

            self.logger.debug(f"Short code collision, retrying: code={code} attempt={attempt}")

        self.logger.error(
            f"Unable to generate unique short code after {self.max_collision_attempts} attempts"
        )
        raise GenerationExhaustedError()

    def _compute_expiry(self, created_at: datetime, ttl_seconds: Optional[int]) -> Optional[datetime]:
        if ttl_seconds is None or ttl_seconds <= 0:
            ttl_seconds = self.default_ttl_seconds
        if ttl_seconds <= 0:
            return None

        try:
            return created_at + timedelta(seconds=ttl_seconds)
        except OverflowError:
            self.logger.debug(f"Rejected ttl {ttl_seconds}: expiry out of range")
            raise InvalidInputError("ttl is too large")

    async def close(self) -> None:
        """Close service connections."""
        await self.db.close()
