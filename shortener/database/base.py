"""Abstract base class for URL shortener database implementations."""

from abc import ABC, abstractmethod
from typing import List, Optional
from datetime import datetime

from .models import ShortURL


class URLShortenerDBBase(ABC):
    """Abstract base class for URL shortener database operations.

    Implementations report failures with the classes from
    ``shortener.errors``: a duplicate short code raises
    ``ShortCodeAlreadyExistsError``, an unreachable store raises
    ``StoreUnavailableError``. A missing row is not an error at this level;
    lookups return ``None`` and deletes return ``False``.
    """

    def __init__(self, db_config: str):
        """Initialize database connection.

        Args:
            db_config: Database connection string
        """
        self.db_config = db_config

    @abstractmethod
    async def create_short_url(self, short_url: ShortURL) -> ShortURL:
        """Persist a new short URL.

        Args:
            short_url: Record to insert (``id`` is ignored)

        Returns:
            The same record with ``id`` assigned by the store

        Raises:
            ShortCodeAlreadyExistsError: If the short code is taken
        """
        pass

    @abstractmethod
    async def get_by_short_code(self, short_code: str) -> Optional[ShortURL]:
        """Get a record by its short code.

        Args:
            short_code: The short code to lookup

        Returns:
            The record or None if not found
        """
        pass

    @abstractmethod
    async def short_code_exists(self, short_code: str) -> bool:
        """Check if a short code already exists.

        Args:
            short_code: The short code to check

        Returns:
            True if exists, False otherwise
        """
        pass

    @abstractmethod
    async def record_access(self, url_id: int, accessed_at: datetime) -> Optional[int]:
        """Atomically add one to the access count and stamp last access.

        Args:
            url_id: Id of the record to update
            accessed_at: Access timestamp

        Returns:
            The new access count, or None if the row no longer exists
        """
        pass

    @abstractmethod
    async def delete_short_url(self, short_code: str) -> bool:
        """Delete a short URL.

        Args:
            short_code: The short code to delete

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete every record whose expiry is set and before ``now``.

        Args:
            now: Cut-off time

        Returns:
            Number of deleted rows
        """
        pass

    @abstractmethod
    async def list_urls(self, limit: int, offset: int) -> List[ShortURL]:
        """List records, newest first.

        Args:
            limit: Maximum number of records to return
            offset: Number of records to skip

        Returns:
            List of records
        """
        pass

    @abstractmethod
    async def count_urls(self) -> int:
        """Count all records in the table."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close database connections."""
        pass

    @abstractmethod
    async def health_check(self, timeout: Optional[float] = None) -> bool:
        """Check if database is healthy.

        Args:
            timeout: Optional bound on the probe in seconds

        Returns:
            True if healthy, False otherwise
        """
        pass
