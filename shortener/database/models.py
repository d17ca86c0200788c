"""Data models for URL shortener."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class ShortURL:
    """Represents one row of the ``urls`` table.

    ``id`` is ``None`` until the store has persisted the record.
    """

    short_code: str
    original_url: str
    created_at: datetime
    expires_at: Optional[datetime] = None
    access_count: int = 0
    last_accessed: Optional[datetime] = None
    id: Optional[int] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check whether the record is past its expiry.

        Records without ``expires_at`` never expire.

        Args:
            now: Reference time (defaults to current UTC time)

        Returns:
            True if ``expires_at`` is set and strictly before ``now``
        """
        if self.expires_at is None:
            return False
        return self.expires_at < (now or utc_now())

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "short_code": self.short_code,
            "original_url": self.original_url,
            "created_at": _isoformat(self.created_at),
            "expires_at": _isoformat(self.expires_at),
            "access_count": self.access_count,
            "last_accessed": _isoformat(self.last_accessed),
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ShortURL":
        """Create from a database record or a plain dictionary."""
        return cls(
            id=record["id"],
            short_code=record["short_code"],
            original_url=record["original_url"],
            created_at=record["created_at"],
            expires_at=record["expires_at"],
            access_count=record["access_count"],
            last_accessed=record["last_accessed"],
        )
