"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from shortener.database.models import ShortURL


class CreateURLRequest(BaseModel):
    """Request to shorten a URL."""

    url: str = Field("", description="The URL to shorten")
    custom_code: Optional[str] = Field(None, description="Optional custom short code")
    ttl: Optional[int] = Field(None, description="Lifetime in seconds; 0 or omitted uses the server default")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "url": "https://example.com/very/long/path/to/resource",
                },
                {
                    "url": "https://github.com/user/repo",
                    "custom_code": "myrepo",
                    "ttl": 3600
                }
            ]
        }
    }


class CreateURLResponse(BaseModel):
    """Response after shortening a URL."""

    id: int = Field(..., description="Record id")
    short_code: str = Field(..., description="The short code")
    short_url: str = Field(..., description="The complete short URL")
    original_url: str = Field(..., description="The original long URL")
    created_at: datetime = Field(..., description="Creation timestamp")
    expires_at: Optional[datetime] = Field(None, description="Expiry timestamp, null if it never expires")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": 1,
                    "short_code": "aZ3kP9q",
                    "short_url": "http://localhost:8080/aZ3kP9q",
                    "original_url": "https://example.com/very/long/path",
                    "created_at": "2024-01-01T12:00:00Z",
                    "expires_at": None
                }
            ]
        }
    }

    @classmethod
    def from_short_url(cls, short_url: ShortURL, full_short_url: str) -> "CreateURLResponse":
        return cls(
            id=short_url.id,
            short_code=short_url.short_code,
            short_url=full_short_url,
            original_url=short_url.original_url,
            created_at=short_url.created_at,
            expires_at=short_url.expires_at,
        )


class URLInfoResponse(BaseModel):
    """Response with URL information."""

    id: int
    short_code: str
    short_url: str
    original_url: str
    created_at: datetime
    expires_at: Optional[datetime] = None
    access_count: int
    last_accessed: Optional[datetime] = None

    @classmethod
    def from_short_url(cls, short_url: ShortURL, full_short_url: str) -> "URLInfoResponse":
        return cls(short_url=full_short_url, **short_url.__dict__)


class ListURLsResponse(BaseModel):
    """Paginated URL listing."""

    urls: List[URLInfoResponse]
    total: int = Field(..., description="Number of URLs in the table, independent of the page")
    limit: int
    offset: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    database: str = Field(..., description="Database status")


class ErrorResponse(BaseModel):
    """Error response."""

    error: str = Field(..., description="Stable machine-readable error token")
    message: str = Field(..., description="Human-readable error message")
