"""API routes implementation."""

from typing import Optional

from fastapi import APIRouter, Request, Response, status

from .schemas import (
    CreateURLRequest,
    CreateURLResponse,
    URLInfoResponse,
    ListURLsResponse,
    ErrorResponse,
)
from shortener.common.url_builder import build_short_url

router = APIRouter()


def _full_short_url(request: Request, short_code: str) -> str:
    config = request.app.state.config
    return build_short_url(
        short_code=short_code,
        base_url=config.base_url,
        path_prefix=config.path_prefix,
    )


def _parse_int(value: Optional[str]) -> Optional[int]:
    """Parse a query parameter leniently; anything unparseable counts as absent."""
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


@router.post(
    "/urls",
    response_model=CreateURLResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid URL, short code or body"},
        409: {"model": ErrorResponse, "description": "Short code already exists"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
    summary="Create short URL",
    description="Create a shortened URL. Optionally provide a custom short code and a TTL in seconds.",
)
async def create_short_url(request: Request, body: CreateURLRequest):
    """Create a shortened URL."""
    service = request.app.state.service

    short_url = await service.create_short_url(
        original_url=body.url,
        custom_code=body.custom_code,
        ttl_seconds=body.ttl,
    )

    return CreateURLResponse.from_short_url(
        short_url, _full_short_url(request, short_url.short_code)
    )


@router.get(
    "/urls",
    response_model=ListURLsResponse,
    summary="List URLs",
    description="List short URLs newest first. limit defaults to 20 and is capped at 100.",
)
async def list_urls(
    request: Request,
    limit: Optional[str] = None,
    offset: Optional[str] = None,
):
    """List shortened URLs."""
    service = request.app.state.service

    page = await service.list_urls(limit=_parse_int(limit), offset=_parse_int(offset))

    return ListURLsResponse(
        urls=[
            URLInfoResponse.from_short_url(url, _full_short_url(request, url.short_code))
            for url in page.urls
        ],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


@router.get(
    "/urls/{short_code}",
    response_model=URLInfoResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Short code not found"},
    },
    summary="Get URL information",
    description="Get information about a shortened URL including access statistics.",
)
async def get_url_info(request: Request, short_code: str):
    """Get information about a shortened URL."""
    service = request.app.state.service

    short_url = await service.get_url_info(short_code)

    return URLInfoResponse.from_short_url(short_url, _full_short_url(request, short_code))


@router.delete(
    "/urls/{short_code}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        404: {"model": ErrorResponse, "description": "Short code not found"},
    },
    summary="Delete short URL",
)
async def delete_url(request: Request, short_code: str):
    """Delete a shortened URL."""
    service = request.app.state.service

    await service.delete_short_url(short_code)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
