"""Public routes: health probe and short code redirects."""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from ..api.schemas import HealthResponse, ErrorResponse

health_router = APIRouter()
redirect_router = APIRouter()


@health_router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse, "description": "Database unreachable"}},
    summary="Health check",
)
async def health_check(request: Request):
    """Health check endpoint for load balancers and monitoring."""
    service = request.app.state.service

    health = await service.health_check()

    if health["overall"]:
        return HealthResponse(status="healthy", database="connected")

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=HealthResponse(status="unhealthy", database="disconnected").model_dump(),
    )


@redirect_router.get(
    "/{short_code}",
    status_code=status.HTTP_301_MOVED_PERMANENTLY,
    response_class=RedirectResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Short code not found"},
        410: {"model": ErrorResponse, "description": "Short URL has expired"},
    },
    summary="Redirect to the original URL",
)
async def redirect_to_url(request: Request, short_code: str):
    """Redirect to the original URL and count the access."""
    service = request.app.state.service

    short_url = await service.resolve_redirect(short_code)

    return RedirectResponse(url=short_url.original_url, status_code=status.HTTP_301_MOVED_PERMANENTLY)
