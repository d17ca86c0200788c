"""FastAPI application factory."""

from fastapi import FastAPI

from shortener import __version__
from shortener.common.url_builder import normalize_path_prefix
from .api import api_router
from .web import health_router, redirect_router
from .errors import register_error_handlers
from .middleware import (
    LoggingMiddleware,
    RecoveryMiddleware,
    RequestIDMiddleware,
    TimeoutMiddleware,
)


def create_app(
    service_instance,
    config,
    lifespan=None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        service_instance: Service instance
        config: Configuration instance
        lifespan: Optional lifespan context manager (set by the server entry point)

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="URL Shortener",
        description="URL shortening service with expiry and access tracking",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    # Store instances in app state for access in routes
    app.state.service = service_instance
    app.state.config = config

    register_error_handlers(app)

    # Last added runs first: request id -> logging -> recovery -> timeout -> routes
    app.add_middleware(TimeoutMiddleware, timeout_seconds=config.request_timeout_seconds)
    app.add_middleware(RecoveryMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(api_router, prefix="/api", tags=["API"])
    # Health goes first so an unprefixed catch-all never sees "health" as a code
    app.include_router(health_router, tags=["Web"])
    app.include_router(redirect_router, prefix=normalize_path_prefix(config.path_prefix), tags=["Web"])

    return app
