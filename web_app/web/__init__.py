"""Health probe and redirect routes."""

from .routes import health_router, redirect_router

__all__ = ["health_router", "redirect_router"]
