"""FastAPI router for pagethumb."""

from pagethumb.api.routes import create_router, status_for

__all__ = ["create_router", "status_for"]
