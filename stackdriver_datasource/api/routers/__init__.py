"""Data source API routers module."""

from .datasource import router as datasource_router
from .health import router as health_router

__all__ = [
    "datasource_router",
    "health_router",
]
