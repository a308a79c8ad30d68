"""
API routers for different endpoints.
"""

from .health import router as health_router
from .galleries import router as galleries_router
from .trending import router as trending_router

__all__ = [
    "health_router",
    "galleries_router",
    "trending_router",
]
