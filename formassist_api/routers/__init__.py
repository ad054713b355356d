"""
API Routers.
"""

from formassist_api.routers.ask import router as ask_router
from formassist_api.routers.health import router as health_router

__all__ = [
    "ask_router",
    "health_router",
]
