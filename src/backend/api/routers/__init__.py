"""
API routers package.
"""

from api.routers.chat import router as chat_router
from api.routers.sessions import router as sessions_router

__all__ = ["chat_router", "sessions_router"]
