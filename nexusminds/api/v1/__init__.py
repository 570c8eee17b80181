"""API v1 package."""

from .users import router as users_router
from .personalities import router as personalities_router
from .conversations import router as conversations_router
from .messages import router as messages_router
from .catalog import router as catalog_router

__all__ = [
    "users_router",
    "personalities_router",
    "conversations_router",
    "messages_router",
    "catalog_router",
]
