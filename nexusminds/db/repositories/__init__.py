"""Repository layer for data access."""

from .user import UserRepository
from .personality import AgentPersonalityRepository
from .conversation import ConversationRepository
from .message import MessageRepository

__all__ = [
    "UserRepository",
    "AgentPersonalityRepository",
    "ConversationRepository",
    "MessageRepository",
]
