"""Database package - connection, models, and repositories."""

from .connection import DatabaseConnection
from .repositories.user import UserRepository
from .repositories.personality import AgentPersonalityRepository
from .repositories.conversation import ConversationRepository
from .repositories.message import MessageRepository

__all__ = [
    "DatabaseConnection",
    "UserRepository",
    "AgentPersonalityRepository",
    "ConversationRepository",
    "MessageRepository",
]
