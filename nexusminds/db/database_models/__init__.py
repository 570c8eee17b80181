"""Database models (Data Objects) - map to database tables."""

from .user import UserDO
from .personality import AgentPersonalityDO
from .conversation import ConversationDO, ConversationStatus
from .message import MessageDO, MessageType

__all__ = [
    "UserDO",
    "AgentPersonalityDO",
    "ConversationDO",
    "ConversationStatus",
    "MessageDO",
    "MessageType",
]
