"""Conversation database model."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class ConversationStatus(str, Enum):
    """Lifecycle status of a conversation."""

    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    ARCHIVED = "archived"


@dataclass
class ConversationDO:
    """Conversation data object - maps to conversations table."""

    topic: str
    session_id: str
    id: Optional[int] = None
    status: str = ConversationStatus.ACTIVE.value
    current_turn: int = 0
    max_turns: Optional[int] = None
    is_active: bool = True
    started_at: datetime = field(default_factory=datetime.utcnow)
    ended_at: Optional[datetime] = None
    last_activity: datetime = field(default_factory=datetime.utcnow)
    user_id: Optional[int] = None

    def is_accessible_by(self, user_id: Optional[int]) -> bool:
        """Unowned conversations are visible to everyone."""
        return self.user_id is None or self.user_id == user_id
