"""Message database model."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class MessageType(str, Enum):
    """Kinds of message an agent can contribute."""

    STANDARD = "standard"
    QUESTION = "question"
    RESPONSE = "response"
    SUMMARY = "summary"
    SYSTEM = "system"
    THINKING = "thinking"
    ERROR = "error"


@dataclass
class MessageDO:
    """Message data object - maps to messages table."""

    conversation_id: int
    agent_personality_id: int
    content: str
    id: Optional[int] = None
    message_type: str = MessageType.STANDARD.value
    token_count: Optional[int] = None
    process_time: Optional[int] = None
    model: Optional[str] = None
    temperature: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    is_edited: bool = False
    timestamp: datetime = field(default_factory=datetime.utcnow)
