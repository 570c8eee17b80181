"""Message API models."""

from datetime import datetime
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Response model for a single message, enriched with agent display fields."""

    id: int = Field(description="Message ID")
    conversation_id: int = Field(description="Conversation ID")
    agent_personality_id: int = Field(description="Agent that wrote the message")
    content: str = Field(description="Message content")
    message_type: str = Field(description="standard, question, response, summary, system, thinking or error")
    token_count: Optional[int] = Field(None, description="Tokens used")
    process_time: Optional[int] = Field(None, description="Generation time in milliseconds")
    model: Optional[str] = Field(None, description="Model snapshot")
    temperature: Optional[str] = Field(None, description="Temperature snapshot")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Additional metadata")
    is_edited: bool = Field(default=False, description="Whether the content was edited")
    timestamp: datetime = Field(description="Message timestamp")
    agent_name: Optional[str] = Field(None, description="Agent display name")
    agent_color: Optional[str] = Field(None, description="Agent display color")


class ConversationMessagesResponse(BaseModel):
    """Response model for conversation messages."""

    conversation_id: int = Field(description="Conversation ID")
    messages: List[MessageResponse] = Field(description="Messages in chronological order")
    total: int = Field(description="Total number of messages")


class GenerateResponseRequest(BaseModel):
    """Request model for a one-shot agent reply."""

    conversation_id: int = Field(description="Conversation ID")
    agent_personality_id: int = Field(description="Agent to reply")


class UpdateMessageRequest(BaseModel):
    """Request model for editing message content."""

    content: str = Field(description="New content", min_length=1)
