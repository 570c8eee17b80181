"""Conversation API models."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class CreateConversationRequest(BaseModel):
    """Request model for creating a conversation."""

    topic: str = Field(description="Discussion topic", min_length=1, max_length=500)
    session_id: Optional[str] = Field(None, description="Client session ID; generated when omitted", max_length=100)
    max_turns: Optional[int] = Field(None, description="Upper bound on orchestrated turns", ge=1)

    @field_validator('topic')
    @classmethod
    def validate_topic(cls, v):
        """Reject whitespace-only topics."""
        v = v.strip()
        if not v:
            raise ValueError("Topic must not be blank")
        return v


class ConversationResponse(BaseModel):
    """Response model for conversation information."""

    id: int = Field(description="Conversation ID")
    topic: str = Field(description="Discussion topic")
    session_id: str = Field(description="Session ID the conversation was started from")
    status: str = Field(description="active, paused, completed or archived")
    current_turn: int = Field(description="Completed orchestration turns")
    max_turns: Optional[int] = Field(None, description="Upper bound on turns")
    is_active: bool = Field(description="Whether the conversation accepts new messages")
    started_at: datetime = Field(description="Start timestamp")
    ended_at: Optional[datetime] = Field(None, description="End timestamp")
    last_activity: datetime = Field(description="Last activity timestamp")
    user_id: Optional[int] = Field(None, description="Owner; unowned conversations are public")


class ConversationListResponse(BaseModel):
    """Response model for listing conversations."""

    conversations: List[ConversationResponse] = Field(description="List of conversations")
    total: int = Field(description="Total number of conversations")


class OrchestrateRequest(BaseModel):
    """Request model for starting an orchestration run."""

    conversation_id: int = Field(description="Conversation to orchestrate")
    agent_personality_ids: List[int] = Field(
        description="Participating agents; list order is turn order and an agent may appear more than once",
        min_length=2
    )
    turn_count: Optional[int] = Field(None, description="Number of turns", ge=1)


class OrchestrateResponse(BaseModel):
    """Acknowledgement for an accepted orchestration run."""

    conversation_id: int
    status: str = Field(description="Run status at acknowledgement time")
    agent_personality_ids: List[int]
    turn_count: int
    message: str


class OrchestrationRunResponse(BaseModel):
    """State of the latest orchestration run for a conversation."""

    conversation_id: int
    status: str = Field(description="pending, running, completed, stopped, failed or aborted")
    agent_personality_ids: List[int]
    turn_count: int
    turns_completed: int
    messages_created: int
    error: Optional[str] = None
    started_at: datetime
    finished_at: Optional[datetime] = None


class InsightsResponse(BaseModel):
    """Response model for conversation insights."""

    conversation_id: int
    insights: List[str] = Field(description="At most five key insights")
    model: str = Field(description="Model that produced the insights")
