"""Conversation helpers shared by the REST routes and the orchestrator."""

from typing import Any, Dict, Optional

from ..db import DatabaseConnection, ConversationRepository
from ..db.database_models import AgentPersonalityDO, ConversationDO, MessageDO
from ..utils.logger import get_app_logger
from .broadcaster import Broadcaster, EventType


def serialize_conversation(conversation: ConversationDO) -> Dict[str, Any]:
    """Conversation fields as sent to clients."""
    return {
        "id": conversation.id,
        "topic": conversation.topic,
        "session_id": conversation.session_id,
        "status": conversation.status,
        "current_turn": conversation.current_turn,
        "max_turns": conversation.max_turns,
        "is_active": conversation.is_active,
        "started_at": conversation.started_at,
        "ended_at": conversation.ended_at,
        "last_activity": conversation.last_activity,
        "user_id": conversation.user_id,
    }


def serialize_message(message: MessageDO, persona: Optional[AgentPersonalityDO] = None) -> Dict[str, Any]:
    """Message fields plus the writing agent's name and color."""
    return {
        "id": message.id,
        "conversation_id": message.conversation_id,
        "agent_personality_id": message.agent_personality_id,
        "content": message.content,
        "message_type": message.message_type,
        "token_count": message.token_count,
        "process_time": message.process_time,
        "model": message.model,
        "temperature": message.temperature,
        "metadata": message.metadata or {},
        "is_edited": message.is_edited,
        "timestamp": message.timestamp,
        "agent_name": persona.name if persona else None,
        "agent_color": persona.color if persona else None,
    }


async def end_conversation(
    db_conn: DatabaseConnection,
    broadcaster: Broadcaster,
    conversation_id: int
) -> bool:
    """
    End a conversation and announce it.

    END_CONVERSATION is broadcast only by the caller that actually flips the
    conversation to ended, so concurrent enders produce a single event.

    Args:
        db_conn: Database connection
        broadcaster: Event broadcaster
        conversation_id: Conversation ID

    Returns:
        True if this call ended the conversation, False if it was already ended
    """
    repo = ConversationRepository(db_conn.conn)
    if not repo.end(conversation_id):
        return False

    conversation = repo.get(conversation_id)
    get_app_logger().info(f"Conversation {conversation_id} ended")

    await broadcaster.broadcast(EventType.END_CONVERSATION, {
        "conversation_id": conversation_id,
        "conversation": serialize_conversation(conversation) if conversation else None,
    })
    return True
