"""Message REST API routes - V1."""

from fastapi import APIRouter, HTTPException, Depends

from ...models.message import MessageResponse, GenerateResponseRequest, UpdateMessageRequest
from ...db import AgentPersonalityRepository, ConversationRepository, MessageRepository
from ...db.database_models import UserDO
from ...services import CompletionError, Orchestrator
from ...services.conversations import serialize_message
from ...utils.logger import get_app_logger
from .deps import (
    get_current_user,
    get_conversation_repo,
    get_personality_repo,
    get_message_repo,
    get_orchestrator,
    completion_http_error,
    load_conversation,
    load_personality
)

router = APIRouter(prefix="/api/v1/messages", tags=["Messages"])
logger = get_app_logger()


@router.post("/generate", response_model=MessageResponse, status_code=201)
async def generate_response(
    request: GenerateResponseRequest,
    user: UserDO = Depends(get_current_user),
    conv_repo: ConversationRepository = Depends(get_conversation_repo),
    personality_repo: AgentPersonalityRepository = Depends(get_personality_repo),
    orchestrator: Orchestrator = Depends(get_orchestrator)
):
    """Generate one reply from one agent and wait for it."""
    conversation = load_conversation(request.conversation_id, user, conv_repo)
    if not conversation.is_active:
        raise HTTPException(status_code=409, detail="Conversation has already ended")

    persona = load_personality(request.agent_personality_id, user, personality_repo)

    try:
        message = await orchestrator.generate_reply(conversation.id, conversation.topic, persona)
    except CompletionError as e:
        logger.error(f"One-shot reply from {persona.name} failed: {e}")
        raise completion_http_error(e)
    except RuntimeError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return MessageResponse(**serialize_message(message, persona))


@router.patch("/{message_id}", response_model=MessageResponse)
async def update_message(
    message_id: int,
    request: UpdateMessageRequest,
    user: UserDO = Depends(get_current_user),
    message_repo: MessageRepository = Depends(get_message_repo),
    conv_repo: ConversationRepository = Depends(get_conversation_repo),
    personality_repo: AgentPersonalityRepository = Depends(get_personality_repo)
):
    """Edit message content; the message is flagged as edited."""
    message = message_repo.get(message_id)
    if not message:
        raise HTTPException(status_code=404, detail=f"Message not found: {message_id}")

    load_conversation(message.conversation_id, user, conv_repo)

    if not message_repo.update_content(message_id, request.content):
        raise HTTPException(status_code=500, detail="Failed to edit message")

    return MessageResponse(**serialize_message(
        message_repo.get(message_id),
        personality_repo.get(message.agent_personality_id)
    ))
