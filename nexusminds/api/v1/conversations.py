"""Conversation REST API routes - V1."""

import uuid
from fastapi import APIRouter, HTTPException, Depends, Request

from ...config import settings
from ...models.conversation import (
    ConversationResponse,
    ConversationListResponse,
    CreateConversationRequest,
    OrchestrateRequest,
    OrchestrateResponse,
    OrchestrationRunResponse,
    InsightsResponse
)
from ...models.message import MessageResponse, ConversationMessagesResponse
from ...db import (
    DatabaseConnection,
    AgentPersonalityRepository,
    ConversationRepository,
    MessageRepository
)
from ...db.database_models import ConversationDO, MessageType, UserDO
from ...services import (
    Broadcaster,
    CompletionError,
    CompletionService,
    EventType,
    Orchestrator,
    OrchestrationRun,
    SlidingWindowRateLimiter
)
from ...services.conversations import end_conversation, serialize_conversation, serialize_message
from ...services.insights import generate_insights
from ...utils.logger import get_app_logger
from .deps import (
    get_db,
    get_current_user,
    get_conversation_repo,
    get_personality_repo,
    get_message_repo,
    get_broadcaster,
    get_completion_service,
    get_orchestrator,
    get_orchestration_limiter,
    get_insight_limiter,
    get_client_ip,
    enforce_rate_limit,
    completion_http_error,
    load_conversation,
    load_personality
)

router = APIRouter(prefix="/api/v1/conversations", tags=["Conversations"])
logger = get_app_logger()


def _to_response(conv: ConversationDO) -> ConversationResponse:
    """Convert ConversationDO to ConversationResponse."""
    return ConversationResponse(**serialize_conversation(conv))


def _run_response(run: OrchestrationRun) -> OrchestrationRunResponse:
    return OrchestrationRunResponse(
        conversation_id=run.conversation_id,
        status=run.status.value,
        agent_personality_ids=run.agent_ids,
        turn_count=run.turn_count,
        turns_completed=run.turns_completed,
        messages_created=run.messages_created,
        error=run.error,
        started_at=run.started_at,
        finished_at=run.finished_at
    )


@router.get("", response_model=ConversationListResponse)
async def list_conversations(
    user: UserDO = Depends(get_current_user),
    repo: ConversationRepository = Depends(get_conversation_repo)
):
    """List the caller's conversations plus unowned ones, newest first."""
    conversations = repo.list_visible(user.id)

    return ConversationListResponse(
        conversations=[_to_response(c) for c in conversations],
        total=len(conversations)
    )


@router.post("", response_model=ConversationResponse, status_code=201)
async def create_conversation(
    request: CreateConversationRequest,
    user: UserDO = Depends(get_current_user),
    repo: ConversationRepository = Depends(get_conversation_repo),
    broadcaster: Broadcaster = Depends(get_broadcaster)
):
    """Create a new conversation and announce it to connected clients."""
    conversation = ConversationDO(
        topic=request.topic,
        session_id=request.session_id or str(uuid.uuid4()),
        max_turns=request.max_turns,
        user_id=user.id
    )

    if repo.create(conversation) is None:
        raise HTTPException(status_code=500, detail="Failed to create conversation")

    await broadcaster.broadcast(EventType.NEW_CONVERSATION, serialize_conversation(conversation))
    return _to_response(conversation)


@router.post("/orchestrate", response_model=OrchestrateResponse, status_code=202)
async def orchestrate_conversation(
    request: OrchestrateRequest,
    http_request: Request,
    user: UserDO = Depends(get_current_user),
    conv_repo: ConversationRepository = Depends(get_conversation_repo),
    personality_repo: AgentPersonalityRepository = Depends(get_personality_repo),
    orchestrator: Orchestrator = Depends(get_orchestrator),
    limiter: SlidingWindowRateLimiter = Depends(get_orchestration_limiter)
):
    """Start an orchestration run in the background and return at once."""
    enforce_rate_limit(limiter, get_client_ip(http_request), "orchestration")

    conversation = load_conversation(request.conversation_id, user, conv_repo)
    if not conversation.is_active:
        raise HTTPException(status_code=409, detail="Conversation has already ended")

    for personality_id in request.agent_personality_ids:
        personality = load_personality(personality_id, user, personality_repo)
        if not personality.active:
            raise HTTPException(status_code=400, detail=f"Agent personality is inactive: {personality.name}")

    turn_count = request.turn_count or settings.default_turn_count
    if turn_count > settings.max_turn_count:
        raise HTTPException(
            status_code=400,
            detail=f"turn_count may not exceed {settings.max_turn_count}"
        )
    if conversation.max_turns is not None and conversation.current_turn + turn_count > conversation.max_turns:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Conversation allows {conversation.max_turns} turns and has used "
                f"{conversation.current_turn}; {turn_count} more would exceed the limit"
            )
        )

    try:
        run = orchestrator.start(
            conversation_id=conversation.id,
            topic=conversation.topic,
            agent_ids=request.agent_personality_ids,
            turn_count=turn_count
        )
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return OrchestrateResponse(
        conversation_id=conversation.id,
        status=run.status.value,
        agent_personality_ids=run.agent_ids,
        turn_count=run.turn_count,
        message="Orchestration started"
    )


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: int,
    user: UserDO = Depends(get_current_user),
    repo: ConversationRepository = Depends(get_conversation_repo)
):
    """Get conversation details."""
    return _to_response(load_conversation(conversation_id, user, repo))


@router.post("/{conversation_id}/end", response_model=ConversationResponse)
async def end_conversation_route(
    conversation_id: int,
    user: UserDO = Depends(get_current_user),
    repo: ConversationRepository = Depends(get_conversation_repo),
    db: DatabaseConnection = Depends(get_db),
    broadcaster: Broadcaster = Depends(get_broadcaster)
):
    """
    End a conversation.

    A running orchestration notices at its next liveness check. Ending an
    already ended conversation is a no-op and does not broadcast again.
    """
    load_conversation(conversation_id, user, repo)

    await end_conversation(db, broadcaster, conversation_id)

    return _to_response(repo.get(conversation_id))


@router.get("/{conversation_id}/messages", response_model=ConversationMessagesResponse)
async def get_conversation_messages(
    conversation_id: int,
    user: UserDO = Depends(get_current_user),
    conv_repo: ConversationRepository = Depends(get_conversation_repo),
    message_repo: MessageRepository = Depends(get_message_repo),
    personality_repo: AgentPersonalityRepository = Depends(get_personality_repo)
):
    """Get messages from a conversation in chronological order."""
    load_conversation(conversation_id, user, conv_repo)

    messages = message_repo.get_by_conversation(conversation_id)
    personas = personality_repo.get_many(sorted({m.agent_personality_id for m in messages}))

    return ConversationMessagesResponse(
        conversation_id=conversation_id,
        messages=[
            MessageResponse(**serialize_message(m, personas.get(m.agent_personality_id)))
            for m in messages
        ],
        total=len(messages)
    )


@router.get("/{conversation_id}/orchestration", response_model=OrchestrationRunResponse)
async def get_orchestration(
    conversation_id: int,
    user: UserDO = Depends(get_current_user),
    repo: ConversationRepository = Depends(get_conversation_repo),
    orchestrator: Orchestrator = Depends(get_orchestrator)
):
    """Get the state of the latest orchestration run."""
    load_conversation(conversation_id, user, repo)

    run = orchestrator.get_run(conversation_id)
    if run is None:
        raise HTTPException(status_code=404, detail=f"No orchestration run for conversation {conversation_id}")

    return _run_response(run)


@router.post("/{conversation_id}/insights", response_model=InsightsResponse)
async def generate_conversation_insights(
    conversation_id: int,
    http_request: Request,
    user: UserDO = Depends(get_current_user),
    conv_repo: ConversationRepository = Depends(get_conversation_repo),
    message_repo: MessageRepository = Depends(get_message_repo),
    personality_repo: AgentPersonalityRepository = Depends(get_personality_repo),
    completion_service: CompletionService = Depends(get_completion_service),
    limiter: SlidingWindowRateLimiter = Depends(get_insight_limiter)
):
    """Summarize an ended conversation into at most five key insights."""
    enforce_rate_limit(limiter, get_client_ip(http_request), "insight")

    conversation = load_conversation(conversation_id, user, conv_repo)
    if conversation.is_active:
        raise HTTPException(status_code=400, detail="Insights are only available for ended conversations")

    messages = [
        m for m in message_repo.get_by_conversation(conversation_id)
        if m.message_type != MessageType.ERROR.value
    ]
    if not messages:
        raise HTTPException(status_code=400, detail="Conversation has no messages to analyze")

    personas = personality_repo.get_many(sorted({m.agent_personality_id for m in messages}))
    transcript = [
        (personas[m.agent_personality_id].name if m.agent_personality_id in personas else "Unknown agent", m.content)
        for m in messages
    ]

    try:
        insights, model = await generate_insights(
            completion_service,
            topic=conversation.topic,
            transcript=transcript,
            model=settings.insights_model
        )
    except CompletionError as e:
        logger.error(f"Insight generation failed for conversation {conversation_id}: {e}")
        raise completion_http_error(e)

    return InsightsResponse(conversation_id=conversation_id, insights=insights, model=model)
