"""Shared FastAPI dependencies - V1."""

from typing import Optional
from fastapi import Depends, Header, HTTPException, Request

from ...db import (
    DatabaseConnection,
    UserRepository,
    AgentPersonalityRepository,
    ConversationRepository,
    MessageRepository
)
from ...db.database_models import AgentPersonalityDO, ConversationDO, UserDO
from ...services import (
    Broadcaster,
    CompletionError,
    CompletionService,
    CompletionTimeoutError,
    Orchestrator,
    SlidingWindowRateLimiter
)

# Database connection (set by main.py)
db_conn: DatabaseConnection = None
# Realtime broadcaster (set by main.py)
broadcaster: Broadcaster = None
# Completion client (set by main.py)
completion_service: CompletionService = None
# Orchestrator (set by main.py)
orchestrator: Orchestrator = None
# Rate limiters (set by main.py)
orchestration_limiter: SlidingWindowRateLimiter = None
insight_limiter: SlidingWindowRateLimiter = None


def get_db() -> DatabaseConnection:
    """Dependency to get the database connection."""
    if db_conn is None:
        raise HTTPException(status_code=500, detail="Database not initialized")
    return db_conn


def get_user_repo(db: DatabaseConnection = Depends(get_db)) -> UserRepository:
    """Dependency to get user repository."""
    return UserRepository(db.conn)


def get_personality_repo(db: DatabaseConnection = Depends(get_db)) -> AgentPersonalityRepository:
    """Dependency to get agent personality repository."""
    return AgentPersonalityRepository(db.conn)


def get_conversation_repo(db: DatabaseConnection = Depends(get_db)) -> ConversationRepository:
    """Dependency to get conversation repository."""
    return ConversationRepository(db.conn)


def get_message_repo(db: DatabaseConnection = Depends(get_db)) -> MessageRepository:
    """Dependency to get message repository."""
    return MessageRepository(db.conn)


def get_broadcaster() -> Broadcaster:
    """Dependency to get the broadcaster."""
    if broadcaster is None:
        raise HTTPException(status_code=500, detail="Broadcaster not initialized")
    return broadcaster


def get_completion_service() -> CompletionService:
    """Dependency to get the completion service."""
    if completion_service is None:
        raise HTTPException(status_code=500, detail="Completion service not initialized")
    return completion_service


def get_orchestrator() -> Orchestrator:
    """Dependency to get the orchestrator."""
    if orchestrator is None:
        raise HTTPException(status_code=500, detail="Orchestrator not initialized")
    return orchestrator


def get_orchestration_limiter() -> SlidingWindowRateLimiter:
    if orchestration_limiter is None:
        raise HTTPException(status_code=500, detail="Rate limiter not initialized")
    return orchestration_limiter


def get_insight_limiter() -> SlidingWindowRateLimiter:
    if insight_limiter is None:
        raise HTTPException(status_code=500, detail="Rate limiter not initialized")
    return insight_limiter


def get_client_ip(request: Request) -> str:
    """Client address for rate limiting; honours X-Forwarded-For behind a proxy."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


def get_current_user(
    x_user_id: Optional[str] = Header(None, description="Caller user ID"),
    repo: UserRepository = Depends(get_user_repo)
) -> UserDO:
    """
    Resolve the caller from the X-User-Id header.

    Raises:
        HTTPException: 401 when the header is missing, malformed or unknown
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    try:
        user_id = int(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid X-User-Id header")

    user = repo.get(user_id)
    if user is None:
        raise HTTPException(status_code=401, detail=f"Unknown user: {user_id}")
    return user


def enforce_rate_limit(limiter: SlidingWindowRateLimiter, key: str, action: str):
    """
    Raise 429 with a Retry-After hint when ``key`` is over the limit.

    Args:
        limiter: Limiter guarding the endpoint
        key: Client key
        action: Human readable action name for the error detail
    """
    allowed, retry_after = limiter.check(key)
    if not allowed:
        raise HTTPException(
            status_code=429,
            detail={
                "message": f"Too many {action} requests. Please try again later.",
                "retry_after": retry_after,
            },
            headers={"Retry-After": str(retry_after)}
        )


def completion_http_error(error: CompletionError) -> HTTPException:
    """Map a completion failure on a synchronous endpoint to an HTTP error."""
    if isinstance(error, CompletionTimeoutError):
        return HTTPException(status_code=504, detail=f"Completion service timed out: {error}")
    return HTTPException(status_code=502, detail=f"Completion service error: {error}")


def load_conversation(conversation_id: int, user: UserDO, repo: ConversationRepository) -> ConversationDO:
    """Fetch a conversation the caller may access (404 if missing, 403 if owned by someone else)."""
    conversation = repo.get(conversation_id)
    if not conversation:
        raise HTTPException(status_code=404, detail=f"Conversation not found: {conversation_id}")
    if not conversation.is_accessible_by(user.id):
        raise HTTPException(status_code=403, detail="Not allowed to access this conversation")
    return conversation


def load_personality(personality_id: int, user: UserDO, repo: AgentPersonalityRepository) -> AgentPersonalityDO:
    """Fetch a personality the caller may use (404 if missing, 403 if private to someone else)."""
    personality = repo.get(personality_id)
    if not personality:
        raise HTTPException(status_code=404, detail=f"Agent personality not found: {personality_id}")
    if not personality.is_visible_to(user.id):
        raise HTTPException(status_code=403, detail="Not allowed to access this agent personality")
    return personality
