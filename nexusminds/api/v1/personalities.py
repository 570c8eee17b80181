"""Agent personality REST API routes - V1."""

from fastapi import APIRouter, HTTPException, Depends

from ...models.personality import (
    CreateAgentPersonalityRequest,
    UpdateAgentPersonalityRequest,
    AgentPersonalityResponse,
    AgentPersonalityListResponse
)
from ...db import AgentPersonalityRepository, MessageRepository
from ...db.database_models import AgentPersonalityDO, UserDO
from .deps import get_personality_repo, get_message_repo, get_current_user, load_personality

router = APIRouter(prefix="/api/v1/agent-personalities", tags=["Agent Personalities"])


def _to_response(personality: AgentPersonalityDO) -> AgentPersonalityResponse:
    """Convert AgentPersonalityDO to AgentPersonalityResponse."""
    return AgentPersonalityResponse(
        id=personality.id,
        name=personality.name,
        description=personality.description,
        system_prompt=personality.system_prompt,
        model=personality.model,
        temperature=personality.temperature,
        color=personality.color,
        avatar=personality.avatar,
        active=personality.active,
        archetype=personality.archetype,
        voice_type=personality.voice_type,
        speech_pattern=personality.speech_pattern,
        quirks=personality.quirks,
        personality_traits=personality.personality_traits,
        knowledge_domains=personality.knowledge_domains,
        specialties=personality.specialties,
        perspective=personality.perspective,
        response_style=personality.response_style,
        temperament=personality.temperament,
        user_id=personality.user_id,
        is_public=personality.is_public,
        is_system=personality.is_system,
        created_at=personality.created_at,
        updated_at=personality.updated_at
    )


def _get_owned(
    personality_id: int,
    user: UserDO,
    repo: AgentPersonalityRepository
) -> AgentPersonalityDO:
    personality = load_personality(personality_id, user, repo)
    if personality.is_system:
        raise HTTPException(status_code=403, detail="System agent personalities cannot be modified")
    if personality.user_id != user.id:
        raise HTTPException(status_code=403, detail="Not the owner of this agent personality")
    return personality


@router.get("", response_model=AgentPersonalityListResponse)
async def list_personalities(
    user: UserDO = Depends(get_current_user),
    repo: AgentPersonalityRepository = Depends(get_personality_repo)
):
    """List system, public and own agent personalities."""
    personalities = repo.list_visible(user.id)
    return AgentPersonalityListResponse(
        personalities=[_to_response(p) for p in personalities],
        total=len(personalities)
    )


@router.get("/{personality_id}", response_model=AgentPersonalityResponse)
async def get_personality(
    personality_id: int,
    user: UserDO = Depends(get_current_user),
    repo: AgentPersonalityRepository = Depends(get_personality_repo)
):
    """Get agent personality details."""
    return _to_response(load_personality(personality_id, user, repo))


@router.post("", response_model=AgentPersonalityResponse, status_code=201)
async def create_personality(
    request: CreateAgentPersonalityRequest,
    user: UserDO = Depends(get_current_user),
    repo: AgentPersonalityRepository = Depends(get_personality_repo)
):
    """Create an agent personality owned by the caller."""
    personality = AgentPersonalityDO(user_id=user.id, **request.model_dump())

    if repo.create(personality) is None:
        raise HTTPException(status_code=500, detail="Failed to create agent personality")

    return _to_response(personality)


@router.patch("/{personality_id}", response_model=AgentPersonalityResponse)
async def update_personality(
    personality_id: int,
    request: UpdateAgentPersonalityRequest,
    user: UserDO = Depends(get_current_user),
    repo: AgentPersonalityRepository = Depends(get_personality_repo)
):
    """Update fields of an owned agent personality."""
    _get_owned(personality_id, user, repo)

    updates = request.model_dump(exclude_unset=True, exclude_none=True)
    if not repo.update(personality_id, updates):
        raise HTTPException(status_code=500, detail="Failed to update agent personality")

    return _to_response(repo.get(personality_id))


@router.delete("/{personality_id}", response_model=dict)
async def delete_personality(
    personality_id: int,
    user: UserDO = Depends(get_current_user),
    repo: AgentPersonalityRepository = Depends(get_personality_repo),
    message_repo: MessageRepository = Depends(get_message_repo)
):
    """Delete an owned agent personality that has not written any messages."""
    _get_owned(personality_id, user, repo)

    if message_repo.count_by_personality(personality_id) > 0:
        raise HTTPException(
            status_code=409,
            detail="Agent personality has messages and cannot be deleted; deactivate it instead"
        )

    if not repo.delete(personality_id):
        raise HTTPException(status_code=500, detail="Failed to delete agent personality")

    return {
        "status": "deleted",
        "message": f"Agent personality {personality_id} deleted successfully"
    }
