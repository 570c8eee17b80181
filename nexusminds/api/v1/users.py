"""User REST API routes - V1."""

from fastapi import APIRouter, HTTPException, Depends

from ...models.user import CreateUserRequest, UserResponse
from ...db import UserRepository
from ...db.database_models import UserDO
from .deps import get_user_repo, get_current_user

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


def _to_response(user: UserDO) -> UserResponse:
    return UserResponse(id=user.id, username=user.username, created_at=user.created_at)


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    request: CreateUserRequest,
    repo: UserRepository = Depends(get_user_repo)
):
    """Register a user. Credentials are handled outside this service."""
    if repo.get_by_username(request.username):
        raise HTTPException(status_code=409, detail=f"Username already taken: {request.username}")

    user = UserDO(username=request.username)
    if repo.create(user) is None:
        raise HTTPException(status_code=500, detail="Failed to create user")

    return _to_response(user)


@router.get("/me", response_model=UserResponse)
async def get_me(user: UserDO = Depends(get_current_user)):
    """Get the calling user."""
    return _to_response(user)
