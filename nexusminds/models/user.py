"""User API models."""

import re
from datetime import datetime
from pydantic import BaseModel, Field, field_validator


# Letters, digits, dots, hyphens and underscores
USERNAME_PATTERN = re.compile(r'^[A-Za-z0-9._-]+$')


class CreateUserRequest(BaseModel):
    """Request model for registering a user."""

    username: str = Field(description="Unique username", min_length=2, max_length=50)

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        """Validate username characters."""
        v = v.strip()
        if not USERNAME_PATTERN.match(v):
            raise ValueError(
                f"Invalid username '{v}'. Use letters, digits, dots, hyphens or underscores."
            )
        return v


class UserResponse(BaseModel):
    """Response model for user information."""

    id: int
    username: str
    created_at: datetime
