"""User database model."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class UserDO:
    """User data object - maps to users table."""

    username: str
    id: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
