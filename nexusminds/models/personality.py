"""Agent personality API models."""

import re
from datetime import datetime
from typing import Any, List, Optional
from pydantic import BaseModel, Field, field_validator

from ..services.prompt_builder import RESPONSE_STYLE_DIRECTIVES


# #RGB or #RRGGBB
HEX_COLOR_PATTERN = re.compile(r'^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$')

RESPONSE_STYLES = tuple(RESPONSE_STYLE_DIRECTIVES)


def _validate_temperature(v: Any) -> Any:
    if v is None:
        return v
    try:
        value = float(v)
    except (TypeError, ValueError):
        raise ValueError(f"Temperature must be a number, got '{v}'")
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"Temperature must be between 0 and 1, got {value}")
    return str(v).strip()


def _validate_color(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    if not HEX_COLOR_PATTERN.match(v):
        raise ValueError(f"Invalid color '{v}'. Use #RGB or #RRGGBB hex notation.")
    return v


def _validate_response_style(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip().lower()
    if v not in RESPONSE_STYLES:
        raise ValueError(f"Unknown response style '{v}'. Available: {list(RESPONSE_STYLES)}")
    return v


class CreateAgentPersonalityRequest(BaseModel):
    """Request model for creating an agent personality."""

    name: str = Field(description="Display name", min_length=2, max_length=30)
    description: str = Field(description="Short description", min_length=5, max_length=100)
    system_prompt: str = Field(description="System prompt sent with every completion", min_length=10)
    model: str = Field(description="Completion model ID", min_length=1)
    temperature: str = Field(default="0.7", description="Sampling temperature in [0, 1]")
    color: str = Field(default="#64FFDA", description="Hex display color")
    avatar: Optional[str] = Field(None, description="Avatar URL or icon name")
    active: bool = Field(default=True, description="Whether the personality can be used")
    archetype: Optional[str] = Field(None, description="Character archetype")
    voice_type: Optional[str] = Field(default="neutral", description="Voice type")
    speech_pattern: Optional[str] = Field(None, description="Speech pattern")
    quirks: List[str] = Field(default_factory=list, description="Behavioural quirks")
    personality_traits: List[str] = Field(default_factory=list, description="Personality traits")
    knowledge_domains: List[str] = Field(default_factory=list, description="Knowledge domains")
    specialties: List[str] = Field(default_factory=list, description="Specialties")
    perspective: Optional[str] = Field(None, description="Worldview")
    response_style: str = Field(default="balanced", description="Response style")
    temperament: Optional[str] = Field(None, description="Temperament")
    is_public: bool = Field(default=False, description="Visible to other users")

    @field_validator('temperature', mode='before')
    @classmethod
    def validate_temperature(cls, v):
        """Temperature must parse to a float in [0, 1]."""
        return _validate_temperature(v)

    @field_validator('color')
    @classmethod
    def validate_color(cls, v):
        """Validate hex color."""
        return _validate_color(v)

    @field_validator('response_style')
    @classmethod
    def validate_response_style(cls, v):
        """Validate response style vocabulary."""
        return _validate_response_style(v)

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        return v.strip()


class UpdateAgentPersonalityRequest(BaseModel):
    """Request model for a partial personality update; unset fields stay unchanged."""

    name: Optional[str] = Field(None, min_length=2, max_length=30)
    description: Optional[str] = Field(None, min_length=5, max_length=100)
    system_prompt: Optional[str] = Field(None, min_length=10)
    model: Optional[str] = Field(None, min_length=1)
    temperature: Optional[str] = None
    color: Optional[str] = None
    avatar: Optional[str] = None
    active: Optional[bool] = None
    archetype: Optional[str] = None
    voice_type: Optional[str] = None
    speech_pattern: Optional[str] = None
    quirks: Optional[List[str]] = None
    personality_traits: Optional[List[str]] = None
    knowledge_domains: Optional[List[str]] = None
    specialties: Optional[List[str]] = None
    perspective: Optional[str] = None
    response_style: Optional[str] = None
    temperament: Optional[str] = None
    is_public: Optional[bool] = None

    @field_validator('temperature', mode='before')
    @classmethod
    def validate_temperature(cls, v):
        return _validate_temperature(v)

    @field_validator('color')
    @classmethod
    def validate_color(cls, v):
        return _validate_color(v)

    @field_validator('response_style')
    @classmethod
    def validate_response_style(cls, v):
        return _validate_response_style(v)


class AgentPersonalityResponse(BaseModel):
    """Response model for agent personality information."""

    id: int
    name: str
    description: str
    system_prompt: str
    model: str
    temperature: str
    color: str
    avatar: Optional[str] = None
    active: bool
    archetype: Optional[str] = None
    voice_type: Optional[str] = None
    speech_pattern: Optional[str] = None
    quirks: List[str] = Field(default_factory=list)
    personality_traits: List[str] = Field(default_factory=list)
    knowledge_domains: List[str] = Field(default_factory=list)
    specialties: List[str] = Field(default_factory=list)
    perspective: Optional[str] = None
    response_style: Optional[str] = None
    temperament: Optional[str] = None
    user_id: Optional[int] = None
    is_public: bool
    is_system: bool = Field(description="System personalities cannot be edited or deleted")
    created_at: datetime
    updated_at: datetime


class AgentPersonalityListResponse(BaseModel):
    """Response model for listing agent personalities."""

    personalities: List[AgentPersonalityResponse] = Field(description="List of personalities")
    total: int = Field(description="Total number of personalities")
