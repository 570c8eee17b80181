"""Agent personality database model."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


DEFAULT_TEMPERATURE = 0.7


@dataclass
class AgentPersonalityDO:
    """Agent personality data object - maps to agent_personalities table."""

    name: str
    description: str
    system_prompt: str
    model: str
    color: str
    id: Optional[int] = None
    temperature: str = "0.7"
    avatar: Optional[str] = None
    active: bool = True
    archetype: Optional[str] = None
    voice_type: Optional[str] = "neutral"
    speech_pattern: Optional[str] = None
    quirks: List[str] = field(default_factory=list)
    personality_traits: List[str] = field(default_factory=list)
    knowledge_domains: List[str] = field(default_factory=list)
    specialties: List[str] = field(default_factory=list)
    perspective: Optional[str] = None
    response_style: Optional[str] = "balanced"
    temperament: Optional[str] = None
    user_id: Optional[int] = None
    is_public: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_system(self) -> bool:
        """System personalities have no owner and cannot be edited or deleted."""
        return self.user_id is None

    def temperature_value(self) -> float:
        """Parse the stored temperature, falling back to the default when invalid."""
        try:
            value = float(self.temperature)
        except (TypeError, ValueError):
            return DEFAULT_TEMPERATURE
        if not 0.0 <= value <= 1.0:
            return DEFAULT_TEMPERATURE
        return value

    def is_visible_to(self, user_id: Optional[int]) -> bool:
        """Whether the given user may read or use this personality."""
        return self.is_system or self.is_public or self.user_id == user_id
