"""Pydantic models for API request/response."""

from .user import CreateUserRequest, UserResponse
from .personality import (
    CreateAgentPersonalityRequest,
    UpdateAgentPersonalityRequest,
    AgentPersonalityResponse,
    AgentPersonalityListResponse
)
from .conversation import (
    CreateConversationRequest,
    ConversationResponse,
    ConversationListResponse,
    OrchestrateRequest,
    OrchestrateResponse,
    OrchestrationRunResponse,
    InsightsResponse
)
from .message import (
    MessageResponse,
    ConversationMessagesResponse,
    GenerateResponseRequest,
    UpdateMessageRequest
)
from .catalog import ModelCatalogResponse

__all__ = [
    "CreateUserRequest",
    "UserResponse",
    "CreateAgentPersonalityRequest",
    "UpdateAgentPersonalityRequest",
    "AgentPersonalityResponse",
    "AgentPersonalityListResponse",
    "CreateConversationRequest",
    "ConversationResponse",
    "ConversationListResponse",
    "OrchestrateRequest",
    "OrchestrateResponse",
    "OrchestrationRunResponse",
    "InsightsResponse",
    "MessageResponse",
    "ConversationMessagesResponse",
    "GenerateResponseRequest",
    "UpdateMessageRequest",
    "ModelCatalogResponse",
]
