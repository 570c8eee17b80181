"""Services module."""

from .broadcaster import Broadcaster, ClientConnection, ConnectionState, EventType
from .completion import (
    CompletionError,
    CompletionResult,
    CompletionService,
    CompletionTimeoutError,
    ModelUnavailableError
)
from .orchestrator import Orchestrator, OrchestrationRun, RunStatus
from .rate_limiter import SlidingWindowRateLimiter

__all__ = [
    "Broadcaster",
    "ClientConnection",
    "ConnectionState",
    "EventType",
    "CompletionError",
    "CompletionResult",
    "CompletionService",
    "CompletionTimeoutError",
    "ModelUnavailableError",
    "Orchestrator",
    "OrchestrationRun",
    "RunStatus",
    "SlidingWindowRateLimiter",
]
