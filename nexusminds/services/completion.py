"""Text completion service backed by the Groq API."""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import groq
from groq import AsyncGroq

from ..utils.logger import get_app_logger


# Error codes Groq returns when a model id is unknown or retired
MODEL_UNAVAILABLE_CODES = {"model_not_found", "model_decommissioned", "model_not_active"}

_MODEL_UNAVAILABLE_PHRASES = ("not found", "does not exist", "decommissioned", "not available", "unavailable")


class CompletionError(Exception):
    """The completion provider failed or returned an unusable answer."""


class ModelUnavailableError(CompletionError):
    """The provider rejected the requested model."""

    def __init__(self, model: str, message: str = ""):
        self.model = model
        super().__init__(message or f"Model unavailable: {model}")


class CompletionTimeoutError(CompletionError):
    """The provider did not answer within the configured timeout."""


@dataclass
class CompletionResult:
    """Generated text plus token usage for one completion call."""

    text: str
    model: str
    usage: Dict[str, Optional[int]] = field(default_factory=dict)
    process_time_ms: int = 0
    fallback_from: Optional[str] = None

    @property
    def total_tokens(self) -> Optional[int]:
        return self.usage.get("total_tokens")


def is_model_unavailable(error: Exception) -> bool:
    """Tell model-not-found style rejections apart from other API errors."""
    if isinstance(error, groq.NotFoundError):
        return True
    if not isinstance(error, groq.APIStatusError):
        return False

    body = getattr(error, "body", None)
    if isinstance(body, dict):
        details = body.get("error", body)
        if isinstance(details, dict) and details.get("code") in MODEL_UNAVAILABLE_CODES:
            return True

    message = str(error).lower()
    return "model" in message and any(phrase in message for phrase in _MODEL_UNAVAILABLE_PHRASES)


class CompletionService:
    """Stateless wrapper around Groq chat completions."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        max_tokens: int = 500,
        fallback_model: str = "llama3-8b-8192",
        default_model: str = "llama3-8b-8192",
        client: Optional[Any] = None
    ):
        """
        Initialize the completion service.

        Args:
            api_key: Groq API key (falls back to GROQ_API_KEY in the environment)
            base_url: Optional API base URL override
            timeout: Per-call timeout in seconds
            max_tokens: Default max tokens per reply
            fallback_model: Preferred model when the requested one is unavailable
            default_model: Last-resort model when the catalog cannot be read
            client: Pre-built async client, mainly for tests
        """
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.fallback_model = fallback_model
        self.default_model = default_model
        self.logger = get_app_logger("completion")
        self._client = client

    def _get_client(self):
        # Created lazily so the service can be built without credentials
        if self._client is None:
            kwargs: Dict[str, Any] = {}
            if self.api_key:
                kwargs["api_key"] = self.api_key
            if self.base_url:
                kwargs["base_url"] = self.base_url
            self._client = AsyncGroq(**kwargs)
        return self._client

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None
    ) -> CompletionResult:
        """
        Generate a reply for one system + user prompt pair.

        Raises:
            ModelUnavailableError: The provider rejected the model
            CompletionTimeoutError: No answer within the timeout
            CompletionError: Any other provider failure
        """
        started = time.monotonic()
        try:
            client = self._get_client()
            response = await asyncio.wait_for(
                client.chat.completions.create(
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    model=model,
                    temperature=temperature,
                    max_tokens=max_tokens or self.max_tokens,
                    stream=False,
                ),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, groq.APITimeoutError) as e:
            raise CompletionTimeoutError(f"Completion with {model} timed out after {self.timeout}s") from e
        except groq.APIError as e:
            if is_model_unavailable(e):
                raise ModelUnavailableError(model, str(e)) from e
            raise CompletionError(f"Completion with {model} failed: {e}") from e
        except groq.GroqError as e:
            raise CompletionError(f"Completion client error: {e}") from e

        if not response.choices:
            raise CompletionError(f"Completion with {model} returned no choices")

        text = (response.choices[0].message.content or "").strip()
        if not text:
            raise CompletionError(f"Completion with {model} returned empty content")
        usage = getattr(response, "usage", None)

        return CompletionResult(
            text=text,
            model=model,
            usage={
                "prompt_tokens": getattr(usage, "prompt_tokens", None),
                "completion_tokens": getattr(usage, "completion_tokens", None),
                "total_tokens": getattr(usage, "total_tokens", None),
            },
            process_time_ms=int((time.monotonic() - started) * 1000),
        )

    async def list_models(self) -> List[str]:
        """
        Read the live model catalog.

        Returns:
            Model IDs the provider currently serves
        """
        try:
            client = self._get_client()
            response = await asyncio.wait_for(client.models.list(), timeout=self.timeout)
        except (asyncio.TimeoutError, groq.APITimeoutError) as e:
            raise CompletionTimeoutError("Listing models timed out") from e
        except (groq.APIError, groq.GroqError) as e:
            raise CompletionError(f"Failed to list models: {e}") from e

        return [
            model.id for model in response.data
            if getattr(model, "active", True) is not False
        ]

    async def resolve_fallback_model(self, exclude: Optional[str] = None) -> str:
        """
        Pick a model to retry with after a model rejection.

        Preference: the configured small model if the catalog lists it, then the
        first catalog entry, then the hardcoded default.
        """
        try:
            catalog = await self.list_models()
        except CompletionError as e:
            self.logger.warning(f"Model catalog unavailable, using default fallback: {e}")
            catalog = []

        candidates = [model for model in catalog if model != exclude]
        if self.fallback_model in candidates:
            return self.fallback_model
        if candidates:
            return candidates[0]
        return self.default_model

    async def complete_with_fallback(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None
    ) -> CompletionResult:
        """
        Like complete(), but retry once with a fallback model on model rejection.

        Only ModelUnavailableError triggers the retry; every other error propagates.
        The original error is raised when no model other than the rejected one
        is available.
        """
        try:
            return await self.complete(system_prompt, user_prompt, model, temperature, max_tokens)
        except ModelUnavailableError as e:
            fallback = await self.resolve_fallback_model(exclude=model)
            if fallback == model:
                self.logger.warning(f"Model {model} unavailable ({e}) and no other model to fall back to")
                raise
            self.logger.warning(f"Model {model} unavailable ({e}); retrying with {fallback}")

        result = await self.complete(system_prompt, user_prompt, fallback, temperature, max_tokens)
        result.fallback_from = model
        return result
