"""Tests for the Groq completion service."""

import asyncio
import pytest
import httpx
import groq
from types import SimpleNamespace

from nexusminds.services.completion import (
    CompletionService,
    CompletionError,
    CompletionTimeoutError,
    ModelUnavailableError,
    is_model_unavailable
)


@pytest.fixture
def service(groq_client):
    """Provide a CompletionService over the fake client."""
    return CompletionService(
        timeout=5,
        max_tokens=500,
        fallback_model="llama3-8b-8192",
        default_model="llama3-8b-8192",
        client=groq_client
    )


class TestComplete:
    """SUT: CompletionService.complete"""

    async def test_returns_text_and_usage(self, service, groq_client):
        groq_client.create.side_effect = None
        groq_client.create.return_value = groq_client.response("  Hello there.  ", 7, 3)

        result = await service.complete("system", "user", "llama3-8b-8192", temperature=0.4)

        assert result.text == "Hello there."
        assert result.model == "llama3-8b-8192"
        assert result.usage == {"prompt_tokens": 7, "completion_tokens": 3, "total_tokens": 10}
        assert result.total_tokens == 10

        kwargs = groq_client.create.call_args.kwargs
        assert kwargs["messages"] == [
            {"role": "system", "content": "system"},
            {"role": "user", "content": "user"},
        ]
        assert kwargs["temperature"] == 0.4
        assert kwargs["max_tokens"] == 500

    async def test_model_not_found(self, service, groq_client):
        groq_client.create.side_effect = groq_client.not_found("nope")

        with pytest.raises(ModelUnavailableError) as exc_info:
            await service.complete("s", "u", "nope")
        assert exc_info.value.model == "nope"

    async def test_other_api_error(self, service, groq_client):
        groq_client.create.side_effect = groq_client.server_error()

        with pytest.raises(CompletionError) as exc_info:
            await service.complete("s", "u", "llama3-8b-8192")
        assert not isinstance(exc_info.value, ModelUnavailableError)

    async def test_timeout(self, groq_client):
        async def hang(**kwargs):
            await asyncio.sleep(10)

        groq_client.create.side_effect = hang
        service = CompletionService(timeout=0.05, client=groq_client)

        with pytest.raises(CompletionTimeoutError):
            await service.complete("s", "u", "llama3-8b-8192")

    async def test_empty_content(self, service, groq_client):
        groq_client.create.side_effect = None
        groq_client.create.return_value = groq_client.response("   ")

        with pytest.raises(CompletionError):
            await service.complete("s", "u", "llama3-8b-8192")


class TestIsModelUnavailable:
    """SUT: is_model_unavailable"""

    def _bad_request(self, message, body):
        request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
        return groq.BadRequestError(message, response=httpx.Response(400, request=request), body=body)

    def test_decommissioned_code(self):
        error = self._bad_request("bad", {"error": {"code": "model_decommissioned"}})
        assert is_model_unavailable(error) is True

    def test_message_phrase(self):
        error = self._bad_request("The model `x` has been decommissioned", None)
        assert is_model_unavailable(error) is True

    def test_unrelated_bad_request(self):
        error = self._bad_request("max_tokens must be positive", {"error": {"code": "invalid_request"}})
        assert is_model_unavailable(error) is False


class TestFallback:
    """SUT: CompletionService.resolve_fallback_model / complete_with_fallback"""

    async def test_prefers_configured_small_model(self, service):
        assert await service.resolve_fallback_model(exclude="bogus") == "llama3-8b-8192"

    async def test_first_catalog_entry(self, service, groq_client):
        groq_client.list_models.return_value = SimpleNamespace(
            data=[SimpleNamespace(id="gemma-7b-it", active=True), SimpleNamespace(id="mixtral", active=True)]
        )
        assert await service.resolve_fallback_model(exclude="bogus") == "gemma-7b-it"

    async def test_default_when_catalog_fails(self, service, groq_client):
        groq_client.list_models.side_effect = groq_client.server_error()
        assert await service.resolve_fallback_model(exclude="bogus") == "llama3-8b-8192"

    async def test_retries_exactly_once_with_fallback(self, service, groq_client):
        """A rejected model should cost exactly one retry against the fallback."""
        groq_client.create.side_effect = [
            groq_client.not_found("made-up-model"),
            groq_client.response("Recovered answer."),
        ]

        result = await service.complete_with_fallback("s", "u", "made-up-model")

        assert result.text == "Recovered answer."
        assert result.model == "llama3-8b-8192"
        assert result.fallback_from == "made-up-model"
        assert groq_client.create.await_count == 2
        models = [call.kwargs["model"] for call in groq_client.create.call_args_list]
        assert models == ["made-up-model", "llama3-8b-8192"]

    async def test_no_second_fallback(self, service, groq_client):
        groq_client.create.side_effect = [
            groq_client.not_found("made-up-model"),
            groq_client.not_found("llama3-8b-8192"),
        ]

        with pytest.raises(ModelUnavailableError):
            await service.complete_with_fallback("s", "u", "made-up-model")
        assert groq_client.create.await_count == 2

    async def test_rejected_default_not_retried(self, service, groq_client):
        """With no catalog, a rejected default model has nothing to fall back to."""
        groq_client.list_models.side_effect = groq_client.server_error()
        groq_client.create.side_effect = groq_client.not_found("llama3-8b-8192")

        with pytest.raises(ModelUnavailableError) as exc_info:
            await service.complete_with_fallback("s", "u", "llama3-8b-8192")

        assert exc_info.value.model == "llama3-8b-8192"
        assert groq_client.create.await_count == 1

    async def test_other_errors_not_retried(self, service, groq_client):
        groq_client.create.side_effect = groq_client.server_error()

        with pytest.raises(CompletionError):
            await service.complete_with_fallback("s", "u", "llama3-8b-8192")
        assert groq_client.create.await_count == 1
