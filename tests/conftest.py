"""Shared pytest fixtures."""

import pytest
import httpx
import groq
from types import SimpleNamespace
from unittest.mock import AsyncMock

from nexusminds.db import DatabaseConnection, AgentPersonalityRepository, UserRepository
from nexusminds.db.database_models import AgentPersonalityDO, UserDO


class FakeGroqClient:
    """Stand-in for AsyncGroq exposing chat.completions.create and models.list."""

    def __init__(self, model_ids=("llama3-8b-8192", "llama3-70b-8192")):
        self.calls = 0
        self.create = AsyncMock(side_effect=self._default_reply)
        self.list_models = AsyncMock(return_value=SimpleNamespace(
            data=[SimpleNamespace(id=model_id, active=True) for model_id in model_ids]
        ))
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self.create))
        self.models = SimpleNamespace(list=self.list_models)

    def _default_reply(self, **kwargs):
        self.calls += 1
        return self.response(f"Reply {self.calls} from {kwargs['model']}")

    @staticmethod
    def response(text, prompt_tokens=12, completion_tokens=30):
        """Build a chat completion response object."""
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=text))],
            usage=SimpleNamespace(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens
            )
        )

    @staticmethod
    def not_found(model):
        """Build the error Groq raises for an unknown model."""
        request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
        return groq.NotFoundError(
            f"The model `{model}` does not exist or you do not have access to it.",
            response=httpx.Response(404, request=request),
            body={"error": {"code": "model_not_found", "message": f"The model `{model}` does not exist"}}
        )

    @staticmethod
    def server_error():
        """Build a 500 from Groq."""
        request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
        return groq.InternalServerError(
            "Internal server error",
            response=httpx.Response(500, request=request),
            body={"error": {"message": "Internal server error"}}
        )


@pytest.fixture
def groq_client():
    """Provide a fake Groq client."""
    return FakeGroqClient()


@pytest.fixture
def db_conn(tmp_path):
    """Provide a fresh database connection."""
    db = DatabaseConnection(str(tmp_path / "test.db"))
    yield db
    db.close()


@pytest.fixture
def user(db_conn):
    """Provide a registered user."""
    user = UserDO(username="alice")
    UserRepository(db_conn.conn).create(user)
    return user


@pytest.fixture
def personas(db_conn):
    """Provide three system personalities, in id order."""
    repo = AgentPersonalityRepository(db_conn.conn)
    created = []
    for name, color in (("ANALYST", "#41FF83"), ("CREATIVE", "#64FFDA"), ("CRITIC", "#FF417D")):
        persona = AgentPersonalityDO(
            name=name,
            description=f"{name.title()} thinker",
            system_prompt=f"You are {name}, a distinct voice in the discussion.",
            model="llama3-8b-8192",
            color=color
        )
        repo.create(persona)
        created.append(persona)
    return created
