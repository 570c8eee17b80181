"""Pytest fixtures for API testing."""

import pytest
from types import SimpleNamespace
from httpx import AsyncClient, ASGITransport
from fastapi import FastAPI

from nexusminds.api import websocket
from nexusminds.api.v1 import (
    deps,
    users_router,
    personalities_router,
    conversations_router,
    messages_router,
    catalog_router
)
from nexusminds.db import UserRepository
from nexusminds.db.database_models import UserDO
from nexusminds.services import Broadcaster, CompletionService, Orchestrator, SlidingWindowRateLimiter


def build_test_app() -> FastAPI:
    """Create a test app without lifespan; dependencies are injected by fixtures."""
    test_app = FastAPI(title="NexusMinds Test")
    test_app.include_router(users_router)
    test_app.include_router(personalities_router)
    test_app.include_router(conversations_router)
    test_app.include_router(messages_router)
    test_app.include_router(catalog_router)
    test_app.include_router(websocket.router)

    @test_app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": "NexusMinds", "version": "1.0.0"}

    return test_app


@pytest.fixture
def services(db_conn, groq_client):
    """Wire the services and inject them into the API modules."""
    broadcaster = Broadcaster(heartbeat_interval=60, sweep_interval=60)
    completion_service = CompletionService(timeout=5, client=groq_client)
    orchestrator = Orchestrator(db_conn, completion_service, broadcaster, turn_delay=0)

    deps.db_conn = db_conn
    deps.broadcaster = broadcaster
    deps.completion_service = completion_service
    deps.orchestrator = orchestrator
    deps.orchestration_limiter = SlidingWindowRateLimiter(3, 300)
    deps.insight_limiter = SlidingWindowRateLimiter(3, 60)
    websocket.broadcaster = broadcaster

    yield SimpleNamespace(
        db_conn=db_conn,
        broadcaster=broadcaster,
        completion_service=completion_service,
        orchestrator=orchestrator,
        groq_client=groq_client
    )

    deps.db_conn = None
    deps.broadcaster = None
    deps.completion_service = None
    deps.orchestrator = None
    deps.orchestration_limiter = None
    deps.insight_limiter = None
    websocket.broadcaster = None


@pytest.fixture
def api_app(services):
    """Provide the test app with services injected."""
    return build_test_app()


@pytest.fixture
async def client(services, api_app):
    """Create async HTTP client against a fresh database."""
    transport = ASGITransport(app=api_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    # Cleanup
    await services.orchestrator.shutdown()
    await services.broadcaster.shutdown()


@pytest.fixture
def auth(user):
    """Headers identifying the default user."""
    return {"X-User-Id": str(user.id)}


@pytest.fixture
def other_auth(db_conn):
    """Headers identifying a second user."""
    bob = UserDO(username="bob")
    UserRepository(db_conn.conn).create(bob)
    return {"X-User-Id": str(bob.id)}
