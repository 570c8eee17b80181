"""Message API integration tests."""

import asyncio
from httpx import AsyncClient


async def _create_conversation(client: AsyncClient, headers) -> dict:
    response = await client.post("/api/v1/conversations", json={"topic": "Cities without cars"}, headers=headers)
    return response.json()


class TestGenerateResponse:
    """One-shot reply endpoint tests."""

    async def test_generate(self, client: AsyncClient, auth, personas):
        conversation = await _create_conversation(client, auth)

        response = await client.post(
            "/api/v1/messages/generate",
            json={"conversation_id": conversation["id"], "agent_personality_id": personas[2].id},
            headers=auth
        )

        assert response.status_code == 201
        data = response.json()
        assert data["content"] == "Reply 1 from llama3-8b-8192"
        assert data["agent_name"] == "CRITIC"
        assert data["agent_color"] == "#FF417D"
        assert data["message_type"] == "response"
        assert data["metadata"]["turn_number"] is None

        messages = (await client.get(f"/api/v1/conversations/{conversation['id']}/messages", headers=auth)).json()
        assert messages["total"] == 1

    async def test_generate_on_ended_conversation(self, client: AsyncClient, auth, personas):
        conversation = await _create_conversation(client, auth)
        await client.post(f"/api/v1/conversations/{conversation['id']}/end", headers=auth)

        response = await client.post(
            "/api/v1/messages/generate",
            json={"conversation_id": conversation["id"], "agent_personality_id": personas[0].id},
            headers=auth
        )
        assert response.status_code == 409

    async def test_generate_unknown_agent(self, client: AsyncClient, auth):
        conversation = await _create_conversation(client, auth)

        response = await client.post(
            "/api/v1/messages/generate",
            json={"conversation_id": conversation["id"], "agent_personality_id": 999},
            headers=auth
        )
        assert response.status_code == 404

    async def test_provider_error(self, client: AsyncClient, auth, services, personas):
        services.groq_client.create.side_effect = services.groq_client.server_error()
        conversation = await _create_conversation(client, auth)

        response = await client.post(
            "/api/v1/messages/generate",
            json={"conversation_id": conversation["id"], "agent_personality_id": personas[0].id},
            headers=auth
        )
        assert response.status_code == 502

    async def test_provider_timeout(self, client: AsyncClient, auth, services, personas):
        async def hang(**kwargs):
            await asyncio.sleep(10)

        services.groq_client.create.side_effect = hang
        services.completion_service.timeout = 0.05
        conversation = await _create_conversation(client, auth)

        response = await client.post(
            "/api/v1/messages/generate",
            json={"conversation_id": conversation["id"], "agent_personality_id": personas[0].id},
            headers=auth
        )
        assert response.status_code == 504


class TestUpdateMessage:
    """Message edit endpoint tests."""

    async def _generate(self, client: AsyncClient, auth, persona_id) -> dict:
        conversation = await _create_conversation(client, auth)
        response = await client.post(
            "/api/v1/messages/generate",
            json={"conversation_id": conversation["id"], "agent_personality_id": persona_id},
            headers=auth
        )
        return response.json()

    async def test_edit(self, client: AsyncClient, auth, personas):
        message = await self._generate(client, auth, personas[0].id)

        response = await client.patch(
            f"/api/v1/messages/{message['id']}", json={"content": "Edited text"}, headers=auth
        )

        assert response.status_code == 200
        data = response.json()
        assert data["content"] == "Edited text"
        assert data["is_edited"] is True
        assert data["agent_name"] == "ANALYST"

    async def test_edit_not_found(self, client: AsyncClient, auth):
        response = await client.patch("/api/v1/messages/999", json={"content": "Edited text"}, headers=auth)
        assert response.status_code == 404

    async def test_edit_other_users_message(self, client: AsyncClient, auth, other_auth, personas):
        message = await self._generate(client, auth, personas[0].id)

        response = await client.patch(
            f"/api/v1/messages/{message['id']}", json={"content": "Edited text"}, headers=other_auth
        )
        assert response.status_code == 403

    async def test_edit_empty_content(self, client: AsyncClient, auth, personas):
        message = await self._generate(client, auth, personas[0].id)

        response = await client.patch(f"/api/v1/messages/{message['id']}", json={"content": ""}, headers=auth)
        assert response.status_code == 422
