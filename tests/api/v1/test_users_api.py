"""User API integration tests."""

from httpx import AsyncClient


class TestUserAPI:
    """User registration and identity tests."""

    async def test_create_user(self, client: AsyncClient):
        response = await client.post("/api/v1/users", json={"username": "carol"})
        assert response.status_code == 201
        data = response.json()
        assert data["username"] == "carol"
        assert "id" in data

    async def test_duplicate_username(self, client: AsyncClient):
        await client.post("/api/v1/users", json={"username": "carol"})
        response = await client.post("/api/v1/users", json={"username": "carol"})
        assert response.status_code == 409

    async def test_invalid_username(self, client: AsyncClient):
        response = await client.post("/api/v1/users", json={"username": "no spaces"})
        assert response.status_code == 422

    async def test_me(self, client: AsyncClient, auth):
        response = await client.get("/api/v1/users/me", headers=auth)
        assert response.status_code == 200
        assert response.json()["username"] == "alice"

    async def test_me_requires_header(self, client: AsyncClient):
        response = await client.get("/api/v1/users/me")
        assert response.status_code == 401

    async def test_me_unknown_user(self, client: AsyncClient):
        response = await client.get("/api/v1/users/me", headers={"X-User-Id": "9999"})
        assert response.status_code == 401

    async def test_me_malformed_header(self, client: AsyncClient):
        response = await client.get("/api/v1/users/me", headers={"X-User-Id": "alice"})
        assert response.status_code == 401


class TestHealth:
    """Health endpoint tests."""

    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
