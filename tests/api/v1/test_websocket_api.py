"""WebSocket endpoint tests."""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def ws_client(services, api_app):
    """Synchronous client sharing one event loop for HTTP and WebSocket calls."""
    with TestClient(api_app) as tc:
        yield tc


class TestWebSocket:
    """SUT: /ws"""

    def test_connection_established(self, ws_client):
        with ws_client.websocket_connect("/ws") as ws:
            event = ws.receive_json()

        assert event["type"] == "CONNECTION_ESTABLISHED"
        assert event["data"]["session_id"]
        assert event["data"]["resumed"] is False

    def test_reconnect_reuses_session(self, ws_client):
        with ws_client.websocket_connect("/ws?session_id=session-7") as ws:
            event = ws.receive_json()

        assert event["data"]["session_id"] == "session-7"
        assert event["data"]["resumed"] is True

    def test_keep_alive(self, ws_client):
        with ws_client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_json({"type": "KEEP_ALIVE"})
            event = ws.receive_json()

        assert event["type"] == "KEEP_ALIVE_ACK"
        assert "timestamp" in event["data"]

    def test_ping(self, ws_client):
        with ws_client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_text("not json")
            ws.send_json({"type": "PING"})
            event = ws.receive_json()

        assert event["type"] == "PONG"

    def test_receives_new_conversation(self, ws_client, auth):
        with ws_client.websocket_connect("/ws") as ws:
            ws.receive_json()
            response = ws_client.post("/api/v1/conversations", json={"topic": "Tides"}, headers=auth)
            event = ws.receive_json()

        assert response.status_code == 201
        assert event["type"] == "NEW_CONVERSATION"
        assert event["data"]["id"] == response.json()["id"]
        assert event["data"]["topic"] == "Tides"

