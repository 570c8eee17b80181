"""Realtime broadcaster - WebSocket connection registry and fan-out."""

import asyncio
import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder
from starlette.websockets import WebSocketState

from ..utils.logger import get_app_logger


class EventType(str, Enum):
    """Event names exchanged over the WebSocket channel."""

    CONNECTION_ESTABLISHED = "CONNECTION_ESTABLISHED"
    NEW_MESSAGE = "NEW_MESSAGE"
    NEW_CONVERSATION = "NEW_CONVERSATION"
    END_CONVERSATION = "END_CONVERSATION"
    HEARTBEAT = "HEARTBEAT"
    KEEP_ALIVE = "KEEP_ALIVE"
    KEEP_ALIVE_ACK = "KEEP_ALIVE_ACK"
    PING = "PING"
    PONG = "PONG"


class ConnectionState(str, Enum):
    """Lifecycle of one client connection."""

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class ClientConnection:
    """One live WebSocket registered under (client identity, session id)."""

    websocket: WebSocket
    client_id: str
    session_id: str
    resumed: bool = False
    state: ConnectionState = ConnectionState.CONNECTING
    connected_at: datetime = field(default_factory=datetime.utcnow)
    last_seen: datetime = field(default_factory=datetime.utcnow)
    heartbeat_task: Optional[asyncio.Task] = None
    send_lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.client_id, self.session_id)


class Broadcaster:
    """
    Registry of live client connections with heartbeats and event fan-out.

    Constructed once at startup and shared by the WebSocket endpoint, the REST
    routes and the orchestrator.
    """

    def __init__(self, heartbeat_interval: float = 30.0, sweep_interval: float = 60.0):
        """
        Initialize the broadcaster.

        Args:
            heartbeat_interval: Seconds between HEARTBEAT events per connection
            sweep_interval: Seconds between stale connection sweeps
        """
        self.heartbeat_interval = heartbeat_interval
        self.sweep_interval = sweep_interval
        self.logger = get_app_logger("broadcaster")
        self.connections: Dict[Tuple[str, str], ClientConnection] = {}
        self._sweep_task: Optional[asyncio.Task] = None

    @property
    def connection_count(self) -> int:
        return len(self.connections)

    def get_connection(self, client_id: str, session_id: str) -> Optional[ClientConnection]:
        return self.connections.get((client_id, session_id))

    async def start(self):
        """Start the periodic sweep task."""
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.create_task(self._sweep_loop())
            self.logger.info(
                f"Broadcaster started (heartbeat {self.heartbeat_interval}s, sweep {self.sweep_interval}s)"
            )

    async def shutdown(self):
        """Stop sweeping and close every connection."""
        if self._sweep_task and not self._sweep_task.done():
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
        self._sweep_task = None

        for connection in list(self.connections.values()):
            await self.disconnect(connection, code=1001)

        self.logger.info("Broadcaster shut down")

    # === Connection lifecycle ===

    async def connect(
        self,
        websocket: WebSocket,
        client_id: str,
        session_id: Optional[str] = None
    ) -> ClientConnection:
        """
        Accept a WebSocket and register it.

        A client-supplied session id is reused as-is so a reconnecting client
        keeps its identity; otherwise a fresh one is generated. An existing
        entry under the same key is closed and replaced.

        Args:
            websocket: Incoming WebSocket
            client_id: Client network identity
            session_id: Optional session id from the client

        Returns:
            The registered connection
        """
        resumed = bool(session_id)
        connection = ClientConnection(
            websocket=websocket,
            client_id=client_id,
            session_id=session_id or str(uuid.uuid4()),
            resumed=resumed
        )

        await websocket.accept()

        stale = self.connections.get(connection.key)
        if stale is not None:
            self.logger.info(f"Replacing stale connection for session {connection.session_id}")
            await self.disconnect(stale)

        connection.state = ConnectionState.OPEN
        self.connections[connection.key] = connection

        await self.send(connection, EventType.CONNECTION_ESTABLISHED, {
            "session_id": connection.session_id,
            "resumed": resumed,
            "message": "Reconnected to NexusMinds" if resumed else "Connected to NexusMinds",
        })

        connection.heartbeat_task = asyncio.create_task(self._heartbeat(connection))
        self.logger.info(
            f"WebSocket connected: {client_id} session={connection.session_id} "
            f"(resumed={resumed}, total={self.connection_count})"
        )
        return connection

    async def disconnect(self, connection: ClientConnection, code: int = 1000):
        """
        Close a connection and drop it from the registry. Safe to call twice.

        Args:
            connection: Connection to close
            code: WebSocket close code
        """
        if connection.state in (ConnectionState.CLOSING, ConnectionState.CLOSED):
            return
        connection.state = ConnectionState.CLOSING

        # A reconnect may already own this key
        if self.connections.get(connection.key) is connection:
            del self.connections[connection.key]

        task = connection.heartbeat_task
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()

        if connection.websocket.application_state != WebSocketState.DISCONNECTED:
            try:
                await connection.websocket.close(code=code)
            except Exception as e:
                self.logger.debug(f"Close failed for session {connection.session_id}: {e}")

        connection.state = ConnectionState.CLOSED
        self.logger.info(
            f"WebSocket disconnected: {connection.client_id} session={connection.session_id} "
            f"(total={self.connection_count})"
        )

    # === Messaging ===

    async def send(self, connection: ClientConnection, event_type: str, data: Any) -> bool:
        """
        Send one {type, data} event to a single connection.

        Returns:
            True if sent, False if the connection is not open or the send failed
        """
        if connection.state != ConnectionState.OPEN:
            return False

        payload = jsonable_encoder({"type": event_type, "data": data})
        try:
            async with connection.send_lock:
                await connection.websocket.send_json(payload)
            return True
        except Exception as e:
            self.logger.warning(f"Send to session {connection.session_id} failed: {e}")
            return False

    async def broadcast(self, event_type: str, data: Any) -> int:
        """
        Send an event to every open connection.

        Per-connection failures are logged and never stop the remaining sends;
        failed connections are closed afterwards.

        Returns:
            Number of connections the event reached
        """
        targets = [c for c in list(self.connections.values()) if c.state == ConnectionState.OPEN]
        failed: List[ClientConnection] = []

        for connection in targets:
            if not await self.send(connection, event_type, data):
                failed.append(connection)

        for connection in failed:
            await self.disconnect(connection)

        delivered = len(targets) - len(failed)
        self.logger.debug(f"Broadcast {getattr(event_type, 'value', event_type)} to {delivered}/{len(targets)}")
        return delivered

    async def handle_client_message(self, connection: ClientConnection, raw: str):
        """
        React to an inbound client message.

        Only KEEP_ALIVE and PING are understood; everything else, including
        invalid JSON, is logged and ignored.
        """
        connection.last_seen = datetime.utcnow()
        try:
            message = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            self.logger.debug(f"Ignoring non-JSON message from session {connection.session_id}")
            return

        if not isinstance(message, dict):
            self.logger.debug(f"Ignoring non-object message from session {connection.session_id}")
            return

        message_type = message.get("type")
        try:
            if message_type == EventType.KEEP_ALIVE.value:
                await self.send(connection, EventType.KEEP_ALIVE_ACK, {"timestamp": datetime.utcnow()})
            elif message_type == EventType.PING.value:
                await self.send(connection, EventType.PONG, {"timestamp": datetime.utcnow()})
            else:
                self.logger.debug(f"Ignoring message type {message_type!r} from session {connection.session_id}")
        except Exception as e:
            self.logger.error(f"Error handling message from session {connection.session_id}: {e}")

    # === Liveness ===

    @staticmethod
    def is_open(connection: ClientConnection) -> bool:
        websocket = connection.websocket
        return (
            connection.state == ConnectionState.OPEN
            and websocket.client_state == WebSocketState.CONNECTED
            and websocket.application_state == WebSocketState.CONNECTED
        )

    async def _heartbeat(self, connection: ClientConnection):
        while connection.state == ConnectionState.OPEN:
            await asyncio.sleep(self.heartbeat_interval)
            if connection.state != ConnectionState.OPEN:
                break
            if not await self.send(connection, EventType.HEARTBEAT, {"timestamp": datetime.utcnow()}):
                self.logger.info(f"Heartbeat failed for session {connection.session_id}, closing")
                await self.disconnect(connection)
                break

    async def sweep(self) -> int:
        """Close registry entries whose socket is no longer open. Returns the number closed."""
        stale = [c for c in list(self.connections.values()) if not self.is_open(c)]
        for connection in stale:
            await self.disconnect(connection)
        if stale:
            self.logger.info(f"Swept {len(stale)} stale connections")
        return len(stale)

    async def _sweep_loop(self):
        while True:
            await asyncio.sleep(self.sweep_interval)
            try:
                await self.sweep()
            except Exception as e:
                self.logger.error(f"Connection sweep failed: {e}")
