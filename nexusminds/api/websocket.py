"""WebSocket endpoint for real-time conversation events."""

from typing import Optional
from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from ..services import Broadcaster
from ..utils.logger import get_app_logger

router = APIRouter(tags=["websocket"])

# Global broadcaster instance (will be set by main.py)
broadcaster: Broadcaster = None
logger = get_app_logger()


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    session_id: Optional[str] = Query(None, max_length=100)
):
    """
    WebSocket endpoint streaming conversation events.

    Args:
        websocket: WebSocket connection
        session_id: Session ID from a previous connection, reused on reconnect
    """
    if broadcaster is None:
        await websocket.close(code=1011)
        return

    client_id = websocket.client.host if websocket.client else "unknown"
    connection = await broadcaster.connect(websocket, client_id, session_id)

    try:
        # Listen for messages from client
        while True:
            data = await websocket.receive_text()
            await broadcaster.handle_client_message(connection, data)

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected by client: session={connection.session_id}")

    except Exception as e:
        logger.error(f"WebSocket error for session {connection.session_id}: {e}")

    finally:
        await broadcaster.disconnect(connection)
