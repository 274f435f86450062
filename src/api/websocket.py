"""WebSocket handlers for the live dashboard feed."""

import json
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ValidationError

from src.engine.events import EngineEvent
from src.engine.service import RestaurantEngine
from src.utils.logging import get_logger

logger = get_logger(__name__)


class WebSocketMessage(BaseModel):
    """Client message format."""

    type: str  # "ping", "snapshot"
    content: str | None = None
    metadata: dict[str, Any] = {}


class DashboardConnectionManager:
    """Tracks dashboard sockets and fans engine events out to them."""

    def __init__(self) -> None:
        self.active_connections: dict[int, WebSocket] = {}

    async def connect(self, websocket: WebSocket) -> int:
        """Accept and register a WebSocket connection."""
        await websocket.accept()
        connection_id = id(websocket)
        self.active_connections[connection_id] = websocket
        logger.info("websocket_connected", connection_id=connection_id)
        return connection_id

    def disconnect(self, connection_id: int) -> None:
        """Remove a WebSocket connection."""
        if connection_id in self.active_connections:
            del self.active_connections[connection_id]
            logger.info("websocket_disconnected", connection_id=connection_id)

    async def broadcast(self, event: EngineEvent) -> None:
        """Send an engine event to every dashboard. Dead sockets are dropped."""
        message = {"type": "event", "event": event.model_dump(mode="json")}
        for connection_id, websocket in list(self.active_connections.items()):
            try:
                await websocket.send_json(message)
            except Exception as e:
                logger.warning("websocket_send_failed", connection_id=connection_id, error=str(e))
                self.disconnect(connection_id)


async def send_snapshot(websocket: WebSocket, engine: RestaurantEngine) -> None:
    """Send funds, low stock and insights so a new dashboard can render at once."""
    financial = await engine.get_financial_status()
    low_stock = await engine.get_low_stock()
    insights = await engine.get_insights()
    await websocket.send_json(
        {
            "type": "snapshot",
            "financial": financial.model_dump(mode="json"),
            "low_stock": [item.model_dump(mode="json") for item in low_stock],
            "insights": insights,
        }
    )


async def handle_dashboard_websocket(
    websocket: WebSocket,
    manager: DashboardConnectionManager,
    engine: RestaurantEngine,
) -> None:
    """
    Handle a dashboard WebSocket connection.

    Engine events are pushed by ``DashboardConnectionManager.broadcast``;
    this loop only answers pings and snapshot requests.
    """
    connection_id = await manager.connect(websocket)
    await send_snapshot(websocket, engine)

    try:
        while True:
            data = await websocket.receive_text()

            try:
                ws_message = WebSocketMessage(**json.loads(data))

                if ws_message.type == "ping":
                    await websocket.send_json({"type": "pong"})
                elif ws_message.type == "snapshot":
                    await send_snapshot(websocket, engine)

            except (ValidationError, json.JSONDecodeError, TypeError) as e:
                await websocket.send_json(
                    {
                        "type": "error",
                        "message": "Invalid message format",
                        "details": str(e),
                    }
                )

    except WebSocketDisconnect:
        manager.disconnect(connection_id)
        logger.info("websocket_client_disconnected", connection_id=connection_id)

    except Exception as e:
        logger.error("websocket_error", connection_id=connection_id, error=str(e))
        manager.disconnect(connection_id)
