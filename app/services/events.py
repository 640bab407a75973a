"""
Event Broadcaster
Pushes state-change events to every connected WebSocket observer.
Best effort: no queueing, no replay, no delivery guarantee.
"""

import logging
from typing import Any, List, Set

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel
from starlette.websockets import WebSocketState

from app.schemas.events import EventMessage, EventType

logger = logging.getLogger(__name__)


def encode_event(kind: EventType, payload: Any) -> str:
    """Serialize `{type, data}`; entity payloads use their camelCase JSON."""
    if isinstance(payload, BaseModel):
        data = payload.model_dump(mode="json", by_alias=True)
    else:
        data = jsonable_encoder(payload)
    return EventMessage(type=kind, data=data).model_dump_json()


def _is_ready(websocket: WebSocket) -> bool:
    return (
        websocket.client_state == WebSocketState.CONNECTED
        and websocket.application_state == WebSocketState.CONNECTED
    )


class EventBroadcaster:
    """Registry of observer connections."""
    
    def __init__(self):
        self._connections: Set[WebSocket] = set()
    
    @property
    def connection_count(self) -> int:
        return len(self._connections)
    
    async def connect(self, websocket: WebSocket) -> None:
        # Registered before the handshake completes; not sent to until CONNECTED
        self._connections.add(websocket)
        try:
            await websocket.accept()
        except Exception:
            self._connections.discard(websocket)
            raise
        logger.info(f"WebSocket client connected ({self.connection_count} open)")
    
    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self._connections:
            self._connections.discard(websocket)
            logger.info(f"WebSocket client disconnected ({self.connection_count} open)")
    
    async def broadcast(self, kind: EventType, payload: Any) -> int:
        """
        Send one event to every ready observer.
        
        Returns the number of observers the event was delivered to.
        """
        message = encode_event(kind, payload)
        delivered = 0
        dead: List[WebSocket] = []
        
        # Snapshot: connections may come and go while we await sends
        for websocket in list(self._connections):
            if not _is_ready(websocket):
                continue
            try:
                await websocket.send_text(message)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping WebSocket client after failed send: {e}")
                dead.append(websocket)
        
        for websocket in dead:
            self.disconnect(websocket)
        
        logger.debug(f"Broadcast {EventType(kind).value} to {delivered} client(s)")
        return delivered
