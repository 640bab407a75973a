"""
Events WebSocket
Push channel: every connected client receives every broadcast event.
"""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

router = APIRouter()


@router.websocket("/ws")
async def event_stream(websocket: WebSocket):
    broadcaster = websocket.app.state.broadcaster
    await broadcaster.connect(websocket)
    try:
        # One-way channel; inbound messages are read only to notice the close
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        broadcaster.disconnect(websocket)
