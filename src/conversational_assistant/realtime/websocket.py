from fastapi import WebSocket
from fastapi.websockets import WebSocketState


class WebSocketConnection:
    """Adapts a FastAPI websocket to the hub's 'Connection' protocol."""

    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket

    @property
    def is_open(self) -> bool:
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def send_text(self, data: str) -> None:
        await self.websocket.send_text(data)
