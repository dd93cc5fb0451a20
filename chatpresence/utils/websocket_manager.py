import logging
from typing import Dict, List

from fastapi import WebSocket


logger = logging.getLogger(__name__)


class ConnectionManager:
    """Open typing sockets per user; a user may have several tabs open."""

    def __init__(self) -> None:
        self.active_connections: Dict[str, List[WebSocket]] = {}

    async def connect(self, user_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        sockets = self.active_connections.setdefault(user_id, [])
        sockets.append(websocket)
        logger.debug("Typing socket opened for %s (%d open)", user_id, len(sockets))

    def disconnect(self, user_id: str, websocket: WebSocket) -> None:
        sockets = self.active_connections.get(user_id)
        if not sockets:
            return
        if websocket in sockets:
            sockets.remove(websocket)
        if not sockets:
            self.active_connections.pop(user_id, None)

    async def send_personal_message(self, receiver_id: str, message: str) -> int:
        """Send to every socket of receiver_id. Returns how many sockets took the message."""
        delivered = 0
        for websocket in list(self.active_connections.get(receiver_id, [])):
            try:
                await websocket.send_text(message)
            except Exception as exc:
                logger.warning("Dropping dead typing socket of %s: %s", receiver_id, exc)
                self.disconnect(receiver_id, websocket)
                continue
            delivered += 1
        return delivered
