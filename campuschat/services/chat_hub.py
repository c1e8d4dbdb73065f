# FILE: campuschat/services/chat_hub.py
import logging
from collections import defaultdict
from typing import Any, Dict, Set

from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

logger = logging.getLogger("campuschat.chat")


class ChatHub:
    """In-process room registry for connected chat sockets."""

    def __init__(self):
        self._rooms: Dict[str, Set[WebSocket]] = defaultdict(set)

    def join(self, ws: WebSocket, room: str) -> None:
        self._rooms[room].add(ws)

    def leave(self, ws: WebSocket) -> None:
        for room in list(self._rooms):
            self._rooms[room].discard(ws)
            if not self._rooms[room]:
                del self._rooms[room]

    def members(self, room: str) -> Set[WebSocket]:
        return set(self._rooms.get(room, ()))

    def is_member(self, ws: WebSocket, room: str) -> bool:
        return ws in self._rooms.get(room, ())

    async def emit(self, ws: WebSocket, event: str, payload: Any) -> None:
        """Send one event to a single connection."""
        if ws.client_state == WebSocketState.CONNECTED:
            await ws.send_json({"event": event, "data": payload})

    async def broadcast(self, room: str, event: str, payload: Any) -> None:
        for ws in self.members(room):
            try:
                await self.emit(ws, event, payload)
            except (WebSocketDisconnect, RuntimeError, ConnectionError) as exc:
                logger.info("Dropping dead chat socket: %s", exc)
                self.leave(ws)


hub = ChatHub()
