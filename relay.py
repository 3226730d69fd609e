"""
Real-time relay for forum and chat events over WebSockets.

The relay keeps track of connected sockets and the named rooms they joined.
It is created with the application and never persists messages.
"""
import logging
from collections import defaultdict
from typing import Any, DefaultDict, Dict, Set

from fastapi import WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder

log = logging.getLogger(__name__)

FORUM_ROOM = "forum"


class ForumRelay:
    def __init__(self):
        self.rooms: DefaultDict[str, Set[WebSocket]] = defaultdict(set)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.join(websocket, FORUM_ROOM)

    def disconnect(self, websocket: WebSocket) -> None:
        for room in list(self.rooms):
            self.leave(websocket, room)

    def join(self, websocket: WebSocket, room: str) -> None:
        self.rooms[room].add(websocket)

    def leave(self, websocket: WebSocket, room: str) -> None:
        members = self.rooms.get(room)
        if members is None:
            return
        members.discard(websocket)
        if not members:
            del self.rooms[room]

    def members(self, room: str) -> int:
        return len(self.rooms.get(room, ()))

    async def send(self, websocket: WebSocket, event: str, data: Any) -> None:
        await websocket.send_json({"event": event, "data": jsonable_encoder(data)})

    async def broadcast(self, event: str, data: Any, room: str = FORUM_ROOM) -> int:
        """Send an event to every socket in `room`. Returns how many received it."""
        message: Dict[str, Any] = {"event": event, "data": jsonable_encoder(data)}
        delivered = 0
        for websocket in list(self.rooms.get(room, ())):
            try:
                await websocket.send_json(message)
                delivered += 1
            except (WebSocketDisconnect, RuntimeError, OSError):
                log.warning("Dropping dead socket from room %s", room)
                self.disconnect(websocket)
        return delivered
