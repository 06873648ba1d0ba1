from typing import Any, Dict, List, Set

from fastapi import WebSocket, WebSocketDisconnect

from schoolportal.core.logging import logger


class ConnectionManager:
    """
    In-process chat rooms keyed by appointment id.

    Delivery is best effort: a socket that fails to receive is dropped from
    every room and the remaining peers still get the frame.
    """

    def __init__(self):
        self.active_connections: List[WebSocket] = []
        self.rooms: Dict[str, Set[WebSocket]] = {}

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
        for room_id in list(self.rooms):
            self.leave(room_id, websocket)

    def join(self, room_id: str, websocket: WebSocket) -> None:
        self.rooms.setdefault(str(room_id), set()).add(websocket)

    def leave(self, room_id: str, websocket: WebSocket) -> None:
        members = self.rooms.get(str(room_id))
        if members is None:
            return
        members.discard(websocket)
        if not members:
            del self.rooms[str(room_id)]

    def is_member(self, room_id: str, websocket: WebSocket) -> bool:
        return websocket in self.rooms.get(str(room_id), set())

    def room_size(self, room_id: str) -> int:
        return len(self.rooms.get(str(room_id), set()))

    async def send_event(self, websocket: WebSocket, event: str, data: Any) -> bool:
        try:
            await websocket.send_json({"event": event, "data": data})
            return True
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.warning(f"Dropping chat socket after failed send: {str(e)}")
            self.disconnect(websocket)
            return False

    async def relay(self, room_id: str, event: str, data: Any, sender: WebSocket) -> int:
        """Send ``event`` to every other socket in the room. Returns deliveries."""
        delivered = 0
        for connection in list(self.rooms.get(str(room_id), set())):
            if connection is sender:
                continue
            if await self.send_event(connection, event, data):
                delivered += 1
        return delivered


manager = ConnectionManager()
