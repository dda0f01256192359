"""
kaabhub.services.room_hub — Per-Question WebSocket Rooms
=========================================================

Clients viewing a question join its room (``question-<id>``) and receive a
push when someone answers it or an answer is accepted.

Delivery is fire-and-forget: routes schedule :meth:`QuestionRoomHub.broadcast`
as a background task after the response is sent, sockets that fail to
receive are dropped from every room, and nothing is retried or replayed.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any

from starlette.websockets import WebSocket

from kaabhub.constants import room_name

logger = logging.getLogger(__name__)


class QuestionRoomHub:
    """Room membership for connected sockets.

    All methods run on the event loop, so plain dict/set access is safe.
    """

    def __init__(self) -> None:
        self._rooms: dict[str, set[WebSocket]] = defaultdict(set)

    def join(self, websocket: WebSocket, question_id: int) -> str:
        room = room_name(question_id)
        self._rooms[room].add(websocket)
        return room

    def leave(self, websocket: WebSocket, question_id: int) -> str:
        room = room_name(question_id)
        members = self._rooms.get(room)
        if members is not None:
            members.discard(websocket)
            if not members:
                del self._rooms[room]
        return room

    def disconnect(self, websocket: WebSocket) -> None:
        """Remove *websocket* from every room it joined."""
        for room in list(self._rooms):
            members = self._rooms[room]
            members.discard(websocket)
            if not members:
                del self._rooms[room]

    def member_count(self, question_id: int) -> int:
        return len(self._rooms.get(room_name(question_id), ()))

    def rooms_of(self, websocket: WebSocket) -> list[str]:
        return sorted(room for room, members in self._rooms.items() if websocket in members)

    async def broadcast(self, question_id: int, event: str, data: dict[str, Any]) -> int:
        """Send ``{"event", "questionId", "data"}`` to the question's room.

        Returns the number of sockets that received it.
        """
        room = room_name(question_id)
        members = list(self._rooms.get(room, ()))
        if not members:
            return 0

        payload = {"event": event, "questionId": question_id, "data": data}
        delivered = 0
        for websocket in members:
            try:
                await websocket.send_json(payload)
                delivered += 1
            except Exception:
                logger.warning("Dropping dead socket from %s", room, exc_info=True)
                self.disconnect(websocket)
        logger.debug("Broadcast %s to %d/%d member(s) of %s", event, delivered, len(members), room)
        return delivered
