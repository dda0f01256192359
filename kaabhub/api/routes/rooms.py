"""
kaabhub.api.routes.rooms — Question room WebSocket
====================================================

Protocol (JSON text frames)::

    → {"type": "join-question",  "questionId": 12}
    ← {"event": "joined", "room": "question-12"}
    → {"type": "leave-question", "questionId": 12}
    ← {"event": "left", "room": "question-12"}

Pushes arriving while joined look like
``{"event": "new-answer", "questionId": 12, "data": {...}}``.
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from kaabhub.database.engine import run_db
from kaabhub.services import question_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["rooms"])


def _parse(raw: str) -> tuple[str, int]:
    """Return ``(type, question_id)`` or raise ValueError."""
    message = json.loads(raw)
    if not isinstance(message, dict):
        raise ValueError("message must be an object")
    kind = message.get("type")
    if kind not in ("join-question", "leave-question"):
        raise ValueError(f"unknown message type {kind!r}")
    question_id = message.get("questionId")
    if isinstance(question_id, bool) or not isinstance(question_id, int | str):
        raise ValueError("questionId is required")
    return kind, int(question_id)


@router.websocket("/ws")
async def question_rooms(websocket: WebSocket):
    context = websocket.app.state.context
    hub = context.hub
    await websocket.accept()
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            raw = message.get("text")
            try:
                if raw is None:
                    raise ValueError("binary frames are not supported")
                kind, question_id = _parse(raw)
            except ValueError as exc:
                # json.JSONDecodeError is a ValueError too
                logger.warning("Rejected socket message: %s", exc)
                await websocket.send_json({"event": "error", "message": str(exc)})
                continue

            if kind == "leave-question":
                room = hub.leave(websocket, question_id)
                await websocket.send_json({"event": "left", "room": room})
                continue

            if not await run_db(question_service.question_exists, context.engine, question_id):
                await websocket.send_json({"event": "error", "message": "Question not found"})
                continue
            room = hub.join(websocket, question_id)
            await websocket.send_json({"event": "joined", "room": room})
    except WebSocketDisconnect:
        logger.debug("Socket disconnected")
    finally:
        hub.disconnect(websocket)
