# /campuschat/api/chat_ws.py
"""
WebSocket endpoint for the shared chat room.

Frames are JSON objects ``{"event": <name>, "data": <payload>}`` in both
directions. The acting user is always the one the socket authenticated as.
"""
import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Query
from pydantic import ValidationError as PydanticValidationError

from campuschat.core.config import CHAT_ROOM, COOKIE_NAME
from campuschat.core.database import SessionLocal
from campuschat.core.errors import AppError, InsufficientFunds
from campuschat.schemas.chat import ChatMessageIn, JoinChatRequest
from campuschat.services import chat_service, ledger_service, user_service
from campuschat.services.auth_service import decode_token
from campuschat.services.chat_hub import hub

router = APIRouter(tags=["chat"])
logger = logging.getLogger("campuschat.chat")

POLICY_VIOLATION = 1008


async def _authenticate(websocket: WebSocket, token: Optional[str]):
    user_id = decode_token(token or websocket.cookies.get(COOKIE_NAME))
    async with SessionLocal() as db:
        return await user_service.get_user(db, user_id)


async def _send_balance(websocket: WebSocket, user_id: int) -> None:
    async with SessionLocal() as db:
        coins = await ledger_service.get_balance(db, user_id)
    await hub.emit(websocket, "coin_balance", {"coins": coins})


async def handle_join(websocket: WebSocket, user, data: Dict[str, Any]) -> None:
    join = JoinChatRequest.model_validate(data or {})
    if join.user_id is not None and join.user_id != user.id:
        logger.warning("Socket for user %s tried to join as %s", user.id, join.user_id)

    hub.join(websocket, CHAT_ROOM)
    logger.info("%s joined the chat", user.username)

    await hub.emit(websocket, "recent_messages", await chat_service.recent_messages())
    await _send_balance(websocket, user.id)


async def handle_send(websocket: WebSocket, user, data: Dict[str, Any]) -> None:
    if not hub.is_member(websocket, CHAT_ROOM):
        await hub.emit(websocket, "error", {"message": "Join the chat before sending messages"})
        return

    try:
        message = ChatMessageIn.model_validate(data or {})
    except PydanticValidationError as exc:
        errors = exc.errors()
        detail = errors[0]["msg"] if errors else "Invalid message"
        await hub.emit(websocket, "error", {"message": detail.removeprefix("Value error, ")})
        return

    # re-read so a rename made over HTTP applies to an open socket
    async with SessionLocal() as db:
        sender = (await user_service.get_user(db, user.id)).username

    try:
        sent = await chat_service.send_message(user.id, sender, message)
    except InsufficientFunds:
        await hub.emit(websocket, "error", {"message": "Insufficient coins for anonymous message"})
        return
    except AppError as exc:
        await hub.emit(websocket, "error", {"message": exc.message})
        return

    # balance goes to the sender only
    if sent.balance is not None:
        await hub.emit(websocket, "coin_balance", {"coins": sent.balance})
    await hub.broadcast(CHAT_ROOM, "new_message", sent.message)


HANDLERS = {
    "join_chat": handle_join,
    "send_message": handle_send,
}


@router.websocket("/ws/chat")
async def chat_websocket(websocket: WebSocket, token: Optional[str] = Query(None)):
    try:
        user = await _authenticate(websocket, token)
    except AppError as exc:
        logger.info("Rejected chat socket: %s", exc.message)
        await websocket.close(code=POLICY_VIOLATION)
        return

    await websocket.accept()
    logger.info("User %s connected", user.id)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                frame = json.loads(raw)
            except ValueError:
                await hub.emit(websocket, "error", {"message": "Malformed frame"})
                continue
            if not isinstance(frame, dict):
                await hub.emit(websocket, "error", {"message": "Malformed frame"})
                continue

            event = frame.get("event")
            handler = HANDLERS.get(event)
            if handler is None:
                await hub.emit(websocket, "error", {"message": f"Unknown event: {event}"})
                continue

            try:
                await handler(websocket, user, frame.get("data") or {})
            except AppError as exc:
                await hub.emit(websocket, "error", {"message": exc.message})
            except PydanticValidationError:
                await hub.emit(websocket, "error", {"message": "Invalid payload"})
            except WebSocketDisconnect:
                raise
            except Exception:
                logger.exception("Chat event %s failed for user %s", event, user.id)
                await hub.emit(websocket, "error", {"message": "Failed to process message"})

    except WebSocketDisconnect:
        pass
    finally:
        hub.leave(websocket)
        logger.info("User %s disconnected", user.id)
