# FILE: campuschat/services/chat_service.py
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campuschat.core.config import ANON_IMAGE_COST, ANON_TEXT_COST, CHAT_HISTORY_LIMIT, CHAT_ROOM
from campuschat.core.database import SessionLocal
from campuschat.models.message import ChatMessage
from campuschat.schemas.chat import ChatMessageIn
from campuschat.services import ledger_service

logger = logging.getLogger("campuschat.chat")

ANONYMOUS_SENDER = "Anonymous"


@dataclass
class SentMessage:
    message: Dict[str, Any]
    # Sender's balance after the debit; None when nothing was charged
    balance: Optional[int] = None


def message_cost(kind: str) -> int:
    return ANON_IMAGE_COST if kind == "meme" else ANON_TEXT_COST


def serialize_message(msg: ChatMessage) -> Dict[str, Any]:
    return {
        "id": msg.id,
        "text": msg.text or "",
        "sender": msg.sender,
        "isAnonymous": bool(msg.is_anonymous),
        "type": msg.kind,
        "imageUrl": msg.image_url,
        "caption": msg.caption,
        "timestamp": msg.created_at.replace(tzinfo=timezone.utc).isoformat(),
    }


async def send_message(user_id: int, sender: str, data: ChatMessageIn) -> SentMessage:
    """Store a chat message, charging the sender first when it is anonymous.

    The debit and the insert share one transaction: if the user cannot pay,
    nothing is stored.
    """

    async def _store(db: AsyncSession) -> SentMessage:
        balance = None
        if data.is_anonymous:
            balance = await ledger_service.debit(db, user_id, message_cost(data.kind))

        msg = ChatMessage(
            room_id=CHAT_ROOM,
            text=data.text,
            sender=ANONYMOUS_SENDER if data.is_anonymous else sender,
            is_anonymous=data.is_anonymous,
            kind=data.kind,
            image_url=data.image_url,
            caption=data.caption,
            created_at=datetime.utcnow(),
        )
        db.add(msg)
        await db.flush()
        return SentMessage(message=serialize_message(msg), balance=balance)

    sent = await ledger_service.run_ledger_transaction(_store)
    logger.info(
        "Message %s stored (anonymous=%s, kind=%s)",
        sent.message["id"], data.is_anonymous, data.kind,
    )
    return sent


async def recent_messages(limit: int = CHAT_HISTORY_LIMIT, room: str = CHAT_ROOM) -> List[Dict[str, Any]]:
    """Newest ``limit`` messages of the room, oldest first."""
    async with SessionLocal() as db:
        rows = (
            await db.execute(
                select(ChatMessage)
                .where(ChatMessage.room_id == room)
                .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
                .limit(limit)
            )
        ).scalars().all()
    return [serialize_message(m) for m in reversed(rows)]
