# /campuschat/models/message.py
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, Text, Boolean, DateTime

from campuschat.core.config import CHAT_ROOM
from campuschat.core.database import Base


class ChatMessage(Base):
    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    room_id: Mapped[str] = mapped_column(String(60), default=CHAT_ROOM, index=True)

    text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sender: Mapped[str] = mapped_column(String(60))
    is_anonymous: Mapped[bool] = mapped_column(Boolean, default=False)

    # Kind: text, meme
    kind: Mapped[str] = mapped_column(String(10), default="text")
    image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    caption: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
