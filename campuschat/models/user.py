# /campuschat/models/user.py
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, DateTime, CheckConstraint

from campuschat.core.config import SIGNUP_BONUS_COINS
from campuschat.core.database import Base


class User(Base):
    """Chat member and coin balance holder."""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("coins >= 0", name="ck_users_coins_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(190), unique=True, index=True)
    username: Mapped[str] = mapped_column(String(60))
    school_domain: Mapped[str] = mapped_column(String(190), index=True)

    # Only ever changed through ledger_service (conditional update)
    coins: Mapped[int] = mapped_column(Integer, default=SIGNUP_BONUS_COINS)

    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
