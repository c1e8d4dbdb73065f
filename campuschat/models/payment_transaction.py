# /campuschat/models/payment_transaction.py
from datetime import datetime
from decimal import Decimal
from typing import Optional, Any
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, ForeignKey, DateTime, JSON, Numeric

from campuschat.core.database import Base


class PaymentTransaction(Base):
    """One settlement attempt for a gateway payment reference."""
    __tablename__ = "payment_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)

    # Unique: a reference can be settled at most once
    reference: Mapped[str] = mapped_column(String(190), unique=True, index=True)

    # Amount paid in currency units (not kobo)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    coins: Mapped[int] = mapped_column(Integer)

    # Status: pending, success, failed
    status: Mapped[str] = mapped_column(String(20), default="pending")

    # Raw verifier response
    raw: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)

    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
