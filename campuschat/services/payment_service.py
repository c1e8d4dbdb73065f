# FILE: campuschat/services/payment_service.py
"""Coin top-up settlement.

A settlement verifies the payment with the gateway first, outside any ledger
transaction, and only then opens one short transaction that records the
reference and credits the coins together.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from campuschat.core.config import COIN_PRICE_TABLE
from campuschat.core.database import SessionLocal
from campuschat.core.errors import (
    AmountMismatch,
    DuplicateReference,
    ValidationError,
    VerificationFailed,
)
from campuschat.models.payment_transaction import PaymentTransaction
from campuschat.services import ledger_service
from campuschat.services.paystack_service import VerificationResult, get_paystack_verifier

logger = logging.getLogger("campuschat.payments")


class PaymentVerifier(Protocol):
    async def verify(self, reference: str) -> VerificationResult: ...


@dataclass
class Settlement:
    new_balance: int
    transaction: PaymentTransaction


def expected_amount(coins: int, price_table: Optional[Dict[int, Decimal]] = None) -> Decimal:
    table = COIN_PRICE_TABLE if price_table is None else price_table
    if coins not in table:
        raise ValidationError(f"Unknown coin package: {coins}")
    return table[coins]


async def reference_exists(db: AsyncSession, reference: str) -> bool:
    found = (
        await db.execute(
            select(PaymentTransaction.id).where(PaymentTransaction.reference == reference)
        )
    ).first()
    return found is not None


async def _record_failed(user_id: int, reference: str, coins: int, result: VerificationResult) -> None:
    async with SessionLocal() as db:
        db.add(PaymentTransaction(
            user_id=user_id,
            reference=reference,
            amount=result.paid_amount,
            coins=coins,
            status="failed",
            raw=result.raw,
            created_at=datetime.utcnow(),
        ))
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.warning("Reference %s was recorded concurrently", reference)


async def settle(
    user_id: int,
    reference: str,
    claimed_coins: int,
    verifier: Optional[PaymentVerifier] = None,
    price_table: Optional[Dict[int, Decimal]] = None,
) -> Settlement:
    reference = (reference or "").strip()
    if not reference:
        raise ValidationError("Payment reference is required")
    price = expected_amount(claimed_coins, price_table)

    async with SessionLocal() as db:
        if await reference_exists(db, reference):
            logger.warning("Rejected replayed payment reference %s (user %s)", reference, user_id)
            raise DuplicateReference()

    verifier = verifier or get_paystack_verifier()
    result = await verifier.verify(reference)
    if not result.success:
        logger.warning("Payment %s not successful: status=%s", reference, result.status)
        raise VerificationFailed()

    if result.paid_amount != price:
        logger.warning(
            "Amount mismatch for %s: expected %s, paid %s", reference, price, result.paid_amount
        )
        await _record_failed(user_id, reference, claimed_coins, result)
        raise AmountMismatch(
            f"Payment amount mismatch. Expected {price}, got {result.paid_amount}"
        )

    async def _apply(db: AsyncSession):
        txn = PaymentTransaction(
            user_id=user_id,
            reference=reference,
            amount=result.paid_amount,
            coins=claimed_coins,
            status="success",
            raw=result.raw,
            paid_at=datetime.utcnow(),
            created_at=datetime.utcnow(),
        )
        db.add(txn)
        await db.flush()
        balance = await ledger_service.credit(db, user_id, claimed_coins)
        return Settlement(new_balance=balance, transaction=txn)

    try:
        settlement = await ledger_service.run_ledger_transaction(_apply)
    except IntegrityError as exc:
        logger.warning("Reference %s settled concurrently", reference)
        raise DuplicateReference() from exc

    logger.info(
        "Settled %s: +%s coins for user %s (balance %s)",
        reference, claimed_coins, user_id, settlement.new_balance,
    )
    return settlement
