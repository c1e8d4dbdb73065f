# FILE: campuschat/services/ledger_service.py
"""Coin balance mutations.

Balances are changed with a compare-and-swap: the row is updated only if the
stored balance still equals the value read a moment earlier. Losing that race
raises ``ConcurrentModification``; callers go through
``run_ledger_transaction`` which retries the whole unit of work a bounded
number of times.

``debit`` and ``credit`` never commit. They run inside whatever transaction
the caller holds, so a failure later in the same unit rolls them back.
"""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from campuschat.core.config import LEDGER_RETRY_ATTEMPTS
from campuschat.core.database import SessionLocal
from campuschat.core.errors import (
    ConcurrentModification,
    InsufficientFunds,
    NotFound,
    ValidationError,
)
from campuschat.models.user import User

logger = logging.getLogger("campuschat.ledger")

T = TypeVar("T")


def _check_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValidationError("Coin amount must be a positive integer")


async def get_balance(db: AsyncSession, user_id: int) -> int:
    coins = (
        await db.execute(select(User.coins).where(User.id == user_id))
    ).scalar_one_or_none()
    if coins is None:
        raise NotFound("User not found")
    return int(coins)


async def swap_balance(db: AsyncSession, user_id: int, expected: int, new_balance: int) -> None:
    """Set the balance to ``new_balance`` only if it still equals ``expected``."""
    result = await db.execute(
        update(User)
        .where(User.id == user_id, User.coins == expected)
        .values(coins=new_balance)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        logger.warning(
            "Balance CAS lost for user %s (expected %s -> %s)", user_id, expected, new_balance
        )
        raise ConcurrentModification()


async def debit(db: AsyncSession, user_id: int, amount: int) -> int:
    _check_amount(amount)
    balance = await get_balance(db, user_id)
    if balance < amount:
        raise InsufficientFunds(balance=balance, required=amount)

    new_balance = balance - amount
    await swap_balance(db, user_id, balance, new_balance)
    logger.info("Debited %s coins from user %s: %s -> %s", amount, user_id, balance, new_balance)
    return new_balance


async def credit(db: AsyncSession, user_id: int, amount: int) -> int:
    _check_amount(amount)
    balance = await get_balance(db, user_id)

    new_balance = balance + amount
    await swap_balance(db, user_id, balance, new_balance)
    logger.info("Credited %s coins to user %s: %s -> %s", amount, user_id, balance, new_balance)
    return new_balance


async def run_ledger_transaction(
    work: Callable[[AsyncSession], Awaitable[T]],
    attempts: Optional[int] = None,
) -> T:
    """Run ``work`` in a fresh session and transaction, retrying lost CAS races.

    Any other exception rolls the transaction back and propagates unchanged.
    """
    attempts = max(1, attempts or LEDGER_RETRY_ATTEMPTS)
    for attempt in range(1, attempts + 1):
        try:
            async with SessionLocal() as db:
                async with db.begin():
                    return await work(db)
        except ConcurrentModification:
            if attempt >= attempts:
                logger.error("Ledger transaction gave up after %s attempts", attempts)
                raise
            logger.info("Retrying ledger transaction (attempt %s/%s)", attempt + 1, attempts)
    raise ConcurrentModification()
