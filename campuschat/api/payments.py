# FILE: campuschat/api/payments.py
"""Coin top-up endpoints."""

from typing import List

from fastapi import APIRouter, Depends

from campuschat.api.deps import get_current_user
from campuschat.core.config import COIN_CURRENCY, COIN_PRICE_TABLE
from campuschat.schemas.payments import (
    CoinPackage,
    PaymentVerifyRequest,
    PaymentVerifyResponse,
    TransactionSummary,
)
from campuschat.services import payment_service
from campuschat.services.paystack_service import PaystackVerifier, get_paystack_verifier

router = APIRouter(prefix="/api/payment", tags=["payments"])


@router.get("/packages", response_model=List[CoinPackage])
async def get_coin_packages():
    return [
        CoinPackage(coins=coins, price=price, currency=COIN_CURRENCY)
        for coins, price in sorted(COIN_PRICE_TABLE.items())
    ]


@router.post("/verify/{reference}", response_model=PaymentVerifyResponse)
async def verify_payment(
        reference: str,
        req: PaymentVerifyRequest,
        user=Depends(get_current_user),
        verifier: PaystackVerifier = Depends(get_paystack_verifier),
):
    """Verify a Paystack payment and credit the purchased coins once."""
    settlement = await payment_service.settle(user["id"], reference, req.coins, verifier=verifier)
    txn = settlement.transaction

    return PaymentVerifyResponse(
        success=True,
        message=f"Successfully added {req.coins} coins to your balance",
        coins=settlement.new_balance,
        newBalance=settlement.new_balance,
        transaction=TransactionSummary(
            reference=txn.reference,
            amount=txn.amount,
            coins=txn.coins,
            status=txn.status,
            paid_at=txn.paid_at,
        ),
    )
