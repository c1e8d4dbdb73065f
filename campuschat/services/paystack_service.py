# FILE: campuschat/services/paystack_service.py
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from campuschat.core.config import (
    PAYSTACK_BASE_URL,
    PAYSTACK_SECRET_KEY,
    PAYSTACK_TIMEOUT_SECONDS,
)
from campuschat.core.errors import DependencyUnavailable, VerificationFailed, VerifierUnavailable

logger = logging.getLogger("campuschat.paystack")


@dataclass
class VerificationResult:
    status: str
    paid_amount: Decimal
    raw: Dict[str, Any] = field(default_factory=dict)
    gateway_response: Optional[str] = None
    paid_at: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == "success" or self.gateway_response == "Approved"


class PaystackVerifier:
    """Looks up a transaction reference on Paystack."""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.secret_key = PAYSTACK_SECRET_KEY if secret_key is None else secret_key
        self.base_url = (base_url or PAYSTACK_BASE_URL).rstrip("/")
        self.timeout = timeout or PAYSTACK_TIMEOUT_SECONDS
        self.transport = transport

    async def verify(self, reference: str) -> VerificationResult:
        if not self.secret_key:
            raise DependencyUnavailable("Payment gateway is not configured")

        url = f"{self.base_url}/transaction/verify/{quote(reference, safe='')}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.get(
                    url,
                    headers={
                        "Authorization": f"Bearer {self.secret_key}",
                        "Content-Type": "application/json",
                        "Cache-Control": "no-cache",
                    },
                )
        except httpx.HTTPError as exc:
            logger.error("Paystack request failed for %s: %s", reference, exc)
            raise VerifierUnavailable() from exc

        if resp.status_code >= 500:
            logger.error("Paystack returned %s for %s", resp.status_code, reference)
            raise VerifierUnavailable()

        try:
            body = resp.json()
        except ValueError as exc:
            raise VerifierUnavailable("Invalid response from payment gateway") from exc

        if resp.status_code >= 400:
            message = body.get("message") if isinstance(body, dict) else None
            logger.warning("Paystack rejected %s: %s", reference, message)
            raise VerificationFailed(message or "Payment verification failed")

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict) or not data.get("status"):
            raise VerificationFailed("Invalid transaction data")

        try:
            # Paystack reports amounts in the lowest currency unit (kobo)
            paid_amount = Decimal(str(data.get("amount") or 0)) / 100
        except InvalidOperation as exc:
            raise VerificationFailed("Invalid transaction amount") from exc

        return VerificationResult(
            status=str(data.get("status")),
            paid_amount=paid_amount,
            raw=body,
            gateway_response=data.get("gateway_response"),
            paid_at=data.get("paid_at") or data.get("paidAt"),
        )


def get_paystack_verifier() -> PaystackVerifier:
    return PaystackVerifier()
