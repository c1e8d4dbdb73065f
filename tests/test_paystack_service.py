"""
Paystack verifier tests against a mocked HTTP transport.
"""

from decimal import Decimal

import httpx
import pytest

from campuschat.core.errors import DependencyUnavailable, VerificationFailed, VerifierUnavailable
from campuschat.services.paystack_service import PaystackVerifier


def verifier_for(handler, secret_key="sk_test_123"):
    return PaystackVerifier(
        secret_key=secret_key,
        base_url="https://paystack.test",
        transport=httpx.MockTransport(handler),
    )


class TestPaystackVerifier:

    @pytest.mark.asyncio
    async def test_success_converts_kobo_to_currency_units(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={
                "status": True,
                "message": "Verification successful",
                "data": {"status": "success", "amount": 20000, "gateway_response": "Successful"},
            })

        result = await verifier_for(handler).verify("ref 1/x")

        assert result.success
        assert result.paid_amount == Decimal("200")
        assert result.raw["data"]["amount"] == 20000
        assert seen["url"] == "https://paystack.test/transaction/verify/ref%201%2Fx"
        assert seen["auth"] == "Bearer sk_test_123"

    @pytest.mark.asyncio
    async def test_approved_gateway_response_counts_as_success(self):
        def handler(request):
            return httpx.Response(200, json={
                "data": {"status": "ongoing", "amount": 40000, "gateway_response": "Approved"},
            })

        result = await verifier_for(handler).verify("ref")

        assert result.success

    @pytest.mark.asyncio
    async def test_failed_status_is_not_success(self):
        def handler(request):
            return httpx.Response(200, json={
                "data": {"status": "failed", "amount": 20000, "gateway_response": "Declined"},
            })

        result = await verifier_for(handler).verify("ref")

        assert not result.success

    @pytest.mark.asyncio
    async def test_missing_data_fails_verification(self):
        def handler(request):
            return httpx.Response(200, json={"status": True})

        with pytest.raises(VerificationFailed):
            await verifier_for(handler).verify("ref")

    @pytest.mark.asyncio
    async def test_unknown_reference(self):
        def handler(request):
            return httpx.Response(400, json={"status": False, "message": "Transaction reference not found"})

        with pytest.raises(VerificationFailed) as info:
            await verifier_for(handler).verify("nope")

        assert info.value.message == "Transaction reference not found"

    @pytest.mark.asyncio
    async def test_server_error_means_unavailable(self):
        def handler(request):
            return httpx.Response(502, text="bad gateway")

        with pytest.raises(VerifierUnavailable):
            await verifier_for(handler).verify("ref")

    @pytest.mark.asyncio
    async def test_transport_error_means_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(VerifierUnavailable):
            await verifier_for(handler).verify("ref")

    @pytest.mark.asyncio
    async def test_not_configured(self):
        with pytest.raises(DependencyUnavailable):
            await verifier_for(lambda r: httpx.Response(200), secret_key="").verify("ref")
