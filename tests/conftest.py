"""
Shared fixtures for the CampusChat test suite.

Environment is configured before any ``campuschat`` import so the engine
points at a throwaway SQLite file and external services stay unconfigured.
"""

import asyncio
import os
import tempfile
from decimal import Decimal
from pathlib import Path

_TMP_DIR = Path(tempfile.mkdtemp(prefix="campuschat-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR / 'test.db'}"
os.environ["UPLOAD_DIR"] = str(_TMP_DIR / "uploads")
os.environ["JWT_SECRET"] = "campuschat-test-secret-key-0123456789abcdef"
os.environ["PAYSTACK_SECRET_KEY"] = "sk_test_dummy"
os.environ["RESEND_API_KEY"] = ""
os.environ["SIGNUP_BONUS_COINS"] = "10"

import pytest
from fastapi.testclient import TestClient

from campuschat.core.database import Base, SessionLocal, engine
from campuschat.models import User
from campuschat.services import auth_service, email_service
from campuschat.services.chat_hub import hub
from campuschat.services.paystack_service import VerificationResult, get_paystack_verifier
from campuschat.services.verification_service import challenge_store


async def _reset_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


def run(coro):
    """Run a coroutine on a private loop (for use from sync tests and fixtures)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@pytest.fixture(autouse=True)
def fresh_database():
    run(_reset_schema())
    challenge_store._challenges.clear()
    hub._rooms.clear()
    yield


async def create_user(email="alice@uni.edu", username="alice", coins=10) -> User:
    async with SessionLocal() as db:
        user = User(
            email=email,
            username=username,
            school_domain=email.split("@")[1],
            coins=coins,
        )
        db.add(user)
        await db.commit()
        return user


async def balance_of(user_id: int) -> int:
    async with SessionLocal() as db:
        return (await db.get(User, user_id)).coins


@pytest.fixture
def make_user():
    def _make(**kwargs) -> User:
        return run(create_user(**kwargs))
    return _make


class FakeVerifier:
    """Stands in for Paystack; records every reference it was asked about."""

    def __init__(self, paid_amount="200", status="success", error=None):
        self.paid_amount = Decimal(paid_amount)
        self.status = status
        self.error = error
        self.calls = []

    async def verify(self, reference: str) -> VerificationResult:
        self.calls.append(reference)
        if self.error is not None:
            raise self.error
        return VerificationResult(
            status=self.status,
            paid_amount=self.paid_amount,
            raw={"status": True, "data": {"reference": reference, "status": self.status}},
        )


@pytest.fixture
def fake_verifier():
    return FakeVerifier()


@pytest.fixture
def sent_emails(monkeypatch):
    outbox = []

    async def _capture(email, code):
        outbox.append((email, code))

    monkeypatch.setattr(email_service, "send_verification_email", _capture)
    return outbox


@pytest.fixture
def client(fake_verifier):
    from campuschat.server import app

    app.dependency_overrides[get_paystack_verifier] = lambda: fake_verifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {auth_service.create_token(user.id)}"}
    return _headers
