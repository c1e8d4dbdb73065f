# FILE: campuschat/services/verification_service.py
"""Email one-time codes for passwordless login.

Challenges live in process memory, so every instance of the service keeps
its own set. Running more than one instance needs a shared store with a
server-side TTL keyed by email.
"""

import re
import secrets
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from campuschat.core.config import (
    ALLOWED_EMAIL_SUFFIXES,
    VERIFICATION_CODE_TTL_SECONDS,
    VERIFICATION_MAX_ATTEMPTS,
)
from campuschat.core.errors import ValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def validate_school_email(email: str) -> str:
    """Return the email's domain, or raise if it is not a school address."""
    if not email:
        raise ValidationError("Email is required")
    if not EMAIL_RE.match(email):
        raise ValidationError("Invalid email format")

    domain = email.rsplit("@", 1)[1]
    if not any(domain == s or domain.endswith("." + s) for s in ALLOWED_EMAIL_SUFFIXES):
        raise ValidationError("Must use a school email address")
    return domain


def generate_code() -> str:
    return str(100000 + secrets.randbelow(900000))


def generate_username(email: str) -> str:
    local = re.sub(r"[^a-zA-Z0-9]", "", email.split("@", 1)[0]) or "student"
    return f"{local[:40]}{secrets.randbelow(1000)}"


@dataclass
class Challenge:
    code: str
    issued_at: float
    failed_attempts: int = 0


class ChallengeStore:
    def __init__(
        self,
        ttl_seconds: int = VERIFICATION_CODE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        max_attempts: int = VERIFICATION_MAX_ATTEMPTS,
    ):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self.max_attempts = max_attempts
        self._challenges: Dict[str, Challenge] = {}

    def issue(self, email: str) -> str:
        self.purge_expired()
        # a new request replaces any live code for the same email
        code = generate_code()
        self._challenges[email] = Challenge(code=code, issued_at=self.clock())
        return code

    def discard(self, email: str) -> None:
        self._challenges.pop(email, None)

    def is_expired(self, challenge: Challenge) -> bool:
        return self.clock() - challenge.issued_at > self.ttl_seconds

    def verify(self, email: str, code: str) -> None:
        challenge = self._challenges.get(email)
        if challenge is None:
            raise ValidationError("No verification code found or code expired")
        if self.is_expired(challenge):
            self.discard(email)
            raise ValidationError("Verification code expired")
        if not secrets.compare_digest(challenge.code, (code or "").strip()):
            challenge.failed_attempts += 1
            if challenge.failed_attempts >= self.max_attempts:
                self.discard(email)
                raise ValidationError("Too many failed attempts. Request a new code")
            raise ValidationError("Invalid verification code")
        self.discard(email)

    def purge_expired(self) -> int:
        expired = [e for e, c in self._challenges.items() if self.is_expired(c)]
        for email in expired:
            del self._challenges[email]
        return len(expired)

    def __len__(self) -> int:
        return len(self._challenges)


challenge_store = ChallengeStore()
