# FILE: campuschat/services/auth_service.py
import secrets
from datetime import datetime, timezone, timedelta
from typing import Optional, Tuple

import jwt

from campuschat.core.config import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRATION_HOURS
from campuschat.core.errors import AuthError


def create_token(user_id: int, expires_in: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "user_id": user_id,
        "iat": now,
        "exp": now + (expires_in or timedelta(hours=JWT_EXPIRATION_HOURS)),
        # unique per issue so a refresh always rotates the token value
        "jti": secrets.token_urlsafe(12),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_token(token: Optional[str]) -> int:
    if not token or not token.strip():
        raise AuthError("No token provided")
    try:
        payload = jwt.decode(token.strip(), JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthError("Invalid token")

    user_id = payload.get("user_id")
    if isinstance(user_id, bool) or not isinstance(user_id, int):
        raise AuthError("Invalid token payload")
    return user_id


def refresh_token(token: Optional[str]) -> Tuple[int, str]:
    user_id = decode_token(token)
    return user_id, create_token(user_id)
