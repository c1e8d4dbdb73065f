# FILE: campuschat/api/deps.py

from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campuschat.core.config import COOKIE_NAME
from campuschat.core.database import get_db
from campuschat.core.errors import AuthError
from campuschat.models.user import User
from campuschat.services.auth_service import decode_token

security = HTTPBearer(auto_error=False)


def user_payload(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "username": user.username,
        "school_domain": user.school_domain,
        "coins": user.coins or 0,
    }


def get_credential(
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """Bearer token first, then the session cookie."""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(COOKIE_NAME)


async def get_current_user(
        credential: Optional[str] = Depends(get_credential),
        db: AsyncSession = Depends(get_db),
):
    try:
        user_id = decode_token(credential)
    except AuthError as exc:
        raise HTTPException(status_code=401, detail=exc.message)

    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=401, detail="Invalid token - user not found")

    return user_payload(user)
