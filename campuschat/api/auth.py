# FILE: campuschat/api/auth.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from campuschat.core.config import COOKIE_NAME, IS_PRODUCTION, JWT_EXPIRATION_HOURS
from campuschat.core.database import get_db
from campuschat.core.errors import AppError
from campuschat.schemas.auth import (
    LoginRequest,
    MessageResponse,
    TokenResponse,
    UsernameUpdateRequest,
    UserResponse,
    VerifyCodeRequest,
)
from campuschat.services import auth_service, email_service, user_service
from campuschat.services.verification_service import (
    challenge_store,
    normalize_email,
    validate_school_email,
)
from campuschat.api.deps import get_credential, get_current_user, user_payload

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger("campuschat.auth")


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        max_age=JWT_EXPIRATION_HOURS * 3600,
        httponly=True,
        secure=IS_PRODUCTION,
        samesite="strict",
    )


def _clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=COOKIE_NAME,
        httponly=True,
        secure=IS_PRODUCTION,
        samesite="strict",
    )


@router.post("/login", response_model=MessageResponse)
async def login(data: LoginRequest):
    email = normalize_email(data.email)
    validate_school_email(email)

    code = challenge_store.issue(email)
    try:
        await email_service.send_verification_email(email, code)
    except AppError:
        challenge_store.discard(email)
        raise

    return MessageResponse(message="Verification code sent to your email")


@router.post("/verify", response_model=TokenResponse)
async def verify(data: VerifyCodeRequest, response: Response, db: AsyncSession = Depends(get_db)):
    email = normalize_email(data.email)
    domain = validate_school_email(email)
    challenge_store.verify(email, data.code)

    user = await user_service.get_or_create_user(db, email, domain)
    token = auth_service.create_token(user.id)
    _set_session_cookie(response, token)
    logger.info("User %s logged in", user.id)

    return TokenResponse(user=UserResponse(**user_payload(user)), token=token)


@router.post("/verify-token", response_model=TokenResponse)
async def verify_token(
        response: Response,
        credential: Optional[str] = Depends(get_credential),
        db: AsyncSession = Depends(get_db),
):
    try:
        user_id, token = auth_service.refresh_token(credential)
        user = await user_service.get_user(db, user_id)
    except AppError as exc:
        failure = JSONResponse(status_code=401, content={"detail": exc.message})
        _clear_session_cookie(failure)
        return failure

    _set_session_cookie(response, token)
    return TokenResponse(user=UserResponse(**user_payload(user)), token=token)


@router.get("/profile", response_model=UserResponse)
async def profile(user=Depends(get_current_user)):
    return UserResponse(**user)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response, user=Depends(get_current_user)):
    _clear_session_cookie(response)
    return MessageResponse(message="Logged out successfully")


@router.put("/username", response_model=UserResponse)
async def update_username(data: UsernameUpdateRequest, user=Depends(get_current_user)):
    updated = await user_service.change_username(user["id"], data.username)
    return UserResponse(**user_payload(updated))
