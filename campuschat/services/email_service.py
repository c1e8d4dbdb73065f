# FILE: campuschat/services/email_service.py
import asyncio
import logging

import resend

from campuschat.core.config import EMAIL_FROM, RESEND_API_KEY, VERIFICATION_CODE_TTL_SECONDS
from campuschat.core.errors import DependencyUnavailable

logger = logging.getLogger("campuschat.email")


def _send_sync(to: str, subject: str, html: str) -> None:
    resend.api_key = RESEND_API_KEY
    resend.Emails.send({
        "from": EMAIL_FROM,
        "to": to,
        "subject": subject,
        "html": html,
    })


async def send_email(to: str, subject: str, html: str) -> None:
    if not RESEND_API_KEY:
        raise DependencyUnavailable("Email delivery is not configured")
    try:
        await asyncio.to_thread(_send_sync, to, subject, html)
    except Exception as exc:
        logger.error("Failed to send email to %s: %s", to, exc)
        raise DependencyUnavailable("Failed to send email") from exc


async def send_verification_email(email: str, code: str) -> None:
    minutes = VERIFICATION_CODE_TTL_SECONDS // 60
    html = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #4F46E5;">Welcome to CampusChat!</h2>
        <p>Your verification code is:</p>
        <div style="background-color: #F3F4F6; padding: 20px; border-radius: 8px; text-align: center; margin: 20px 0;">
            <h1 style="color: #4F46E5; margin: 0; font-size: 32px;">{code}</h1>
        </div>
        <p>This code will expire in {minutes} minutes.</p>
        <p>If you didn't request this code, please ignore this email.</p>
    </div>
    """
    await send_email(email, "CampusChat Verification Code", html)
    logger.info("Verification email sent to %s", email)
