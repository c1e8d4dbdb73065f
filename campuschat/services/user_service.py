# FILE: campuschat/services/user_service.py
import logging
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from campuschat.core.config import USERNAME_CHANGE_COST
from campuschat.core.errors import NotFound, ValidationError
from campuschat.models.user import User
from campuschat.services import ledger_service
from campuschat.services.verification_service import generate_username

logger = logging.getLogger("campuschat.users")

MIN_USERNAME_LENGTH = 3
MAX_USERNAME_LENGTH = 40


async def get_user(db: AsyncSession, user_id: int) -> User:
    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if not user:
        raise NotFound("User not found")
    return user


async def get_or_create_user(db: AsyncSession, email: str, domain: str) -> User:
    """Find the user by email or create it on first login; stamps last_login."""
    user = (await db.execute(select(User).where(User.email == email))).scalar_one_or_none()
    if not user:
        user = User(
            email=email,
            username=generate_username(email),
            school_domain=domain,
            created_at=datetime.utcnow(),
        )
        db.add(user)
        try:
            await db.commit()
            logger.info("Created user %s for domain %s", user.id, domain)
        except IntegrityError:
            # created by a parallel verify of the same email
            await db.rollback()
            user = (await db.execute(select(User).where(User.email == email))).scalar_one()

    user.last_login = datetime.utcnow()
    await db.commit()
    return user


def clean_username(username: str) -> str:
    username = (username or "").strip()
    if len(username) < MIN_USERNAME_LENGTH:
        raise ValidationError(f"Username must be at least {MIN_USERNAME_LENGTH} characters long")
    if len(username) > MAX_USERNAME_LENGTH:
        raise ValidationError(f"Username must be at most {MAX_USERNAME_LENGTH} characters long")
    return username


async def change_username(user_id: int, username: str) -> User:
    """Rename the user, paying ``USERNAME_CHANGE_COST`` coins in the same transaction."""
    username = clean_username(username)

    async def _apply(db: AsyncSession) -> User:
        await ledger_service.debit(db, user_id, USERNAME_CHANGE_COST)
        await db.execute(
            update(User)
            .where(User.id == user_id)
            .values(username=username)
            .execution_options(synchronize_session=False)
        )
        return await db.get(User, user_id, populate_existing=True)

    user = await ledger_service.run_ledger_transaction(_apply)
    logger.info("User %s changed username", user_id)
    return user
