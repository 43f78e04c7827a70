"""
User Service.

Idempotent sign-in registration, search and role management.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from zap_shift.app.core.exceptions import ResourceNotFoundError
from zap_shift.app.models.enums import UserRole
from zap_shift.app.models.user import User
from zap_shift.app.schemas.user import UserCreate

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 5


async def search_users(db: AsyncSession, search_text: Optional[str] = None) -> List[User]:
    """
    Case-insensitive substring search on display name or email.

    At most ``SEARCH_LIMIT`` users, ordered by display name.
    """
    query = select(User)
    if search_text:
        pattern = f"%{_escape_like(search_text)}%"
        query = query.where(or_(
            User.display_name.ilike(pattern, escape="\\"),
            User.email.ilike(pattern, escape="\\"),
        ))

    result = await db.execute(query.order_by(User.display_name.asc(), User.id.asc()).limit(SEARCH_LIMIT))
    return result.scalars().all()


async def get_user(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise ResourceNotFoundError("User", user_id)
    return user


async def get_role_by_email(db: AsyncSession, email: str) -> UserRole:
    """Role of the account with this email; unknown accounts are plain users."""
    result = await db.execute(select(User.role).where(User.email == email))
    return result.scalar_one_or_none() or UserRole.USER


async def create_user(db: AsyncSession, data: UserCreate) -> Tuple[User, bool]:
    """
    Register a user on first sign-in.

    Returns:
        (user, created) - ``created`` is False when the email is already
        registered; the existing record is left unchanged.
    """
    existing = await _find_by_email(db, data.email)
    if existing:
        return existing, False

    user = User(
        email=data.email,
        display_name=data.display_name,
        photo_url=data.photo_url,
        role=UserRole.USER,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        return await _find_by_email(db, data.email), False

    await db.refresh(user)
    logger.info("User %s registered", user.email)
    return user, True


async def set_role(db: AsyncSession, user_id: int, role: UserRole, changed_by: str) -> User:
    user = await get_user(db, user_id)
    previous = user.role
    user.role = role
    await db.commit()
    await db.refresh(user)
    logger.info("Role of %s changed from %s to %s by %s", user.email, previous.value, role.value, changed_by)
    return user


async def _find_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


def _escape_like(text: str) -> str:
    """Make ``%`` and ``_`` match literally in a LIKE pattern."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
