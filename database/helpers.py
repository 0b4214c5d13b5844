"""
Database helper functions — user lookups and creation.

"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import User

logger = logging.getLogger(__name__)


class UsernameTakenError(Exception):
    """Raised when registering a username that already exists."""


def _to_uuid(value: str | uuid.UUID) -> uuid.UUID:
    return uuid.UUID(value) if isinstance(value, str) else value


async def get_user_by_username(session: AsyncSession, username: str) -> Optional[User]:
    result = await session.execute(
        select(User).where(User.username == username)
    )
    return result.scalar_one_or_none()


async def get_user_by_id(session: AsyncSession, user_id: str | uuid.UUID) -> Optional[User]:
    """Return the user or ``None``; malformed ids are treated as unknown."""
    try:
        uid = _to_uuid(user_id)
    except ValueError:
        return None
    result = await session.execute(
        select(User).where(User.user_id == uid)
    )
    return result.scalar_one_or_none()


async def create_user(
    session: AsyncSession,
    *,
    username: str,
    password_hash: str,
    email: str | None = None,
    display_name: str | None = None,
) -> User:
    """
    Insert a new ``User`` row and flush it.

    Raises ``UsernameTakenError`` when the username already exists, either
    from the pre-check or from the unique constraint on a concurrent insert.
    """
    if await get_user_by_username(session, username) is not None:
        raise UsernameTakenError(username)

    user = User(
        user_id=uuid.uuid4(),
        username=username,
        email=email,
        display_name=display_name or username,
        password_hash=password_hash,
    )
    session.add(user)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        raise UsernameTakenError(username) from exc

    logger.debug("Inserted user row %s", user.user_id)
    return user
