"""
Credential store: user lookup and creation.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import User
from utils.results import ErrorKind, Failure, Result

logger = logging.getLogger(__name__)

DUPLICATE_USER = Failure(
    ErrorKind.CONFLICT, "User with this username or email already exists."
)


async def find_by_email(session: AsyncSession, email: str) -> Optional[User]:
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def find_by_username_or_email(
    session: AsyncSession,
    username: str,
    email: str,
) -> Optional[User]:
    result = await session.execute(
        select(User)
        .where(or_(User.username == username, User.email == email))
        .limit(1)
    )
    return result.scalar_one_or_none()


async def create_user(
    session: AsyncSession,
    username: str,
    email: str,
    password_hash: str,
) -> Result[User]:
    """
    Insert a user row and commit.

    A uniqueness violation (another request registered the same username
    or email after our pre-check) comes back as a ``CONFLICT`` failure.
    """
    user = User(username=username, email=email, password_hash=password_hash)
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        logger.info("Registration conflict on insert for %s / %s", username, email)
        return DUPLICATE_USER
    return user
