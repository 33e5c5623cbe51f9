"""
Registration and login.

Both return an ``AuthSession`` on success or a ``Failure``; they never
raise for an expected outcome.  bcrypt work runs in a worker thread so a
slow hash does not stall other requests.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import TokenService
from auth.password import PasswordHasher
from database import users
from database.models import User
from utils.results import ErrorKind, Failure, Result

logger = logging.getLogger(__name__)

# Same failure for "no such email" and "wrong password".
INVALID_CREDENTIALS = Failure(ErrorKind.UNAUTHENTICATED, "Invalid email or password.")


@dataclass(frozen=True)
class AuthSession:
    user: User
    token: str


async def register(
    session: AsyncSession,
    hasher: PasswordHasher,
    tokens: TokenService,
    username: str,
    email: str,
    password: str,
) -> Result[AuthSession]:
    """Create a user and issue their first token."""
    if await users.find_by_username_or_email(session, username, email) is not None:
        return users.DUPLICATE_USER

    password_hash = await asyncio.to_thread(hasher.hash, password)
    created = await users.create_user(session, username, email, password_hash)
    if isinstance(created, Failure):
        return created

    logger.info("Registered user %s (%s)", created.username, created.id)
    return AuthSession(user=created, token=tokens.issue(created.id))


async def login(
    session: AsyncSession,
    hasher: PasswordHasher,
    tokens: TokenService,
    email: str,
    password: str,
) -> Result[AuthSession]:
    """Login with email + password."""
    user = await users.find_by_email(session, email)
    if user is None:
        logger.info("Login failed: unknown email")
        return INVALID_CREDENTIALS

    if not await asyncio.to_thread(hasher.verify, password, user.password_hash):
        logger.info("Login failed: bad password for user %s", user.id)
        return INVALID_CREDENTIALS

    logger.info("Login: %s (%s)", user.username, user.id)
    return AuthSession(user=user, token=tokens.issue(user.id))
