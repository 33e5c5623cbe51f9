"""
Auth API routes — register, login.

Route prefix: /api
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from api.errors import internal_error, raise_for
from auth import service
from auth.dependencies import get_password_hasher, get_token_service
from auth.jwt import TokenService
from auth.password import PasswordHashError, PasswordHasher
from database.session import get_db_session
from utils.results import Failure
from utils.schemas import AuthResponse, LoginRequest, RegisterRequest, UserPublic

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def _auth_payload(message: str, result: service.AuthSession) -> Dict[str, Any]:
    return {
        "message": message,
        "token": result.token,
        "user": UserPublic.from_orm_user(result.user),
    }


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    req: RegisterRequest,
    session: AsyncSession = Depends(get_db_session),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> Dict[str, Any]:
    """Register a new user."""
    try:
        result = await service.register(
            session, hasher, tokens, req.username, req.email, req.password,
        )
    except (SQLAlchemyError, PasswordHashError):
        logger.exception("Registration error for %s", req.email)
        raise internal_error("Server error during registration.")

    if isinstance(result, Failure):
        raise_for(result)
    return _auth_payload("User registered successfully", result)


@router.post("/login", response_model=AuthResponse)
async def login(
    req: LoginRequest,
    session: AsyncSession = Depends(get_db_session),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> Dict[str, Any]:
    """Login with email + password."""
    try:
        result = await service.login(session, hasher, tokens, req.email, req.password)
    except (SQLAlchemyError, PasswordHashError):
        logger.exception("Login error")
        raise internal_error("Server error during login.")

    if isinstance(result, Failure):
        raise_for(result)
    return _auth_payload("Login successful", result)
