"""
FastAPI dependencies for authentication.

``get_current_user_id`` is the gate in front of every task route: it
resolves completely (or rejects the request) before the handler body
runs, and leaves the verified id on ``request.state.user_id``.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from auth.jwt import TokenFailure, TokenService
from auth.password import PasswordHasher

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.hasher


async def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> int:
    """
    Extract and verify the Bearer token, returning the authenticated
    ``user_id``.

    Missing token → 401; invalid or expired token → 403.
    """
    check = tokens.verify(credentials.credentials if credentials else None)

    if check.failure is TokenFailure.MISSING:
        logger.warning("Auth rejected %s %s: token missing", request.method, request.url.path)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: Token missing.",
        )
    if not check.ok:
        logger.warning(
            "Auth rejected %s %s: token %s",
            request.method, request.url.path, check.failure.value,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: Invalid or expired token.",
        )

    request.state.user_id = check.user_id
    return check.user_id
