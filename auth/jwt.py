"""
JWT-style token creation and verification.

Tokens are base64url-encoded JSON payloads signed with HMAC-SHA256::

    base64url({"user_id": 1, "iat": ..., "exp": ...}) + "." + hex(signature)

The secret and expiry window come from ``Settings`` (env vars
``JWT_SECRET`` / ``JWT_EXPIRY_SECONDS``).  Changing the secret invalidates
every token issued before.
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import json
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional


class TokenFailure(str, Enum):
    MISSING = "missing"
    INVALID = "invalid"
    EXPIRED = "expired"


@dataclass(frozen=True)
class TokenCheck:
    """Outcome of ``TokenService.verify``: a user id or a failure kind."""

    user_id: Optional[int] = None
    failure: Optional[TokenFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


class TokenService:
    def __init__(
        self,
        secret: str,
        expiry_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._secret = secret.encode()
        self.expiry_seconds = expiry_seconds
        self._clock = clock

    def _sign(self, raw: bytes) -> str:
        return hmac.new(self._secret, raw, hashlib.sha256).hexdigest()

    def issue(self, user_id: int) -> str:
        """Create a signed token containing ``user_id``, issue time and expiry."""
        now = int(self._clock())
        payload = {
            "user_id": user_id,
            "iat": now,
            "exp": now + self.expiry_seconds,
        }
        raw = json.dumps(payload, separators=(",", ":")).encode()
        return urlsafe_b64encode(raw).decode() + "." + self._sign(raw)

    def verify(self, token: Optional[str]) -> TokenCheck:
        if not token:
            return TokenCheck(failure=TokenFailure.MISSING)

        parts = token.split(".", 1)
        if len(parts) != 2:
            return TokenCheck(failure=TokenFailure.INVALID)
        try:
            raw = urlsafe_b64decode(parts[0].encode())
        except (binascii.Error, ValueError):
            return TokenCheck(failure=TokenFailure.INVALID)

        if not hmac.compare_digest(parts[1].encode(), self._sign(raw).encode()):
            return TokenCheck(failure=TokenFailure.INVALID)

        try:
            payload = json.loads(raw)
            user_id = payload["user_id"]
            exp = payload["exp"]
        except (ValueError, KeyError, TypeError):
            return TokenCheck(failure=TokenFailure.INVALID)
        if (
            not isinstance(user_id, int)
            or isinstance(user_id, bool)
            or not isinstance(exp, (int, float))
        ):
            return TokenCheck(failure=TokenFailure.INVALID)

        if exp <= self._clock():
            return TokenCheck(failure=TokenFailure.EXPIRED)
        return TokenCheck(user_id=user_id)
