"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.
"""

from __future__ import annotations

import bcrypt

# bcrypt only looks at the first 72 bytes of the password.
MAX_PASSWORD_BYTES = 72


class PasswordHashError(Exception):
    """Hashing or verification failed for a reason other than a wrong password."""


class PasswordHasher:
    def __init__(self, rounds: int = 10) -> None:
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password with bcrypt (fresh salt on every call)."""
        try:
            return bcrypt.hashpw(
                password.encode(), bcrypt.gensalt(rounds=self.rounds)
            ).decode()
        except (ValueError, TypeError) as exc:
            raise PasswordHashError(f"bcrypt hash failed: {exc}") from exc

    def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time comparison against a bcrypt hash."""
        raw = password.encode()
        if len(raw) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(raw, password_hash.encode())
        except (ValueError, TypeError) as exc:
            raise PasswordHashError(f"bcrypt verify failed: {exc}") from exc
