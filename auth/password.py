"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and a work factor taken from ``config.bcrypt_rounds``.
"""

from __future__ import annotations

import bcrypt

from config.settings import config

# Compared against when the username is unknown so both rejection paths
# cost one bcrypt check.
_DUMMY_HASH = bcrypt.hashpw(b"not-a-password", bcrypt.gensalt(rounds=4)).decode()


def hash_password(password: str) -> str:
    """Hash a password with bcrypt (auto-salted)."""
    return bcrypt.hashpw(
        password.encode(), bcrypt.gensalt(rounds=config.bcrypt_rounds)
    ).decode()


def verify_password(password: str, password_hash: str | None) -> bool:
    """Constant-time comparison against a bcrypt hash.

    ``None`` burns a comparison against a dummy hash and returns False.
    """
    if password_hash is None:
        bcrypt.checkpw(password.encode(), _DUMMY_HASH.encode())
        return False
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except (ValueError, TypeError):
        return False
