"""
JWT-style token creation and verification.

Tokens are base64-encoded JSON payloads signed with HMAC-SHA256.
Secret key is loaded from ``config.jwt_secret`` (env var: ``JWT_SECRET``).
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import json
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Optional

from config.settings import config


class InvalidTokenError(Exception):
    """Token is malformed, tampered with, or expired."""


def _sign(raw: bytes, secret: str) -> str:
    return hmac.new(secret.encode(), raw, hashlib.sha256).hexdigest()


def create_token(
    user_id: str,
    *,
    secret: Optional[str] = None,
    expires_in: Optional[int] = None,
) -> str:
    """Create a signed token containing ``user_id`` and expiry."""
    secret = secret or config.jwt_secret
    ttl = config.jwt_expiry_seconds if expires_in is None else expires_in
    payload = {
        "user_id": user_id,
        "exp": int(time.time()) + ttl,
    }
    raw = json.dumps(payload, separators=(",", ":")).encode()
    return urlsafe_b64encode(raw).decode() + "." + _sign(raw, secret)


def verify_token(token: str, *, secret: Optional[str] = None) -> str:
    """
    Verify token and return ``user_id``.

    Raises ``InvalidTokenError`` on invalid or expired tokens.
    """
    secret = secret or config.jwt_secret
    parts = token.split(".", 1)
    if len(parts) != 2:
        raise InvalidTokenError("bad format")
    try:
        raw = urlsafe_b64decode(parts[0].encode())
    except (binascii.Error, ValueError) as exc:
        raise InvalidTokenError("bad encoding") from exc
    if not hmac.compare_digest(parts[1], _sign(raw, secret)):
        raise InvalidTokenError("bad signature")
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise InvalidTokenError("bad payload") from exc
    if not isinstance(payload, dict) or "user_id" not in payload:
        raise InvalidTokenError("bad payload")
    if payload.get("exp", 0) < time.time():
        raise InvalidTokenError("token expired")
    return payload["user_id"]
