"""Password hashing and signed session tokens."""

from __future__ import annotations

import os
import time

import bcrypt
import jwt

DEFAULT_COST = 10
TOKEN_LIFETIME_SECONDS = 5 * 60
_MAX_PASSWORD_BYTES = 72


class TokenError(Exception):
    """A token could not be verified or carries no usable user id."""


def _resolve_key(key: str | bytes | None) -> bytes:
    if key is None:
        key = os.environ.get("JWT_SECRET", "")
    return key.encode() if isinstance(key, str) else key


def hash_password(password: str) -> str:
    raw = password.encode()
    if len(raw) > _MAX_PASSWORD_BYTES:
        raise ValueError("password length exceeds 72 bytes")
    return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=DEFAULT_COST)).decode()


def check_password_hash(password: str, hashed: str) -> bool:
    raw = password.encode()
    if len(raw) > _MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(raw, hashed.encode())
    except ValueError:
        return False


def generate_jwt(user_id: int, key: str | bytes | None = None) -> str:
    """Sign an HS256 token for ``user_id`` expiring in five minutes (key defaults to JWT_SECRET)."""
    claims = {"user_id": user_id, "exp": int(time.time()) + TOKEN_LIFETIME_SECONDS}
    return jwt.encode(claims, _resolve_key(key), algorithm="HS256")


def parse_jwt(token_str: str, key: str | bytes | None = None) -> int:
    """Verify ``token_str`` and return the user id it carries."""
    try:
        claims = jwt.decode(
            token_str, _resolve_key(key), algorithms=["HS256", "HS384", "HS512"]
        )
    except jwt.PyJWTError as exc:
        raise TokenError(str(exc)) from exc
    user_id = claims.get("user_id")
    if isinstance(user_id, bool) or not isinstance(user_id, (int, float)):
        raise TokenError("invalid user_id in token")
    return int(user_id)