"""
Auth security helpers: password hashing and access tokens.
"""

from __future__ import annotations

import base64
import hashlib
import time
from typing import Any

import bcrypt
import jwt


class AuthSecurityError(RuntimeError):
    pass


class MissingToken(AuthSecurityError):
    pass


class InvalidToken(AuthSecurityError):
    pass


def now_epoch_s() -> int:
    return int(time.time())


def _bcrypt_input(password: bytes) -> bytes:
    # bcrypt reads at most 72 bytes; a base64 SHA-256 digest is 44.
    return base64.b64encode(hashlib.sha256(password).digest())


def hash_password(plain_password: str, *, rounds: int = 10) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(_bcrypt_input(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(_bcrypt_input(password), hashed)
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


def build_access_token(
    *,
    username: str,
    secret: str,
    algorithm: str = "HS256",
    expire_minutes: int = 60,
) -> str:
    issued_at = now_epoch_s()
    payload = {
        "username": username,
        "iat": issued_at,
        "exp": issued_at + (expire_minutes * 60),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_access_token(token: str, *, secret: str, algorithm: str = "HS256") -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise MissingToken("Access token is empty.")

    try:
        payload = jwt.decode(raw, secret, algorithms=[algorithm])
    except jwt.InvalidTokenError as exc:
        raise InvalidToken("Invalid access token.") from exc

    username = payload.get("username")
    if not isinstance(username, str) or not username:
        raise InvalidToken("Access token has no username.")
    return payload
