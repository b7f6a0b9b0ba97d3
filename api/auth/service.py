"""
Auth business logic: registration and login.
"""

from __future__ import annotations

import logging

import asyncpg

from core.config import Settings

from . import schemas, security
from .repository import UserStore

logger = logging.getLogger(__name__)


class AuthError(Exception):
    status_code = 400


class MissingField(AuthError):
    def __init__(self) -> None:
        super().__init__("Username and password are required")


class DuplicateUsername(AuthError):
    def __init__(self) -> None:
        super().__init__("Username already exists")


class InvalidCredentials(AuthError):
    def __init__(self) -> None:
        super().__init__("Invalid credentials")


def _require_credentials(payload: schemas.CredentialsRequest) -> tuple[str, str]:
    username = payload.username or ""
    password = payload.password or ""
    if not username or not password:
        raise MissingField()
    return username, password


async def register(
    payload: schemas.CredentialsRequest,
    *,
    store: UserStore,
    settings: Settings,
) -> schemas.MessageResponse:
    username, password = _require_credentials(payload)

    # Fast path only; the primary key on users.username is the real guarantee.
    existing = await store.get_user(username)
    if existing is not None:
        raise DuplicateUsername()

    password_hash = security.hash_password(password, rounds=settings.bcrypt_rounds)
    try:
        await store.create_user(username=username, password_hash=password_hash)
    except asyncpg.UniqueViolationError as exc:
        raise DuplicateUsername() from exc

    logger.info("user_registered username=%s", username)
    return schemas.MessageResponse(message="User registered")


async def authenticate(
    payload: schemas.CredentialsRequest,
    *,
    store: UserStore,
    settings: Settings,
) -> schemas.TokenResponse:
    username, password = _require_credentials(payload)

    user_row = await store.get_user(username)
    if user_row is None:
        raise InvalidCredentials()

    if not security.verify_password(password, str(user_row.get("password") or "")):
        raise InvalidCredentials()

    token = security.build_access_token(
        username=username,
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.access_token_expire_minutes,
    )
    return schemas.TokenResponse(token=token)


def verify_token(token: str, *, settings: Settings) -> dict:
    return security.decode_access_token(
        token,
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
