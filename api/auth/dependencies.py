"""
Auth dependencies for protected FastAPI routes.
"""

from __future__ import annotations

import logging

from fastapi import Depends, Header, HTTPException, status

from core.config import Settings, get_settings

from . import security, service

logger = logging.getLogger(__name__)

ACCESS_DENIED = "Access denied"


def _extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise security.MissingToken("Missing Authorization header.")

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise security.InvalidToken("Invalid Authorization header format.")

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise security.InvalidToken("Authorization must be: Bearer <token>.")
    return token


async def get_current_user(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> dict:
    try:
        token = _extract_bearer_token(authorization)
        return service.verify_token(token, settings=settings)
    except security.AuthSecurityError as exc:
        logger.info("access_denied reason=%s", exc)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=ACCESS_DENIED,
        ) from exc
