"""
Auth API endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from core.config import Settings, get_settings

from . import schemas, service
from .repository import UserStore, get_user_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/auth/register",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.MessageResponse,
)
async def register(
    payload: schemas.CredentialsRequest,
    store: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_settings),
) -> schemas.MessageResponse:
    try:
        return await service.register(payload, store=store, settings=settings)
    except service.AuthError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("register_failed username=%s", payload.username)
        raise HTTPException(status_code=500, detail="Internal server error") from exc


@router.post("/auth/login", response_model=schemas.TokenResponse)
async def login(
    payload: schemas.CredentialsRequest,
    store: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_settings),
) -> schemas.TokenResponse:
    try:
        return await service.authenticate(payload, store=store, settings=settings)
    except service.AuthError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("login_failed username=%s", payload.username)
        raise HTTPException(status_code=500, detail="Internal server error") from exc
