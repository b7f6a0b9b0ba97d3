"""
KOL API endpoints. Every route requires a bearer token.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse

from auth import dependencies as auth_dependencies

from . import schemas, service
from .repository import KolStore, get_kol_store

router = APIRouter(dependencies=[Depends(auth_dependencies.get_current_user)])


@router.get("/records", response_model=list[schemas.KolRecord])
async def list_records(store: KolStore = Depends(get_kol_store)) -> list[dict[str, Any]]:
    return await service.list_kols(store)


@router.post("/records", response_class=PlainTextResponse, status_code=status.HTTP_201_CREATED)
async def create_record(
    payload: schemas.KolCreate,
    store: KolStore = Depends(get_kol_store),
) -> str:
    await service.create_kol(payload, store)
    return "KOL created"


@router.put("/records/{record_id}")
async def update_record(
    record_id: str,
    payload: schemas.KolUpdate,
    store: KolStore = Depends(get_kol_store),
) -> dict[str, Any]:
    """
    Apply a sparse update and return the changed fields.

    400 for an empty body, 500 for an invalid field or a store failure, and
    404 when no record has this id (an update never creates a record).
    """
    return await service.update_kol(record_id, payload.root, store)


@router.delete("/records/{record_id}", response_class=PlainTextResponse)
async def delete_record(
    record_id: str,
    store: KolStore = Depends(get_kol_store),
) -> str:
    await service.delete_kol(record_id, store)
    return "KOL deleted"
