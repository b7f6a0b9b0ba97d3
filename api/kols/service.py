"""
KOL business logic.

Sanitizing and the final rule check happen here, before any store call. Store
failures are logged in full and reported to the client with a generic
message.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import uuid4

from fastapi import HTTPException, status

from core.sanitize import sanitize_value

from .expression import BuilderError, EmptyUpdate, build_update
from .repository import ID_COLUMN, KolStore
from .schemas import KolCreate
from .validation import FieldValidationError, validate_record

logger = logging.getLogger(__name__)


async def list_kols(store: KolStore) -> list[dict[str, Any]]:
    try:
        return await store.scan_all()
    except Exception as exc:
        logger.exception("kol_scan_failed")
        raise HTTPException(status_code=500, detail="Error fetching data") from exc


async def create_kol(payload: KolCreate, store: KolStore) -> str:
    """
    Sanitize and insert a full record. Returns the new record id.

    The sanitized record is checked again, so markup-only text that cleans
    down to nothing is rejected instead of stored empty.
    """
    cleaned = {key: sanitize_value(value) for key, value in payload.model_dump(by_alias=True).items()}
    try:
        record = validate_record(cleaned)
    except FieldValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.reason) from exc

    record[ID_COLUMN] = str(uuid4())

    try:
        await store.insert(record)
    except Exception as exc:
        logger.exception("kol_create_failed")
        raise HTTPException(status_code=500, detail="Error creating KOL") from exc

    logger.info("kol_created id=%s", record[ID_COLUMN])
    return record[ID_COLUMN]


async def update_kol(record_id: str, fields: dict[str, Any], store: KolStore) -> dict[str, Any]:
    """
    Apply a sparse update and return the changed fields.
    """
    try:
        directive = build_update(record_id, fields)
    except EmptyUpdate as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except BuilderError as exc:
        logger.warning("kol_update_rejected id=%s reason=%s", record_id, exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    try:
        changed = await store.apply_update(directive)
    except Exception as exc:
        logger.exception("kol_update_failed id=%s", record_id)
        raise HTTPException(status_code=500, detail="Error updating KOL") from exc

    if changed is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="KOL not found")
    return changed


async def delete_kol(record_id: str, store: KolStore) -> None:
    """
    Delete by id. Deleting an unknown id is not an error.
    """
    if not record_id.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='"id" is not allowed to be empty')

    try:
        await store.remove(record_id)
    except Exception as exc:
        logger.exception("kol_delete_failed id=%s", record_id)
        raise HTTPException(status_code=500, detail="Error deleting KOL") from exc
