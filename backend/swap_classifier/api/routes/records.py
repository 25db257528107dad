"""Stored swap record endpoints."""
from functools import lru_cache
from typing import List

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from swap_classifier.config import settings
from swap_classifier.db import init_db, make_engine, make_session_factory
from swap_classifier.models.record import PersistedSwapRecord
from swap_classifier.services.swap_repository import SwapRecordRepository

router = APIRouter()


class ReconciliationResponse(BaseModel):
    """Signatures whose stored records need attention."""
    incomplete_splits: List[str] = Field(..., description="Split swaps with only one stored leg")
    legacy_both: List[str] = Field(..., description="Rows still using the combined 'both' type")


@lru_cache
def get_repository() -> SwapRecordRepository:
    engine = make_engine(settings.database_url)
    init_db(engine)
    return SwapRecordRepository(make_session_factory(engine))


@router.get("/reconciliation", response_model=ReconciliationResponse)
def reconciliation():
    """List split pairs missing a leg and legacy combined rows."""
    repository = get_repository()
    return ReconciliationResponse(
        incomplete_splits=repository.find_incomplete_splits(),
        legacy_both=repository.find_legacy_both_records(),
    )


@router.get("/{signature}", response_model=List[PersistedSwapRecord])
def get_records(signature: str):
    """
    Stored records for a transaction signature.

    A split swap returns its SELL record followed by its BUY record.
    """
    records = get_repository().find_by_signature(signature)
    if not records:
        raise HTTPException(status_code=404, detail=f"No records stored for {signature}")
    return records
