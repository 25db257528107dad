"""Persisted swap record model."""
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RecordType(str, Enum):
    """Stored record type. The legacy combined type is not a member."""
    BUY = "buy"
    SELL = "sell"


LEGACY_BOTH_TYPE = "both"


class ClassificationSource(str, Enum):
    """Provenance of a stored record."""
    PARSER = "v2_parser"
    SPLIT_SELL = "v2_parser_split_sell"
    SPLIT_BUY = "v2_parser_split_buy"


class RecordAmount(BaseModel):
    """USD value of the record's side; exactly one is non-zero."""
    model_config = ConfigDict(frozen=True)

    buy_amount: Decimal = Decimal(0)
    sell_amount: Decimal = Decimal(0)


class RecordSolAmount(BaseModel):
    """SOL moved by the record's side, null when no SOL leg exists."""
    model_config = ConfigDict(frozen=True)

    buy_sol_amount: Optional[Decimal] = None
    sell_sol_amount: Optional[Decimal] = None


class RecordTokenSide(BaseModel):
    """Token leaving or entering the wallet."""
    model_config = ConfigDict(frozen=True)

    mint: str
    symbol: Optional[str] = None
    amount: Decimal


class RecordTransaction(BaseModel):
    """Token flow of the record."""
    model_config = ConfigDict(frozen=True)

    token_in: RecordTokenSide = Field(..., description="Asset that left the wallet")
    token_out: RecordTokenSide = Field(..., description="Asset that arrived in the wallet")


class PersistedSwapRecord(BaseModel):
    """Storage-ready swap record keyed by (signature, type)."""
    model_config = ConfigDict(frozen=True)

    signature: str
    type: RecordType
    classification_source: ClassificationSource
    swapper: str
    protocol: str = "UNKNOWN"
    timestamp: Optional[str] = None
    amount: RecordAmount
    sol_amount: RecordSolAmount
    transaction: RecordTransaction
    confidence: int = Field(..., ge=0, le=100)
