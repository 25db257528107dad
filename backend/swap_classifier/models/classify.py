"""Classification request and response models."""
from decimal import Decimal
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from swap_classifier.models.swap import ClassifierResult

PayloadFormat = Literal["raw", "shyft", "rpc"]


class ClassifyRequest(BaseModel):
    """Request model for single transaction classification."""
    transaction: dict = Field(..., description="Transaction payload")
    format: PayloadFormat = Field(default="raw", description="Payload format: raw, shyft or rpc")
    prices: Optional[Dict[str, Decimal]] = Field(
        None, description="Mint -> USD price; enables the minimum value gate"
    )
    sol_to_quote_rates: Optional[Dict[str, Decimal]] = Field(
        None, description="Mint -> quote units per SOL, for fee conversion"
    )
    persist: bool = Field(default=False, description="Store accepted results; requires prices")


class BatchClassifyRequest(BaseModel):
    """Request model for batch classification."""
    transactions: List[dict] = Field(..., min_length=1, description="Transaction payloads")
    format: PayloadFormat = Field(default="raw", description="Payload format: raw, shyft or rpc")
    prices: Optional[Dict[str, Decimal]] = None
    sol_to_quote_rates: Optional[Dict[str, Decimal]] = None
    persist: bool = False


class BatchClassifyResponse(BaseModel):
    """Response model for batch classification."""
    results: List[ClassifierResult]
    parsed: int
    split: int
    rejected: int
