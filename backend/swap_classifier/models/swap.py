"""Swap classification models."""
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Direction(str, Enum):
    """Trade direction of a swap leg."""
    BUY = "BUY"
    SELL = "SELL"


class SwapperMethod(str, Enum):
    """How the swapper address was identified."""
    FEE_PAYER = "FEE_PAYER"
    SIGNER = "SIGNER"


class DeltaSource(str, Enum):
    """Where an asset delta came from."""
    BALANCE_CHANGE = "balance_change"
    ACTION_FALLBACK = "action_fallback"


class Confidence(str, Enum):
    """Confidence level of a parsed leg."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def score(self) -> int:
        return {"HIGH": 100, "MEDIUM": 90, "LOW": 80}[self.value]


class RejectionReason(str, Enum):
    """Stable rejection taxonomy."""
    SWAPPER_IDENTIFICATION_FAILED = "swapper_identification_failed"
    SIMPLE_TRANSFER_DETECTED = "simple_transfer_detected"
    ONLY_TRANSFER_ACTIONS = "only_transfer_actions"
    NO_OPPOSITE_DELTAS = "no_opposite_deltas"
    INVALID_ASSET_COUNT = "invalid_asset_count"
    AMBIGUOUS_CORE_TO_CORE = "ambiguous_core_to_core"
    QUOTE_BASE_DETECTION_FAILED = "quote_base_detection_failed"
    NO_SWAP_ACTION = "no_swap_action"
    BELOW_MINIMUM_VALUE_THRESHOLD = "below_minimum_value_threshold"
    UNKNOWN_ERASE_REASON = "unknown_erase_reason"
    TRANSACTION_FAILED = "transaction_failed"
    NON_SWAP_TRANSACTION_TYPE = "non_swap_transaction_type"


class AssetDelta(BaseModel):
    """Net signed balance change of one asset for the swapper."""
    model_config = ConfigDict(frozen=True)

    mint: str = Field(..., description="Canonical mint address")
    symbol: Optional[str] = Field(None, description="Best-effort symbol")
    decimals: int = Field(..., ge=0)
    raw_delta: int = Field(..., description="Net signed change in raw units")
    source: DeltaSource = DeltaSource.BALANCE_CHANGE
    decimals_inferred: bool = Field(False, description="Decimals were defaulted, not observed")

    @property
    def normalized(self) -> Decimal:
        return Decimal(self.raw_delta).scaleb(-self.decimals)

    @property
    def synthesized(self) -> bool:
        return self.source is DeltaSource.ACTION_FALLBACK


class AssetRef(BaseModel):
    """Identity of an asset inside a leg."""
    model_config = ConfigDict(frozen=True)

    mint: str
    symbol: Optional[str] = None
    decimals: int

    @classmethod
    def from_delta(cls, delta: AssetDelta) -> "AssetRef":
        return cls(mint=delta.mint, symbol=delta.symbol, decimals=delta.decimals)


class FeeBreakdown(BaseModel):
    """Informational fee breakdown, never subtracted from amounts."""
    model_config = ConfigDict(frozen=True)

    transaction_fee_sol: Decimal = Field(..., description="Network fee in SOL")
    transaction_fee_quote: Optional[Decimal] = Field(None, description="Network fee in quote units")
    platform_fee: Decimal = Field(Decimal(0), description="Platform fee in quote units")
    priority_fee: Decimal = Field(Decimal(0), description="Priority fee in SOL")
    total_fee_quote: Decimal = Field(Decimal(0), description="Sum of quote-denominated fees")


class SwapAmounts(BaseModel):
    """Balance-truth amounts of a leg."""
    model_config = ConfigDict(frozen=True)

    base_amount: Decimal = Field(..., description="Absolute normalized base delta")
    swap_input_amount: Optional[Decimal] = Field(None, description="Pool input, when corroborated")
    swap_output_amount: Optional[Decimal] = Field(None, description="Pool output, when corroborated")
    total_wallet_cost: Optional[Decimal] = Field(None, description="Quote the wallet gave up (BUY)")
    net_wallet_received: Optional[Decimal] = Field(None, description="Quote the wallet received (SELL)")
    fee_breakdown: FeeBreakdown


class SwapLeg(BaseModel):
    """One directional swap event."""
    model_config = ConfigDict(frozen=True)

    signature: str
    timestamp: Optional[str] = None
    direction: Direction
    swapper: str
    quote_asset: AssetRef
    base_asset: AssetRef
    amounts: SwapAmounts
    confidence: Confidence
    swapper_identification_method: SwapperMethod
    rent_refunds_filtered: bool = False
    intermediate_assets_collapsed: List[str] = Field(default_factory=list)
    protocol: str = "UNKNOWN"

    @property
    def confidence_score(self) -> int:
        return self.confidence.score


class SplitSwapPair(BaseModel):
    """Token-to-token swap expressed as a SELL leg and a BUY leg."""
    model_config = ConfigDict(frozen=True)

    sell_record: SwapLeg
    buy_record: SwapLeg
    split_reason: str

    @property
    def signature(self) -> str:
        return self.sell_record.signature


class ParsedResult(BaseModel):
    """A standard BUY or SELL."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["parsed"] = "parsed"
    leg: SwapLeg


class SplitResult(BaseModel):
    """A non-core to non-core swap."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["split"] = "split"
    pair: SplitSwapPair


class RejectedResult(BaseModel):
    """A transaction that is not a classifiable swap."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["rejected"] = "rejected"
    signature: Optional[str] = None
    reason: RejectionReason
    debug_info: dict[str, Any] = Field(default_factory=dict)


ClassifierResult = Annotated[
    Union[ParsedResult, SplitResult, RejectedResult],
    Field(discriminator="kind"),
]
