"""Raw transaction input model."""
from datetime import datetime
from typing import Any, List, Optional

import base58
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from swap_classifier.utils.constants import SOL_MINTS
from swap_classifier.utils.errors import InvalidTransactionError


def is_valid_mint(mint: str) -> bool:
    """
    Check a mint address is base58 and decodes to a 32-byte public key.

    Args:
        mint: Mint address to check

    Returns:
        True if the address is usable as a mint
    """
    if mint in SOL_MINTS:
        return True
    if not isinstance(mint, str) or not 32 <= len(mint) <= 44:
        return False
    try:
        return len(base58.b58decode(mint)) == 32
    except ValueError:
        return False


class ProtocolInfo(BaseModel):
    """Protocol descriptor attached to a transaction or action."""
    model_config = ConfigDict(frozen=True)

    name: str
    address: Optional[str] = None


class BalanceChange(BaseModel):
    """One account's balance change for one mint."""
    model_config = ConfigDict(frozen=True)

    mint: str = Field(..., description="Token mint address")
    owner: str = Field(..., description="Wallet that owns the changed account")
    decimals: int = Field(..., ge=0, le=30, description="Mint decimals")
    change_amount: int = Field(..., description="Signed change in raw units")
    pre_balance: Optional[int] = Field(None, description="Raw balance before the transaction")
    post_balance: Optional[int] = Field(None, description="Raw balance after the transaction")
    address: Optional[str] = Field(None, description="Token account address")

    @field_validator("mint")
    @classmethod
    def _mint_is_base58(cls, v: str) -> str:
        if not is_valid_mint(v):
            raise ValueError(f"invalid mint address: {v!r}")
        return v


class Action(BaseModel):
    """Decoded protocol action with its type-specific payload."""
    model_config = ConfigDict(frozen=True)

    type: str
    info: dict[str, Any] = Field(default_factory=dict)
    source_protocol: Optional[ProtocolInfo] = None

    @field_validator("type")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.strip().upper()


class RawTransaction(BaseModel):
    """Indexer-decoded Solana transaction, the classifier's only input."""
    model_config = ConfigDict(frozen=True)

    signature: str = Field(..., min_length=1, description="Transaction signature")
    timestamp: Optional[datetime] = Field(None, description="Block time")
    status: str = Field(default="Success", description="Execution status")
    fee: int = Field(..., ge=0, description="Transaction fee in lamports")
    fee_payer: str = Field(..., min_length=1, description="Fee payer address")
    signers: List[str] = Field(..., description="Signer addresses in order")
    type: Optional[str] = Field(None, description="Indexer's top-level transaction type")
    protocol: Optional[ProtocolInfo] = None
    token_balance_changes: List[BalanceChange]
    actions: List[Action] = Field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: dict) -> "RawTransaction":
        """
        Validate a raw payload into a RawTransaction.

        Args:
            payload: Decoded transaction dictionary

        Returns:
            Validated transaction

        Raises:
            InvalidTransactionError: If required fields are missing or malformed
        """
        if not isinstance(payload, dict):
            raise InvalidTransactionError("Transaction payload must be an object")
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
            raise InvalidTransactionError(
                f"Malformed transaction {payload.get('signature', '<unknown>')}: {', '.join(fields)}"
            ) from e

    def rows_owned_by(self, owner: str) -> List[BalanceChange]:
        return [row for row in self.token_balance_changes if row.owner == owner]
