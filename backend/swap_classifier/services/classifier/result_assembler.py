"""Confidence scoring and result assembly."""
import logging
from decimal import Decimal
from typing import List, Mapping, Optional

from swap_classifier.models.swap import (
    AssetDelta,
    AssetRef,
    Confidence,
    Direction,
    ParsedResult,
    SplitResult,
    SplitSwapPair,
    SwapLeg,
    SwapperMethod,
)
from swap_classifier.models.transaction import Action, RawTransaction
from swap_classifier.services.classifier.actions import swap_actions
from swap_classifier.services.classifier.amount_calculator import calculate_amounts
from swap_classifier.services.classifier.asset_delta_collector import CollectedAssets
from swap_classifier.services.classifier.swap_shape_resolver import SplitShape, StandardShape
from swap_classifier.services.classifier.swapper_identifier import SwapperIdentity
from swap_classifier.utils.constants import UNKNOWN_PROTOCOL, symbol_for_mint

logger = logging.getLogger(__name__)

SPLIT_REASON = "token_to_token_unstable_pair"


def assign_confidence(method: SwapperMethod, deltas: List[AssetDelta]) -> Confidence:
    """
    Confidence from provenance.

    HIGH: fee payer swapper, every leg from balance changes.
    MEDIUM: a synthesized leg, or a signer swapper.
    LOW: a synthesized leg that also needed defaulted decimals or a
    signer swapper.
    """
    synthesized = [delta for delta in deltas if delta.synthesized]
    if synthesized and (
        any(delta.decimals_inferred for delta in synthesized) or method is SwapperMethod.SIGNER
    ):
        return Confidence.LOW
    if synthesized or method is SwapperMethod.SIGNER:
        return Confidence.MEDIUM
    return Confidence.HIGH


def resolve_protocol(tx: RawTransaction) -> str:
    """Transaction protocol, else the first SWAP action's, else UNKNOWN."""
    if tx.protocol and tx.protocol.name:
        return tx.protocol.name
    for action in swap_actions(tx):
        if action.source_protocol and action.source_protocol.name:
            return action.source_protocol.name
    return UNKNOWN_PROTOCOL


def _asset_ref(delta: AssetDelta) -> AssetRef:
    ref = AssetRef.from_delta(delta)
    if ref.symbol is None:
        ref = ref.model_copy(update={"symbol": symbol_for_mint(delta.mint)})
    return ref


class ResultAssembler:
    """Builds SwapLegs and wraps them in classifier results."""

    def __init__(
        self,
        tx: RawTransaction,
        swapper: SwapperIdentity,
        collected: CollectedAssets,
        action: Optional[Action] = None,
        sol_to_quote_rates: Optional[Mapping[str, Decimal]] = None,
    ):
        self.tx = tx
        self.swapper = swapper
        self.collected = collected
        self.action = action
        self.sol_to_quote_rates = sol_to_quote_rates
        self.protocol = resolve_protocol(tx)
        self.confidence = assign_confidence(swapper.method, collected.deltas)

    def build_leg(self, direction: Direction, base: AssetDelta, quote: AssetDelta) -> SwapLeg:
        amounts = calculate_amounts(
            self.tx, direction, base, quote, self.action, self.sol_to_quote_rates
        )
        return SwapLeg(
            signature=self.tx.signature,
            timestamp=self.tx.timestamp.isoformat() if self.tx.timestamp else None,
            direction=direction,
            swapper=self.swapper.address,
            quote_asset=_asset_ref(quote),
            base_asset=_asset_ref(base),
            amounts=amounts,
            confidence=self.confidence,
            swapper_identification_method=self.swapper.method,
            rent_refunds_filtered=self.collected.rent_refunds_filtered,
            intermediate_assets_collapsed=list(self.collected.intermediate_assets_collapsed),
            protocol=self.protocol,
        )

    def parsed(self, shape: StandardShape) -> ParsedResult:
        leg = self.build_leg(shape.direction, shape.base, shape.quote)
        logger.info(
            f"[CLASSIFY] {self.tx.signature}: {leg.direction.value} {leg.amounts.base_amount} "
            f"{leg.base_asset.symbol} ({leg.confidence.value})"
        )
        return ParsedResult(leg=leg)

    def split(self, shape: SplitShape) -> SplitResult:
        """Sell the outgoing asset and buy the incoming one, each priced in the other."""
        sell = self.build_leg(Direction.SELL, base=shape.outgoing, quote=shape.incoming)
        buy = self.build_leg(Direction.BUY, base=shape.incoming, quote=shape.outgoing)
        logger.info(
            f"[CLASSIFY] {self.tx.signature}: split {sell.base_asset.symbol} -> {buy.base_asset.symbol}"
        )
        return SplitResult(pair=SplitSwapPair(sell_record=sell, buy_record=buy, split_reason=SPLIT_REASON))
