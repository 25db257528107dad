"""Minimum USD value policy applied after classification."""
import logging
from decimal import Decimal
from typing import Mapping, Optional, assert_never

from swap_classifier.models.swap import (
    ClassifierResult,
    ParsedResult,
    RejectedResult,
    RejectionReason,
    SplitResult,
    SwapLeg,
)
from swap_classifier.utils.constants import canonical_prices

logger = logging.getLogger(__name__)


def leg_usd_value(leg: SwapLeg, prices: Mapping[str, Decimal]) -> Optional[Decimal]:
    """
    USD value of a leg from caller-supplied prices.

    The quote side is valued first; the base side is used when the quote
    asset has no price.

    Args:
        leg: Parsed swap leg
        prices: Mint -> USD price

    Returns:
        USD value, or None when neither asset is priced
    """
    prices = canonical_prices(prices)
    quote_amount = leg.amounts.total_wallet_cost or leg.amounts.net_wallet_received
    quote_price = prices.get(leg.quote_asset.mint)
    if quote_price is not None and quote_amount is not None:
        return quote_amount * Decimal(quote_price)

    base_price = prices.get(leg.base_asset.mint)
    if base_price is not None:
        return leg.amounts.base_amount * Decimal(base_price)
    return None


class MinimumValueGate:
    """Rejects parsed swaps worth less than a USD threshold."""

    def __init__(self, threshold_usd: Decimal):
        self.threshold_usd = Decimal(threshold_usd)

    def apply(self, result: ClassifierResult, prices: Mapping[str, Decimal]) -> ClassifierResult:
        """
        Apply the threshold to a classifier result.

        Split results and rejections pass through unchanged, as do parsed
        results that cannot be priced.

        Args:
            result: Classifier output
            prices: Mint -> USD price

        Returns:
            The original result, or a RejectedResult below the threshold
        """
        match result:
            case ParsedResult(leg=leg):
                value = leg_usd_value(leg, prices)
                if value is None or value >= self.threshold_usd:
                    return result
                logger.info(
                    f"[CLASSIFY] {leg.signature}: ${value:.2f} below ${self.threshold_usd} minimum"
                )
                return RejectedResult(
                    signature=leg.signature,
                    reason=RejectionReason.BELOW_MINIMUM_VALUE_THRESHOLD,
                    debug_info={"usd_value": str(value), "threshold": str(self.threshold_usd)},
                )
            case SplitResult() | RejectedResult():
                return result
            case other:
                assert_never(other)
