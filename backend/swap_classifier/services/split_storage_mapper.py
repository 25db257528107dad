"""Mapping of classifier results to storage records."""
import logging
from decimal import Decimal
from typing import List, Mapping, Optional, Tuple, assert_never

from swap_classifier.models.record import (
    ClassificationSource,
    PersistedSwapRecord,
    RecordAmount,
    RecordSolAmount,
    RecordTokenSide,
    RecordTransaction,
    RecordType,
)
from swap_classifier.models.swap import (
    ClassifierResult,
    Direction,
    ParsedResult,
    RejectedResult,
    SplitResult,
    SplitSwapPair,
    SwapLeg,
)
from swap_classifier.utils.constants import CANONICAL_SOL_MINT, canonical_prices
from swap_classifier.utils.errors import StorageMappingError

logger = logging.getLogger(__name__)


def leg_sol_amount(leg: SwapLeg) -> Optional[Decimal]:
    """Balance-truth SOL moved by a leg, or None when neither side is SOL."""
    quote_amount = leg.amounts.total_wallet_cost if leg.direction is Direction.BUY else leg.amounts.net_wallet_received
    if leg.quote_asset.mint == CANONICAL_SOL_MINT:
        return quote_amount
    if leg.base_asset.mint == CANONICAL_SOL_MINT:
        return leg.amounts.base_amount
    return None


def map_leg(
    leg: SwapLeg,
    source: ClassificationSource,
    prices: Mapping[str, Decimal],
) -> PersistedSwapRecord:
    """
    Map one leg to a storage record.

    The record's own side carries the base amount valued at the base
    asset's USD price; the other side is zero.

    Args:
        leg: Swap leg
        source: Provenance tag for the record
        prices: Mint -> USD price

    Returns:
        PersistedSwapRecord

    Raises:
        StorageMappingError: If the base asset has no price
    """
    price = canonical_prices(prices).get(leg.base_asset.mint)
    if price is None:
        raise StorageMappingError(
            f"No USD price for {leg.base_asset.mint} in {leg.signature}"
        )
    usd_value = leg.amounts.base_amount * Decimal(price)
    sol_amount = leg_sol_amount(leg)

    base_side = RecordTokenSide(
        mint=leg.base_asset.mint,
        symbol=leg.base_asset.symbol,
        amount=leg.amounts.base_amount,
    )
    if leg.direction is Direction.BUY:
        quote_side = RecordTokenSide(
            mint=leg.quote_asset.mint,
            symbol=leg.quote_asset.symbol,
            amount=leg.amounts.total_wallet_cost or Decimal(0),
        )
        record_type = RecordType.BUY
        amount = RecordAmount(buy_amount=usd_value, sell_amount=Decimal(0))
        sol = RecordSolAmount(buy_sol_amount=sol_amount)
        flow = RecordTransaction(token_in=quote_side, token_out=base_side)
    else:
        quote_side = RecordTokenSide(
            mint=leg.quote_asset.mint,
            symbol=leg.quote_asset.symbol,
            amount=leg.amounts.net_wallet_received or Decimal(0),
        )
        record_type = RecordType.SELL
        amount = RecordAmount(buy_amount=Decimal(0), sell_amount=usd_value)
        sol = RecordSolAmount(sell_sol_amount=sol_amount)
        flow = RecordTransaction(token_in=base_side, token_out=quote_side)

    return PersistedSwapRecord(
        signature=leg.signature,
        type=record_type,
        classification_source=source,
        swapper=leg.swapper,
        protocol=leg.protocol,
        timestamp=leg.timestamp,
        amount=amount,
        sol_amount=sol,
        transaction=flow,
        confidence=leg.confidence_score,
    )


def check_split_pair(pair: SplitSwapPair) -> None:
    """
    Verify the pair can be stored as two legs of one transaction.

    Raises:
        StorageMappingError: If the legs disagree on signature or swapper,
            or carry the wrong directions
    """
    sell, buy = pair.sell_record, pair.buy_record
    if sell.direction is not Direction.SELL or buy.direction is not Direction.BUY:
        raise StorageMappingError(f"Split pair {pair.signature} has wrong leg directions")
    if sell.signature != buy.signature:
        raise StorageMappingError(
            f"Split legs carry different signatures: {sell.signature} / {buy.signature}"
        )
    if sell.swapper != buy.swapper:
        raise StorageMappingError(f"Split pair {pair.signature} has two swappers")


def map_split_pair(
    pair: SplitSwapPair,
    prices: Mapping[str, Decimal],
) -> Tuple[PersistedSwapRecord, PersistedSwapRecord]:
    """
    Map a split pair to its SELL and BUY records.

    Args:
        pair: Split swap pair
        prices: Mint -> USD price

    Returns:
        (sell record, buy record) sharing one signature
    """
    check_split_pair(pair)
    sell = map_leg(pair.sell_record, ClassificationSource.SPLIT_SELL, prices)
    buy = map_leg(pair.buy_record, ClassificationSource.SPLIT_BUY, prices)
    logger.debug(f"[STORAGE] {pair.signature}: mapped split pair")
    return sell, buy


def map_result(result: ClassifierResult, prices: Mapping[str, Decimal]) -> List[PersistedSwapRecord]:
    """
    Map any classifier result to the records it should persist.

    Args:
        result: Classifier output
        prices: Mint -> USD price

    Returns:
        One record for a parsed swap, two for a split

    Raises:
        StorageMappingError: For rejected results or missing prices
    """
    match result:
        case ParsedResult(leg=leg):
            return [map_leg(leg, ClassificationSource.PARSER, prices)]
        case SplitResult(pair=pair):
            return list(map_split_pair(pair, prices))
        case RejectedResult(reason=reason):
            raise StorageMappingError(f"Rejected result cannot be stored: {reason.value}")
        case other:
            assert_never(other)
