"""Balance-truth amount calculation."""
import logging
from decimal import Decimal
from typing import Mapping, Optional

from swap_classifier.models.swap import AssetDelta, Direction, FeeBreakdown, SwapAmounts
from swap_classifier.models.transaction import Action, RawTransaction
from swap_classifier.services.classifier.actions import parse_decimal, parse_raw_amount, route_legs
from swap_classifier.utils.constants import CANONICAL_SOL_MINT, SOL_DECIMALS

logger = logging.getLogger(__name__)

ZERO = Decimal(0)


def _non_negative(value: Optional[Decimal]) -> Decimal:
    return value if value is not None and value > 0 else ZERO


def calculate_fee_breakdown(
    tx: RawTransaction,
    quote_mint: str,
    action: Optional[Action] = None,
    sol_to_quote_rates: Optional[Mapping[str, Decimal]] = None,
) -> FeeBreakdown:
    """
    Break the transaction's fees down into SOL and quote terms.

    The platform fee is read in quote units and the priority fee in
    lamports from the SWAP action. Unparsable values count as zero. SOL
    fees convert to quote units when the quote is SOL or a rate is given.

    Args:
        tx: Transaction being classified
        quote_mint: Canonical mint of the leg's quote asset
        action: The swapper's SWAP action, if any
        sol_to_quote_rates: Optional mint -> quote units per SOL

    Returns:
        FeeBreakdown
    """
    transaction_fee_sol = Decimal(tx.fee).scaleb(-SOL_DECIMALS)

    platform_fee = ZERO
    priority_fee = ZERO
    if action is not None:
        platform_fee = _non_negative(parse_decimal(action.info.get("platform_fee")))
        priority_lamports = parse_raw_amount(action.info.get("priority_fee"))
        if priority_lamports:
            priority_fee = Decimal(priority_lamports).scaleb(-SOL_DECIMALS)

    if quote_mint == CANONICAL_SOL_MINT:
        rate: Optional[Decimal] = Decimal(1)
    else:
        rate = (sol_to_quote_rates or {}).get(quote_mint)

    transaction_fee_quote = transaction_fee_sol * rate if rate is not None else None
    priority_fee_quote = priority_fee * rate if rate is not None else ZERO
    total_fee_quote = (transaction_fee_quote or ZERO) + priority_fee_quote + platform_fee

    return FeeBreakdown(
        transaction_fee_sol=transaction_fee_sol,
        transaction_fee_quote=transaction_fee_quote,
        platform_fee=platform_fee,
        priority_fee=priority_fee,
        total_fee_quote=total_fee_quote,
    )


def calculate_amounts(
    tx: RawTransaction,
    direction: Direction,
    base: AssetDelta,
    quote: AssetDelta,
    action: Optional[Action] = None,
    sol_to_quote_rates: Optional[Mapping[str, Decimal]] = None,
) -> SwapAmounts:
    """
    Compute leg amounts from wallet balance deltas.

    `base_amount`, `total_wallet_cost` and `net_wallet_received` always come
    from the swapper's deltas. Pool amounts from the SWAP action are only
    attached when the action names the quote asset on the matching side and
    the quote delta was observed rather than synthesized. Fees are reported
    alongside and never subtracted.

    Args:
        tx: Transaction being classified
        direction: BUY or SELL
        base: Base asset delta
        quote: Quote asset delta
        action: The swapper's SWAP action, if any
        sol_to_quote_rates: Optional mint -> quote units per SOL

    Returns:
        SwapAmounts
    """
    base_amount = abs(base.normalized)
    quote_amount = abs(quote.normalized)

    leg_in, leg_out = route_legs(action) if action is not None else (None, None)
    pool_amount = None
    pool_leg = leg_in if direction is Direction.BUY else leg_out
    if pool_leg is not None and pool_leg.mint == quote.mint and not quote.synthesized and pool_leg.amount_raw:
        pool_amount = Decimal(pool_leg.amount_raw).scaleb(-quote.decimals)

    fees = calculate_fee_breakdown(tx, quote.mint, action, sol_to_quote_rates)

    if direction is Direction.BUY:
        amounts = SwapAmounts(
            base_amount=base_amount,
            swap_input_amount=pool_amount,
            total_wallet_cost=quote_amount,
            fee_breakdown=fees,
        )
    else:
        amounts = SwapAmounts(
            base_amount=base_amount,
            swap_output_amount=pool_amount,
            net_wallet_received=quote_amount,
            fee_breakdown=fees,
        )

    logger.debug(
        f"[AMOUNTS] {tx.signature}: {direction.value} base={base_amount} quote={quote_amount} "
        f"pool={pool_amount} fees={fees.total_fee_quote}"
    )
    return amounts
