"""Helpers for reading decoded SWAP action payloads."""
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from swap_classifier.models.transaction import Action, RawTransaction
from swap_classifier.utils.constants import SWAP_ACTION_TYPES, canonical_mint


# Largest u128; anything above cannot be an on-chain token amount
MAX_RAW_AMOUNT = 2 ** 128 - 1
# Fee values beyond 10**38 are treated as garbage
MAX_DECIMAL_EXPONENT = 38
MAX_DECIMALS = 30


class ActionLeg(BaseModel):
    """One side (in or out) of a SWAP action."""
    model_config = ConfigDict(frozen=True)

    mint: str
    amount_raw: Optional[int] = None
    decimals: Optional[int] = None
    symbol: Optional[str] = None


def parse_raw_amount(value: Any) -> Optional[int]:
    """
    Parse a raw integer amount from an action payload.

    Args:
        value: String or integer amount

    Returns:
        Non-negative integer up to the u128 range, or None when the value
        is absent, unparsable or out of range
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if 0 <= value <= MAX_RAW_AMOUNT else None
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount < 0 or amount.adjusted() > MAX_DECIMAL_EXPONENT:
        return None
    if amount != amount.to_integral_value():
        return None
    raw = int(amount)
    return raw if raw <= MAX_RAW_AMOUNT else None


def parse_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount.adjusted() > MAX_DECIMAL_EXPONENT:
        return None
    return amount


def _leg(payload: Any) -> Optional[ActionLeg]:
    if not isinstance(payload, dict):
        return None
    mint = payload.get("token_address") or payload.get("mint")
    if not isinstance(mint, str) or not mint:
        return None
    decimals = payload.get("decimals")
    return ActionLeg(
        mint=canonical_mint(mint),
        amount_raw=parse_raw_amount(payload.get("amount_raw")),
        decimals=decimals if isinstance(decimals, int) and not isinstance(decimals, bool) and 0 <= decimals <= MAX_DECIMALS else None,
        symbol=payload.get("symbol") if isinstance(payload.get("symbol"), str) else None,
    )


def is_swap_action(action: Action) -> bool:
    return action.type in SWAP_ACTION_TYPES


def swap_actions(tx: RawTransaction) -> List[Action]:
    return [action for action in tx.actions if is_swap_action(action)]


def find_swap_action(tx: RawTransaction, swapper: str) -> Optional[Action]:
    """First SWAP action that belongs to the swapper (or names no swapper)."""
    for action in swap_actions(tx):
        owner = action.info.get("swapper")
        if not owner or owner == swapper:
            return action
    return None


def hop_legs(action: Action) -> List[Tuple[Optional[ActionLeg], Optional[ActionLeg]]]:
    """Per-hop (in, out) legs of a routed swap, in route order."""
    hops = action.info.get("swaps")
    if not isinstance(hops, list):
        return []
    legs = []
    for hop in hops:
        if not isinstance(hop, dict):
            continue
        legs.append((_leg(hop.get("in")), _leg(hop.get("out"))))
    return legs


def route_legs(action: Action) -> Tuple[Optional[ActionLeg], Optional[ActionLeg]]:
    """
    End-to-end input and output legs of a SWAP action.

    `tokens_swapped` is preferred. When a routed swap reports a hop asset
    as its in or out leg, the route's first input or last output replaces it.

    Args:
        action: SWAP action

    Returns:
        (in leg, out leg); either may be None
    """
    swapped = action.info.get("tokens_swapped")
    swapped = swapped if isinstance(swapped, dict) else {}
    leg_in, leg_out = _leg(swapped.get("in")), _leg(swapped.get("out"))

    hops = [hop for hop in hop_legs(action) if hop[0] or hop[1]]
    if not hops:
        return leg_in, leg_out

    hop_inputs = {hop_in.mint for hop_in, _ in hops if hop_in}
    hop_outputs = {hop_out.mint for _, hop_out in hops if hop_out}
    intermediates = hop_inputs & hop_outputs

    first_in, last_out = hops[0][0], hops[-1][1]
    if (leg_in is None or leg_in.mint in intermediates) and first_in is not None:
        leg_in = first_in
    if (leg_out is None or leg_out.mint in intermediates) and last_out is not None:
        leg_out = last_out
    return leg_in, leg_out


def hop_mints(action: Action) -> List[str]:
    """Every mint touched by the route's hops, in first-seen order."""
    mints: List[str] = []
    for hop_in, hop_out in hop_legs(action):
        for leg in (hop_in, hop_out):
            if leg and leg.mint not in mints:
                mints.append(leg.mint)
    return mints
