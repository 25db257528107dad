"""Asset delta collection for the identified swapper."""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from swap_classifier.config import ClassifierConfig
from swap_classifier.models.swap import AssetDelta, DeltaSource, RejectedResult, RejectionReason
from swap_classifier.models.transaction import Action, BalanceChange, RawTransaction
from swap_classifier.services.classifier.actions import (
    ActionLeg,
    find_swap_action,
    hop_mints,
    parse_decimal,
    parse_raw_amount,
    route_legs,
)
from swap_classifier.services.classifier.rent_refund_filter import filter_rent_refunds
from swap_classifier.services.classifier.transfer_detector import detect_transfer
from swap_classifier.utils.constants import (
    CANONICAL_SOL_MINT,
    KNOWN_SYMBOLS,
    LAMPORTS_PER_SOL,
    SOL_DECIMALS,
    SOL_TRANSFER_ACTION,
    canonical_mint,
    is_sol_mint,
)

logger = logging.getLogger(__name__)

# Used when neither the action nor any balance row reveals a mint's decimals
DEFAULT_DECIMALS = 9


class CollectedAssets(BaseModel):
    """Net swapper deltas ready for shape resolution."""
    model_config = ConfigDict(frozen=True)

    deltas: List[AssetDelta]
    rent_refunds_filtered: bool = False
    intermediate_assets_collapsed: List[str] = Field(default_factory=list)


def describe_deltas(deltas: List[AssetDelta]) -> List[Dict[str, Any]]:
    """Plain representation of deltas for rejection debug payloads."""
    return [
        {
            "mint": delta.mint,
            "raw_delta": delta.raw_delta,
            "decimals": delta.decimals,
            "source": delta.source.value,
        }
        for delta in deltas
    ]


def _aggregate(rows: List[BalanceChange], dust_threshold: Decimal) -> Tuple[List[AssetDelta], List[str]]:
    """
    Sum rows per canonical mint.

    Returns:
        (non-zero deltas in first-seen order, mints that netted to zero)
    """
    totals: Dict[str, int] = {}
    decimals: Dict[str, int] = {}
    for row in rows:
        mint = canonical_mint(row.mint)
        totals[mint] = totals.get(mint, 0) + row.change_amount
        decimals.setdefault(mint, SOL_DECIMALS if is_sol_mint(row.mint) else row.decimals)

    active: List[AssetDelta] = []
    collapsed: List[str] = []
    for mint, raw in totals.items():
        delta = AssetDelta(
            mint=mint,
            symbol=KNOWN_SYMBOLS.get(mint),
            decimals=decimals[mint],
            raw_delta=raw,
        )
        if raw == 0 or abs(delta.normalized) < dust_threshold:
            collapsed.append(mint)
        else:
            active.append(delta)
    return active, collapsed


def _sol_transfer_delta(tx: RawTransaction, swapper: str, dust_threshold: Decimal) -> Optional[AssetDelta]:
    """Net native SOL the swapper moved through SOL_TRANSFER actions."""
    net = 0
    for action in tx.actions:
        if action.type != SOL_TRANSFER_ACTION:
            continue
        lamports = parse_raw_amount(action.info.get("amount_raw"))
        if lamports is None:
            sol = parse_decimal(action.info.get("amount"))
            if sol is None or sol < 0:
                continue
            lamports = int((sol * LAMPORTS_PER_SOL).to_integral_value())
        if action.info.get("receiver") == swapper:
            net += lamports
        if action.info.get("sender") == swapper:
            net -= lamports

    if net == 0:
        return None
    delta = AssetDelta(
        mint=CANONICAL_SOL_MINT,
        symbol="SOL",
        decimals=SOL_DECIMALS,
        raw_delta=net,
        source=DeltaSource.ACTION_FALLBACK,
    )
    if abs(delta.normalized) < dust_threshold:
        return None
    return delta


def _leg_decimals(tx: RawTransaction, leg: ActionLeg) -> Tuple[int, bool]:
    """Decimals for a synthesized leg and whether they had to be defaulted."""
    if leg.decimals is not None:
        return leg.decimals, False
    for row in tx.token_balance_changes:
        if canonical_mint(row.mint) == leg.mint:
            return (SOL_DECIMALS if is_sol_mint(row.mint) else row.decimals), False
    if leg.mint == CANONICAL_SOL_MINT:
        return SOL_DECIMALS, False
    return DEFAULT_DECIMALS, True


def _synthesize_missing_legs(
    tx: RawTransaction,
    action: Action,
    active: List[AssetDelta],
) -> List[AssetDelta]:
    """Add only the SWAP action legs whose mint is not already present."""
    leg_in, leg_out = route_legs(action)
    present = {delta.mint for delta in active}
    synthesized: List[AssetDelta] = []

    for leg, sign in ((leg_in, -1), (leg_out, 1)):
        if leg is None or leg.mint in present:
            continue
        if not leg.amount_raw:
            logger.debug(f"[DELTAS] {tx.signature}: action leg {leg.mint} has no usable amount")
            continue
        decimals, inferred = _leg_decimals(tx, leg)
        synthesized.append(AssetDelta(
            mint=leg.mint,
            symbol=KNOWN_SYMBOLS.get(leg.mint) or leg.symbol,
            decimals=decimals,
            raw_delta=sign * leg.amount_raw,
            source=DeltaSource.ACTION_FALLBACK,
            decimals_inferred=inferred,
        ))
        present.add(leg.mint)

    return synthesized


def collect_asset_deltas(
    tx: RawTransaction,
    swapper: str,
    config: ClassifierConfig,
) -> Union[CollectedAssets, RejectedResult]:
    """
    Reduce the swapper's balance changes to one net delta per asset.

    SOL and wrapped SOL are merged before counting. Rent refunds are
    dropped. When only one asset remains and the swapper has a SWAP action,
    the missing counter-asset is synthesized from the action; an asset
    already known from balance changes is never added a second time.

    Args:
        tx: Transaction being classified
        swapper: Identified swapper address
        config: Classifier configuration

    Returns:
        CollectedAssets with exactly two deltas, or a RejectedResult
    """
    swapper_rows = tx.rows_owned_by(swapper)
    filtered = filter_rent_refunds(tx, swapper_rows, config.rent_refund)
    active, collapsed = _aggregate(filtered.economic_changes, config.dust_threshold)

    if not any(is_sol_mint(row.mint) for row in swapper_rows):
        sol_delta = _sol_transfer_delta(tx, swapper, config.dust_threshold)
        if sol_delta is not None:
            logger.debug(f"[DELTAS] {tx.signature}: SOL from transfers {sol_delta.normalized}")
            active.append(sol_delta)

    debug = {
        "swapper": swapper,
        "rent_refunds": len(filtered.rent_refunds),
    }

    rejection = detect_transfer(tx, swapper, len(active), {**debug, "deltas": describe_deltas(active)})
    if rejection is not None:
        return rejection

    action = find_swap_action(tx, swapper)
    if len(active) == 1 and action is not None:
        synthesized = _synthesize_missing_legs(tx, action, active)
        if synthesized:
            logger.info(
                f"[DELTAS] {tx.signature}: synthesized "
                f"{', '.join(d.mint for d in synthesized)} from SWAP action"
            )
        active.extend(synthesized)

    final_mints = {delta.mint for delta in active}
    if action is not None:
        for mint in hop_mints(action):
            if mint not in collapsed:
                collapsed.append(mint)
    collapsed = [mint for mint in collapsed if mint not in final_mints]

    if len(active) != 2:
        logger.info(f"[DELTAS] {tx.signature}: {len(active)} net assets for {swapper}")
        return RejectedResult(
            signature=tx.signature,
            reason=RejectionReason.INVALID_ASSET_COUNT,
            debug_info={**debug, "deltas": describe_deltas(active), "intermediate": collapsed},
        )

    if filtered.rent_refunds:
        logger.info(f"[RENT] {tx.signature}: {len(filtered.rent_refunds)} rent refund rows filtered")

    return CollectedAssets(
        deltas=active,
        rent_refunds_filtered=bool(filtered.rent_refunds),
        intermediate_assets_collapsed=collapsed,
    )
