"""Rent refund detection for swapper SOL rows."""
import logging
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict

from swap_classifier.config import RentRefundParams
from swap_classifier.models.transaction import BalanceChange, RawTransaction
from swap_classifier.services.classifier.actions import route_legs, swap_actions
from swap_classifier.utils.constants import CANONICAL_SOL_MINT, SOL_DECIMALS, is_sol_mint

logger = logging.getLogger(__name__)


class FilteredBalanceChanges(BaseModel):
    """Swapper rows split into economic changes and rent refunds."""
    model_config = ConfigDict(frozen=True)

    economic_changes: List[BalanceChange]
    rent_refunds: List[BalanceChange]


def _matches_reserve(amount: int, params: RentRefundParams) -> bool:
    return any(
        abs(amount - reserve) <= params.reserve_tolerance_lamports
        for reserve in params.rent_exempt_reserves_lamports
    )


def _has_account_lifecycle(rows: List[BalanceChange]) -> bool:
    """True when a non-SOL account was opened or closed."""
    return any(
        not is_sol_mint(row.mint) and row.change_amount != 0
        and (row.pre_balance == 0 or row.post_balance == 0)
        for row in rows
    )


def _reported_sol_outputs(tx: RawTransaction) -> set:
    """Raw SOL amounts that SWAP actions report as swap output."""
    amounts = set()
    for action in swap_actions(tx):
        _, leg_out = route_legs(action)
        if leg_out and leg_out.mint == CANONICAL_SOL_MINT and leg_out.amount_raw:
            amounts.add(leg_out.amount_raw)
    return amounts


def filter_rent_refunds(
    tx: RawTransaction,
    swapper_rows: List[BalanceChange],
    params: RentRefundParams,
) -> FilteredBalanceChanges:
    """
    Separate rent-refund SOL rows from economic swapper rows.

    A SOL row is a rent refund when it is a small inflow (below
    `params.max_sol`), the swapper also moved a non-SOL asset, and the
    refund pairs with an account open/close or a known rent-exempt
    reserve. Inflows that a SWAP action reports as its SOL output are
    genuine micro-swap proceeds and are kept.

    Args:
        tx: Transaction being classified
        swapper_rows: Balance changes owned by the swapper
        params: Heuristic tuning

    Returns:
        FilteredBalanceChanges
    """
    non_sol_activity = any(
        not is_sol_mint(row.mint) and row.change_amount != 0 for row in swapper_rows
    )
    if not non_sol_activity:
        return FilteredBalanceChanges(economic_changes=list(swapper_rows), rent_refunds=[])

    lifecycle = _has_account_lifecycle(swapper_rows)
    corroborated = _reported_sol_outputs(tx)

    economic: List[BalanceChange] = []
    refunds: List[BalanceChange] = []
    for row in swapper_rows:
        if not is_sol_mint(row.mint) or row.change_amount <= 0:
            economic.append(row)
            continue

        # Normalize with SOL decimals regardless of the row's own decimals
        sol = Decimal(row.change_amount).scaleb(-SOL_DECIMALS)
        if sol >= params.max_sol or row.change_amount in corroborated:
            economic.append(row)
            continue

        paired = lifecycle or _matches_reserve(row.change_amount, params)
        if params.require_lifecycle and not paired:
            economic.append(row)
            continue

        logger.debug(f"[RENT] {tx.signature}: filtered {sol} SOL refund")
        refunds.append(row)

    return FilteredBalanceChanges(economic_changes=economic, rent_refunds=refunds)
