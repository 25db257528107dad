"""Detection of plain transfers that carry no swap intent."""
import logging
from typing import Any, Dict, Optional

from swap_classifier.models.swap import RejectedResult, RejectionReason
from swap_classifier.models.transaction import RawTransaction
from swap_classifier.services.classifier.actions import find_swap_action
from swap_classifier.utils.constants import PROTOCOL_ACTION_TYPES, TRANSFER_ACTION_TYPES

logger = logging.getLogger(__name__)


def detect_transfer(
    tx: RawTransaction,
    swapper: str,
    asset_count: int,
    debug_info: Optional[Dict[str, Any]] = None,
) -> Optional[RejectedResult]:
    """
    Reject transactions whose only economic signal is a transfer.

    Only applies when the swapper has no SWAP action. Bookkeeping actions
    (compute budget, account creation/closure) are ignored.

    Args:
        tx: Transaction being classified
        swapper: Identified swapper address
        asset_count: Number of non-zero swapper assets from balance changes
        debug_info: Extra context attached to a rejection

    Returns:
        RejectedResult, or None when classification should continue
    """
    if find_swap_action(tx, swapper) is not None:
        return None

    meaningful = [action.type for action in tx.actions if action.type not in PROTOCOL_ACTION_TYPES]
    only_transfers = bool(meaningful) and all(t in TRANSFER_ACTION_TYPES for t in meaningful)

    reason = None
    if asset_count == 0:
        if only_transfers:
            reason = RejectionReason.ONLY_TRANSFER_ACTIONS
    elif asset_count == 1:
        if not meaningful or only_transfers:
            reason = RejectionReason.SIMPLE_TRANSFER_DETECTED
        else:
            reason = RejectionReason.NO_SWAP_ACTION
    elif only_transfers:
        reason = RejectionReason.ONLY_TRANSFER_ACTIONS

    if reason is None:
        return None

    logger.info(f"[DELTAS] {tx.signature}: {reason.value} ({asset_count} assets, actions={meaningful})")
    debug = dict(debug_info or {})
    debug["action_types"] = meaningful
    return RejectedResult(signature=tx.signature, reason=reason, debug_info=debug)
