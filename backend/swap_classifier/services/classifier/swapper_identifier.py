"""Swapper identification."""
import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict

from swap_classifier.models.swap import SwapperMethod
from swap_classifier.models.transaction import RawTransaction

logger = logging.getLogger(__name__)


class SwapperIdentity(BaseModel):
    """The wallet treated as the trader and how it was found."""
    model_config = ConfigDict(frozen=True)

    address: str
    method: SwapperMethod


def identify_swapper(tx: RawTransaction) -> Optional[SwapperIdentity]:
    """
    Determine the swapper of a transaction.

    The fee payer wins when it owns at least one balance change. Otherwise
    the first signer, in signer order, that owns a balance change is used.

    Args:
        tx: Transaction to inspect

    Returns:
        SwapperIdentity, or None when no candidate owns a balance change
    """
    owners = {row.owner for row in tx.token_balance_changes}

    if tx.fee_payer in owners:
        logger.debug(f"[SWAPPER] {tx.signature}: fee payer {tx.fee_payer}")
        return SwapperIdentity(address=tx.fee_payer, method=SwapperMethod.FEE_PAYER)

    for signer in tx.signers:
        if signer in owners:
            logger.debug(f"[SWAPPER] {tx.signature}: signer {signer}")
            return SwapperIdentity(address=signer, method=SwapperMethod.SIGNER)

    logger.info(f"[SWAPPER] {tx.signature}: no fee payer or signer owns a balance change")
    return None
