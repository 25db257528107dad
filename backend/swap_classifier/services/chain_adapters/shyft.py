"""SHYFT parsed-transaction adapter."""
import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from swap_classifier.models.transaction import RawTransaction
from swap_classifier.services.chain_adapters.base import TransactionAdapter
from swap_classifier.utils.constants import LAMPORTS_PER_SOL
from swap_classifier.utils.errors import InvalidTransactionError

logger = logging.getLogger(__name__)


def _to_raw_units(value: Any, decimals: int) -> Optional[int]:
    """Raw integer amount from either a raw integer or a UI decimal value."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    if amount == amount.to_integral_value() and not isinstance(value, float):
        return int(amount)
    return int(amount.scaleb(decimals).to_integral_value())


def _balance(value: Any, decimals: Any) -> Any:
    if value is None or not isinstance(decimals, int):
        return value
    return _to_raw_units(value, decimals)


def _fee_to_lamports(value: Any) -> Any:
    """SHYFT reports the fee in SOL; integers are already lamports."""
    if isinstance(value, float) or (isinstance(value, str) and "." in value):
        try:
            return int((Decimal(str(value)) * LAMPORTS_PER_SOL).to_integral_value())
        except InvalidOperation:
            return value
    return value


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        # Epoch seconds or milliseconds
        seconds = value / 1000 if value > 10 ** 11 else value
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    return value


class ShyftAdapter(TransactionAdapter):
    """Adapter for SHYFT `transaction/parsed` responses."""

    name = "shyft"

    def parse_transaction(self, payload: dict) -> RawTransaction:
        """
        Parse a SHYFT response into a RawTransaction.

        Accepts either the bare `result` object or the full response
        envelope. Balance change amounts may be raw integers or UI decimals.

        Args:
            payload: SHYFT response or its `result`

        Returns:
            Validated RawTransaction
        """
        if not isinstance(payload, dict):
            raise InvalidTransactionError("SHYFT payload must be an object")

        data = payload.get("result", payload)
        if isinstance(data, list):
            if not data:
                raise InvalidTransactionError("SHYFT response contains no transaction")
            data = data[0]
        if not isinstance(data, dict):
            raise InvalidTransactionError("SHYFT result must be an object")

        signature = data.get("signature")
        if not signature and data.get("signatures"):
            signature = data["signatures"][0]

        normalized: Dict[str, Any] = {
            "signature": signature,
            "timestamp": _parse_timestamp(data.get("timestamp")),
            "status": data.get("status", "Success"),
            "fee": _fee_to_lamports(data.get("fee")),
            "fee_payer": data.get("fee_payer"),
            "signers": data.get("signers"),
            "type": data.get("type"),
            "protocol": data.get("protocol") or None,
            "token_balance_changes": self._balance_changes(data.get("token_balance_changes")),
            "actions": [
                {
                    "type": action.get("type", "UNKNOWN"),
                    "info": action.get("info") or {},
                    "source_protocol": action.get("source_protocol") or None,
                }
                for action in data.get("actions") or []
                if isinstance(action, dict)
            ],
        }

        tx = RawTransaction.from_payload(normalized)
        logger.debug(
            f"[SHYFT] Parsed {tx.signature}: {len(tx.token_balance_changes)} balance changes, "
            f"{len(tx.actions)} actions"
        )
        return tx

    def _balance_changes(self, rows: Any) -> Optional[List[dict]]:
        if rows is None:
            return None
        changes = []
        for row in rows:
            if not isinstance(row, dict):
                continue
            decimals = row.get("decimals")
            change = row.get("change_amount")
            if isinstance(decimals, int):
                change = _to_raw_units(change, decimals)
            changes.append({
                "mint": row.get("mint"),
                "owner": row.get("owner"),
                "decimals": decimals,
                "change_amount": change,
                "pre_balance": _balance(row.get("pre_balance"), decimals),
                "post_balance": _balance(row.get("post_balance"), decimals),
                "address": row.get("address"),
            })
        return changes
