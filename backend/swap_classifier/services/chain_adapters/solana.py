"""Solana JSON-RPC adapter."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from swap_classifier.models.transaction import RawTransaction
from swap_classifier.services.chain_adapters.base import TransactionAdapter
from swap_classifier.utils.constants import NATIVE_SOL_MINT, SOL_DECIMALS
from swap_classifier.utils.errors import InvalidTransactionError

logger = logging.getLogger(__name__)


class SolanaRpcAdapter(TransactionAdapter):
    """
    Adapter for `getTransaction` results with `jsonParsed` encoding.

    RPC results carry no decoded actions, so classification relies on
    balance truth alone.
    """

    name = "solana_rpc"

    def parse_transaction(self, payload: dict) -> RawTransaction:
        """
        Parse a `getTransaction` result into a RawTransaction.

        Native SOL changes are read from pre/post lamport balances; the fee
        payer's network fee is added back so its row holds only transfers.
        SPL changes are paired by account index from pre/post token balances.

        Args:
            payload: RPC `result` object (or the full JSON-RPC response)

        Returns:
            Validated RawTransaction
        """
        if not isinstance(payload, dict):
            raise InvalidTransactionError("RPC payload must be an object")
        tx_data = payload.get("result", payload)
        if not isinstance(tx_data, dict):
            raise InvalidTransactionError("RPC result must be an object")

        transaction = tx_data.get("transaction") or {}
        message = transaction.get("message") or {}
        meta = tx_data.get("meta") or {}

        signatures = transaction.get("signatures") or [None]
        account_keys = [self._pubkey(key) for key in message.get("accountKeys", [])]
        signers = [
            self._pubkey(key) for key in message.get("accountKeys", [])
            if isinstance(key, dict) and key.get("signer")
        ]
        fee = meta.get("fee", 0)
        fee_payer = account_keys[0] if account_keys else None

        block_time = tx_data.get("blockTime")
        timestamp = datetime.fromtimestamp(block_time, tz=timezone.utc) if block_time else None

        changes = self._native_changes(account_keys, meta, fee) + self._token_changes(account_keys, meta)

        tx = RawTransaction.from_payload({
            "signature": signatures[0],
            "timestamp": timestamp,
            "status": "Success" if meta.get("err") is None else "Failed",
            "fee": fee,
            "fee_payer": fee_payer,
            "signers": signers or ([fee_payer] if fee_payer else []),
            "token_balance_changes": changes,
            "actions": [],
        })
        logger.debug(f"[RPC] Parsed {tx.signature}: {len(changes)} balance changes")
        return tx

    @staticmethod
    def _pubkey(key: Any) -> str:
        return key.get("pubkey", "") if isinstance(key, dict) else str(key)

    def _native_changes(self, account_keys: List[str], meta: Dict[str, Any], fee: int) -> List[dict]:
        pre_balances = meta.get("preBalances", [])
        post_balances = meta.get("postBalances", [])
        changes = []
        for i, (pre, post) in enumerate(zip(pre_balances, post_balances)):
            if i >= len(account_keys):
                break
            diff = post - pre
            if i == 0:
                diff += fee
            if diff == 0:
                continue
            changes.append({
                "mint": NATIVE_SOL_MINT,
                "owner": account_keys[i],
                "decimals": SOL_DECIMALS,
                "change_amount": diff,
                "pre_balance": pre,
                "post_balance": post,
                "address": account_keys[i],
            })
        return changes

    def _token_changes(self, account_keys: List[str], meta: Dict[str, Any]) -> List[dict]:
        # Build token balance map keyed by account index
        balances: Dict[int, Dict[str, Any]] = {}
        for side, entries in (("pre", meta.get("preTokenBalances", [])),
                              ("post", meta.get("postTokenBalances", []))):
            for balance in entries:
                index = balance.get("accountIndex")
                ui_amount = balance.get("uiTokenAmount", {})
                entry = balances.setdefault(index, {
                    "mint": balance.get("mint"),
                    "owner": balance.get("owner"),
                    "decimals": ui_amount.get("decimals"),
                    "pre": 0,
                    "post": 0,
                })
                entry[side] = int(ui_amount.get("amount", 0))

        changes = []
        for index, entry in sorted(balances.items(), key=self._sort_key):
            diff = entry["post"] - entry["pre"]
            if diff == 0:
                continue
            changes.append({
                "mint": entry["mint"],
                "owner": entry["owner"],
                "decimals": entry["decimals"],
                "change_amount": diff,
                "pre_balance": entry["pre"],
                "post_balance": entry["post"],
                "address": account_keys[index] if isinstance(index, int) and index < len(account_keys) else None,
            })
        return changes

    @staticmethod
    def _sort_key(item: Tuple[Any, Dict[str, Any]]) -> int:
        index = item[0]
        return index if isinstance(index, int) else -1
