from datetime import datetime, timezone
from decimal import Decimal

import pytest

from helpers import BONK, NATIVE_SOL, POOL, USDC, WALLET, WIF, WSOL

from swap_classifier.models.swap import Direction, ParsedResult, RejectionReason
from swap_classifier.services.chain_adapters.shyft import ShyftAdapter
from swap_classifier.services.chain_adapters.solana import SolanaRpcAdapter
from swap_classifier.utils.errors import InvalidTransactionError


def shyft_result(**overrides):
    result = {
        "timestamp": "2024-05-01T12:00:00.000Z",
        "fee": 0.000005,
        "fee_payer": WALLET,
        "status": "Success",
        "type": "SWAP",
        "signers": [WALLET],
        "signatures": ["shyft-sig"],
        "protocol": {"name": "Jupiter", "address": "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4"},
        "token_balance_changes": [
            {"address": "acct-usdc", "decimals": 6, "change_amount": -2000.0,
             "pre_balance": 2500.5, "post_balance": 500.5, "mint": USDC, "owner": WALLET},
            {"address": "acct-wif", "decimals": 6, "change_amount": 13229297.363172,
             "pre_balance": 0, "post_balance": 13229297.363172, "mint": WIF, "owner": WALLET},
        ],
        "actions": [
            {"type": "SWAP", "info": {"swapper": WALLET}, "source_protocol": {"name": "Jupiter"}},
        ],
    }
    result.update(overrides)
    return result


def rpc_result(err=None):
    return {
        "blockTime": 1714564800,
        "meta": {
            "err": err,
            "fee": 5000,
            "preBalances": [10_000_000_000, 50_000_000_000, 2_039_280],
            "postBalances": [8_999_995_000, 51_000_000_000, 2_039_280],
            "preTokenBalances": [
                {"accountIndex": 2, "mint": BONK, "owner": WALLET,
                 "uiTokenAmount": {"amount": "0", "decimals": 5}},
            ],
            "postTokenBalances": [
                {"accountIndex": 2, "mint": BONK, "owner": WALLET,
                 "uiTokenAmount": {"amount": "70000000000", "decimals": 5}},
            ],
        },
        "transaction": {
            "signatures": ["rpc-sig"],
            "message": {
                "accountKeys": [
                    {"pubkey": WALLET, "signer": True, "writable": True},
                    {"pubkey": POOL, "signer": False, "writable": True},
                    {"pubkey": "8PjJTv657aeN9p5R2WoM6pPSz385chvTTytUWaEjSjkq", "signer": False, "writable": True},
                ],
            },
        },
    }


class TestShyftAdapter:
    def test_ui_amounts_become_raw_units(self):
        tx = ShyftAdapter().parse_transaction(shyft_result())
        usdc, wif = tx.token_balance_changes
        assert tx.signature == "shyft-sig"
        assert tx.fee == 5000
        assert usdc.change_amount == -2_000_000_000
        assert usdc.pre_balance == 2_500_500_000
        assert wif.change_amount == 13_229_297_363_172
        assert tx.timestamp == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def test_raw_integer_amounts_kept(self):
        rows = [{"decimals": 9, "change_amount": -1_500_000_000, "mint": WSOL, "owner": WALLET}]
        tx = ShyftAdapter().parse_transaction(shyft_result(fee=5000, token_balance_changes=rows))
        assert tx.fee == 5000
        assert tx.token_balance_changes[0].change_amount == -1_500_000_000

    def test_response_envelope(self, classifier):
        envelope = {"success": True, "message": "Transaction parsed successfully", "result": shyft_result()}
        result = classifier.classify(ShyftAdapter().parse_transaction(envelope))
        assert isinstance(result, ParsedResult)
        assert result.leg.direction is Direction.BUY
        assert result.leg.amounts.base_amount == Decimal("13229297.363172")
        assert result.leg.amounts.total_wallet_cost == Decimal("2000")
        assert result.leg.timestamp.startswith("2024-05-01T12:00:00")

    def test_epoch_timestamp(self):
        tx = ShyftAdapter().parse_transaction(shyft_result(timestamp=1714564800))
        assert tx.timestamp == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("payload", [
        [],
        {"result": []},
        {"result": "nope"},
        shyft_result(signatures=[], fee_payer=None),
    ])
    def test_malformed(self, payload):
        with pytest.raises(InvalidTransactionError):
            ShyftAdapter().parse_transaction(payload)


class TestSolanaRpcAdapter:
    def test_balances_from_json_parsed(self):
        tx = SolanaRpcAdapter().parse_transaction({"jsonrpc": "2.0", "id": 1, "result": rpc_result()})
        assert tx.signature == "rpc-sig"
        assert tx.fee_payer == WALLET
        assert tx.signers == [WALLET]
        assert tx.actions == []

        by_owner = {(row.owner, row.mint): row.change_amount for row in tx.token_balance_changes}
        # Fee added back; the unchanged account is skipped
        assert by_owner[(WALLET, NATIVE_SOL)] == -1_000_000_000
        assert by_owner[(POOL, NATIVE_SOL)] == 1_000_000_000
        assert by_owner[(WALLET, BONK)] == 70_000_000_000
        assert len(tx.token_balance_changes) == 3

    def test_classifies_buy_from_balances_alone(self, classifier):
        result = classifier.classify(SolanaRpcAdapter().parse_transaction(rpc_result()))
        assert isinstance(result, ParsedResult)
        assert result.leg.base_asset.mint == BONK
        assert result.leg.quote_asset.mint == WSOL
        assert result.leg.amounts.base_amount == Decimal("700000")
        assert result.leg.amounts.total_wallet_cost == Decimal("1")

    def test_failed_transaction(self, classifier):
        tx = SolanaRpcAdapter().parse_transaction(rpc_result(err={"InstructionError": [0, "Custom"]}))
        assert tx.status == "Failed"
        assert classifier.classify(tx).reason is RejectionReason.TRANSACTION_FAILED


class TestValidateAddress:
    @pytest.mark.parametrize("address, expected", [
        (WALLET, True),
        (BONK, True),
        (NATIVE_SOL, True),
        ("", False),
        ("0OIl" * 10, False),
        ("short", False),
    ])
    def test_validate_address(self, address, expected):
        assert SolanaRpcAdapter().validate_address(address) is expected
