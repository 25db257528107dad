"""Tests for asset delta collection and the SWAP action fallback."""
import pytest

from helpers import (
    BONK,
    JUP,
    NATIVE_SOL,
    OTHER_WALLET,
    POOL,
    USDC,
    WALLET,
    WIF,
    WSOL,
    balance_change,
    leg,
    make_tx,
    swap_action,
    transfer_action,
)

from swap_classifier.models.swap import DeltaSource, RejectedResult, RejectionReason
from swap_classifier.services.classifier.asset_delta_collector import CollectedAssets, collect_asset_deltas


def _collect(as_tx, config, payload):
    return collect_asset_deltas(as_tx(payload), WALLET, config)


class TestSolMerge:
    def test_native_and_wrapped_sol_collapse_before_counting(self, as_tx, config):
        collected = _collect(as_tx, config, make_tx([
            balance_change(NATIVE_SOL, -1_000_000_000),
            balance_change(WSOL, -500_000_000),
            balance_change(BONK, 700_000_000, 5),
        ]))
        assert isinstance(collected, CollectedAssets)
        assert [d.mint for d in collected.deltas] == [WSOL, BONK]
        assert collected.deltas[0].raw_delta == -1_500_000_000

    def test_wrap_and_unwrap_net_to_zero(self, as_tx, config):
        collected = _collect(as_tx, config, make_tx(
            [
                balance_change(NATIVE_SOL, -2_000_000_000),
                balance_change(WSOL, 2_000_000_000),
                balance_change(BONK, 700_000_000, 5),
            ],
            actions=[swap_action(leg(WSOL, "2000000000"), leg(BONK, "700000000"))],
        ))
        # SOL vanished from the balances, so the action supplies it
        sol = collected.deltas[1]
        assert sol.mint == WSOL
        assert sol.raw_delta == -2_000_000_000
        assert sol.source is DeltaSource.ACTION_FALLBACK
        assert WSOL not in collected.intermediate_assets_collapsed


class TestFallback:
    @pytest.mark.parametrize("present, present_delta, expected_mint, expected_delta", [
        (BONK, 700_000_000, WSOL, -1_000_000_000),
        (WSOL, -1_000_000_000, BONK, 700_000_000),
    ])
    def test_only_missing_leg_is_synthesized(
        self, as_tx, config, present, present_delta, expected_mint, expected_delta
    ):
        decimals = 5 if present == BONK else 9
        collected = _collect(as_tx, config, make_tx(
            [balance_change(present, present_delta, decimals)],
            actions=[swap_action(leg(WSOL, "1000000000"), leg(BONK, "700000000", decimals=5))],
        ))
        assert len(collected.deltas) == 2
        assert len({d.mint for d in collected.deltas}) == 2
        observed, synthesized = collected.deltas
        assert observed.mint == present
        assert observed.raw_delta == present_delta
        assert observed.source is DeltaSource.BALANCE_CHANGE
        assert synthesized.mint == expected_mint
        assert synthesized.raw_delta == expected_delta
        assert synthesized.synthesized

    def test_present_leg_keeps_balance_amount(self, as_tx, config):
        """The action's figure for the observed asset is never added on top."""
        collected = _collect(as_tx, config, make_tx(
            [balance_change(BONK, 690_000_000, 5)],
            actions=[swap_action(leg(USDC, "150000000"), leg(BONK, "700000000"))],
        ))
        bonk = next(d for d in collected.deltas if d.mint == BONK)
        assert bonk.raw_delta == 690_000_000

    def test_unparsable_amount_leaves_leg_absent(self, as_tx, config):
        result = _collect(as_tx, config, make_tx(
            [balance_change(BONK, 700_000_000, 5)],
            actions=[swap_action(leg(USDC, "not-a-number"), leg(BONK, "700000000"))],
        ))
        assert isinstance(result, RejectedResult)
        assert result.reason is RejectionReason.INVALID_ASSET_COUNT

    def test_swap_action_of_another_wallet_is_ignored(self, as_tx, config):
        result = _collect(as_tx, config, make_tx(
            [balance_change(BONK, 700_000_000, 5)],
            actions=[swap_action(leg(USDC, "150000000"), leg(BONK, "700000000"), swapper=OTHER_WALLET)],
        ))
        assert isinstance(result, RejectedResult)
        assert result.reason is RejectionReason.NO_SWAP_ACTION

    def test_decimals_from_other_balance_rows(self, as_tx, config):
        collected = _collect(as_tx, config, make_tx(
            [balance_change(BONK, 700_000_000, 5), balance_change(WIF, -10, 6, owner=POOL)],
            actions=[swap_action(leg(WIF, "3000000"), leg(BONK, "700000000"))],
        ))
        wif = next(d for d in collected.deltas if d.mint == WIF)
        assert wif.decimals == 6
        assert not wif.decimals_inferred

    def test_unknown_decimals_are_flagged(self, as_tx, config):
        collected = _collect(as_tx, config, make_tx(
            [balance_change(BONK, 700_000_000, 5)],
            actions=[swap_action(leg(WIF, "3000000"), leg(BONK, "700000000"))],
        ))
        wif = next(d for d in collected.deltas if d.mint == WIF)
        assert wif.decimals == 9
        assert wif.decimals_inferred


class TestCounting:
    def test_three_assets_rejected(self, as_tx, config):
        result = _collect(as_tx, config, make_tx(
            [
                balance_change(USDC, -1_000_000, 6),
                balance_change(BONK, 700_000_000, 5),
                balance_change(WIF, 3_000_000, 6),
            ],
            actions=[swap_action()],
        ))
        assert result.reason is RejectionReason.INVALID_ASSET_COUNT
        assert len(result.debug_info["deltas"]) == 3

    def test_dust_is_collapsed(self, as_tx, config):
        collected = _collect(as_tx, config, make_tx([
            balance_change(USDC, -2_000_000, 6),
            balance_change(BONK, 700_000_000, 5),
            balance_change(JUP, 100, 9),
        ]))
        assert [d.mint for d in collected.deltas] == [USDC, BONK]
        assert collected.intermediate_assets_collapsed == [JUP]

    def test_round_trip_asset_is_intermediate(self, as_tx, config):
        collected = _collect(as_tx, config, make_tx([
            balance_change(WIF, -3_000_000, 6),
            balance_change(USDC, 2_500_000, 6),
            balance_change(USDC, -2_500_000, 6),
            balance_change(BONK, 700_000_000, 5),
        ]))
        assert [d.mint for d in collected.deltas] == [WIF, BONK]
        assert collected.intermediate_assets_collapsed == [USDC]

    def test_rent_refund_flag(self, as_tx, config):
        collected = _collect(as_tx, config, make_tx([
            balance_change(NATIVE_SOL, -1_000_000_000),
            balance_change(WSOL, 2_039_280, pre=0),
            balance_change(BONK, 500_000_000, 5, pre=0),
        ]))
        assert collected.rent_refunds_filtered
        assert collected.deltas[0].raw_delta == -1_000_000_000


class TestSolTransferAugmentation:
    def test_sol_paid_through_transfer_action(self, as_tx, config):
        collected = _collect(as_tx, config, make_tx(
            [balance_change(BONK, 700_000_000, 5)],
            actions=[
                transfer_action("SOL_TRANSFER", sender=WALLET, receiver=POOL, amount=1.5),
                swap_action(leg(WSOL, "1500000000"), leg(BONK, "700000000")),
            ],
        ))
        sol = next(d for d in collected.deltas if d.mint == WSOL)
        assert sol.raw_delta == -1_500_000_000
        assert sol.source is DeltaSource.ACTION_FALLBACK
        assert len(collected.deltas) == 2

    def test_not_applied_when_sol_row_exists(self, as_tx, config):
        collected = _collect(as_tx, config, make_tx(
            [balance_change(NATIVE_SOL, -1_000_000_000), balance_change(BONK, 700_000_000, 5)],
            actions=[transfer_action("SOL_TRANSFER", sender=WALLET, receiver=POOL, amount=1.0)],
        ))
        # Transfers only: rejected before any SOL is added a second time
        assert isinstance(collected, RejectedResult)
        assert collected.reason is RejectionReason.ONLY_TRANSFER_ACTIONS
        assert collected.debug_info["deltas"][0]["raw_delta"] == -1_000_000_000
