"""Tests for swapper identification."""
from helpers import BONK, OTHER_WALLET, RELAYER, USDC, WALLET, balance_change, make_tx

from swap_classifier.models.swap import SwapperMethod
from swap_classifier.services.classifier.swapper_identifier import identify_swapper


class TestIdentifySwapper:
    def test_fee_payer_with_balance_change_wins(self, as_tx):
        tx = as_tx(make_tx(
            [balance_change(USDC, -1_000_000, 6), balance_change(BONK, 100, 5, owner=OTHER_WALLET)],
            signers=[OTHER_WALLET, WALLET],
        ))
        identity = identify_swapper(tx)
        assert identity.address == WALLET
        assert identity.method is SwapperMethod.FEE_PAYER

    def test_first_signer_with_balance_change(self, as_tx):
        """A relayer pays the fee; the first signer that moved tokens is the trader."""
        tx = as_tx(make_tx(
            [balance_change(BONK, 100, 5, owner=OTHER_WALLET), balance_change(USDC, -5, 6, owner=WALLET)],
            fee_payer=RELAYER,
            signers=[RELAYER, WALLET, OTHER_WALLET],
        ))
        identity = identify_swapper(tx)
        assert identity.address == WALLET
        assert identity.method is SwapperMethod.SIGNER

    def test_no_owner_among_candidates(self, as_tx):
        tx = as_tx(make_tx(
            [balance_change(BONK, 100, 5, owner=OTHER_WALLET)],
            fee_payer=RELAYER,
            signers=[RELAYER],
        ))
        assert identify_swapper(tx) is None

    def test_zero_change_row_still_counts_as_owned(self, as_tx):
        tx = as_tx(make_tx([balance_change(USDC, 0, 6)]))
        assert identify_swapper(tx).method is SwapperMethod.FEE_PAYER
