from decimal import Decimal

import pytest

from helpers import (
    BONK,
    NATIVE_SOL,
    USDC,
    WSOL,
    balance_change,
    leg,
    make_tx,
    scenario_a,
    scenario_b,
    scenario_c,
    scenario_d,
    swap_action,
)

from swap_classifier.models.swap import RejectedResult, RejectionReason
from swap_classifier.services.value_gate import MinimumValueGate, leg_usd_value


def small_buy():
    return make_tx(
        [balance_change(USDC, -1_000_000, 6), balance_change(BONK, 4_000_000_000, 5)],
        actions=[swap_action(leg(USDC, "1000000"), leg(BONK, "4000000000"))],
        signature="small-buy",
    )


@pytest.fixture
def gate():
    return MinimumValueGate(Decimal("2"))


class TestLegUsdValue:
    def test_quote_side_first(self, classifier):
        leg_ = classifier.classify(scenario_a()).leg
        value = leg_usd_value(leg_, {USDC: Decimal("1"), leg_.base_asset.mint: Decimal("100")})
        assert value == Decimal("2000")

    def test_base_side_when_quote_unpriced(self, classifier):
        leg_ = classifier.classify(small_buy()).leg
        assert leg_usd_value(leg_, {BONK: Decimal("0.00002")}) == Decimal("0.8")

    def test_unpriced(self, classifier):
        leg_ = classifier.classify(small_buy()).leg
        assert leg_usd_value(leg_, {}) is None

    def test_native_sol_price_key(self, classifier):
        leg_ = classifier.classify(scenario_d()).leg
        value = leg_usd_value(leg_, {NATIVE_SOL: Decimal("150")})
        assert value is not None
        assert value == leg_usd_value(leg_, {WSOL: Decimal("150")})


class TestMinimumValueGate:
    def test_below_threshold_rejected(self, classifier, gate):
        result = gate.apply(classifier.classify(small_buy()), {USDC: Decimal("1")})
        assert isinstance(result, RejectedResult)
        assert result.reason is RejectionReason.BELOW_MINIMUM_VALUE_THRESHOLD
        assert result.signature == "small-buy"
        assert Decimal(result.debug_info["usd_value"]) == 1
        assert result.debug_info["threshold"] == "2"

    def test_above_threshold_unchanged(self, classifier, gate):
        parsed = classifier.classify(scenario_a())
        assert gate.apply(parsed, {USDC: Decimal("1")}) is parsed

    def test_threshold_is_inclusive(self, classifier):
        parsed = classifier.classify(small_buy())
        assert MinimumValueGate(Decimal("1")).apply(parsed, {USDC: Decimal("1")}) is parsed

    def test_unpriced_passes(self, classifier, gate):
        parsed = classifier.classify(small_buy())
        assert gate.apply(parsed, {}) is parsed

    @pytest.mark.parametrize("build", [scenario_b, scenario_c])
    def test_split_and_rejected_pass_through(self, classifier, gate, build):
        result = classifier.classify(build())
        assert gate.apply(result, {USDC: Decimal("1")}) is result
