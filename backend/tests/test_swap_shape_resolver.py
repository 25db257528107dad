"""Tests for core token tagging and swap shape resolution."""
import pytest

from helpers import BONK, USDC, USDT, WIF, WSOL

from swap_classifier.config import ClassifierConfig
from swap_classifier.models.swap import AssetDelta, Direction, RejectedResult, RejectionReason
from swap_classifier.services.classifier.core_tokens import CoreTokenClassifier
from swap_classifier.services.classifier.swap_shape_resolver import SplitShape, StandardShape, resolve_shape


def _delta(mint, raw, decimals=6):
    return AssetDelta(mint=mint, decimals=decimals, raw_delta=raw)


@pytest.fixture
def core(config):
    return CoreTokenClassifier(config)


class TestCoreTokens:
    def test_defaults(self, core):
        assert core.is_core(WSOL)
        assert core.is_core(USDC)
        assert core.is_core(USDT)
        assert not core.is_core(BONK)

    def test_native_sol_in_config_is_canonicalized(self):
        config = ClassifierConfig(core_token_mints=["So11111111111111111111111111111111111111111"])
        assert CoreTokenClassifier(config).is_core(WSOL)

    def test_empty_core_list_rejected(self):
        with pytest.raises(ValueError):
            ClassifierConfig(core_token_mints=[])


class TestResolveShape:
    def test_core_outflow_is_buy(self, core):
        shape = resolve_shape("sig", [_delta(USDC, -5), _delta(BONK, 7)], core)
        assert isinstance(shape, StandardShape)
        assert shape.direction is Direction.BUY
        assert shape.base.mint == BONK
        assert shape.quote.mint == USDC

    def test_core_inflow_is_sell(self, core):
        shape = resolve_shape("sig", [_delta(BONK, -7), _delta(WSOL, 5, 9)], core)
        assert shape.direction is Direction.SELL
        assert shape.base.mint == BONK
        assert shape.quote.mint == WSOL

    def test_two_non_core_assets_split(self, core):
        shape = resolve_shape("sig", [_delta(WIF, 3), _delta(BONK, -7)], core)
        assert isinstance(shape, SplitShape)
        assert shape.outgoing.mint == BONK
        assert shape.incoming.mint == WIF

    @pytest.mark.parametrize("deltas, reason", [
        ([_delta(USDC, -5), _delta(USDT, 5)], RejectionReason.AMBIGUOUS_CORE_TO_CORE),
        ([_delta(BONK, 5), _delta(WIF, 5)], RejectionReason.NO_OPPOSITE_DELTAS),
        ([_delta(USDC, -5), _delta(BONK, -5)], RejectionReason.NO_OPPOSITE_DELTAS),
        ([_delta(USDC, 0), _delta(BONK, 5)], RejectionReason.QUOTE_BASE_DETECTION_FAILED),
        ([_delta(USDC, -5)], RejectionReason.INVALID_ASSET_COUNT),
    ])
    def test_degenerate_shapes(self, core, deltas, reason):
        result = resolve_shape("sig", deltas, core)
        assert isinstance(result, RejectedResult)
        assert result.reason is reason
        assert result.signature == "sig"

    def test_configured_core_changes_direction(self):
        core = CoreTokenClassifier(ClassifierConfig(core_token_mints=[BONK]))
        shape = resolve_shape("sig", [_delta(BONK, -7), _delta(WIF, 3)], core)
        assert shape.direction is Direction.BUY
        assert shape.quote.mint == BONK
