"""Tests for strategy ranges and weighted opponent selection."""

from collections import Counter
import copy

import pytest
import numpy as np

from rangeev.errors import InvalidClassError
from rangeev.sim.strategy import (
    Action, ActionWeights, OpponentSampler, StrategyMap,
    BASELINE_GTO, baseline_strategy, get_preset, uniform_strategy,
)


class TestActionWeights:
    def test_probabilities(self):
        weights = ActionWeights(fold=10, call=30, raise_=60)
        assert weights.total == 100
        assert weights.probabilities() == pytest.approx((0.1, 0.3, 0.6))

    def test_zero_total_folds(self):
        assert ActionWeights().probabilities() == (1.0, 0.0, 0.0)

    def test_negative_weight_rejected(self):
        with pytest.raises(ValueError):
            ActionWeights(fold=-1)

    def test_coerce_dict(self):
        weights = ActionWeights.coerce({"fold": 5, "call": 25, "raise": 70})
        assert weights == ActionWeights(5, 25, 70)

    def test_coerce_dict_missing_entries(self):
        assert ActionWeights.coerce({"raise": 1}) == ActionWeights(0, 0, 1)

    def test_coerce_triple(self):
        assert ActionWeights.coerce((1, 2, 3)) == ActionWeights(1, 2, 3)

    def test_coerce_bad_triple(self):
        with pytest.raises(ValueError):
            ActionWeights.coerce((1, 2))


class TestStrategyMap:
    def test_missing_class_folds(self):
        strategy = StrategyMap({"AA": (0, 0, 1)})
        assert strategy.probabilities("72o") == (1.0, 0.0, 0.0)
        assert strategy.total_weight("72o") == 0.0
        assert strategy.probabilities("AA") == (0.0, 0.0, 1.0)

    def test_zero_weight_class_folds(self):
        strategy = StrategyMap({"AA": (0, 0, 0)})
        assert strategy.probabilities("AA") == (1.0, 0.0, 0.0)

    def test_invalid_key_rejected(self):
        with pytest.raises(InvalidClassError):
            StrategyMap({"AKx": (1, 0, 0)})

    def test_input_is_copied(self):
        source = {"AA": {"fold": 0, "call": 0, "raise": 100}}
        strategy = StrategyMap(source)
        source["AA"]["raise"] = 0
        source["KK"] = {"fold": 100}
        assert strategy.probabilities("AA") == (0.0, 0.0, 1.0)
        assert "KK" not in strategy

    def test_read_only(self):
        strategy = StrategyMap({"AA": (0, 0, 1)})
        with pytest.raises(TypeError):
            strategy["KK"] = ActionWeights(1, 0, 0)

    def test_fold_probability_default(self):
        strategy = StrategyMap({"AA": (1, 1, 2)})
        assert strategy.fold_probability("AA", default=0.2) == pytest.approx(0.25)
        assert strategy.fold_probability("KK", default=0.2) == 0.2

    def test_to_probabilities(self, baseline):
        probs = baseline.to_probabilities()
        assert set(probs) == set(BASELINE_GTO)
        for fold, call, raise_ in probs.values():
            assert fold + call + raise_ == pytest.approx(1.0)

    def test_mapping_interface(self, baseline):
        assert len(baseline) == len(BASELINE_GTO)
        assert "AKs" in baseline
        assert baseline["AKs"] == ActionWeights(0, 10, 90)


class TestPresets:
    def test_uniform_covers_all_classes(self):
        strategy = uniform_strategy(raise_=1.0)
        assert len(strategy) == 169
        assert all(strategy.probabilities(k) == (0.0, 0.0, 1.0) for k in strategy)

    def test_get_preset(self):
        assert len(get_preset("baseline")) == len(BASELINE_GTO)
        with pytest.raises(ValueError):
            get_preset("nit")

    def test_baseline_not_shared(self):
        before = copy.deepcopy(BASELINE_GTO)
        baseline_strategy()
        assert BASELINE_GTO == before


class TestOpponentSampler:
    def test_empty_range_rejected(self):
        with pytest.raises(ValueError, match="empty"):
            OpponentSampler(StrategyMap())
        with pytest.raises(ValueError, match="empty"):
            OpponentSampler(StrategyMap({"AA": (0, 0, 0)}))

    def test_zero_weight_never_selected(self, rng):
        sampler = OpponentSampler(StrategyMap({
            "AA": (0, 0, 0),
            "KK": (1, 0, 0),
            "QQ": (0, 0, 0),
            "JJ": (0, 1, 0),
        }))
        seen = {sampler.sample(rng) for _ in range(2000)}
        assert seen == {"KK", "JJ"}

    def test_boundary_picks_smallest_index(self):
        sampler = OpponentSampler(StrategyMap({"AA": (1, 0, 0), "KK": (0, 1, 0)}))
        assert sampler.keys == ["AA", "KK"]
        assert sampler.index_for(1.0) == 0
        assert sampler.index_for(1.0 + 1e-9) == 1
        assert sampler.index_for(2.0) == 1
        assert sampler.index_for(1e-12) == 0

    def test_proportional_to_total_weight(self, rng):
        sampler = OpponentSampler(StrategyMap({"AA": (1, 1, 1), "KK": (0, 0, 1)}))
        counts = Counter(sampler.sample(rng) for _ in range(8000))
        assert counts["AA"] / 8000 == pytest.approx(0.75, abs=0.03)

    def test_draw_extremes(self):
        class FixedRng:
            def __init__(self, value):
                self.value = value

            def random(self):
                return self.value

        sampler = OpponentSampler(StrategyMap({"AA": (1, 0, 0), "KK": (1, 0, 0)}))
        # random() == 0 maps to a draw of the full total
        assert sampler.sample(FixedRng(0.0)) == "KK"
        assert sampler.sample(FixedRng(0.999999)) == "AA"


class TestAction:
    def test_str(self):
        assert str(Action.RAISE) == "Raise"
