"""Pytest configuration and fixtures."""

import pytest
import numpy as np

from rangeev.game.equity import EquityResult
from rangeev.sim import engine
from rangeev.sim.strategy import StrategyMap, baseline_strategy


@pytest.fixture
def rng():
    """Seeded generator so sampled tests are reproducible."""
    return np.random.default_rng(12345)


@pytest.fixture
def baseline():
    return baseline_strategy()


@pytest.fixture
def fast_equity(monkeypatch):
    """
    Replace the showdown estimator in the engine with a cheap stand-in.

    Equity is a deterministic function of the two combos, so engine
    tests only see the engine's own sampling. Every call is recorded.
    """
    calls = []

    def _fake(hero, opponent, sim_count, rng=None):
        calls.append((hero, opponent, sim_count))
        edge = (hero.card1.rank + hero.card2.rank - opponent.card1.rank - opponent.card2.rank) / 48
        wins = int(round((0.5 + edge) * 100))
        return EquityResult(wins=wins, ties=0, losses=100 - wins, simulations=100)

    monkeypatch.setattr(engine, "estimate_equity", _fake)
    return calls


@pytest.fixture
def pairs_only():
    """Opponent range holding only pocket pairs."""
    return StrategyMap({
        f"{r}{r}": {"fold": 1, "call": 2, "raise": 1}
        for r in "AKQJT98765432"
    })
