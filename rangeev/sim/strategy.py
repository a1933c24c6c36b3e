"""Preflop strategy ranges and weighted hand class selection."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Union

import numpy as np

from rangeev.game.cards import ALL_HAND_CLASSES, parse_hand_class


class Action(Enum):
    """Hero decisions evaluated by the simulator."""
    FOLD = "fold"
    CALL = "call"
    RAISE = "raise"

    def __str__(self) -> str:
        return self.value.capitalize()


ACTIONS: tuple[Action, ...] = (Action.FOLD, Action.CALL, Action.RAISE)


@dataclass(frozen=True)
class ActionWeights:
    """Nonnegative fold/call/raise weights for one hand class."""
    fold: float = 0.0
    call: float = 0.0
    raise_: float = 0.0

    def __post_init__(self):
        for name in ("fold", "call", "raise_"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"Strategy weight '{name}' must be nonnegative, got {value}")

    @property
    def total(self) -> float:
        return self.fold + self.call + self.raise_

    def probabilities(self) -> tuple[float, float, float]:
        """
        Normalized (fold, call, raise) probabilities.

        Zero total weight is treated as always folding.
        """
        total = self.total
        if total <= 0:
            return (1.0, 0.0, 0.0)
        return (self.fold / total, self.call / total, self.raise_ / total)

    @classmethod
    def coerce(cls, value: Union["ActionWeights", Mapping, tuple, list]) -> "ActionWeights":
        """Build from an ActionWeights, a {'fold','call','raise'} dict or a triple."""
        if isinstance(value, ActionWeights):
            return value
        if isinstance(value, Mapping):
            return cls(
                fold=float(value.get("fold", 0) or 0),
                call=float(value.get("call", 0) or 0),
                raise_=float(value.get("raise", value.get("raise_", 0)) or 0),
            )
        if len(value) != 3:
            raise ValueError(f"Expected (fold, call, raise) weights, got {value!r}")
        fold, call, raise_ = value
        return cls(float(fold), float(call), float(raise_))


FOLD_ALWAYS = ActionWeights(fold=1.0)


class StrategyMap(Mapping):
    """
    Read-only map from hand class key to action weights.

    The map copies its input, so callers can keep mutating their own
    dicts without affecting a simulation in progress. Classes missing
    from the map behave as 100% fold.
    """

    def __init__(self, weights: Optional[Mapping] = None):
        entries: dict[str, ActionWeights] = {}
        for key, value in (weights or {}).items():
            parse_hand_class(key)
            entries[key] = ActionWeights.coerce(value)
        self._weights = entries

    def __getitem__(self, key: str) -> ActionWeights:
        return self._weights[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._weights)

    def __len__(self) -> int:
        return len(self._weights)

    def __repr__(self) -> str:
        return f"StrategyMap({len(self)} classes)"

    def weights(self, key: str) -> ActionWeights:
        """Weights for a class, 100% fold if absent."""
        return self._weights.get(key, FOLD_ALWAYS)

    def total_weight(self, key: str) -> float:
        """Sum of a class's weights (0 if absent)."""
        entry = self._weights.get(key)
        return entry.total if entry is not None else 0.0

    def probabilities(self, key: str) -> tuple[float, float, float]:
        return self.weights(key).probabilities()

    def fold_probability(self, key: str, default: float) -> float:
        """
        Probability this range folds a class when raised.

        Falls back to ``default`` for classes the range does not list.
        """
        entry = self._weights.get(key)
        if entry is None:
            return default
        return entry.probabilities()[0]

    def to_probabilities(self) -> dict[str, tuple[float, float, float]]:
        """Normalized action probabilities for every listed class."""
        return {key: entry.probabilities() for key, entry in self._weights.items()}

    @classmethod
    def coerce(cls, value: Union["StrategyMap", Mapping]) -> "StrategyMap":
        return value if isinstance(value, StrategyMap) else cls(value)


class OpponentSampler:
    """
    Weighted random choice of an opponent hand class.

    A class is chosen with probability proportional to its total action
    weight. This treats total weight as the likelihood of holding the
    class, a modeling simplification rather than a range posterior.

    Selection is a binary search over the prefix sums of the weights.
    The draw lies in (0, total], and the chosen class is the smallest
    index whose cumulative weight is >= the draw, so zero-weight
    classes are never returned.
    """

    def __init__(self, strategy: StrategyMap):
        keys = [k for k in strategy if strategy.total_weight(k) > 0]
        if not keys:
            raise ValueError("Opponent range is empty (no class has positive weight)")
        self.keys: list[str] = keys
        self.cumulative = np.cumsum([strategy.total_weight(k) for k in keys])
        self.total = float(self.cumulative[-1])

    def index_for(self, draw: float) -> int:
        """Smallest index whose cumulative weight is >= draw."""
        idx = int(np.searchsorted(self.cumulative, draw, side="left"))
        return min(idx, len(self.keys) - 1)

    def sample(self, rng: np.random.Generator) -> str:
        draw = self.total * (1.0 - rng.random())
        return self.keys[self.index_for(draw)]


def uniform_strategy(
    fold: float = 0.0,
    call: float = 0.0,
    raise_: float = 0.0,
) -> StrategyMap:
    """Same weights for all 169 classes."""
    weights = ActionWeights(fold, call, raise_)
    return StrategyMap({key: weights for key in ALL_HAND_CLASSES})


# Baseline preflop strategy (percent weights). Unlisted classes fold.
BASELINE_GTO: dict[str, dict[str, float]] = {
    # Pairs
    "AA": {"fold": 0, "call": 0, "raise": 100},
    "KK": {"fold": 0, "call": 5, "raise": 95},
    "QQ": {"fold": 0, "call": 15, "raise": 85},
    "JJ": {"fold": 5, "call": 25, "raise": 70},
    "TT": {"fold": 10, "call": 30, "raise": 60},
    "99": {"fold": 20, "call": 40, "raise": 40},
    "88": {"fold": 30, "call": 50, "raise": 20},
    "77": {"fold": 40, "call": 45, "raise": 15},
    "66": {"fold": 50, "call": 35, "raise": 15},
    "55": {"fold": 60, "call": 30, "raise": 10},
    "44": {"fold": 70, "call": 25, "raise": 5},
    "33": {"fold": 80, "call": 18, "raise": 2},
    "22": {"fold": 85, "call": 15, "raise": 0},

    # Suited broadway and connectors
    "AKs": {"fold": 0, "call": 10, "raise": 90},
    "AQs": {"fold": 0, "call": 20, "raise": 80},
    "AJs": {"fold": 5, "call": 25, "raise": 70},
    "ATs": {"fold": 10, "call": 30, "raise": 60},
    "KQs": {"fold": 15, "call": 35, "raise": 50},
    "KJs": {"fold": 25, "call": 40, "raise": 35},
    "QJs": {"fold": 35, "call": 45, "raise": 20},
    "JTs": {"fold": 40, "call": 50, "raise": 10},
    "T9s": {"fold": 60, "call": 35, "raise": 5},
    "98s": {"fold": 70, "call": 28, "raise": 2},
    "87s": {"fold": 80, "call": 20, "raise": 0},

    # Offsuit broadway
    "AKo": {"fold": 0, "call": 15, "raise": 85},
    "AQo": {"fold": 10, "call": 30, "raise": 60},
    "AJo": {"fold": 20, "call": 40, "raise": 40},
    "ATo": {"fold": 35, "call": 45, "raise": 20},
    "KQo": {"fold": 40, "call": 50, "raise": 10},
    "KJo": {"fold": 55, "call": 40, "raise": 5},
    "QJo": {"fold": 70, "call": 28, "raise": 2},
    "JTo": {"fold": 80, "call": 20, "raise": 0},
}


def baseline_strategy() -> StrategyMap:
    return StrategyMap(BASELINE_GTO)


PRESETS = {
    "baseline": baseline_strategy,
    "raise-all": lambda: uniform_strategy(raise_=1.0),
    "call-all": lambda: uniform_strategy(call=1.0),
    "fold-all": lambda: uniform_strategy(fold=1.0),
}


def get_preset(name: str) -> StrategyMap:
    """Look up a named strategy preset."""
    try:
        return PRESETS[name]()
    except KeyError:
        raise ValueError(f"Unknown strategy preset: {name}") from None
