"""
Preflop EV simulation engine.

For each sampled hero hand class the engine repeatedly:
- deals a concrete hero combo from the class
- draws an opponent class weighted by the opponent range
- deals an opponent combo around hero's blockers
- estimates showdown equity on random boards
- scores fold, call and raise under a flat single-street pot model

Per-class and global EVs are averages over those trials.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, Mapping, Optional, Sequence, Union
import logging

import numpy as np

from rangeev.game.cards import ALL_HAND_CLASSES, Card, Hand, expand_hand_class, sample_combo
from rangeev.game.equity import estimate_equity
from .strategy import ACTIONS, Action, OpponentSampler, StrategyMap

logger = logging.getLogger(__name__)

# Per-class trial count bounds, and the class count at which
# sims_per_matchup maps one-to-one onto trials
TRIAL_BOUNDS = (40, 400)
CLASS_SCALE = 40

# Boards sampled per showdown
SHOWDOWN_BOUNDS = (80, 500)

BOUNDED_SAMPLE_SIZE = 50
DEFAULT_FOLD_PROBABILITY = 0.2
MAX_COLLISION_RETRIES = 1000


class SampleMode(Enum):
    """Which hero hand classes a run covers."""
    ALL = "all"
    BOUNDED = "bounded-50"


@dataclass
class SimulationConfig:
    """Configuration for an EV simulation run."""
    sims_per_matchup: int = 200
    pot_size: float = 1.0     # Pot before hero acts
    raise_size: float = 1.0   # Hero's investment when raising
    call_size: float = 1.0    # Hero's cost when calling (opponent matches)
    sample_mode: SampleMode = SampleMode.ALL

    def __post_init__(self):
        if isinstance(self.sample_mode, str):
            try:
                self.sample_mode = SampleMode(self.sample_mode)
            except ValueError:
                raise ValueError(f"Unknown sample mode: {self.sample_mode}") from None
        if isinstance(self.sims_per_matchup, bool) or int(self.sims_per_matchup) != self.sims_per_matchup:
            raise ValueError(f"sims_per_matchup must be an integer, got {self.sims_per_matchup}")
        self.sims_per_matchup = int(self.sims_per_matchup)
        if self.sims_per_matchup < 1:
            raise ValueError(f"sims_per_matchup must be >= 1, got {self.sims_per_matchup}")
        for name in ("pot_size", "raise_size", "call_size"):
            if not getattr(self, name) > 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")


def _clamp(value: int, bounds: tuple[int, int]) -> int:
    low, high = bounds
    return max(low, min(high, value))


def trials_per_class(sims_per_matchup: int, num_classes: int) -> int:
    """
    Trials to run for each hero class.

    Scales inversely with the number of classes so total work stays
    bounded, clamped to TRIAL_BOUNDS.
    """
    if num_classes < 1:
        raise ValueError("num_classes must be >= 1")
    return _clamp(int(sims_per_matchup * CLASS_SCALE // num_classes), TRIAL_BOUNDS)


def showdown_samples(sims_per_matchup: int) -> int:
    """Boards sampled per equity estimate, clamped to SHOWDOWN_BOUNDS."""
    return _clamp(sims_per_matchup // 2, SHOWDOWN_BOUNDS)


def select_hand_classes(config: SimulationConfig, rng: np.random.Generator) -> list[str]:
    """Hero classes covered by a run under the configured sample mode."""
    if config.sample_mode is SampleMode.ALL:
        return list(ALL_HAND_CLASSES)
    picks = rng.choice(len(ALL_HAND_CLASSES), size=BOUNDED_SAMPLE_SIZE, replace=False)
    return [ALL_HAND_CLASSES[i] for i in picks]


def action_evs(
    equity: float,
    opp_fold_probability: float,
    config: SimulationConfig,
) -> np.ndarray:
    """
    EV of (fold, call, raise) for one trial.

    Fold is the zero baseline: hero has nothing invested before acting.
    Raising wins the pot outright when the opponent folds, otherwise both
    players put in chips and the pot goes to showdown. Calling always
    goes to showdown with both players investing call_size.
    """
    pot, raise_size, call_size = config.pot_size, config.raise_size, config.call_size

    ev_showdown_raise = equity * (pot + raise_size + call_size) - raise_size
    ev_raise = opp_fold_probability * pot + (1 - opp_fold_probability) * ev_showdown_raise
    ev_call = equity * (pot + 2 * call_size) - call_size
    return np.array([0.0, ev_call, ev_raise])


@dataclass
class ClassResult:
    """Averaged EVs for a single hero hand class."""
    hand: str
    trials: int
    ev: dict[Action, float]
    frequencies: tuple[float, float, float] = (1.0, 0.0, 0.0)  # Hero fold/call/raise

    @property
    def strategy_ev(self) -> float:
        """EV of hero's own mixed strategy for this class."""
        return sum(p * self.ev[a] for p, a in zip(self.frequencies, ACTIONS))

    def best_action(self) -> Action:
        return _best_action(self.ev)


@dataclass
class ActionSummary:
    """Global average EV of one action."""
    avg_ev: float
    count: int


@dataclass
class SimulationResult:
    """
    Outcome of a simulation run.

    ``complete`` is False when the run was stopped before covering every
    planned class; averages then cover only the classes in ``per_class``.
    """
    actions: dict[Action, ActionSummary]
    per_class: dict[str, ClassResult]
    total_trials: int
    classes_planned: int
    complete: bool = True

    @property
    def is_partial(self) -> bool:
        return not self.complete

    def ev(self, action: Action) -> float:
        return self.actions[action].avg_ev

    @property
    def strategy_ev(self) -> float:
        """Trial-weighted EV of hero's own strategy over the simulated classes."""
        if not self.total_trials:
            return 0.0
        weighted = sum(cr.strategy_ev * cr.trials for cr in self.per_class.values())
        return weighted / self.total_trials

    def best_action(self) -> Action:
        return _best_action({a: s.avg_ev for a, s in self.actions.items()})

    def __repr__(self) -> str:
        evs = ", ".join(f"{a}: {s.avg_ev:.3f}" for a, s in self.actions.items())
        status = "complete" if self.complete else "partial"
        return (
            f"SimulationResult({status}, {len(self.per_class)}/{self.classes_planned} classes, "
            f"{self.total_trials} trials, {{{evs}}})"
        )


def _best_action(evs: Mapping[Action, float]) -> Action:
    # Ties go to the earlier action in fold, call, raise order
    best = Action.FOLD
    best_ev = float("-inf")
    for action in ACTIONS:
        if evs[action] > best_ev:
            best, best_ev = action, evs[action]
    return best


@dataclass
class _Accumulator:
    """Running EV sums for fold, call, raise."""
    sums: np.ndarray = field(default_factory=lambda: np.zeros(len(ACTIONS)))
    trials: int = 0

    def add(self, evs: np.ndarray, trials: int = 1) -> None:
        self.sums += evs
        self.trials += trials

    def averages(self) -> dict[Action, float]:
        denom = max(1, self.trials)
        return {action: float(self.sums[i] / denom) for i, action in enumerate(ACTIONS)}


def build_result(
    class_results: Sequence[ClassResult],
    classes_planned: int,
    complete: bool,
) -> SimulationResult:
    """
    Reduce per-class results into a SimulationResult.

    Global averages weight every trial equally, so each class contributes
    its average EV times its trial count.
    """
    total = _Accumulator()
    for cr in class_results:
        total.add(np.array([cr.ev[a] * cr.trials for a in ACTIONS]), cr.trials)

    averages = total.averages()
    return SimulationResult(
        actions={a: ActionSummary(avg_ev=averages[a], count=total.trials) for a in ACTIONS},
        per_class={cr.hand: cr for cr in class_results},
        total_trials=total.trials,
        classes_planned=classes_planned,
        complete=complete,
    )


class EVSimulator:
    """
    Monte Carlo EV simulator for hero versus opponent preflop ranges.

    The simulator only reads the strategy maps it is given. All
    randomness comes from the injected generator, so seeded runs are
    reproducible.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize simulator.

        Args:
            config: Simulation configuration
            rng: Random generator (a fresh unseeded one if omitted)
        """
        self.config = config or SimulationConfig()
        self.rng = rng if rng is not None else np.random.default_rng()

    def plan(self, classes: Optional[Sequence[str]] = None) -> list[str]:
        """Hero classes for a run, validating explicit ones."""
        if classes is None:
            return select_hand_classes(self.config, self.rng)
        planned = list(classes)
        for key in planned:
            expand_hand_class(key)
        if not planned:
            raise ValueError("At least one hand class is required")
        if len(set(planned)) != len(planned):
            raise ValueError("Duplicate hand classes in sample set")
        return planned

    def iter_classes(
        self,
        hero_strategy: Union[StrategyMap, Mapping],
        opp_strategy: Union[StrategyMap, Mapping],
        classes: Optional[Sequence[str]] = None,
        num_classes: Optional[int] = None,
    ) -> Iterator[ClassResult]:
        """
        Simulate hero classes one at a time.

        Control returns to the caller after every class, so a caller can
        stop iterating to cancel a long run.

        Args:
            hero_strategy: Hero range (read only)
            opp_strategy: Opponent range (read only)
            classes: Explicit hero classes; default per sample mode
            num_classes: Class count for trial scaling; defaults to
                len(classes). Shards of a larger run pass the run's total.

        Yields:
            ClassResult per hero class
        """
        hero = StrategyMap.coerce(hero_strategy)
        opp = StrategyMap.coerce(opp_strategy)
        planned = self.plan(classes)

        opponent_sampler = OpponentSampler(opp)
        trials = trials_per_class(self.config.sims_per_matchup, num_classes or len(planned))
        boards = showdown_samples(self.config.sims_per_matchup)

        logger.debug(
            "Simulating %d classes: %d trials/class, %d boards/showdown",
            len(planned), trials, boards,
        )
        for key in planned:
            yield self._simulate_class(
                key, trials, boards, opp, opponent_sampler, hero.probabilities(key)
            )

    def run(
        self,
        hero_strategy: Union[StrategyMap, Mapping],
        opp_strategy: Union[StrategyMap, Mapping],
        classes: Optional[Sequence[str]] = None,
        callback: Optional[Callable[[int, int, ClassResult], None]] = None,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> SimulationResult:
        """
        Run the simulation.

        Args:
            hero_strategy: Hero range (read only)
            opp_strategy: Opponent range (read only)
            classes: Explicit hero classes; default per sample mode
            callback: Called as callback(done, planned, class_result)
                after each class
            should_stop: Checked before each class; returning True ends
                the run with a partial result

        Returns:
            SimulationResult (complete=False if stopped early)
        """
        planned = self.plan(classes)
        results: list[ClassResult] = []

        iterator = self.iter_classes(hero_strategy, opp_strategy, classes=planned)
        complete = True
        while len(results) < len(planned):
            if should_stop is not None and should_stop():
                logger.debug("Run stopped after %d of %d classes", len(results), len(planned))
                complete = False
                break
            class_result = next(iterator)
            results.append(class_result)
            if callback:
                callback(len(results), len(planned), class_result)
        iterator.close()

        return build_result(results, classes_planned=len(planned), complete=complete)

    def _simulate_class(
        self,
        key: str,
        trials: int,
        boards: int,
        opp: StrategyMap,
        opponent_sampler: OpponentSampler,
        frequencies: tuple[float, float, float],
    ) -> ClassResult:
        hero_combos = expand_hand_class(key)
        acc = _Accumulator()

        for _ in range(trials):
            # Re-sampling the same combo across trials is fine
            hero = hero_combos[int(self.rng.integers(len(hero_combos)))]
            opp_key, opp_hand = self._sample_opponent(hero, opponent_sampler)

            equity = estimate_equity(hero, opp_hand, boards, self.rng).equity
            fold_prob = opp.fold_probability(opp_key, default=DEFAULT_FOLD_PROBABILITY)
            acc.add(action_evs(equity, fold_prob, self.config))

        return ClassResult(
            hand=key, trials=acc.trials, ev=acc.averages(), frequencies=frequencies
        )

    def _sample_opponent(
        self,
        hero: Hand,
        opponent_sampler: OpponentSampler,
    ) -> tuple[str, Hand]:
        """Draw an opponent class and combo that avoid hero's cards."""
        blocked: tuple[Card, ...] = hero.cards
        for _ in range(MAX_COLLISION_RETRIES):
            opp_key = opponent_sampler.sample(self.rng)
            opp_hand = sample_combo(opp_key, blocked, self.rng)
            if opp_hand is not None:
                return opp_key, opp_hand
            logger.debug("Blocker collision: %s fully blocked by %s, retrying", opp_key, hero)
        raise RuntimeError(
            f"No opponent combo avoids {hero} after {MAX_COLLISION_RETRIES} attempts"
        )


def run_simulation(
    hero_strategy: Union[StrategyMap, Mapping],
    opp_strategy: Union[StrategyMap, Mapping],
    config: Optional[SimulationConfig] = None,
    rng: Optional[np.random.Generator] = None,
    classes: Optional[Sequence[str]] = None,
) -> SimulationResult:
    """
    Estimate fold/call/raise EV per hero hand class.

    Args:
        hero_strategy: Hero range
        opp_strategy: Opponent range
        config: Simulation configuration
        rng: Random generator (a fresh unseeded one if omitted)
        classes: Optional explicit hero classes

    Returns:
        SimulationResult with global and per-class EVs
    """
    simulator = EVSimulator(config, rng)
    result = simulator.run(hero_strategy, opp_strategy, classes=classes)
    logger.debug("Simulation finished: %r", result)
    return result
