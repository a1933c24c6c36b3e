"""EV simulation module."""

from .strategy import (
    Action,
    ActionWeights,
    StrategyMap,
    OpponentSampler,
    BASELINE_GTO,
    baseline_strategy,
    get_preset,
    uniform_strategy,
)
from .engine import (
    ClassResult,
    EVSimulator,
    SampleMode,
    SimulationConfig,
    SimulationResult,
    run_simulation,
    showdown_samples,
    trials_per_class,
)
from .parallel import run_parallel

__all__ = [
    "Action",
    "ActionWeights",
    "StrategyMap",
    "OpponentSampler",
    "BASELINE_GTO",
    "baseline_strategy",
    "get_preset",
    "uniform_strategy",
    "ClassResult",
    "EVSimulator",
    "SampleMode",
    "SimulationConfig",
    "SimulationResult",
    "run_simulation",
    "showdown_samples",
    "trials_per_class",
    "run_parallel",
]
