"""Process-parallel EV simulation, sharded by hero hand class."""

from concurrent.futures import ProcessPoolExecutor
from typing import Mapping, Optional, Sequence, Union
import logging
import os

import numpy as np

from .engine import (
    ClassResult,
    EVSimulator,
    SimulationConfig,
    SimulationResult,
    build_result,
)
from .strategy import StrategyMap

logger = logging.getLogger(__name__)


def shard_classes(classes: Sequence[str], num_shards: int) -> list[list[str]]:
    """Split classes round-robin into at most num_shards non-empty shards."""
    num_shards = max(1, min(num_shards, len(classes)))
    return [list(classes[i::num_shards]) for i in range(num_shards)]


def _run_shard(
    hero: StrategyMap,
    opp: StrategyMap,
    config: SimulationConfig,
    classes: list[str],
    num_classes: int,
    seed_seq: np.random.SeedSequence,
) -> list[ClassResult]:
    simulator = EVSimulator(config, np.random.default_rng(seed_seq))
    return list(simulator.iter_classes(hero, opp, classes=classes, num_classes=num_classes))


def run_parallel(
    hero_strategy: Union[StrategyMap, Mapping],
    opp_strategy: Union[StrategyMap, Mapping],
    config: Optional[SimulationConfig] = None,
    workers: Optional[int] = None,
    seed: Optional[int] = None,
    classes: Optional[Sequence[str]] = None,
) -> SimulationResult:
    """
    Run a simulation across worker processes.

    Each shard gets its own generator spawned from one SeedSequence, and
    shards share nothing but the read-only strategies. Results are summed
    per action and divided by the total trial count, so per-class trial
    counts match a serial run over the same classes.

    Args:
        hero_strategy: Hero range
        opp_strategy: Opponent range
        config: Simulation configuration
        workers: Worker processes (default: CPU count)
        seed: Seed for reproducible runs with a fixed worker count
        classes: Optional explicit hero classes

    Returns:
        SimulationResult, per_class ordered as planned
    """
    config = config or SimulationConfig()
    hero = StrategyMap.coerce(hero_strategy)
    opp = StrategyMap.coerce(opp_strategy)

    root = np.random.SeedSequence(seed)
    planner_seq, shard_root = root.spawn(2)
    planner = EVSimulator(config, np.random.default_rng(planner_seq))
    planned = planner.plan(classes)

    shards = shard_classes(planned, workers or os.cpu_count() or 1)
    seeds = shard_root.spawn(len(shards))
    logger.debug("Running %d classes over %d shards", len(planned), len(shards))

    with ProcessPoolExecutor(max_workers=len(shards)) as executor:
        futures = [
            executor.submit(_run_shard, hero, opp, config, shard, len(planned), seq)
            for shard, seq in zip(shards, seeds)
        ]
        by_class = {cr.hand: cr for future in futures for cr in future.result()}

    return build_result(
        [by_class[key] for key in planned],
        classes_planned=len(planned),
        complete=True,
    )
