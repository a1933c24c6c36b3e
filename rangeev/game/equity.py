"""Equity estimation by random board sampling."""

from dataclasses import dataclass
from typing import Iterable, Optional, Union

import numpy as np

from rangeev.errors import DivisionUndefinedError
from .cards import Card, CardLike, Hand, build_deck, draw_without_replacement, parse_cards
from .evaluator import compare, evaluate

BOARD_SIZE = 5

ComboLike = Union[Hand, str, Iterable[CardLike]]


@dataclass(frozen=True)
class EquityResult:
    """Showdown tallies for hero over sampled boards."""
    wins: int
    ties: int
    losses: int
    simulations: int

    @property
    def equity(self) -> float:
        """Win probability plus half the tie probability."""
        return (self.wins + 0.5 * self.ties) / self.simulations

    @property
    def win_rate(self) -> float:
        return self.wins / self.simulations

    @property
    def tie_rate(self) -> float:
        return self.ties / self.simulations


def _hole_cards(combo: ComboLike) -> list[Card]:
    if isinstance(combo, Hand):
        return list(combo.cards)
    cards = parse_cards(combo)
    if len(cards) != 2:
        raise ValueError(f"Expected 2 hole cards, got {len(cards)}")
    return cards


def estimate_equity(
    hero: ComboLike,
    opponent: ComboLike,
    sim_count: int,
    rng: Optional[np.random.Generator] = None,
) -> EquityResult:
    """
    Estimate hero's preflop equity against one opponent combo.

    Each simulation deals a random five-card board that avoids all four
    hole cards and scores both seven-card hands.

    Args:
        hero: Hero's hole cards
        opponent: Opponent's hole cards
        sim_count: Number of boards to sample
        rng: Random generator (a fresh unseeded one if omitted)

    Returns:
        EquityResult with win/tie/loss counts for hero

    Raises:
        DivisionUndefinedError: sim_count is zero
    """
    if sim_count == 0:
        raise DivisionUndefinedError("Equity is undefined over zero simulations")
    if sim_count < 0:
        raise ValueError(f"sim_count must be positive, got {sim_count}")

    hero_cards = _hole_cards(hero)
    opp_cards = _hole_cards(opponent)
    blocked = hero_cards + opp_cards
    if len(set(blocked)) != len(blocked):
        raise ValueError("Duplicate cards detected between hero and opponent")

    if rng is None:
        rng = np.random.default_rng()
    dead = set(blocked)
    live = [c for c in build_deck() if c not in dead]

    wins = ties = losses = 0
    for _ in range(sim_count):
        board = draw_without_replacement(live, BOARD_SIZE, rng=rng)
        result = compare(evaluate(hero_cards + board), evaluate(opp_cards + board))
        if result > 0:
            wins += 1
        elif result < 0:
            losses += 1
        else:
            ties += 1

    return EquityResult(wins=wins, ties=ties, losses=losses, simulations=sim_count)
