"""
Seven-card hand evaluation.

Ranks the best five-card poker hand obtainable from seven cards and
orders evaluated hands. Results are plain value objects: a category
ordinal plus a tiebreak sequence of rank values, most significant first.
"""

from dataclasses import dataclass
from enum import IntEnum
from functools import total_ordering
from typing import Optional, Sequence

from .cards import Card


class HandCategory(IntEnum):
    """Hand categories, weakest to strongest."""
    HIGH_CARD = 0
    PAIR = 1
    TWO_PAIR = 2
    TRIPS = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    QUADS = 7
    STRAIGHT_FLUSH = 8

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()


@total_ordering
@dataclass(frozen=True)
class EvaluatedHand:
    """
    Category plus tiebreak ranks of a best five-card hand.

    Within one category tiebreaks always have the same length, so field
    equality agrees with compare().
    """
    category: HandCategory
    tiebreak: tuple[int, ...]

    def __lt__(self, other: "EvaluatedHand") -> bool:
        if not isinstance(other, EvaluatedHand):
            return NotImplemented
        return compare(self, other) < 0

    def __str__(self) -> str:
        return f"{self.category.label} {self.tiebreak}"


def straight_high(ranks: set[int]) -> Optional[int]:
    """
    Top card of the highest five-card straight in a rank set.

    The wheel (A-2-3-4-5) counts as a 5-high straight.
    """
    for top in range(14, 5, -1):
        if all(r in ranks for r in range(top - 4, top + 1)):
            return top
    if 14 in ranks and all(r in ranks for r in (2, 3, 4, 5)):
        return 5
    return None


def evaluate(cards: Sequence[Card]) -> EvaluatedHand:
    """
    Evaluate the best five-card hand from exactly seven cards.

    Args:
        cards: Seven distinct cards (hole cards plus board)

    Returns:
        EvaluatedHand with category and tiebreak sequence
    """
    if len(cards) != 7:
        raise ValueError(f"evaluate expects exactly 7 cards, got {len(cards)}")
    if len(set(cards)) != 7:
        raise ValueError("Duplicate cards detected")

    counts = [0] * 15
    by_suit: list[list[int]] = [[], [], [], []]
    for card in cards:
        counts[card.rank] += 1
        by_suit[card.suit].append(card.rank)

    flush_ranks = None
    for suited in by_suit:
        if len(suited) >= 5:
            flush_ranks = sorted(suited, reverse=True)
            break

    if flush_ranks is not None:
        top = straight_high(set(flush_ranks))
        if top is not None:
            return EvaluatedHand(HandCategory.STRAIGHT_FLUSH, (top,))

    # Ranks present, grouped by multiplicity, each list high to low
    quads, trips, pairs, singles = [], [], [], []
    for rank in range(14, 1, -1):
        n = counts[rank]
        if n == 4:
            quads.append(rank)
        elif n == 3:
            trips.append(rank)
        elif n == 2:
            pairs.append(rank)
        elif n == 1:
            singles.append(rank)

    if quads:
        quad = quads[0]
        kicker = max(r for r in range(2, 15) if counts[r] and r != quad)
        return EvaluatedHand(HandCategory.QUADS, (quad, kicker))

    if trips and (pairs or len(trips) >= 2):
        # A second set of trips plays as the pair
        pair = max(pairs[:1] + trips[1:2])
        return EvaluatedHand(HandCategory.FULL_HOUSE, (trips[0], pair))

    if flush_ranks is not None:
        return EvaluatedHand(HandCategory.FLUSH, tuple(flush_ranks[:5]))

    top = straight_high({r for r in range(2, 15) if counts[r]})
    if top is not None:
        return EvaluatedHand(HandCategory.STRAIGHT, (top,))

    if trips:
        return EvaluatedHand(HandCategory.TRIPS, (trips[0], *singles[:2]))

    if len(pairs) >= 2:
        high, low = pairs[0], pairs[1]
        kicker = max(pairs[2:3] + singles[:1])
        return EvaluatedHand(HandCategory.TWO_PAIR, (high, low, kicker))

    if pairs:
        return EvaluatedHand(HandCategory.PAIR, (pairs[0], *singles[:3]))

    return EvaluatedHand(HandCategory.HIGH_CARD, tuple(singles[:5]))


def compare(a: EvaluatedHand, b: EvaluatedHand) -> int:
    """
    Compare two evaluated hands.

    Returns:
        1 if a beats b, -1 if b beats a, 0 for a split
    """
    if a.category != b.category:
        return 1 if a.category > b.category else -1

    for i in range(max(len(a.tiebreak), len(b.tiebreak))):
        av = a.tiebreak[i] if i < len(a.tiebreak) else 0
        bv = b.tiebreak[i] if i < len(b.tiebreak) else 0
        if av != bv:
            return 1 if av > bv else -1
    return 0


def compare_hands(hand1: Sequence[Card], hand2: Sequence[Card], board: Sequence[Card]) -> int:
    """Compare two sets of hole cards on a five-card board."""
    return compare(
        evaluate([*hand1, *board]),
        evaluate([*hand2, *board]),
    )
