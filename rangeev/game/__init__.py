"""Cards, hand evaluation and equity module."""

from .cards import (
    Card,
    Hand,
    Rank,
    Suit,
    ALL_HAND_CLASSES,
    build_deck,
    draw_without_replacement,
    expand_hand_class,
    get_all_hands,
    parse_cards,
    parse_hand_class,
    sample_combo,
)
from .evaluator import EvaluatedHand, HandCategory, compare, compare_hands, evaluate
from .equity import EquityResult, estimate_equity

__all__ = [
    "Card",
    "Hand",
    "Rank",
    "Suit",
    "ALL_HAND_CLASSES",
    "build_deck",
    "draw_without_replacement",
    "expand_hand_class",
    "get_all_hands",
    "parse_cards",
    "parse_hand_class",
    "sample_combo",
    "EvaluatedHand",
    "HandCategory",
    "compare",
    "compare_hands",
    "evaluate",
    "EquityResult",
    "estimate_equity",
]
