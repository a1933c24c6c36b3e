"""Card, starting hand and deck utilities."""

from dataclasses import dataclass
from enum import IntEnum
from functools import lru_cache
from itertools import combinations
from typing import Iterable, Optional, Union
import re

import numpy as np
from treys import Card as TreysCard

from rangeev.errors import InsufficientCardsError, InvalidClassError


class Rank(IntEnum):
    """Card ranks (2-14 where 14 is Ace)."""
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14


class Suit(IntEnum):
    """Card suits."""
    CLUBS = 0
    DIAMONDS = 1
    HEARTS = 2
    SPADES = 3


# Mapping for string conversion
RANK_STR = {
    2: "2", 3: "3", 4: "4", 5: "5", 6: "6", 7: "7", 8: "8", 9: "9",
    10: "T", 11: "J", 12: "Q", 13: "K", 14: "A"
}
STR_RANK = {v: k for k, v in RANK_STR.items()}

SUIT_STR = {0: "c", 1: "d", 2: "h", 3: "s"}
STR_SUIT = {v: k for k, v in SUIT_STR.items()}

# High to low, the order used for hand class keys and the 13x13 matrix
RANKS = "AKQJT98765432"

_HAND_CLASS_RE = re.compile(r"^([2-9TJQKA])([2-9TJQKA])([so]?)$")


@dataclass(frozen=True)
class Card:
    """A playing card."""
    rank: int  # 2-14
    suit: int  # 0-3

    def __str__(self) -> str:
        return f"{RANK_STR[self.rank]}{SUIT_STR[self.suit]}"

    def __repr__(self) -> str:
        return str(self)

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Parse card from string like 'As', 'Th', '2c'."""
        if len(s) != 2:
            raise ValueError(f"Invalid card string: {s}")
        rank_char = s[0].upper()
        suit_char = s[1].lower()

        if rank_char not in STR_RANK:
            raise ValueError(f"Invalid rank: {rank_char}")
        if suit_char not in STR_SUIT:
            raise ValueError(f"Invalid suit: {suit_char}")

        return cls(rank=STR_RANK[rank_char], suit=STR_SUIT[suit_char])

    def to_treys(self) -> int:
        """Convert to treys library card format."""
        return TreysCard.new(str(self))


CardLike = Union[Card, str]


def parse_cards(cards: Union[str, Iterable[CardLike]]) -> list[Card]:
    """
    Parse cards from 'AsKh', 'As Kh' or an iterable of strings / Cards.
    """
    if isinstance(cards, str):
        compact = cards.replace(" ", "")
        if len(compact) % 2:
            raise ValueError(f"Invalid card string: {cards}")
        return [Card.from_string(compact[i:i + 2]) for i in range(0, len(compact), 2)]
    return [c if isinstance(c, Card) else Card.from_string(c) for c in cards]


@dataclass(frozen=True)
class Hand:
    """A concrete two-card starting hand, higher rank first."""
    card1: Card
    card2: Card

    def __post_init__(self):
        if self.card1 == self.card2:
            raise ValueError(f"Hand needs two distinct cards, got {self.card1} twice")
        # Ensure card1 has higher or equal rank
        if self.card1.rank < self.card2.rank:
            first, second = self.card2, self.card1
            object.__setattr__(self, "card1", first)
            object.__setattr__(self, "card2", second)

    @property
    def cards(self) -> tuple[Card, Card]:
        return (self.card1, self.card2)

    @property
    def is_pair(self) -> bool:
        """Check if hand is a pocket pair."""
        return self.card1.rank == self.card2.rank

    @property
    def is_suited(self) -> bool:
        """Check if hand is suited."""
        return self.card1.suit == self.card2.suit

    @property
    def canonical(self) -> str:
        """
        Get canonical hand notation (e.g., 'AKs', 'QQ', '72o').

        This groups equivalent hands regardless of specific suits.
        """
        r1 = RANK_STR[self.card1.rank]
        r2 = RANK_STR[self.card2.rank]

        if self.is_pair:
            return f"{r1}{r2}"
        elif self.is_suited:
            return f"{r1}{r2}s"
        else:
            return f"{r1}{r2}o"

    def blocks(self, cards: Iterable[Card]) -> bool:
        """True if either hole card appears in ``cards``."""
        return any(c == self.card1 or c == self.card2 for c in cards)

    def __str__(self) -> str:
        return f"{self.card1}{self.card2}"

    def __repr__(self) -> str:
        return f"Hand({self.card1}, {self.card2})"

    @classmethod
    def from_string(cls, s: str) -> "Hand":
        """Parse a specific hand like 'AsKh'."""
        cards = parse_cards(s)
        if len(cards) != 2:
            raise ValueError(f"Invalid hand string: {s}")
        return cls(cards[0], cards[1])

    def to_treys(self) -> list[int]:
        """Convert to treys library format."""
        return [self.card1.to_treys(), self.card2.to_treys()]


def build_deck() -> list[Card]:
    """The 52 cards of a standard deck."""
    return [
        Card(rank, suit)
        for rank in range(2, 15)
        for suit in range(4)
    ]


def get_all_hands() -> list[str]:
    """Generate all 169 unique starting hands in canonical form."""
    hands = []

    # Pairs
    for r in RANKS:
        hands.append(f"{r}{r}")

    # Non-pairs
    for i, r1 in enumerate(RANKS):
        for r2 in RANKS[i+1:]:
            hands.append(f"{r1}{r2}s")  # Suited
            hands.append(f"{r1}{r2}o")  # Offsuit

    return hands


ALL_HAND_CLASSES: tuple[str, ...] = tuple(get_all_hands())


def parse_hand_class(key: str) -> tuple[int, int, Optional[bool]]:
    """
    Validate a hand class key.

    Returns:
        (high_rank, low_rank, suited) where suited is None for pairs.

    Raises:
        InvalidClassError: key is not one of the 169 canonical keys
    """
    match = _HAND_CLASS_RE.match(key) if isinstance(key, str) else None
    if match is None:
        raise InvalidClassError(f"Invalid hand class: {key!r}")

    high, low, suffix = STR_RANK[match.group(1)], STR_RANK[match.group(2)], match.group(3)
    if high == low:
        if suffix:
            raise InvalidClassError(f"Pair class takes no suffix: {key!r}")
        return high, low, None

    if high < low:
        raise InvalidClassError(f"Higher rank must come first: {key!r}")
    if not suffix:
        raise InvalidClassError(f"Non-pair class needs 's' or 'o': {key!r}")
    return high, low, suffix == "s"


@lru_cache(maxsize=None)
def expand_hand_class(key: str) -> tuple[Hand, ...]:
    """
    Expand a hand class into its concrete combos.

    Pairs expand to 6 combos, suited hands to 4, offsuit hands to 12.
    """
    high, low, suited = parse_hand_class(key)

    if suited is None:
        return tuple(
            Hand(Card(high, s1), Card(high, s2))
            for s1, s2 in combinations(range(4), 2)
        )
    if suited:
        return tuple(Hand(Card(high, s), Card(low, s)) for s in range(4))
    return tuple(
        Hand(Card(high, s1), Card(low, s2))
        for s1 in range(4)
        for s2 in range(4)
        if s1 != s2
    )


def draw_without_replacement(
    deck: list[Card],
    count: int,
    blocked: Iterable[Card] = (),
    rng: Optional[np.random.Generator] = None,
) -> list[Card]:
    """
    Draw distinct cards uniformly from the unblocked part of the deck.

    Every subset of size ``count`` of the legal cards is equally likely.

    Args:
        deck: Cards to draw from
        count: Number of cards to draw
        blocked: Cards that may not be drawn
        rng: Random generator (a fresh unseeded one if omitted)

    Raises:
        InsufficientCardsError: fewer than ``count`` legal cards remain
    """
    if count < 0:
        raise ValueError(f"Cannot draw a negative number of cards: {count}")
    dead = set(blocked)
    available = [c for c in deck if c not in dead]
    if count > len(available):
        raise InsufficientCardsError(
            f"Cannot draw {count} cards, only {len(available)} unblocked"
        )
    if rng is None:
        rng = np.random.default_rng()

    picks = rng.choice(len(available), size=count, replace=False)
    return [available[i] for i in picks]


def sample_combo(
    key: str,
    blocked: Iterable[Card] = (),
    rng: Optional[np.random.Generator] = None,
) -> Optional[Hand]:
    """
    Sample a concrete combo of a hand class that avoids blocked cards.

    Returns:
        A Hand, or None if every combo of the class is blocked
    """
    dead = set(blocked)
    legal = [h for h in expand_hand_class(key) if h.card1 not in dead and h.card2 not in dead]
    if not legal:
        return None
    if rng is None:
        rng = np.random.default_rng()
    return legal[int(rng.integers(len(legal)))]
