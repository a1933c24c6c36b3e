"""Exception types raised by the simulation core."""


class InvalidClassError(ValueError):
    """Hand class key does not follow the canonical 'AKs' / 'AKo' / 'AA' grammar."""


class InsufficientCardsError(ValueError):
    """More cards were requested than remain unblocked in the deck."""


class DivisionUndefinedError(ZeroDivisionError):
    """Equity requested over zero sampled boards."""
