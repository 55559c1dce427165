"""Card abstractions and deck helpers for Concentration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, MutableSequence, Protocol, Sequence, TypeVar

__all__ = [
    "CardState",
    "Card",
    "DEFAULT_SYMBOLS",
    "RandomSource",
    "shuffle_in_place",
    "build_deck",
]

T = TypeVar("T")

DEFAULT_SYMBOLS: Final[tuple[str, ...]] = ("🐶", "🐱", "🐭", "🐹", "🐰", "🦊", "🐻", "🐼")


class CardState(str, Enum):
    """Visibility of a single card on the board."""

    HIDDEN = "hidden"
    FLIPPED = "flipped"
    MATCHED = "matched"


@dataclass(frozen=True, slots=True)
class Card:
    """Value object describing one card at a fixed board position."""

    symbol_id: str
    position: int
    state: CardState = CardState.HIDDEN

    @property
    def is_hidden(self) -> bool:
        return self.state is CardState.HIDDEN

    @property
    def is_face_up(self) -> bool:
        """Return ``True`` when the symbol is visible to the player."""

        return self.state is not CardState.HIDDEN

    def with_state(self, state: CardState) -> "Card":
        return Card(symbol_id=self.symbol_id, position=self.position, state=state)


class RandomSource(Protocol):
    """The subset of :class:`random.Random` used for shuffling."""

    def randrange(self, stop: int) -> int: ...


def shuffle_in_place(items: MutableSequence[T], rng: RandomSource) -> None:
    """Apply a Fisher-Yates shuffle to ``items``.

    Walks from the last index down to 1 and swaps each slot with a uniformly
    chosen index in ``[0, i]`` so every permutation is equally likely.
    """

    for i in range(len(items) - 1, 0, -1):
        j = rng.randrange(i + 1)
        items[i], items[j] = items[j], items[i]


def build_deck(symbols: Sequence[str], rng: RandomSource) -> list[Card]:
    """Return a freshly shuffled deck holding every symbol exactly twice."""

    if not symbols:
        raise ValueError("at least one symbol is required")
    if len(set(symbols)) != len(symbols):
        raise ValueError("symbols must be distinct")

    layout = list(symbols) + list(symbols)
    shuffle_in_place(layout, rng)
    return [Card(symbol_id=symbol, position=idx) for idx, symbol in enumerate(layout)]
