from __future__ import annotations

import random
from collections import Counter

import pytest

from concentration import cards
from concentration.cards import Card, CardState
from concentration.state import GameConfig


class KeepOrder:
    """Random source whose Fisher-Yates swaps are all no-ops."""

    def randrange(self, stop: int) -> int:
        return stop - 1


class RecordingRandom:
    def __init__(self) -> None:
        self.calls: list[int] = []

    def randrange(self, stop: int) -> int:
        self.calls.append(stop)
        return 0


def test_build_deck_duplicates_symbols_in_order_without_swaps() -> None:
    deck = cards.build_deck(["A", "B"], KeepOrder())

    assert [card.symbol_id for card in deck] == ["A", "B", "A", "B"]
    assert [card.position for card in deck] == [0, 1, 2, 3]
    assert all(card.state is CardState.HIDDEN for card in deck)


@pytest.mark.parametrize("pairs", [1, 2, 3, 8, 12])
def test_build_deck_holds_each_symbol_exactly_twice(pairs: int) -> None:
    symbols = GameConfig.with_pairs(pairs).active_symbols()
    deck = cards.build_deck(symbols, random.Random(pairs))

    assert len(deck) == 2 * pairs
    counts = Counter(card.symbol_id for card in deck)
    assert set(counts) == set(symbols)
    assert set(counts.values()) == {2}


def test_shuffle_walks_from_last_index_down_to_one() -> None:
    rng = RecordingRandom()
    items = [0, 1, 2, 3, 4]

    cards.shuffle_in_place(items, rng)

    assert rng.calls == [5, 4, 3, 2]
    assert sorted(items) == [0, 1, 2, 3, 4]


def test_shuffle_swaps_with_chosen_index() -> None:
    rng = RecordingRandom()
    items = ["a", "b", "c"]

    cards.shuffle_in_place(items, rng)

    # i=2 swaps with 0 -> c b a; i=1 swaps with 0 -> b c a
    assert items == ["b", "c", "a"]


def test_shuffle_is_noop_for_short_sequences() -> None:
    rng = RecordingRandom()
    single = ["x"]
    cards.shuffle_in_place(single, rng)
    cards.shuffle_in_place([], rng)

    assert single == ["x"]
    assert rng.calls == []


def test_build_deck_rejects_bad_symbols() -> None:
    with pytest.raises(ValueError):
        cards.build_deck([], KeepOrder())
    with pytest.raises(ValueError):
        cards.build_deck(["A", "A"], KeepOrder())


def test_card_with_state_returns_new_card() -> None:
    card = Card(symbol_id="A", position=3)
    flipped = card.with_state(CardState.FLIPPED)

    assert card.state is CardState.HIDDEN
    assert card.is_hidden
    assert flipped.state is CardState.FLIPPED
    assert flipped.is_face_up
    assert flipped.position == 3
