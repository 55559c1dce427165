"""Statistical audit of the deck shuffle."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable, MutableSequence

import numpy as np
from numpy.typing import NDArray

from .cards import RandomSource, shuffle_in_place

__all__ = ["ShuffleAudit", "audit_shuffle"]

ShuffleFn = Callable[[MutableSequence[int], RandomSource], None]


@dataclass(frozen=True, slots=True)
class ShuffleAudit:
    """Position frequencies collected over repeated shuffles.

    ``counts[card, position]`` is how often the card that starts at index
    ``card`` landed on ``position``.
    """

    pairs: int
    trials: int
    counts: NDArray[np.int64]

    @property
    def deck_size(self) -> int:
        return 2 * self.pairs

    @property
    def expected(self) -> float:
        return self.trials / self.deck_size

    @property
    def degrees_of_freedom(self) -> int:
        return self.deck_size - 1

    @property
    def chi_square(self) -> NDArray[np.float64]:
        """Per-card Pearson statistic against a uniform position distribution."""

        deviation = self.counts.astype(np.float64) - self.expected
        return (deviation**2 / self.expected).sum(axis=1)

    @property
    def max_chi_square(self) -> float:
        return float(self.chi_square.max())

    def frequencies(self) -> NDArray[np.float64]:
        return self.counts / float(self.trials)


def audit_shuffle(
    pairs: int,
    trials: int,
    rng: RandomSource | None = None,
    shuffle: ShuffleFn = shuffle_in_place,
) -> ShuffleAudit:
    """Shuffle a ``2 * pairs`` deck ``trials`` times and tally where each card lands."""

    if pairs < 1:
        raise ValueError("pairs must be positive")
    if trials < 1:
        raise ValueError("trials must be positive")
    if rng is None:
        rng = random.Random()

    size = 2 * pairs
    counts = np.zeros((size, size), dtype=np.int64)
    columns = np.arange(size)
    for _ in range(trials):
        layout = list(range(size))
        shuffle(layout, rng)
        counts[np.asarray(layout), columns] += 1
    return ShuffleAudit(pairs=pairs, trials=trials, counts=counts)
