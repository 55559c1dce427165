"""Turn state and bookkeeping structures for Concentration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .cards import DEFAULT_SYMBOLS


class TurnState(str, Enum):
    """Phases of a single turn; new selections are rejected while evaluating."""

    IDLE = "idle"
    ONE_FLIPPED = "one_flipped"
    EVALUATING = "evaluating"

    @property
    def accepts_selection(self) -> bool:
        return self is not TurnState.EVALUATING


@dataclass(slots=True)
class GameConfig:
    """Runtime configuration for a single Concentration board.

    Delay values are presentation pacing in milliseconds; they do not affect
    the outcome of a game.
    """

    pairs: int = len(DEFAULT_SYMBOLS)
    symbols: tuple[str, ...] = DEFAULT_SYMBOLS
    settle_delay_ms: int = 600
    completion_delay_ms: int = 800
    mismatch_delay_ms: int = 1000
    tick_interval_ms: int = 1000

    def __post_init__(self) -> None:
        self.symbols = tuple(self.symbols)
        if self.pairs < 1:
            raise ValueError("pairs must be positive")
        if len(set(self.symbols)) != len(self.symbols):
            raise ValueError("symbols must be distinct")
        if len(self.symbols) < self.pairs:
            raise ValueError(f"need {self.pairs} symbols, only {len(self.symbols)} available")
        for name in ("settle_delay_ms", "completion_delay_ms", "mismatch_delay_ms"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        if self.tick_interval_ms <= 0:
            raise ValueError("tick_interval_ms must be positive")

    @property
    def deck_size(self) -> int:
        return 2 * self.pairs

    def active_symbols(self) -> tuple[str, ...]:
        """Return the symbols dealt onto the board."""

        return self.symbols[: self.pairs]

    @classmethod
    def with_pairs(cls, pairs: int, **overrides: int) -> "GameConfig":
        """Build a config for ``pairs`` symbols, generating labels past the defaults."""

        symbols = DEFAULT_SYMBOLS
        if pairs > len(symbols):
            symbols = symbols + tuple(f"S{idx}" for idx in range(len(symbols), pairs))
        return cls(pairs=pairs, symbols=symbols, **overrides)


@dataclass(slots=True)
class GameStats:
    """Counters tracked for the game in progress."""

    move_count: int = 0
    elapsed_seconds: int = 0
    matched_pair_count: int = 0
    started: bool = False

    def copy(self) -> "GameStats":
        """Return a detached copy of the counters."""

        return GameStats(
            move_count=self.move_count,
            elapsed_seconds=self.elapsed_seconds,
            matched_pair_count=self.matched_pair_count,
            started=self.started,
        )


@dataclass(slots=True)
class PendingTurn:
    """Positions flipped during the current, unresolved turn."""

    positions: list[int] = field(default_factory=list)
    resolving: bool = False

    def clear(self) -> None:
        self.positions.clear()
        self.resolving = False

    def __len__(self) -> int:
        return len(self.positions)
