"""Turn state machine and bookkeeping for a Concentration game."""

from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Callable, Iterable, Sequence

from .cards import Card, CardState, RandomSource, build_deck
from .events import GameListener
from .scheduler import Scheduler, TimerHandle
from .state import GameConfig, GameStats, PendingTurn, TurnState

__all__ = [
    "SelectionError",
    "InvalidSelection",
    "GameEngine",
    "format_elapsed",
]

logger = logging.getLogger(__name__)


class SelectionError(str, Enum):
    """Reasons a card selection can be rejected."""

    OUT_OF_RANGE = "out_of_range"
    NOT_HIDDEN = "not_hidden"
    EVALUATING = "evaluating"
    FINISHED = "finished"


class InvalidSelection(RuntimeError):
    """Raised when a card cannot be selected; the game state is untouched."""

    def __init__(self, position: int, reason: SelectionError) -> None:
        super().__init__(f"cannot select position {position}: {reason.value.replace('_', ' ')}")
        self.position = position
        self.reason = reason


def format_elapsed(seconds: int) -> str:
    """Return ``seconds`` as zero-padded ``MM:SS``."""

    minutes, remainder = divmod(seconds, 60)
    return f"{minutes:02d}:{remainder:02d}"


class GameEngine:
    """Owns the deck, the turn state machine and the move/time counters.

    Every delayed step goes through the injected scheduler and is tagged with
    the generation that scheduled it, so a callback left over from a
    previous game never touches the current deck.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        config: GameConfig | None = None,
        *,
        rng: RandomSource | None = None,
        listeners: Iterable[GameListener] = (),
    ) -> None:
        self.scheduler = scheduler
        self.config = config or GameConfig()
        self.rng: RandomSource = rng if rng is not None else random.Random()
        self._listeners: list[GameListener] = list(listeners)

        self._deck: list[Card] = []
        self._stats = GameStats()
        self._turn_state = TurnState.IDLE
        self._pending = PendingTurn()
        self._finished = False
        self._generation = 0
        self._tick: TimerHandle | None = None
        self._timers: list[TimerHandle] = []

        self.new_game()

    # ------------------------------------------------------------------
    # Read-only views

    @property
    def cards(self) -> tuple[Card, ...]:
        return tuple(self._deck)

    @property
    def stats(self) -> GameStats:
        return self._stats.copy()

    @property
    def turn_state(self) -> TurnState:
        return self._turn_state

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending_positions(self) -> tuple[int, ...]:
        """Positions flipped in the current turn and not yet resolved."""

        return tuple(self._pending.positions)

    @property
    def clock_running(self) -> bool:
        return self._tick is not None

    def symbol_at(self, position: int) -> str:
        return self._deck[position].symbol_id

    def add_listener(self, listener: GameListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: GameListener) -> None:
        self._listeners.remove(listener)

    def _notify(self, hook: str, *args: object) -> None:
        for listener in list(self._listeners):
            getattr(listener, hook)(*args)

    # ------------------------------------------------------------------
    # Timers

    def _schedule(self, delay_ms: int, step: Callable[[], None]) -> None:
        generation = self._generation

        def fire() -> None:
            if generation != self._generation:
                logger.debug("Ignoring stale callback from game %d", generation)
                return
            self._timers = [handle for handle in self._timers if handle is not timer]
            step()

        timer = self.scheduler.call_later(delay_ms, fire)
        self._timers.append(timer)

    def _start_clock(self) -> None:
        generation = self._generation

        def tick() -> None:
            if generation != self._generation or self._finished:
                return
            self._stats.elapsed_seconds += 1
            self._notify("on_time_changed", self._stats.elapsed_seconds)

        self._tick = self.scheduler.call_every(self.config.tick_interval_ms, tick)
        logger.debug("Game clock started")

    def _stop_clock(self) -> None:
        if self._tick is not None:
            self._tick.cancel()
            self._tick = None

    def _cancel_timers(self) -> None:
        for timer in self._timers:
            timer.cancel()
        self._timers.clear()

    # ------------------------------------------------------------------
    # Operations

    def new_game(self) -> None:
        """Discard the current board and deal a freshly shuffled deck."""

        self._generation += 1
        self._stop_clock()
        self._cancel_timers()

        self._deck = build_deck(self.config.active_symbols(), self.rng)
        self._stats = GameStats()
        self._turn_state = TurnState.IDLE
        self._pending.clear()
        self._finished = False

        logger.info("New game %d dealt with %d cards", self._generation, len(self._deck))
        self._notify("on_deck_ready", self.cards)
        self._notify("on_move_count_changed", 0)
        self._notify("on_time_changed", 0)

    def _rejection(self, position: int) -> SelectionError | None:
        if self._finished:
            return SelectionError.FINISHED
        if not self._turn_state.accepts_selection:
            return SelectionError.EVALUATING
        if position < 0 or position >= len(self._deck):
            return SelectionError.OUT_OF_RANGE
        if not self._deck[position].is_hidden:
            return SelectionError.NOT_HIDDEN
        return None

    def can_select(self, position: int) -> bool:
        """Return ``True`` when :meth:`select_card` would accept ``position``."""

        return self._rejection(position) is None

    def select_card(self, position: int) -> None:
        """Flip the card at ``position``.

        Raises :class:`InvalidSelection` when the game is over, a pair is
        being evaluated, the position is off the board or the card is
        already face up.
        """

        reason = self._rejection(position)
        if reason is not None:
            logger.debug("Rejected selection of %d: %s", position, reason.value)
            raise InvalidSelection(position, reason)

        if not self._stats.started:
            self._stats.started = True
            self._start_clock()

        self._deck[position] = self._deck[position].with_state(CardState.FLIPPED)
        self._pending.positions.append(position)
        logger.debug("Card %d flipped: %s", position, self._deck[position].symbol_id)
        self._notify("on_card_flipped", position)

        if len(self._pending) == 1:
            self._turn_state = TurnState.ONE_FLIPPED
            return

        self._stats.move_count += 1
        self._notify("on_move_count_changed", self._stats.move_count)
        self._turn_state = TurnState.EVALUATING
        self._schedule(self.config.settle_delay_ms, self.evaluate_pending_pair)

    def evaluate_pending_pair(self) -> None:
        """Resolve the two cards flipped in the current turn."""

        if self._turn_state is not TurnState.EVALUATING or len(self._pending) != 2:
            return
        # A mismatch already waiting on its flip-back is resolved.
        if self._pending.resolving:
            return

        first, second = self._pending.positions
        if self._deck[first].symbol_id == self._deck[second].symbol_id:
            self._deck[first] = self._deck[first].with_state(CardState.MATCHED)
            self._deck[second] = self._deck[second].with_state(CardState.MATCHED)
            self._stats.matched_pair_count += 1
            self._pending.clear()
            self._turn_state = TurnState.IDLE
            logger.debug(
                "Match found: %s (%d/%d pairs)",
                self._deck[first].symbol_id,
                self._stats.matched_pair_count,
                self.config.pairs,
            )
            self._notify("on_cards_matched", first, second)
            if self._stats.matched_pair_count == self.config.pairs:
                self._schedule(self.config.completion_delay_ms, self.complete_game)
            return

        self._pending.resolving = True
        self._schedule(self.config.mismatch_delay_ms, self._flip_back)

    def _flip_back(self) -> None:
        if not self._pending.resolving or len(self._pending) != 2:
            return
        first, second = self._pending.positions
        self._deck[first] = self._deck[first].with_state(CardState.HIDDEN)
        self._deck[second] = self._deck[second].with_state(CardState.HIDDEN)
        self._pending.clear()
        self._turn_state = TurnState.IDLE
        logger.debug("No match, cards %d and %d flipped back", first, second)
        self._notify("on_cards_mismatched", first, second)

    def complete_game(self) -> None:
        """Stop the clock and report the final counters."""

        if self._finished:
            return
        self._stop_clock()
        self._cancel_timers()
        self._finished = True
        moves = self._stats.move_count
        seconds = self._stats.elapsed_seconds
        logger.info("Game %d completed in %d moves, %s", self._generation, moves, format_elapsed(seconds))
        self._notify("on_game_completed", moves, seconds)

    def rows(self, width: int = 4) -> Sequence[Sequence[Card]]:
        """Return the cards split into rows of ``width`` for grid layouts."""

        if width <= 0:
            raise ValueError("width must be positive")
        cards = self.cards
        return [cards[idx : idx + width] for idx in range(0, len(cards), width)]
