"""Textual-powered interactive Concentration board."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Callable, Protocol, Sequence

from rich.panel import Panel
from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Grid
from textual.reactive import reactive
from textual.widgets import Button, Footer, Header, Static

from ...cards import Card, CardState
from ...engine import GameEngine, InvalidSelection, format_elapsed
from ...events import GameListener
from ...state import GameConfig

BOARD_COLUMNS = 4


class _TimerSource(Protocol):
    def set_timer(self, delay: float, callback: Callable[[], Any]) -> Any: ...

    def set_interval(self, interval: float, callback: Callable[[], Any]) -> Any: ...


@dataclass(slots=True)
class _TextualTimer:
    """Adapts a Textual ``Timer`` to the engine's cancel-only handle."""

    timer: Any

    def cancel(self) -> None:
        self.timer.stop()


class TextualScheduler:
    """Engine scheduler backed by Textual's message-loop timers."""

    def __init__(self, source: _TimerSource) -> None:
        self.source = source

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> _TextualTimer:
        return _TextualTimer(self.source.set_timer(delay_ms / 1000, callback))

    def call_every(self, interval_ms: int, callback: Callable[[], None]) -> _TextualTimer:
        return _TextualTimer(self.source.set_interval(interval_ms / 1000, callback))


class CardButton(Button):
    """A single board slot."""

    def __init__(self, position: int) -> None:
        super().__init__("?", id=f"card-{position}", classes="card")
        self.card_position = position

    def show(self, card: Card, *, reveal: bool) -> None:
        self.remove_class("flipped", "matched")
        if card.state is CardState.HIDDEN:
            self.label = Text(card.symbol_id, style="dim") if reveal else Text("?")
            self.disabled = False
            return
        self.label = Text(card.symbol_id)
        self.add_class(card.state.value)
        self.disabled = card.state is CardState.MATCHED


class StatusStrip(Static):
    """Single line status helper."""

    message: reactive[str] = reactive("", init=False)

    def watch_message(self, value: str) -> None:
        self.update(Panel(Text.from_markup(value or "[dim]Flip a card to start[/dim]"), border_style="green"))


class _BoardListener(GameListener):
    """Forwards engine notifications to the app."""

    def __init__(self, app: "ConcentrationApp") -> None:
        self.app = app

    def on_deck_ready(self, cards: Sequence[Card]) -> None:
        self.app.reset_board()

    def on_card_flipped(self, position: int) -> None:
        self.app.refresh_card(position)

    def on_cards_matched(self, first: int, second: int) -> None:
        self.app.refresh_card(first)
        self.app.refresh_card(second)

    def on_cards_mismatched(self, first: int, second: int) -> None:
        self.app.refresh_card(first)
        self.app.refresh_card(second)

    def on_move_count_changed(self, count: int) -> None:
        self.app.refresh_status()

    def on_time_changed(self, seconds: int) -> None:
        self.app.refresh_status()

    def on_game_completed(self, final_move_count: int, final_elapsed_seconds: int) -> None:
        self.app.show_completion(final_move_count, final_elapsed_seconds)


class ConcentrationApp(App):
    """Textual Concentration game UI."""

    CSS = f"""
    Screen {{
        layout: vertical;
        align: center top;
    }}

    #board {{
        grid-size: {BOARD_COLUMNS};
        grid-gutter: 1 2;
        width: auto;
        height: auto;
        padding: 1 2;
    }}

    CardButton {{
        width: 12;
        height: 3;
    }}

    CardButton.flipped {{
        background: $warning;
    }}

    CardButton.matched {{
        background: $success;
    }}

    StatusStrip {{
        width: 100%;
    }}
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("ctrl+c", "quit", "Quit"),
        Binding("r", "restart", "Restart"),
        Binding("d", "toggle_reveal", "Reveal cards"),
    ]

    def __init__(self, *, config: GameConfig, seed: int | None, start_debug: bool) -> None:
        super().__init__()
        if seed is None:
            seed = random.SystemRandom().randrange(0, 2**63)
        self.seed = seed
        self.game_config = config
        self.reveal_enabled = start_debug
        self.engine: GameEngine | None = None
        self.status_strip: StatusStrip | None = None
        self._buttons: list[CardButton] = []
        self._completion: str | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        self.status_strip = StatusStrip(id="status")
        yield self.status_strip
        self._buttons = [CardButton(position) for position in range(self.game_config.deck_size)]
        yield Grid(*self._buttons, id="board")
        yield Footer()

    def on_mount(self) -> None:  # pragma: no cover - widget lifecycle glue
        self.title = "Concentration"
        self.sub_title = f"seed {self.seed}"
        self.engine = GameEngine(
            TextualScheduler(self),
            self.game_config,
            rng=random.Random(self.seed),
            listeners=[_BoardListener(self)],
        )
        self.reset_board()

    def refresh_card(self, position: int) -> None:
        if self.engine is None or not self._buttons:
            return
        self._buttons[position].show(self.engine.cards[position], reveal=self.reveal_enabled)

    def reset_board(self) -> None:
        self._completion = None
        self.refresh_board()

    def refresh_board(self) -> None:
        for position in range(len(self._buttons)):
            self.refresh_card(position)
        self.refresh_status()

    def refresh_status(self) -> None:
        if self.engine is None or self.status_strip is None:
            return
        if self._completion is not None:
            self.status_strip.message = self._completion
            return
        stats = self.engine.stats
        self.status_strip.message = (
            f"[cyan]Moves[/cyan] {stats.move_count}  "
            f"[cyan]Time[/cyan] {format_elapsed(stats.elapsed_seconds)}  "
            f"[cyan]Pairs[/cyan] {stats.matched_pair_count}/{self.game_config.pairs}"
        )

    def show_completion(self, moves: int, seconds: int) -> None:
        self._completion = (
            f"[bold green]Solved![/bold green] {moves} moves in {format_elapsed(seconds)}. "
            "Press [bold]r[/bold] to play again."
        )
        self.refresh_status()

    def on_button_pressed(self, event: Button.Pressed) -> None:  # pragma: no cover - Textual glue
        event.stop()
        if self.engine is None or not isinstance(event.button, CardButton):
            return
        try:
            self.engine.select_card(event.button.card_position)
        except InvalidSelection:
            self.bell()

    def action_restart(self) -> None:
        if self.engine is not None:
            self.engine.new_game()

    def action_toggle_reveal(self) -> None:
        self.reveal_enabled = not self.reveal_enabled
        self.refresh_board()


def run_textual_app(*, config: GameConfig, seed: int | None, debug: bool) -> None:
    """Launch the Textual UI."""

    app = ConcentrationApp(config=config, seed=seed, start_debug=debug)
    app.run()
