"""Composable view primitives for the Concentration CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table

from ..cards import Card
from ..engine import GameEngine, format_elapsed


@dataclass(slots=True)
class BoardView:
    """Renderable grid of cards plus the game counters."""

    engine: GameEngine
    columns: int
    reveal: bool
    card_formatter: Callable[..., str]

    def _cell(self, card: Card) -> str:
        return f"[dim]{card.position:>2}[/dim] {self.card_formatter(card, reveal=self.reveal)}"

    def _stats_panel(self) -> Panel:
        stats = self.engine.stats
        grid = Table.grid(expand=True)
        grid.add_column(justify="left")
        grid.add_row(f"[cyan]Moves[/cyan]: {stats.move_count}")
        grid.add_row(f"[cyan]Time[/cyan]: {format_elapsed(stats.elapsed_seconds)}")
        grid.add_row(f"[cyan]Pairs[/cyan]: {stats.matched_pair_count}/{self.engine.config.pairs}")
        state_label = self.engine.turn_state.value.replace("_", " ").title()
        if self.engine.finished:
            state_label = "[bold green]Complete[/bold green]"
        grid.add_row(f"[cyan]State[/cyan]: {state_label}")
        return Panel(grid, title="Stats", box=box.SQUARE, border_style="blue")

    def render(self) -> RenderableType:
        table = Table(box=box.ROUNDED, show_header=False, expand=False)
        for _ in range(self.columns):
            table.add_column(justify="center")

        for row in self.engine.rows(self.columns):
            cells = [self._cell(card) for card in row]
            cells.extend("" for _ in range(self.columns - len(cells)))
            table.add_row(*cells)

        return Group(table, self._stats_panel())
