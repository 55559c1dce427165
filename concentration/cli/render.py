"""Rendering helpers dedicated to the CLI experience."""

from __future__ import annotations

from rich.console import RenderableType
from rich.panel import Panel

from ..cards import Card, CardState
from ..engine import GameEngine
from .views import BoardView

_HIDDEN_FACE = "[bold blue]?[/bold blue]"
_STATE_STYLES = {
    CardState.FLIPPED: "yellow",
    CardState.MATCHED: "green",
}


def format_card(card: Card, *, reveal: bool = False) -> str:
    """Return a Rich-rendered label for ``card``.

    Hidden cards show a question mark unless ``reveal`` is set, in which case
    the symbol is dimmed so it still reads as face down.
    """

    if card.state is CardState.HIDDEN:
        if reveal:
            return f"[dim]{card.symbol_id}[/dim]"
        return _HIDDEN_FACE
    style = _STATE_STYLES[card.state]
    return f"[{style}]{card.symbol_id}[/{style}]"


def render_board(
    engine: GameEngine,
    *,
    reveal: bool = False,
    columns: int = 4,
    title: str = "Concentration",
) -> RenderableType:
    """Return a Rich panel describing the current board and counters."""

    view = BoardView(engine=engine, columns=columns, reveal=reveal, card_formatter=format_card)
    return Panel(view.render(), title=title, padding=(0, 1), border_style="cyan")
