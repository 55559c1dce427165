"""Typer entry-point wiring for the Concentration CLI."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Iterable, TextIO

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .. import audit
from ..engine import GameEngine, InvalidSelection
from ..events import EventRecorder
from ..logger import setup_logging
from ..scheduler import VirtualScheduler
from ..state import GameConfig
from .render import render_board
from .textual import run_textual_app

app = typer.Typer(add_completion=False, rich_markup_mode="rich")
console = Console()

HARNESS_HELP = "Commands: new | select <position> | wait <seconds> | show | quit"
MAX_WAIT_SECONDS = 24 * 60 * 60


@dataclass(slots=True)
class HarnessSession:
    """Engine wired to a virtual clock and an event recorder."""

    engine: GameEngine
    scheduler: VirtualScheduler
    recorder: EventRecorder
    reveal: bool = False


def _build_config(pairs: int) -> GameConfig:
    try:
        return GameConfig.with_pairs(pairs)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def create_session(pairs: int, seed: int | None, *, reveal: bool = False) -> HarnessSession:
    """Return a harness session with a freshly dealt board."""

    scheduler = VirtualScheduler()
    recorder = EventRecorder()
    engine = GameEngine(
        scheduler,
        _build_config(pairs),
        rng=random.Random(seed),
        listeners=[recorder],
    )
    return HarnessSession(engine=engine, scheduler=scheduler, recorder=recorder, reveal=reveal)


def _flush_events(session: HarnessSession) -> None:
    for event in session.recorder.drain():
        console.print(event.describe(), highlight=False, markup=False)


def execute_command(session: HarnessSession, line: str) -> bool:
    """Run one harness command. Returns ``False`` once the session should stop."""

    parts = line.split()
    if not parts or parts[0].startswith("#"):
        return True
    command, args = parts[0].lower(), parts[1:]

    if command in {"quit", "exit"}:
        return False
    if command == "new":
        session.engine.new_game()
    elif command == "select":
        try:
            position = int(args[0]) if len(args) == 1 else None
        except ValueError:
            position = None
        if position is None:
            console.print("[red]error[/red]: select expects an integer position")
            return True
        try:
            session.engine.select_card(position)
        except InvalidSelection as exc:
            console.print(f"rejected: {exc.reason.value} (position {exc.position})", highlight=False)
        else:
            session.scheduler.settle()
    elif command == "wait":
        try:
            seconds = float(args[0]) if len(args) == 1 else -1.0
        except ValueError:
            seconds = -1.0
        if not math.isfinite(seconds) or not 0 <= seconds <= MAX_WAIT_SECONDS:
            console.print(f"[red]error[/red]: wait expects a number of seconds between 0 and {MAX_WAIT_SECONDS}")
            return True
        session.scheduler.advance(round(seconds * 1000))
    elif command == "show":
        console.print(render_board(session.engine, reveal=session.reveal))
    elif command == "help":
        console.print(HARNESS_HELP, highlight=False)
    else:
        console.print(f"[red]error[/red]: unknown command {command!r}. {HARNESS_HELP}", highlight=False)
        return True

    _flush_events(session)
    return True


def run_harness(session: HarnessSession, lines: Iterable[str]) -> None:
    """Feed ``lines`` to the session, printing every notification."""

    _flush_events(session)
    for line in lines:
        if not execute_command(session, line.strip()):
            break


@app.callback()
def _configure(
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level written to stderr."),
) -> None:
    try:
        setup_logging(log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc


@app.command()
def harness(
    pairs: int = typer.Option(8, min=1, help="Number of distinct symbols on the board."),
    seed: int | None = typer.Option(None, help="Random seed for a reproducible deal (omit for randomness)."),
    reveal: bool = typer.Option(False, "--reveal", help="Show face-down symbols when rendering the board."),
) -> None:
    """Drive the engine with line commands read from standard input."""

    session = create_session(pairs, seed, reveal=reveal)
    stdin: TextIO = typer.get_text_stream("stdin")
    run_harness(session, stdin)


@app.command()
def play(
    pairs: int = typer.Option(8, min=1, max=18, help="Number of distinct symbols on the board."),
    seed: int | None = typer.Option(None, help="Random seed for reproducible games (omit for randomness)."),
    debug: bool = typer.Option(False, "--debug", help="Reveal face-down symbols on the board."),
) -> None:
    """Play interactively in the terminal."""

    run_textual_app(config=_build_config(pairs), seed=seed, debug=debug)


@app.command("audit")
def audit_cli(
    pairs: int = typer.Option(2, min=1, max=16, help="Number of pairs in the audited deck."),
    trials: int = typer.Option(10_000, min=1, help="Number of shuffles to tally."),
    seed: int | None = typer.Option(None, help="Random seed for the audit."),
) -> None:
    """Check the shuffle for positional bias."""

    report = audit.audit_shuffle(pairs, trials, random.Random(seed))
    frequencies = report.frequencies()

    table = Table(title="Shuffle Position Frequencies", box=box.SIMPLE_HEAVY)
    table.add_column("Card", justify="right")
    for position in range(report.deck_size):
        table.add_column(str(position), justify="right")
    table.add_column("χ²", justify="right")

    for card in range(report.deck_size):
        table.add_row(
            str(card),
            *(f"{value:.3f}" for value in frequencies[card]),
            f"{report.chi_square[card]:.2f}",
        )

    console.print(table)
    console.print(
        f"[cyan]{trials} shuffle(s)[/cyan], expected {1 / report.deck_size:.3f} per cell, "
        f"max χ² {report.max_chi_square:.2f} with {report.degrees_of_freedom} degrees of freedom"
    )


def main() -> None:
    """Entry-point for ``python -m concentration.cli``."""

    app()


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    main()
