from __future__ import annotations

from typing import Callable

from concentration.cli.textual import ConcentrationApp, TextualScheduler
from concentration.state import GameConfig


class FakeTimer:
    def __init__(self) -> None:
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


class FakeTimerSource:
    def __init__(self) -> None:
        self.timers: list[tuple[str, float, Callable[[], None]]] = []
        self.created: list[FakeTimer] = []

    def _timer(self, kind: str, seconds: float, callback: Callable[[], None]) -> FakeTimer:
        self.timers.append((kind, seconds, callback))
        timer = FakeTimer()
        self.created.append(timer)
        return timer

    def set_timer(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        return self._timer("once", delay, callback)

    def set_interval(self, interval: float, callback: Callable[[], None]) -> FakeTimer:
        return self._timer("every", interval, callback)


def test_textual_scheduler_converts_milliseconds_and_cancels() -> None:
    source = FakeTimerSource()
    scheduler = TextualScheduler(source)

    once = scheduler.call_later(600, lambda: None)
    every = scheduler.call_every(1000, lambda: None)

    assert [(kind, seconds) for kind, seconds, _ in source.timers] == [("once", 0.6), ("every", 1.0)]
    once.cancel()
    assert source.created[0].stopped
    assert not source.created[1].stopped
    every.cancel()
    assert source.created[1].stopped


def test_app_starts_without_engine_until_mounted() -> None:
    app = ConcentrationApp(config=GameConfig(pairs=2, symbols=("A", "B")), seed=5, start_debug=True)

    assert app.seed == 5
    assert app.reveal_enabled
    assert app.engine is None
    # Board refreshes are ignored until the engine exists.
    app.refresh_board()
    app.refresh_status()
