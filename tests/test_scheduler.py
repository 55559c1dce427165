from __future__ import annotations

import pytest

from concentration.scheduler import VirtualScheduler


def test_call_later_fires_only_when_due() -> None:
    scheduler = VirtualScheduler()
    fired: list[int] = []

    scheduler.call_later(600, lambda: fired.append(scheduler.now_ms))
    scheduler.advance(599)
    assert fired == []

    scheduler.advance(1)
    assert fired == [600]
    assert scheduler.pending == 0


def test_timers_with_same_due_time_fire_in_scheduling_order() -> None:
    scheduler = VirtualScheduler()
    order: list[str] = []

    scheduler.call_later(100, lambda: order.append("first"))
    scheduler.call_later(100, lambda: order.append("second"))
    scheduler.call_later(50, lambda: order.append("early"))
    scheduler.advance(100)

    assert order == ["early", "first", "second"]


def test_call_every_rearms_until_cancelled() -> None:
    scheduler = VirtualScheduler()
    ticks: list[int] = []

    handle = scheduler.call_every(1000, lambda: ticks.append(scheduler.now_ms))
    scheduler.advance(3500)
    assert ticks == [1000, 2000, 3000]
    assert scheduler.recurring == 1

    handle.cancel()
    scheduler.advance(5000)
    assert ticks == [1000, 2000, 3000]
    assert scheduler.recurring == 0


def test_recurring_callback_may_cancel_itself() -> None:
    scheduler = VirtualScheduler()
    ticks: list[int] = []

    def tick() -> None:
        ticks.append(scheduler.now_ms)
        if len(ticks) == 2:
            handle.cancel()

    handle = scheduler.call_every(10, tick)
    scheduler.advance(100)

    assert ticks == [10, 20]


def test_cancelled_one_shot_never_fires() -> None:
    scheduler = VirtualScheduler()
    fired: list[str] = []

    handle = scheduler.call_later(10, lambda: fired.append("x"))
    handle.cancel()

    assert scheduler.advance(100) == 0
    assert fired == []
    assert scheduler.now_ms == 100


def test_settle_runs_chained_one_shots_and_ticks_on_the_way() -> None:
    scheduler = VirtualScheduler()
    log: list[tuple[str, int]] = []

    def settle_step() -> None:
        log.append(("settle", scheduler.now_ms))
        scheduler.call_later(1000, lambda: log.append(("flip_back", scheduler.now_ms)))

    scheduler.call_every(1000, lambda: log.append(("tick", scheduler.now_ms)))
    scheduler.call_later(600, settle_step)

    moved = scheduler.settle()

    assert moved == 1600
    assert log == [("settle", 600), ("tick", 1000), ("flip_back", 1600)]
    assert scheduler.pending == 0
    assert scheduler.next_due() is None


def test_settle_stops_at_limit_for_self_rescheduling_callbacks() -> None:
    scheduler = VirtualScheduler()

    def again() -> None:
        scheduler.call_later(100, again)

    scheduler.call_later(100, again)
    scheduler.settle(limit_ms=1000)

    assert scheduler.now_ms == 1000
    assert scheduler.pending == 1


def test_invalid_delays_are_rejected() -> None:
    scheduler = VirtualScheduler()
    with pytest.raises(ValueError):
        scheduler.call_later(-1, lambda: None)
    with pytest.raises(ValueError):
        scheduler.call_every(0, lambda: None)
    with pytest.raises(ValueError):
        scheduler.advance(-5)
