"""Timer abstractions consumed by the game engine."""

from __future__ import annotations

import heapq
from dataclasses import dataclass, field
from typing import Callable, Protocol

__all__ = ["TimerHandle", "Scheduler", "VirtualScheduler"]

Callback = Callable[[], None]


class TimerHandle(Protocol):
    """Handle returned for every scheduled callback."""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Schedules one-shot and recurring callbacks in milliseconds."""

    def call_later(self, delay_ms: int, callback: Callback) -> TimerHandle: ...

    def call_every(self, interval_ms: int, callback: Callback) -> TimerHandle: ...


@dataclass(order=True, slots=True)
class _VirtualTimer:
    due_ms: int
    sequence: int
    callback: Callback = field(compare=False)
    interval_ms: int | None = field(default=None, compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def recurring(self) -> bool:
        return self.interval_ms is not None


class VirtualScheduler:
    """Deterministic scheduler driven by an explicit virtual clock.

    Nothing runs until :meth:`advance` or :meth:`settle` is called. Timers
    fire in due-time order; timers sharing a due time fire in the order
    they were scheduled.
    """

    def __init__(self) -> None:
        self.now_ms = 0
        self._sequence = 0
        self._queue: list[_VirtualTimer] = []

    def _push(self, due_ms: int, callback: Callback, interval_ms: int | None) -> _VirtualTimer:
        timer = _VirtualTimer(
            due_ms=due_ms,
            sequence=self._sequence,
            callback=callback,
            interval_ms=interval_ms,
        )
        self._sequence += 1
        heapq.heappush(self._queue, timer)
        return timer

    def call_later(self, delay_ms: int, callback: Callback) -> _VirtualTimer:
        if delay_ms < 0:
            raise ValueError("delay_ms must not be negative")
        return self._push(self.now_ms + delay_ms, callback, None)

    def call_every(self, interval_ms: int, callback: Callback) -> _VirtualTimer:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        return self._push(self.now_ms + interval_ms, callback, interval_ms)

    def _discard_cancelled(self) -> None:
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)

    def advance(self, ms: int) -> int:
        """Move the clock forward by ``ms`` firing every timer that falls due.

        Returns the number of callbacks invoked.
        """

        if ms < 0:
            raise ValueError("cannot move the clock backwards")
        target = self.now_ms + ms
        fired = 0
        while True:
            self._discard_cancelled()
            if not self._queue or self._queue[0].due_ms > target:
                break
            timer = heapq.heappop(self._queue)
            self.now_ms = timer.due_ms
            if timer.recurring:
                # Re-arm before running so the callback may cancel its own handle.
                assert timer.interval_ms is not None
                timer.due_ms += timer.interval_ms
                timer.sequence = self._sequence
                self._sequence += 1
                heapq.heappush(self._queue, timer)
            timer.callback()
            fired += 1
        self.now_ms = target
        return fired

    @property
    def pending(self) -> int:
        """Number of live one-shot timers."""

        return sum(1 for timer in self._queue if not timer.cancelled and not timer.recurring)

    @property
    def recurring(self) -> int:
        """Number of live recurring timers."""

        return sum(1 for timer in self._queue if not timer.cancelled and timer.recurring)

    def next_due(self) -> int | None:
        """Return the due time of the earliest live one-shot timer."""

        dues = [timer.due_ms for timer in self._queue if not timer.cancelled and not timer.recurring]
        return min(dues, default=None)

    def settle(self, limit_ms: int = 60_000) -> int:
        """Advance until no one-shot timer remains, firing ticks on the way.

        ``limit_ms`` bounds the total advance so callbacks that keep
        rescheduling themselves cannot spin forever. Returns the number of
        milliseconds the clock moved.
        """

        start = self.now_ms
        while True:
            due = self.next_due()
            if due is None or due - start > limit_ms:
                break
            self.advance(due - self.now_ms)
        return self.now_ms - start
