"""Observer interface the engine uses to talk to presentation code."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Sequence

from .cards import Card

__all__ = ["GameListener", "GameEvent", "EventRecorder"]


class GameListener:
    """Receives engine notifications. Every hook is a no-op by default."""

    def on_deck_ready(self, cards: Sequence[Card]) -> None:
        pass

    def on_card_flipped(self, position: int) -> None:
        pass

    def on_cards_matched(self, first: int, second: int) -> None:
        pass

    def on_cards_mismatched(self, first: int, second: int) -> None:
        pass

    def on_move_count_changed(self, count: int) -> None:
        pass

    def on_time_changed(self, seconds: int) -> None:
        pass

    def on_game_completed(self, final_move_count: int, final_elapsed_seconds: int) -> None:
        pass


@dataclass(frozen=True, slots=True)
class GameEvent:
    """A single recorded notification."""

    kind: str
    payload: Mapping[str, object] = field(default_factory=dict)

    def describe(self) -> str:
        """Return a one-line ``kind key=value`` rendering."""

        if not self.payload:
            return self.kind
        details = " ".join(f"{key}={value}" for key, value in self.payload.items())
        return f"{self.kind} {details}"


class EventRecorder(GameListener):
    """Listener that keeps every notification in arrival order."""

    def __init__(self) -> None:
        self.events: list[GameEvent] = []

    def _record(self, kind: str, **payload: object) -> None:
        self.events.append(GameEvent(kind, payload))

    def on_deck_ready(self, cards: Sequence[Card]) -> None:
        self._record("deck_ready", size=len(cards))

    def on_card_flipped(self, position: int) -> None:
        self._record("card_flipped", position=position)

    def on_cards_matched(self, first: int, second: int) -> None:
        self._record("cards_matched", first=first, second=second)

    def on_cards_mismatched(self, first: int, second: int) -> None:
        self._record("cards_mismatched", first=first, second=second)

    def on_move_count_changed(self, count: int) -> None:
        self._record("moves", count=count)

    def on_time_changed(self, seconds: int) -> None:
        self._record("time", seconds=seconds)

    def on_game_completed(self, final_move_count: int, final_elapsed_seconds: int) -> None:
        self._record("game_completed", moves=final_move_count, seconds=final_elapsed_seconds)

    def kinds(self) -> list[str]:
        return [event.kind for event in self.events]

    def of_kind(self, kind: str) -> list[GameEvent]:
        return [event for event in self.events if event.kind == kind]

    def drain(self) -> list[GameEvent]:
        """Return and forget everything recorded so far."""

        drained = self.events
        self.events = []
        return drained

    def clear(self) -> None:
        self.events.clear()
