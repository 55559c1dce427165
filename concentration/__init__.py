"""Top-level package for the Concentration memory game engine."""

from . import audit, cards, engine, events, scheduler, state

__all__ = [
    "audit",
    "cards",
    "engine",
    "events",
    "scheduler",
    "state",
]
