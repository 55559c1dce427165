"""Textual-powered interactive board."""

from .app import ConcentrationApp, TextualScheduler, run_textual_app

__all__ = ["ConcentrationApp", "TextualScheduler", "run_textual_app"]
