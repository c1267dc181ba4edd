"""
Sideline Lineup

Roster attendance, formation-based lineups and per-player playing time for
soccer coaches, with a match clock that keeps every player's minutes in step
with who is actually on the field.

This package provides both desktop (Tkinter) and web (Flask) interfaces
over a single MatchService.
"""
from .models import Player, MatchState
from .services import MatchService, JsonFileStore, MemoryStore, LineupError, PersistenceError
from .utils import fmt_mmss, now_ms, APP_TITLE

__version__ = "1.0.0"

__all__ = [
    "Player", "MatchState", "MatchService", "JsonFileStore", "MemoryStore",
    "LineupError", "PersistenceError", "fmt_mmss", "now_ms", "APP_TITLE"
]
