"""
Models package for the Sideline Lineup application.

This package contains the core data models used throughout the application.
"""
from .player import Player
from .clock import ClockState
from .session import SessionEntry
from .assignment_table import AssignmentTable
from .match_state import MatchState

__all__ = [
    "Player", "ClockState", "SessionEntry", "AssignmentTable", "MatchState"
]
