"""
Services package for the Sideline Lineup application.

This package contains service classes that handle business logic:
the clock, the session ledger, lineup changes and persistence, tied
together by MatchService.
"""
from .errors import LineupError, PersistenceError
from .persistence_service import PersistenceGateway, JsonFileStore, MemoryStore
from .session_ledger import SessionLedger
from .clock_service import ClockService
from .lineup_service import LineupService
from .consistency import ValidationResult, check_match_state
from .match_service import MatchService

__all__ = [
    "LineupError", "PersistenceError", "PersistenceGateway", "JsonFileStore", "MemoryStore",
    "SessionLedger", "ClockService", "LineupService", "ValidationResult",
    "check_match_state", "MatchService"
]
