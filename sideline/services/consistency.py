"""
Consistency checks for the match state.

These rules describe what every reachable state must look like. The match
service runs them after loading, and the tests run them after every step.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import Counter
from typing import List, Optional

from ..models import MatchState


class ValidationResult:
    """Result of a validation operation with success status and error messages."""

    def __init__(self, is_valid: bool = True, errors: Optional[List[str]] = None):
        self.is_valid = is_valid
        self.errors = errors or []

    def add_error(self, error: str) -> None:
        """Add an error message and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def combine(self, other: ValidationResult) -> ValidationResult:
        """Combine with another validation result."""
        return ValidationResult(
            is_valid=self.is_valid and other.is_valid,
            errors=self.errors + other.errors
        )


class ValidationRule(ABC):
    """A single rule checked against the match state."""

    @abstractmethod
    def validate(self, match_state: MatchState) -> ValidationResult:
        pass


class ClockRule(ValidationRule):
    """A running clock has a start time and a stopped one does not."""

    def validate(self, match_state: MatchState) -> ValidationResult:
        result = ValidationResult()
        clock = match_state.clock
        if clock.running != (clock.started_at is not None):
            result.add_error(
                f"Clock running={clock.running} but started_at={clock.started_at}"
            )
        if clock.elapsed_ms < 0:
            result.add_error(f"Clock elapsed is negative: {clock.elapsed_ms}")
        return result


class AssignmentRule(ValidationRule):
    """Assignments use current labels, present players, one slot each."""

    def validate(self, match_state: MatchState) -> ValidationResult:
        result = ValidationResult()
        table = match_state.assignments
        valid = set(match_state.valid_positions())

        counts = Counter(table.player_ids())
        for player_id, count in counts.items():
            if count > 1:
                result.add_error(f"Player '{player_id}' holds {count} positions")

        for position, player_id in table:
            if position not in valid:
                result.add_error(
                    f"Position '{position}' is not in formation {match_state.formation}"
                )
            if not match_state.is_present(player_id):
                result.add_error(f"Absent player '{player_id}' holds '{position}'")
            if table.position_of(player_id) != position:
                result.add_error(f"Reverse index out of step for '{player_id}'")
        return result


class SessionRule(ValidationRule):
    """A session is open exactly when the clock runs and the player is on."""

    def validate(self, match_state: MatchState) -> ValidationResult:
        result = ValidationResult()
        running = match_state.clock.running
        on_field = set(match_state.assignments.player_ids())

        for player_id, entry in match_state.ledger.items():
            should_be_open = running and player_id in on_field
            if entry.is_open != should_be_open:
                result.add_error(
                    f"Player '{player_id}' session open={entry.is_open}, "
                    f"expected {should_be_open}"
                )
            if entry.total_ms < 0:
                result.add_error(f"Player '{player_id}' has negative total")

        if running:
            for player_id in on_field - set(match_state.ledger.keys()):
                result.add_error(f"Player '{player_id}' is on the field without a session")
        return result


DEFAULT_RULES: List[ValidationRule] = [ClockRule(), AssignmentRule(), SessionRule()]


def check_match_state(
    match_state: MatchState,
    rules: Optional[List[ValidationRule]] = None,
) -> ValidationResult:
    """Run every rule and merge the results."""
    result = ValidationResult()
    for rule in rules or DEFAULT_RULES:
        result = result.combine(rule.validate(match_state))
    return result
