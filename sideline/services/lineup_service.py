"""
Lineup service for the Sideline Lineup application.

This module owns every change to attendance, position assignments and the
active formation. Each operation checks its preconditions first and raises
LineupError before touching state; once it starts mutating, the session
ledger is told about every player who enters or leaves the field.
"""
import logging
from typing import Callable, Dict, Optional

from ..models import MatchState
from ..models.formation import positions_for, resolve_formation, resolve_orientation
from .errors import LineupError
from .session_ledger import SessionLedger

logger = logging.getLogger(__name__)


class LineupService:
    """Service for attendance, assignments and formation changes."""

    def __init__(
        self,
        match_state: MatchState,
        ledger: SessionLedger,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self.match_state = match_state
        self.ledger = ledger
        self.on_change = on_change

    @property
    def assignments(self):
        return self.match_state.assignments

    # ------------------------------------------------------------------
    # Assignments
    # ------------------------------------------------------------------
    def assign(self, position: str, player_id: str) -> Dict[str, str]:
        """
        Put a present player on a position of the current formation.

        A player already elsewhere is moved; a different player holding the
        position is taken off. Sessions are closed for whoever leaves and
        opened for the incoming player if the clock runs.

        Args:
            position: Position label in the current formation
            player_id: Id of a present roster player

        Returns:
            The updated position -> player id mapping

        Raises:
            LineupError: If nobody is present, the player is unknown or
                         absent, or the position is not in the formation
        """
        state = self.match_state
        if not state.present_players():
            raise LineupError("No players are checked in.")
        if state.player(player_id) is None:
            raise LineupError(f"Unknown player '{player_id}'")
        if not state.is_present(player_id):
            raise LineupError(f"Player '{player_id}' is not checked in")
        if position not in state.valid_positions():
            raise LineupError(
                f"Position '{position}' is not part of formation {state.formation}"
            )

        table = state.assignments
        old_position = table.position_of(player_id)
        if old_position is not None and old_position != position:
            self.ledger.close_session(player_id)
            table.remove(old_position)

        replaced = table.player_at(position)
        if replaced is not None and replaced != player_id:
            self.ledger.close_session(replaced)
            table.remove(position)

        table.put(position, player_id)
        self.ledger.open_session(player_id)

        logger.debug("Assigned %s to %s", player_id, position)
        self._changed()
        return table.snapshot()

    def clear(self, position: str) -> None:
        """Take whoever holds ``position`` off the field."""
        player_id = self.assignments.player_at(position)
        if player_id is None:
            return
        self.ledger.close_session(player_id)
        self.assignments.remove(position)
        logger.debug("Cleared %s (was %s)", position, player_id)
        self._changed()

    def unassign(self, player_id: str) -> None:
        """Take a player off whatever position they hold."""
        position = self.assignments.position_of(player_id)
        if position is not None:
            self.clear(position)

    # ------------------------------------------------------------------
    # Attendance
    # ------------------------------------------------------------------
    def set_attendance(self, player_id: str, present: bool) -> None:
        """
        Mark a player present or absent.

        Marking a player absent first closes their session and clears their
        position.

        Raises:
            LineupError: If the player is not on the roster
        """
        if self.match_state.player(player_id) is None:
            raise LineupError(f"Unknown player '{player_id}'")

        if not present:
            position = self.assignments.position_of(player_id)
            self.ledger.close_session(player_id)
            if position is not None:
                self.assignments.remove(position)

        self.match_state.attendance[player_id] = bool(present)
        logger.debug("Attendance %s -> %s", player_id, bool(present))
        self._changed()

    # ------------------------------------------------------------------
    # Formation / orientation
    # ------------------------------------------------------------------
    def change_formation(self, key: str) -> None:
        """
        Switch formation, keeping every assignment whose label survives.

        Labels are not translated between formations; players on labels the
        new formation lacks leave the field.
        """
        resolved = resolve_formation(key)
        if resolved != key:
            logger.warning("Unknown formation %r, using %s", key, resolved)
        next_positions = set(positions_for(resolved))

        for position, player_id in self.assignments:
            if position not in next_positions:
                self.ledger.close_session(player_id)
                self.assignments.remove(position)

        self.match_state.formation = resolved
        logger.info("Formation changed to %s", resolved)
        self._changed()

    def set_orientation(self, key: str) -> None:
        """Store the display orientation; unknown keys use the default."""
        self.match_state.orientation = resolve_orientation(key)
        self._changed()

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()
