"""Clock service for the Sideline Lineup application."""

import logging
from typing import Callable, Optional, Union

from ..models import MatchState
from ..utils import now_ms
from .session_ledger import SessionLedger

logger = logging.getLogger(__name__)

Confirmation = Union[bool, Callable[[], bool]]


class ClockService:
    """Service for the match clock and the sessions that follow it."""

    def __init__(
        self,
        match_state: MatchState,
        ledger: SessionLedger,
        now: Callable[[], int] = now_ms,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self.match_state = match_state
        self.ledger = ledger
        self.now = now
        self.on_change = on_change

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Start the clock and open a session for everyone on the field."""

        clock = self.match_state.clock
        if clock.running:
            return

        clock.running = True
        clock.started_at = self.now()

        for player_id in self.match_state.assignments.player_ids():
            self.ledger.open_session(player_id)

        logger.info("Clock started at %s", clock.elapsed_ms)
        self._changed()

    def pause(self) -> None:
        """Bank every open session and freeze the elapsed time."""

        clock = self.match_state.clock
        if not clock.running:
            return

        for player_id in self.match_state.assignments.player_ids():
            self.ledger.close_session(player_id)

        clock.elapsed_ms = clock.effective_elapsed(self.now())
        clock.running = False
        clock.started_at = None

        logger.info("Clock paused at %s", clock.elapsed_ms)
        self._changed()

    def reset(self, confirm: Confirmation = False) -> bool:
        """
        Zero the clock and stop every session, keeping banked totals.

        Time accrued since the last start is discarded rather than credited.

        Args:
            confirm: ``True`` or a callable asked for confirmation; nothing
                     happens unless it is truthy

        Returns:
            True if the reset was applied
        """

        confirmed = confirm() if callable(confirm) else bool(confirm)
        if not confirmed:
            logger.info("Clock reset declined")
            return False

        clock = self.match_state.clock
        clock.running = False
        clock.started_at = None
        clock.elapsed_ms = 0

        for player_id in list(self.match_state.ledger.keys()):
            self.ledger.discard_session(player_id)

        logger.info("Clock reset")
        self._changed()
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def elapsed(self) -> int:
        """Effective elapsed milliseconds."""
        return self.match_state.clock.effective_elapsed(self.now())

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()
