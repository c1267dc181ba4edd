"""Session ledger: per-player playing time bookkeeping."""
import logging
from typing import Callable, Optional

from ..models import MatchState, SessionEntry
from ..utils import now_ms

logger = logging.getLogger(__name__)


class SessionLedger:
    """
    Tracks how long each player has been on the field while the clock ran.

    The ledger never opens or closes sessions by itself. The clock and lineup
    services call it at every transition that affects who is accruing time.
    """

    def __init__(self, match_state: MatchState, now: Callable[[], int] = now_ms):
        self.match_state = match_state
        self.now = now

    def ensure(self, player_id: str) -> SessionEntry:
        """Return the player's entry, creating a zeroed one if absent."""
        entry = self.match_state.ledger.get(player_id)
        if entry is None:
            entry = SessionEntry()
            self.match_state.ledger[player_id] = entry
        return entry

    def open_session(self, player_id: Optional[str]) -> None:
        """Start accruing time for a player if the clock runs. Idempotent."""
        if not player_id:
            return
        entry = self.ensure(player_id)
        if self.match_state.clock.running and entry.active_start_ms is None:
            entry.active_start_ms = self.now()
            logger.debug("Session opened for %s", player_id)

    def close_session(self, player_id: Optional[str]) -> None:
        """Bank the running session of a player, if any."""
        if not player_id:
            return
        entry = self.ensure(player_id)
        started = entry.active_start_ms
        if started is not None:
            entry.total_ms += max(0, self.now() - started)
            entry.active_start_ms = None
            logger.debug("Session closed for %s (total %d ms)", player_id, entry.total_ms)

    def discard_session(self, player_id: str) -> None:
        """Drop a running session without crediting it."""
        entry = self.match_state.ledger.get(player_id)
        if entry is not None:
            entry.active_start_ms = None

    def effective_time(self, player_id: str) -> int:
        """Banked time plus the running session while the clock runs."""
        entry = self.ensure(player_id)
        started = entry.active_start_ms
        extra = 0
        if started is not None and self.match_state.clock.running:
            extra = max(0, self.now() - started)
        return entry.total_ms + extra
