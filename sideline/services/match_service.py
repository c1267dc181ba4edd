"""
Match service: the single entry point the user interfaces talk to.

A MatchService owns one MatchState, the services that mutate it, and the
gateway it is flushed to. Every successful mutation is written through to
storage before the call returns; rejected calls write nothing. If the write
fails, memory and storage are both put back to the state before the call.

Calls are serialized on an internal lock, so one service can be shared by
the threads of a web server.
"""
import copy
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, TypeVar

from ..models import MatchState
from ..models.formation import coords_for, formation_keys
from ..utils import LABEL_SEPARATOR, PLACEHOLDER, fmt_mmss, now_ms
from .clock_service import ClockService, Confirmation
from .consistency import ValidationResult, check_match_state
from .errors import LineupError, PersistenceError
from .lineup_service import LineupService
from .persistence_service import MemoryStore, PersistenceGateway
from .session_ledger import SessionLedger

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MatchService:
    """
    Facade over the clock, ledger and lineup services.

    Create one per match (or per test) and call ``load()`` before use.
    """

    def __init__(
        self,
        gateway: Optional[PersistenceGateway] = None,
        now: Callable[[], int] = now_ms,
    ):
        """
        Initialize the service.

        Args:
            gateway: Storage to read from and write through to; defaults to
                     an in-memory store
            now: Source of epoch milliseconds
        """
        self.gateway = gateway if gateway is not None else MemoryStore()
        self.now = now
        self.match_state = MatchState()
        self._lock = threading.RLock()
        self._dirty = False
        self._wire()

    def _wire(self) -> None:
        """(Re)build the services around the current state object."""
        self.ledger = SessionLedger(self.match_state, now=self.now)
        self.clock = ClockService(
            self.match_state, self.ledger, now=self.now, on_change=self._mark_dirty
        )
        self.lineup = LineupService(
            self.match_state, self.ledger, on_change=self._mark_dirty
        )

    def _mark_dirty(self) -> None:
        self._dirty = True

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def load(self) -> "MatchService":
        """
        Replace the in-memory state with what the gateway holds.

        Missing or corrupt keys fall back to defaults. Sessions are then
        reconciled with the clock: a stopped clock has no open sessions, and
        a running one has exactly the on-field players accruing.
        """
        with self._lock:
            self.match_state = MatchState.from_storage(self.gateway.load)
            self._wire()
            if self._reconcile_sessions():
                try:
                    self.save()
                except Exception:
                    # Rewritten with the next successful change
                    logger.exception("Could not write back the repaired match")

            result = self.invariant_violations()
            if not result.is_valid:
                logger.warning("Loaded state failed checks: %s", "; ".join(result.errors))
            logger.info(
                "Loaded match: %d players, formation %s, clock %s",
                len(self.match_state.roster),
                self.match_state.formation,
                "running" if self.match_state.clock.running else "stopped",
            )
        return self

    def save(self) -> None:
        """Flush every key to the gateway."""
        with self._lock:
            for key, value in self.match_state.to_storage().items():
                self.gateway.save(key, value)

    def _apply(self, action: Callable[[], T]) -> T:
        """
        Run one mutation and write it through.

        Raises:
            LineupError: The operation was refused; nothing changed
            PersistenceError: The change could not be saved and was undone
        """
        with self._lock:
            before = self.match_state.to_storage()
            self._dirty = False
            try:
                result = action()
            except LineupError:
                raise
            except Exception:
                self._restore(before)
                raise
            if not self._dirty:
                return result
            self._dirty = False
            try:
                self.save()
            except Exception as e:
                logger.exception("Save failed, rolling back")
                self._restore(before)
                self._rewrite(before)
                raise PersistenceError(f"Could not save the change: {e}") from e
            return result

    def _restore(self, documents: Dict[str, Any]) -> None:
        def load(key: str, fallback: Any) -> Any:
            return copy.deepcopy(documents.get(key, fallback))

        self.match_state = MatchState.from_storage(load)
        self._wire()

    def _rewrite(self, documents: Dict[str, Any]) -> None:
        # Undo keys that were written before the failure
        for key, value in documents.items():
            try:
                self.gateway.save(key, value)
            except Exception:
                logger.exception("Could not restore %s", key)

    def _reconcile_sessions(self) -> bool:
        state = self.match_state
        on_field = set(state.assignments.player_ids())
        changed = False

        for player_id, entry in state.ledger.items():
            if entry.is_open and not (state.clock.running and player_id in on_field):
                logger.warning("Dropping stray session for %s", player_id)
                self.ledger.discard_session(player_id)
                changed = True

        if state.clock.running:
            for player_id in on_field:
                if not self.ledger.ensure(player_id).is_open:
                    logger.warning("Reopening missing session for %s", player_id)
                    self.ledger.open_session(player_id)
                    changed = True
        return changed

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def assign(self, position: str, player_id: str) -> Dict[str, str]:
        return self._apply(lambda: self.lineup.assign(position, player_id))

    def clear(self, position: str) -> None:
        self._apply(lambda: self.lineup.clear(position))

    def unassign(self, player_id: str) -> None:
        self._apply(lambda: self.lineup.unassign(player_id))

    def set_attendance(self, player_id: str, present: bool) -> None:
        self._apply(lambda: self.lineup.set_attendance(player_id, present))

    def change_formation(self, key: str) -> None:
        self._apply(lambda: self.lineup.change_formation(key))

    def set_orientation(self, key: str) -> None:
        self._apply(lambda: self.lineup.set_orientation(key))

    def start(self) -> None:
        self._apply(lambda: self.clock.start())

    def pause(self) -> None:
        self._apply(lambda: self.clock.pause())

    def reset(self, confirm: Confirmation = False) -> bool:
        return self._apply(lambda: self.clock.reset(confirm))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def elapsed(self) -> int:
        with self._lock:
            return self.clock.elapsed()

    def effective_time(self, player_id: str) -> int:
        with self._lock:
            return self.ledger.effective_time(player_id)

    def invariant_violations(self) -> ValidationResult:
        with self._lock:
            return check_match_state(self.match_state)

    def snapshot(self) -> Dict[str, Any]:
        """
        Read-only view of everything a UI renders.

        Safe to call at any cadence; it never changes state. Positions held
        by a player missing from the roster render as the placeholder.
        """
        with self._lock:
            return self._build_snapshot()

    def _build_snapshot(self) -> Dict[str, Any]:
        state = self.match_state
        elapsed = self.elapsed()

        players: List[Dict[str, Any]] = []
        for player in state.roster:
            ms = self._time_of(player.id)
            players.append({
                "id": player.id,
                "name": player.name,
                "number": player.number,
                "label": player.label,
                "present": state.is_present(player.id),
                "position": state.assignments.position_of(player.id),
                "effective_ms": ms,
                "display": fmt_mmss(ms),
            })

        lineup: List[Dict[str, Any]] = []
        for position in state.valid_positions():
            player_id = state.assignments.player_at(position)
            player = state.player(player_id)
            x, y = coords_for(state.formation, position, state.orientation)
            entry: Dict[str, Any] = {
                "position": position,
                "player_id": player_id,
                "label": PLACEHOLDER,
                "effective_ms": None,
                "x": x,
                "y": y,
            }
            if player is not None:
                ms = self._time_of(player.id)
                entry["label"] = f"{player.label} {LABEL_SEPARATOR} {fmt_mmss(ms)}"
                entry["effective_ms"] = ms
            lineup.append(entry)

        return {
            "clock": {
                "running": state.clock.running,
                "elapsed_ms": elapsed,
                "display": fmt_mmss(elapsed),
            },
            "formation": state.formation,
            "orientation": state.orientation,
            "formations": formation_keys(),
            "players": players,
            "present": [p.id for p in state.present_players()],
            "lineup": lineup,
        }

    def _time_of(self, player_id: str) -> int:
        # Read path: no lazy ledger entries
        entry = self.match_state.ledger.get(player_id)
        if entry is None:
            return 0
        return self.ledger.effective_time(player_id)

