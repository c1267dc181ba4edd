"""
MatchState model for the Sideline Lineup application.

This module contains the MatchState aggregate which bundles everything a
match needs: roster, attendance, lineup, playing time and the clock. Each
part maps to its own storage key so it can be loaded and saved independently.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .assignment_table import AssignmentTable
from .clock import ClockState
from .formation import positions_for, resolve_formation, resolve_orientation
from .player import Player
from .session import SessionEntry
from ..utils import DEFAULT_FORMATION, DEFAULT_ORIENTATION, ROSTER_SEED, STORAGE_KEYS

logger = logging.getLogger(__name__)

Loader = Callable[[str, Any], Any]


@dataclass
class MatchState:
    """
    Represents the complete state of a match.

    Attributes:
        roster: Players in display order
        attendance: Player id -> present flag
        assignments: Position label -> player id for the current formation
        formation: Active formation key
        orientation: Attack direction used for display
        ledger: Player id -> accumulated playing time
        clock: Global match clock
    """
    roster: List[Player] = field(default_factory=list)
    attendance: Dict[str, bool] = field(default_factory=dict)
    assignments: AssignmentTable = field(default_factory=AssignmentTable)
    formation: str = DEFAULT_FORMATION
    orientation: str = DEFAULT_ORIENTATION
    ledger: Dict[str, SessionEntry] = field(default_factory=dict)
    clock: ClockState = field(default_factory=ClockState)

    def player(self, player_id: Optional[str]) -> Optional[Player]:
        """Look up a roster entry; None when the id is unknown."""
        if player_id is None:
            return None
        return next((p for p in self.roster if p.id == player_id), None)

    def is_present(self, player_id: str) -> bool:
        return bool(self.attendance.get(player_id))

    def present_players(self) -> List[Player]:
        return [p for p in self.roster if self.is_present(p.id)]

    def valid_positions(self) -> tuple:
        return positions_for(self.formation)

    def to_storage(self) -> Dict[str, Any]:
        """
        Convert to the per-key documents written to storage.

        Returns:
            Dictionary of storage key -> JSON-serializable value
        """
        return {
            STORAGE_KEYS["roster"]: [p.to_dict() for p in self.roster],
            STORAGE_KEYS["attendance"]: dict(self.attendance),
            STORAGE_KEYS["assignments"]: self.assignments.to_json(),
            STORAGE_KEYS["formation"]: self.formation,
            STORAGE_KEYS["orientation"]: self.orientation,
            STORAGE_KEYS["minutes"]: {pid: e.to_json() for pid, e in self.ledger.items()},
            STORAGE_KEYS["clock"]: self.clock.to_json(),
        }

    @staticmethod
    def from_storage(load: Loader) -> "MatchState":
        """
        Build a MatchState from a ``load(key, fallback)`` callable.

        Every key is read independently; anything with the wrong shape is
        replaced by that key's default. Assignments are filtered down to the
        current formation and to present players. Session reconciliation with
        the clock is left to the service layer.

        Args:
            load: Gateway read function

        Returns:
            New MatchState instance
        """
        ms = MatchState()

        roster_data = load(STORAGE_KEYS["roster"], ROSTER_SEED)
        ms.roster = _parse_roster(roster_data)

        attendance = load(STORAGE_KEYS["attendance"], {})
        if isinstance(attendance, dict):
            ms.attendance = {str(k): bool(v) for k, v in attendance.items()}
        else:
            logger.warning("Ignoring malformed attendance record")

        formation = load(STORAGE_KEYS["formation"], DEFAULT_FORMATION)
        ms.formation = resolve_formation(formation if isinstance(formation, str) else None)

        orientation = load(STORAGE_KEYS["orientation"], DEFAULT_ORIENTATION)
        ms.orientation = resolve_orientation(orientation if isinstance(orientation, str) else None)

        minutes = load(STORAGE_KEYS["minutes"], {})
        if isinstance(minutes, dict):
            ms.ledger = {str(pid): SessionEntry.from_json(v) for pid, v in minutes.items()}
        else:
            logger.warning("Ignoring malformed minutes record")

        ms.clock = ClockState.from_json(load(STORAGE_KEYS["clock"], None))

        assignments = load(STORAGE_KEYS["assignments"], {})
        if not isinstance(assignments, dict):
            logger.warning("Ignoring malformed assignments record")
            assignments = {}
        valid = set(ms.valid_positions())
        kept = {}
        for position, player_id in assignments.items():
            if position not in valid or not isinstance(player_id, str):
                logger.warning("Dropping stale assignment %s -> %r", position, player_id)
                continue
            if not ms.is_present(player_id):
                logger.warning("Dropping assignment of absent player %s", player_id)
                continue
            kept[position] = player_id
        ms.assignments = AssignmentTable.from_mapping(kept)
        return ms


def _parse_roster(data: Any) -> List[Player]:
    if not isinstance(data, list):
        logger.warning("Roster record is not a list; using seed roster")
        data = ROSTER_SEED
    roster: List[Player] = []
    seen = set()
    for record in data:
        if not isinstance(record, dict):
            continue
        try:
            player = Player.from_dict(record)
        except ValueError:
            logger.warning("Skipping roster record without id")
            continue
        if player.id in seen:
            continue
        seen.add(player.id)
        roster.append(player)
    return roster
