"""Per-player playing time records."""
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class SessionEntry:
    """
    Accumulated on-field time for one player.

    ``active_start_ms`` is set while the player is accruing time.
    """
    total_ms: int = 0
    active_start_ms: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.active_start_ms is not None

    def to_json(self) -> Dict[str, Any]:
        return {"totalMs": self.total_ms, "activeStartMs": self.active_start_ms}

    @staticmethod
    def from_json(data: Any) -> "SessionEntry":
        if not isinstance(data, dict):
            return SessionEntry()
        try:
            total = max(0, int(data.get("totalMs") or 0))
        except (TypeError, ValueError):
            total = 0
        start = data.get("activeStartMs")
        try:
            start = int(start) if start is not None else None
        except (TypeError, ValueError):
            start = None
        return SessionEntry(total_ms=total, active_start_ms=start)
