"""Match clock state for the Sideline Lineup application."""
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ClockState:
    """
    Global match clock.

    Attributes:
        running: Whether the clock is currently counting
        started_at: Epoch ms of the last start; set iff ``running``
        elapsed_ms: Time banked by previous runs
    """
    running: bool = False
    started_at: Optional[int] = None
    elapsed_ms: int = 0

    def effective_elapsed(self, now: int) -> int:
        """Banked time plus the current run, if any."""
        if not self.running or self.started_at is None:
            return self.elapsed_ms
        return self.elapsed_ms + max(0, now - self.started_at)

    def to_json(self) -> Dict[str, Any]:
        return {
            "running": self.running,
            "startedAt": self.started_at,
            "elapsedMs": self.elapsed_ms,
        }

    @staticmethod
    def from_json(data: Any) -> "ClockState":
        """
        Create a ClockState from its stored form.

        Anything unreadable yields a stopped, zeroed clock. A record that
        claims to be running without a start time is treated as stopped.
        """
        if not isinstance(data, dict):
            return ClockState()
        try:
            elapsed = max(0, int(data.get("elapsedMs") or 0))
        except (TypeError, ValueError):
            elapsed = 0
        started_at = data.get("startedAt")
        try:
            started_at = int(started_at) if started_at is not None else None
        except (TypeError, ValueError):
            started_at = None
        running = bool(data.get("running")) and started_at is not None
        return ClockState(
            running=running,
            started_at=started_at if running else None,
            elapsed_ms=elapsed,
        )
