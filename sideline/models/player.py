"""
Player model for the Sideline Lineup application.

Players are identified by ``id``; name and number are display data only.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Player:
    """A roster entry. Immutable for the lifetime of a match."""
    id: str
    name: str
    number: Optional[int] = None

    @property
    def label(self) -> str:
        """Number and name as shown on the lineup, e.g. ``"9 Ethan"``."""
        number = "" if self.number is None else str(self.number)
        return f"{number} {self.name}".strip()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"id": self.id, "name": self.name, "number": self.number}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        """
        Create from dictionary for JSON deserialization.

        Raises:
            ValueError: If the record has no usable id
        """
        pid = data.get("id")
        if pid is None or str(pid) == "":
            raise ValueError(f"Player record without id: {data!r}")
        number = data.get("number")
        if number is not None:
            try:
                number = int(number)
            except (TypeError, ValueError):
                number = None
        return cls(id=str(pid), name=str(data.get("name") or ""), number=number)
