"""
Formation and orientation registry for the Sideline Lineup application.

Formations are static tables: an ordered list of position labels and a base
coordinate for each label on a 0-100 square with the team attacking toward
the top ("up"). Orientation is applied when coordinates are read and never
changes the stored tables.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..utils import DEFAULT_FORMATION, DEFAULT_ORIENTATION

Point = Tuple[float, float]


class Orientation(Enum):
    """Direction the team attacks on screen."""
    UP = "up"
    RIGHT = "right"
    DOWN = "down"
    LEFT = "left"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional[Orientation]:
        """Return the matching orientation, or None for unknown values."""
        try:
            return cls(value)
        except ValueError:
            return None


FORMATIONS: Dict[str, Tuple[str, ...]] = {
    "433": ("GK", "RB", "RCB", "LCB", "LB", "RM", "CM", "LM", "RW", "ST", "LW"),
    "442": ("GK", "RB", "RCB", "LCB", "LB", "RM", "RCM", "LCM", "LM", "RST", "LST"),
    "352": ("GK", "RCB", "CB", "LCB", "RWB", "RDM", "CAM", "LDM", "LWB", "RST", "LST"),
}

FIELD_COORDS_UP: Dict[str, Dict[str, Point]] = {
    "433": {
        "GK": (50, 92),
        "RB": (78, 78), "RCB": (62, 74), "LCB": (38, 74), "LB": (22, 78),
        "RM": (72, 56), "CM": (50, 50), "LM": (28, 56),
        "RW": (70, 30), "ST": (50, 24), "LW": (30, 30),
    },
    "442": {
        "GK": (50, 92),
        "RB": (78, 78), "RCB": (62, 74), "LCB": (38, 74), "LB": (22, 78),
        "RM": (72, 56), "RCM": (58, 50), "LCM": (42, 50), "LM": (28, 56),
        "RST": (58, 28), "LST": (42, 28),
    },
    "352": {
        "GK": (50, 92),
        "RCB": (62, 80), "CB": (50, 82), "LCB": (38, 80),
        "RWB": (76, 60), "RDM": (58, 52), "CAM": (50, 40), "LDM": (42, 52), "LWB": (24, 60),
        "RST": (56, 28), "LST": (44, 28),
    },
}

FIELD_CENTER: Point = (50, 50)


@dataclass(frozen=True)
class FieldSpot:
    """A position label placed on the field for a given orientation."""
    position: str
    x: float
    y: float

    def to_dict(self) -> Dict:
        return {"position": self.position, "x": self.x, "y": self.y}


def formation_keys() -> List[str]:
    """All known formation keys in display order."""
    return list(FORMATIONS.keys())


def resolve_formation(key: Optional[str]) -> str:
    """Return ``key`` if it is a known formation, else the default."""
    return key if key in FORMATIONS else DEFAULT_FORMATION


def resolve_orientation(key: Optional[str]) -> str:
    """Return ``key`` if it is a known orientation, else the default."""
    orientation = Orientation.parse(key)
    return orientation.value if orientation else DEFAULT_ORIENTATION


def positions_for(key: Optional[str]) -> Tuple[str, ...]:
    """Ordered position labels of a formation; unknown keys use the default."""
    return FORMATIONS[resolve_formation(key)]


def rotate_from_up(point: Point, orientation: Optional[str]) -> Point:
    """
    Rotate a point given for an upward attack into ``orientation``.

    Unknown orientations leave the point unchanged.
    """
    x, y = point
    parsed = Orientation.parse(orientation)
    if parsed is Orientation.RIGHT:
        return (y, 100 - x)
    if parsed is Orientation.DOWN:
        return (100 - x, 100 - y)
    if parsed is Orientation.LEFT:
        return (100 - y, x)
    return (x, y)


def coords_for(key: Optional[str], position: str, orientation: Optional[str]) -> Point:
    """Field coordinate of ``position`` in formation ``key`` as displayed."""
    table = FIELD_COORDS_UP.get(key) or FIELD_COORDS_UP[DEFAULT_FORMATION]
    return rotate_from_up(table.get(position, FIELD_CENTER), orientation)


def field_layout(key: Optional[str], orientation: Optional[str]) -> List[FieldSpot]:
    """Every position of a formation with its rotated coordinate."""
    resolved = resolve_formation(key)
    spots = []
    for position in FORMATIONS[resolved]:
        x, y = coords_for(resolved, position, orientation)
        spots.append(FieldSpot(position=position, x=x, y=y))
    return spots
