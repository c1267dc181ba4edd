"""Position to player mapping with a reverse index."""
from typing import Dict, Iterator, List, Optional, Tuple


class AssignmentTable:
    """
    Maps position labels to player ids, one position per player.

    A reverse index (player id -> position) is kept in step with the forward
    mapping so a player's slot is found without scanning. This class only
    maintains the two maps; session bookkeeping belongs to the services.
    """

    def __init__(self) -> None:
        self._by_position: Dict[str, str] = {}
        self._by_player: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._by_position)

    def __contains__(self, position: str) -> bool:
        return position in self._by_position

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(list(self._by_position.items()))

    def player_at(self, position: str) -> Optional[str]:
        return self._by_position.get(position)

    def position_of(self, player_id: str) -> Optional[str]:
        return self._by_player.get(player_id)

    def positions(self) -> List[str]:
        return list(self._by_position.keys())

    def player_ids(self) -> List[str]:
        return list(self._by_position.values())

    def put(self, position: str, player_id: str) -> None:
        """
        Write an entry, evicting whatever conflicts with it.

        Any previous holder of ``position`` and any previous position of
        ``player_id`` are removed from both maps.
        """
        self.remove(position)
        old_position = self._by_player.get(player_id)
        if old_position is not None:
            self.remove(old_position)
        self._by_position[position] = player_id
        self._by_player[player_id] = position

    def remove(self, position: str) -> Optional[str]:
        """Drop the entry for ``position``; returns the evicted player id."""
        player_id = self._by_position.pop(position, None)
        if player_id is not None and self._by_player.get(player_id) == position:
            del self._by_player[player_id]
        return player_id

    def snapshot(self) -> Dict[str, str]:
        return dict(self._by_position)

    def to_json(self) -> Dict[str, str]:
        return self.snapshot()

    @staticmethod
    def from_mapping(mapping: Dict[str, str]) -> "AssignmentTable":
        """
        Build a table from ``position -> player_id`` pairs.

        Later pairs win when a player appears twice, so the result always
        satisfies the one-position-per-player rule.
        """
        table = AssignmentTable()
        for position, player_id in mapping.items():
            if player_id:
                table.put(str(position), str(player_id))
        return table
