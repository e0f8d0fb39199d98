"""
Board representation: tiles and the path that links them.
"""
from dataclasses import dataclass
from typing import Dict, Optional

from shared.constants import START_TILE_ID

from .actions import TileAction, Reroute, action_to_dict, action_from_dict
from .errors import TileConfigurationError


@dataclass
class Tile:
    """A position on the path."""

    tile_id: int
    next_tile_id: Optional[int] = None
    action: Optional[TileAction] = None

    def __post_init__(self):
        if self.tile_id < 1:
            raise ValueError(f"Tile id must be 1 or greater, got {self.tile_id}")

    @property
    def has_action(self) -> bool:
        return self.action is not None

    @property
    def is_last(self) -> bool:
        """Check if the path ends here."""
        return self.next_tile_id is None

    def to_dict(self) -> dict:
        data = {"id": self.tile_id, "next": self.next_tile_id}
        if self.action is not None:
            data["action"] = action_to_dict(self.action)
        return data


class Board:
    """Owns every tile of a game, indexed by tile id."""

    def __init__(self, winning_tile_id: Optional[int] = None):
        self.tiles: Dict[int, Tile] = {}
        self._winning_tile_id = winning_tile_id

    @classmethod
    def linear(cls, length: int, winning_tile_id: Optional[int] = None) -> "Board":
        """
        Build a single chain of tiles 1..length.

        Args:
            length: Number of tiles on the path
            winning_tile_id: Tile that ends the game (defaults to the last tile)
        """
        if length < 1:
            raise ValueError(f"Board needs at least one tile, got {length}")

        board = cls(winning_tile_id=winning_tile_id or length)
        for tile_id in range(START_TILE_ID, length + 1):
            board.add_tile(Tile(tile_id))
        for tile_id in range(START_TILE_ID, length):
            board.link(tile_id, tile_id + 1)
        return board

    @property
    def winning_tile_id(self) -> int:
        """Tile that ends the game; the highest tile id if not set explicitly."""
        if self._winning_tile_id is not None:
            return self._winning_tile_id
        return max(self.tiles) if self.tiles else START_TILE_ID

    @property
    def start_tile(self) -> Tile:
        tile = self.get_tile(START_TILE_ID)
        if tile is None:
            raise TileConfigurationError("Board has no start tile", tile_id=START_TILE_ID)
        return tile

    def __len__(self) -> int:
        return len(self.tiles)

    def __contains__(self, tile_id: int) -> bool:
        return tile_id in self.tiles

    def add_tile(self, tile: Tile) -> None:
        """
        Register a tile under its id.

        Raises:
            ValueError: A tile with the same id is already on the board
        """
        if tile.tile_id in self.tiles:
            raise ValueError(f"Tile {tile.tile_id} is already on the board")
        self.tiles[tile.tile_id] = tile

    def get_tile(self, tile_id: int) -> Optional[Tile]:
        """Get the tile with this id, or None if there is none."""
        return self.tiles.get(tile_id)

    def link(self, tile_id: int, next_tile_id: int) -> None:
        """Set the forward link of a tile. Each tile is linked at most once."""
        tile = self._require_tile(tile_id)
        self._require_tile(next_tile_id)
        if tile.next_tile_id is not None:
            raise ValueError(
                f"Tile {tile_id} is already linked to {tile.next_tile_id}"
            )
        tile.next_tile_id = next_tile_id

    def set_action(self, tile_id: int, action: TileAction) -> None:
        """Attach an action to a tile, replacing any earlier one."""
        self._require_tile(tile_id).action = action

    def walk(self, from_tile_id: int, steps: int) -> Tile:
        """
        Follow the path forward from a tile.

        Movement stops at the last reachable tile when the path runs out
        before `steps` is used up.

        Returns:
            Tile reached after at most `steps` links
        """
        tile = self._require_tile(from_tile_id)
        for _ in range(max(steps, 0)):
            if tile.next_tile_id is None:
                break
            tile = self._require_tile(tile.next_tile_id)
        return tile

    def action_tiles(self) -> list[Tile]:
        """All tiles carrying an action, in id order."""
        return [
            self.tiles[tile_id] for tile_id in sorted(self.tiles)
            if self.tiles[tile_id].has_action
        ]

    def validate(self) -> None:
        """
        Check that the start and winning tiles exist and every reroute lands on the board.

        Raises:
            TileConfigurationError: Naming the first tile that breaks the layout
        """
        if START_TILE_ID not in self.tiles:
            raise TileConfigurationError("Board has no start tile", tile_id=START_TILE_ID)
        if self.winning_tile_id not in self.tiles:
            raise TileConfigurationError(
                f"Winning tile {self.winning_tile_id} is not on the board",
                tile_id=self.winning_tile_id,
            )
        for tile in self.action_tiles():
            if isinstance(tile.action, Reroute) and tile.action.destination_tile_id not in self.tiles:
                raise TileConfigurationError(
                    f"Tile {tile.tile_id} reroutes to missing tile {tile.action.destination_tile_id}",
                    tile_id=tile.action.destination_tile_id,
                )

    def _require_tile(self, tile_id: int) -> Tile:
        tile = self.tiles.get(tile_id)
        if tile is None:
            raise TileConfigurationError(f"Tile {tile_id} does not exist", tile_id=tile_id)
        return tile

    def to_dict(self) -> dict:
        """Convert board to dictionary for serialization."""
        return {
            "winning_tile_id": self.winning_tile_id,
            "tiles": [self.tiles[tile_id].to_dict() for tile_id in sorted(self.tiles)],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Board":
        """
        Create board from dictionary.

        Raises:
            TileConfigurationError: The tiles break the board layout, see validate()
        """
        board = cls(winning_tile_id=data.get("winning_tile_id"))

        tiles = data.get("tiles", [])
        for tile_data in tiles:
            board.add_tile(Tile(int(tile_data["id"])))

        for tile_data in tiles:
            tile_id = int(tile_data["id"])
            if tile_data.get("next") is not None:
                board.link(tile_id, int(tile_data["next"]))
            if tile_data.get("action"):
                board.set_action(tile_id, action_from_dict(tile_data["action"]))

        board.validate()
        return board
