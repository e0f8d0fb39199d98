"""
Player state management.
"""
from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING
import uuid

from .errors import PlayerNotPlacedError

if TYPE_CHECKING:
    from .board import Board, Tile


@dataclass
class Player:
    """Represents a player in the game."""

    name: str
    token: str = "default"
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    # Owning game, by id
    game_id: Optional[str] = None

    # None until the player is placed on the board
    tile_id: Optional[int] = None

    # Skip the next turn instead of rolling
    waiting: bool = False

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Player name cannot be empty")

    @property
    def is_placed(self) -> bool:
        return self.tile_id is not None

    def place_on_tile(self, tile: "Tile") -> None:
        """Put the player on a tile, wherever they were before."""
        if tile is None:
            raise ValueError("Cannot place a player on a missing tile")
        self.tile_id = tile.tile_id

    def move(self, board: "Board", steps: int) -> "Tile":
        """
        Move player forward along the path.

        Args:
            board: Board the player is on
            steps: Number of tiles to advance; clamps at the end of the path

        Returns:
            The tile the player ends up on
        """
        if not self.is_placed:
            raise PlayerNotPlacedError(f"{self.name} has not been placed on the board")

        destination = board.walk(self.tile_id, steps)
        self.place_on_tile(destination)
        return destination

    def set_wait_turn(self, waiting: bool) -> None:
        self.waiting = waiting

    def will_wait_turn(self) -> bool:
        return self.waiting

    def to_dict(self) -> dict:
        """Convert player to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "token": self.token,
            "game_id": self.game_id,
            "tile_id": self.tile_id,
            "waiting": self.waiting,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Player":
        """
        Create player from dictionary.

        The tile is not restored here; the engine places the player so a
        bad saved tile id can fall back to the start tile.
        """
        return cls(
            name=data["name"],
            token=data.get("token", "default"),
            id=data["id"],
            game_id=data.get("game_id"),
            waiting=bool(data.get("waiting", False)),
        )
