"""
Exceptions raised by the game engine.
"""


class GameEngineError(Exception):
    """Base class for all engine errors."""


class TileConfigurationError(GameEngineError):
    """Board data is corrupt, e.g. a reroute points at a tile that does not exist."""

    def __init__(self, message: str, tile_id: int | None = None):
        super().__init__(message)
        self.tile_id = tile_id


class BoardNotBuiltError(GameEngineError):
    """The board was accessed before it was created."""


class PlayerNotPlacedError(GameEngineError):
    """A player was moved before being placed on the board."""


class GameNotStartedError(GameEngineError):
    """A turn was requested before the game started."""


class GameOverError(GameEngineError):
    """A turn was requested after a winner was recorded."""


class GameFaultedError(GameEngineError):
    """A turn was requested after a board error stopped the game."""
