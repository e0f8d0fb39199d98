"""
Persistence layer for the ladder game.

Provides SQLite-based storage for saved games and JSON board definition files.
"""

from core.persistence.database import (
    Database,
    get_database,
    init_database
)
from core.persistence.models import (
    GameRecord,
    PlayerRecord,
    GameStateSnapshot,
    GameSummary
)
from core.persistence.repository import GameRepository
from core.persistence.saves import save_game, load_game
from core.persistence.board_file import (
    board_to_json,
    read_board_file,
    write_board_file
)
from core.persistence.errors import (
    PersistenceError,
    BoardFileError,
    DataFormatError,
    GameNotFoundError
)


__all__ = [
    # Database
    "Database",
    "get_database",
    "init_database",

    # Models
    "GameRecord",
    "PlayerRecord",
    "GameStateSnapshot",
    "GameSummary",

    # Repository
    "GameRepository",

    # Save/load
    "save_game",
    "load_game",

    # Board files
    "board_to_json",
    "read_board_file",
    "write_board_file",

    # Errors
    "PersistenceError",
    "BoardFileError",
    "DataFormatError",
    "GameNotFoundError"
]
