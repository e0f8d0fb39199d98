"""
Engine configuration loaded from environment variables.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

from shared.constants import CLASSIC_VARIANT, MIN_PLAYERS, MAX_PLAYERS

load_dotenv()


def _optional_int(value: str | None) -> int | None:
    if value is None or value.strip() == "":
        return None
    return int(value)


class Config:
    """Engine configuration."""

    # Database
    DATABASE_PATH: Path = Path(os.getenv("DATABASE_PATH", "./data/ladder_game.db"))

    # Board definition files (JSON)
    BOARD_FILES_DIR: Path = Path(os.getenv("BOARD_FILES_DIR", "./data/boards"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Game settings
    DEFAULT_VARIANT: str = os.getenv("DEFAULT_VARIANT", CLASSIC_VARIANT)
    MIN_PLAYERS: int = int(os.getenv("MIN_PLAYERS", str(MIN_PLAYERS)))
    MAX_PLAYERS: int = int(os.getenv("MAX_PLAYERS", str(MAX_PLAYERS)))
    DICE_SEED: int | None = _optional_int(os.getenv("DICE_SEED"))

    @classmethod
    def ensure_directories(cls) -> None:
        """Create necessary directories if they don't exist."""
        cls.DATABASE_PATH.parent.mkdir(parents=True, exist_ok=True)
        cls.BOARD_FILES_DIR.mkdir(parents=True, exist_ok=True)


config = Config()
settings = config
