"""
Row types for the saved-games tables.

These mirror the database columns and know nothing about the engine;
core.persistence.saves converts between them and a running GameEngine.
"""

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Mapping


class _Row:
    """Build a record from a sqlite3.Row (or any mapping) by column name."""

    @classmethod
    def from_row(cls, row: Mapping[str, Any]):
        keys = row.keys()
        return cls(**{f.name: row[f.name] for f in fields(cls) if f.name in keys})


@dataclass
class GameRecord(_Row):
    """A row of saved_games."""
    id: str
    name: str
    variant: str
    status: str = "waiting"
    current_player_index: int = 0
    turn_number: int = 0
    winner_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    finished_at: datetime | None = None


@dataclass
class PlayerRecord(_Row):
    """
    A row of saved_players.

    tile_id is whatever the column holds, which for old or hand-edited
    saves may be NULL, text, or an id that is not on the board.
    """
    id: str
    game_id: str
    name: str
    token: str
    seat: int
    tile_id: Any = None
    is_waiting: bool = False

    def __post_init__(self):
        self.is_waiting = bool(self.is_waiting)


@dataclass
class GameStateSnapshot(_Row):
    """A row of snapshots: the JSON of GameEngine.to_dict() at one save."""
    id: int | None
    game_id: str
    turn_number: int
    state_json: str
    taken_at: datetime | None = None


@dataclass
class GameSummary(_Row):
    """One line of a saved-games listing."""
    id: str
    name: str
    variant: str
    status: str
    player_count: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
