"""
SQLite storage for saved ladder games.

One Database object per file. Connections are opened lazily, one per thread,
and every `transaction()` block commits on success and rolls back on error.
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from core.config import settings


logger = logging.getLogger(__name__)

# Bump when SCHEMA_SQL changes shape
SCHEMA_VERSION = 1


SCHEMA_SQL = """
-- One row per saved game
CREATE TABLE IF NOT EXISTS saved_games (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    variant TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'waiting',
    current_player_index INTEGER NOT NULL DEFAULT 0,
    turn_number INTEGER NOT NULL DEFAULT 0,
    winner_id TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    finished_at TIMESTAMP
);

-- Seats in a saved game; tile_id has no declared type and is validated on load
CREATE TABLE IF NOT EXISTS saved_players (
    id TEXT PRIMARY KEY,
    game_id TEXT NOT NULL REFERENCES saved_games(id) ON DELETE CASCADE,
    seat INTEGER NOT NULL,
    name TEXT NOT NULL,
    token TEXT NOT NULL,
    tile_id,
    is_waiting INTEGER NOT NULL DEFAULT 0
);

-- GameEngine.to_dict() taken at each save
CREATE TABLE IF NOT EXISTS snapshots (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    game_id TEXT NOT NULL REFERENCES saved_games(id) ON DELETE CASCADE,
    turn_number INTEGER NOT NULL,
    state_json TEXT NOT NULL,
    taken_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS ix_saved_games_status ON saved_games(status);
CREATE INDEX IF NOT EXISTS ix_saved_players_game ON saved_players(game_id, seat);
CREATE INDEX IF NOT EXISTS ix_snapshots_game ON snapshots(game_id, turn_number);
"""


class Database:
    """A saved-games database file."""

    def __init__(self, db_path: str | Path | None = None):
        self.path = Path(db_path or settings.DATABASE_PATH)
        self._local = threading.local()
        self._schema_lock = threading.Lock()
        self._schema_ready = False

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._prepare_schema()

    @property
    def db_path(self) -> str:
        return str(self.path)

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=30.0, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute("PRAGMA journal_mode = WAL")
        return conn

    @property
    def connection(self) -> sqlite3.Connection:
        """This thread's connection, opened on first use."""
        conn = getattr(self._local, "connection", None)
        if conn is None:
            conn = self._local.connection = self._open()
        return conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Run statements as one unit of work.

        Usage:
            with db.transaction() as conn:
                conn.execute("UPDATE ...")
        """
        conn = self.connection
        try:
            yield conn
        except Exception:
            conn.rollback()
            raise
        conn.commit()

    def _prepare_schema(self) -> None:
        with self._schema_lock:
            if self._schema_ready:
                return
            with self.transaction() as conn:
                version = conn.execute("PRAGMA user_version").fetchone()[0]
                if version > SCHEMA_VERSION:
                    logger.warning(
                        f"{self.path} has schema version {version}, "
                        f"newer than {SCHEMA_VERSION}"
                    )
                conn.executescript(SCHEMA_SQL)
                conn.execute(f"PRAGMA user_version = {max(version, SCHEMA_VERSION)}")
            self._schema_ready = True

    def table_names(self) -> list[str]:
        rows = self.connection.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%'"
        ).fetchall()
        return [row["name"] for row in rows]

    def close_connection(self) -> None:
        """Close this thread's connection, if one is open."""
        conn = getattr(self._local, "connection", None)
        if conn is not None:
            conn.close()
            self._local.connection = None

    def reset_database(self) -> None:
        """Delete every saved game by dropping and recreating the tables."""
        with self.transaction() as conn:
            for table in self.table_names():
                conn.execute(f"DROP TABLE IF EXISTS {table}")
            conn.executescript(SCHEMA_SQL)
        logger.warning(f"Saved games in {self.path} were reset")


_default_db: Database | None = None


def get_database() -> Database:
    """The process-wide database at settings.DATABASE_PATH."""
    global _default_db
    if _default_db is None:
        _default_db = Database()
    return _default_db


def init_database(db_path: str | Path | None = None) -> Database:
    """Open a database and make it the process-wide default."""
    global _default_db
    _default_db = Database(db_path)
    return _default_db
