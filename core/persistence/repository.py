"""
Queries against the saved-games database.
"""

import json
import logging
from typing import Any

from core.persistence.database import Database, get_database
from core.persistence.models import (
    GameRecord,
    PlayerRecord,
    GameStateSnapshot,
    GameSummary
)


logger = logging.getLogger(__name__)

# Snapshots kept per game after each save
SNAPSHOTS_TO_KEEP = 10


class GameRepository:
    """
    Reads and writes saved games.

    A save is written by save_full_game() in one transaction: the game row,
    one row per seat, and a JSON snapshot. Rows are upserted, so saving the
    same game again updates it in place.
    """

    def __init__(self, database: Database | None = None):
        self.db = database or get_database()

    # =========================================================================
    # Games
    # =========================================================================

    def get_game(self, game_id: str) -> GameRecord | None:
        row = self.db.connection.execute(
            "SELECT * FROM saved_games WHERE id = ?", (game_id,)
        ).fetchone()
        return GameRecord.from_row(row) if row else None

    def delete_game(self, game_id: str) -> bool:
        """Delete a saved game with its seats and snapshots."""
        with self.db.transaction() as conn:
            deleted = conn.execute(
                "DELETE FROM saved_games WHERE id = ?", (game_id,)
            ).rowcount > 0
        if deleted:
            logger.info(f"Deleted saved game {game_id}")
        return deleted

    def list_games(
        self,
        status: str | None = None,
        limit: int = 50,
        offset: int = 0
    ) -> list[GameSummary]:
        """Saved games, most recently saved first."""
        where, params = ("WHERE g.status = ?", [status]) if status else ("", [])
        rows = self.db.connection.execute(
            f"""
            SELECT g.id, g.name, g.variant, g.status, g.created_at, g.updated_at,
                   (SELECT COUNT(*) FROM saved_players p WHERE p.game_id = g.id)
                       AS player_count
            FROM saved_games g
            {where}
            ORDER BY g.updated_at DESC, g.rowid DESC
            LIMIT ? OFFSET ?
            """,
            (*params, limit, offset)
        ).fetchall()
        return [GameSummary.from_row(row) for row in rows]

    # =========================================================================
    # Seats
    # =========================================================================

    def get_players_for_game(self, game_id: str) -> list[PlayerRecord]:
        """Seats of a game in turn order."""
        rows = self.db.connection.execute(
            "SELECT * FROM saved_players WHERE game_id = ? ORDER BY seat", (game_id,)
        ).fetchall()
        return [PlayerRecord.from_row(row) for row in rows]

    # =========================================================================
    # Snapshots
    # =========================================================================

    def get_latest_game_state(self, game_id: str) -> GameStateSnapshot | None:
        row = self.db.connection.execute(
            """
            SELECT * FROM snapshots WHERE game_id = ?
            ORDER BY turn_number DESC, id DESC LIMIT 1
            """,
            (game_id,)
        ).fetchone()
        return GameStateSnapshot.from_row(row) if row else None

    def cleanup_old_snapshots(self, game_id: str, keep_count: int = SNAPSHOTS_TO_KEEP) -> int:
        """Drop all but the newest `keep_count` snapshots. Returns how many went."""
        with self.db.transaction() as conn:
            return conn.execute(
                """
                DELETE FROM snapshots
                WHERE game_id = ? AND id NOT IN (
                    SELECT id FROM snapshots WHERE game_id = ?
                    ORDER BY turn_number DESC, id DESC LIMIT ?
                )
                """,
                (game_id, game_id, keep_count)
            ).rowcount

    # =========================================================================
    # Whole games
    # =========================================================================

    def save_full_game(
        self,
        game: GameRecord,
        players: list[PlayerRecord],
        state_snapshot: dict[str, Any] | None = None,
    ) -> None:
        """Write a game, its seats and an optional snapshot atomically."""
        with self.db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO saved_games (id, name, variant, status, current_player_index,
                                         turn_number, winner_id, finished_at)
                VALUES (:id, :name, :variant, :status, :current_player_index,
                        :turn_number, :winner_id, :finished_at)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    variant = excluded.variant,
                    status = excluded.status,
                    current_player_index = excluded.current_player_index,
                    turn_number = excluded.turn_number,
                    winner_id = excluded.winner_id,
                    finished_at = excluded.finished_at,
                    updated_at = CURRENT_TIMESTAMP
                """,
                {
                    "id": game.id,
                    "name": game.name,
                    "variant": game.variant,
                    "status": game.status,
                    "current_player_index": game.current_player_index,
                    "turn_number": game.turn_number,
                    "winner_id": game.winner_id,
                    "finished_at": game.finished_at,
                }
            )

            conn.executemany(
                """
                INSERT INTO saved_players (id, game_id, seat, name, token, tile_id, is_waiting)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    seat = excluded.seat,
                    tile_id = excluded.tile_id,
                    is_waiting = excluded.is_waiting
                """,
                [
                    (p.id, p.game_id, p.seat, p.name, p.token, p.tile_id, int(p.is_waiting))
                    for p in players
                ]
            )

            if state_snapshot:
                conn.execute(
                    "INSERT INTO snapshots (game_id, turn_number, state_json) VALUES (?, ?, ?)",
                    (game.id, game.turn_number, json.dumps(state_snapshot))
                )

    def load_full_game(self, game_id: str) -> dict[str, Any] | None:
        """
        Everything stored for one game.

        Returns:
            {"game": GameRecord, "players": [PlayerRecord], "latest_snapshot": GameStateSnapshot | None},
            or None if the game was never saved
        """
        game = self.get_game(game_id)
        if game is None:
            return None

        return {
            "game": game,
            "players": self.get_players_for_game(game_id),
            "latest_snapshot": self.get_latest_game_state(game_id),
        }
