"""
Saving and restoring whole games.

Converts between the running GameEngine and the database records. Player
positions are always restored through the engine, which falls back to the
start tile when a saved tile id is unusable.
"""

import json
import logging
from datetime import datetime

from core.game_engine import GameEngine
from core.persistence.errors import GameNotFoundError
from core.persistence.models import GameRecord, PlayerRecord
from core.persistence.repository import GameRepository
from shared.enums import GamePhase, GameStatus


logger = logging.getLogger(__name__)


def _status_for(game: GameEngine) -> GameStatus:
    if game.phase == GamePhase.WAITING:
        return GameStatus.WAITING
    if game.is_game_over:
        return GameStatus.FINISHED
    return GameStatus.IN_PROGRESS


def save_game(game: GameEngine, repository: GameRepository | None = None) -> None:
    """Write the game, its players and a full snapshot in one transaction."""
    repository = repository or GameRepository()
    status = _status_for(game)

    game_record = GameRecord(
        id=game.id,
        name=game.name,
        variant=game.variant,
        status=status.value,
        current_player_index=game.current_player_index,
        turn_number=game.turn_number,
        finished_at=datetime.utcnow().isoformat() if status == GameStatus.FINISHED else None,
        winner_id=game.winner.id if game.winner else None,
    )

    player_records = [
        PlayerRecord(
            id=player.id,
            game_id=game.id,
            name=player.name,
            token=player.token,
            seat=seat,
            tile_id=player.tile_id,
            is_waiting=player.waiting,
        )
        for seat, player in enumerate(game.players)
    ]

    repository.save_full_game(
        game=game_record,
        players=player_records,
        state_snapshot=game.to_dict(),
    )
    repository.cleanup_old_snapshots(game.id)
    logger.info(f"Game {game.id} saved at turn {game.turn_number}")


def _phase_for(status: str) -> GamePhase:
    if status == GameStatus.FINISHED.value:
        return GamePhase.GAME_OVER
    if status == GameStatus.IN_PROGRESS.value:
        return GamePhase.AWAITING_ROLL
    return GamePhase.WAITING


def load_game(game_id: str, repository: GameRepository | None = None) -> GameEngine:
    """
    Rebuild a saved game.

    The latest snapshot supplies the board and the last roll; the saved
    rows win for everything else, including each player's tile.

    Raises:
        GameNotFoundError: No game with this id was saved
    """
    repository = repository or GameRepository()
    data = repository.load_full_game(game_id)
    if data is None:
        raise GameNotFoundError(f"Game {game_id} not found")

    record: GameRecord = data["game"]
    snapshot = data["latest_snapshot"]

    state = {}
    if snapshot is not None:
        try:
            state = json.loads(snapshot.state_json)
        except json.JSONDecodeError as e:
            logger.warning(f"Snapshot for game {game_id} is not valid JSON: {e}")
        if not isinstance(state, dict):
            logger.warning(f"Snapshot for game {game_id} is not a game state")
            state = {}

    finished = record.status == GameStatus.FINISHED.value
    state.update({
        "id": record.id,
        "name": record.name,
        "variant": record.variant,
        "phase": _phase_for(record.status).value,
        "turn_number": record.turn_number,
        "current_player_index": record.current_player_index,
        "winner_id": record.winner_id if finished else None,
        "players": [
            {
                "id": player_record.id,
                "name": player_record.name,
                "token": player_record.token,
                "tile_id": player_record.tile_id,
                "waiting": player_record.is_waiting,
            }
            for player_record in data["players"]
        ],
    })

    game = GameEngine.from_dict(state)

    logger.info(f"Game {game_id} loaded from turn {record.turn_number}")
    return game
