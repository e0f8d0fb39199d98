"""
Local game controller.

Drives the game engine for hot-seat play on one device. The engine runs each
turn synchronously; this controller decides when the next turn starts and
relays engine events to the view as Qt signals.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from core.game_engine import (
    GameEngine, GameEngineError, Player,
    GameEvent, PlayerMoved, PlayerSkippedTurn, ActionTriggered,
    CurrentPlayerChanged, GameWon, TurnCompleted,
)
from core.persistence import (
    GameRepository, PersistenceError, read_board_file, save_game, load_game
)
from client.config import ClientSettings, settings as default_settings
from shared.constants import PLAYER_TOKENS
from shared.enums import GamePhase


logger = logging.getLogger(__name__)


class LocalGameController(QObject):
    """
    Controller for local (offline) ladder games.

    Wraps the GameEngine and emits Qt signals for UI updates.
    At most one turn runs at a time; requests that arrive while a turn
    is being resolved are refused.

    Signals:
        game_state_changed: Game state updated (state_dict)
        game_event: An engine event occurred (event_type, event_data)
        player_moved: A token moved (player_id, from_tile_id, to_tile_id, dice_value)
        action_triggered: A tile action fired (player_id, action_kind)
        turn_skipped: A waiting player sat out (player_id, player_name)
        player_switched: Active player changed (player_id, player_name)
        turn_completed: A turn finished (turn_number)
        game_won: The game is over (player_id, player_name)
        error_occurred: An error happened (error_message)
    """

    game_state_changed = pyqtSignal(dict)
    game_event = pyqtSignal(str, dict)
    player_moved = pyqtSignal(str, int, int, int)
    action_triggered = pyqtSignal(str, str)
    turn_skipped = pyqtSignal(str, str)
    player_switched = pyqtSignal(str, str)
    turn_completed = pyqtSignal(int)
    game_won = pyqtSignal(str, str)
    error_occurred = pyqtSignal(str)

    def __init__(
        self,
        parent=None,
        settings: Optional[ClientSettings] = None,
        repository: Optional[GameRepository] = None
    ):
        super().__init__(parent)

        self._settings = settings or default_settings
        self._repository = repository
        self._game: Optional[GameEngine] = None
        self._turn_in_progress = False
        self._auto_play = self._settings.auto_play

        self._turn_timer = QTimer(self)
        self._turn_timer.setSingleShot(True)
        self._turn_timer.timeout.connect(self._on_turn_timer)

    @property
    def game(self) -> Optional[GameEngine]:
        """The current game instance."""
        return self._game

    @property
    def is_game_active(self) -> bool:
        """Whether a game is in progress."""
        return self._game is not None and self._game.phase not in (
            GamePhase.WAITING, GamePhase.GAME_OVER, GamePhase.FAULTED
        )

    @property
    def is_turn_in_progress(self) -> bool:
        return self._turn_in_progress

    @property
    def is_next_turn_scheduled(self) -> bool:
        return self._turn_timer.isActive()

    def get_state(self) -> dict:
        """Get the current game state."""
        if not self._game:
            return {}

        state = self._game.get_state()
        state["is_local_game"] = True
        state["auto_play"] = self._auto_play
        return state

    def _emit_state(self) -> None:
        """Emit the current game state."""
        if self._game:
            self.game_state_changed.emit(self.get_state())

    def _fail(self, message: str) -> None:
        logger.error(message)
        self.error_occurred.emit(message)

    # =========================================================================
    # Game Setup
    # =========================================================================

    def _attach(self, game: GameEngine) -> None:
        self._turn_timer.stop()
        if self._game is not None:
            self._game.remove_listener(self._on_engine_event)
        self._game = game
        self._game.add_listener(self._on_engine_event)

    def create_game(self, variant: Optional[str] = None, game_name: str = "Local Game") -> bool:
        """Create a new local game on the board of the given variant."""
        game = GameEngine(name=game_name)
        try:
            game.create_board(variant)
        except (KeyError, GameEngineError) as e:
            self._fail(f"Could not create board: {e}")
            return False

        self._attach(game)
        self._emit_state()
        return True

    def create_game_from_board_file(self, path: str | Path, game_name: str = "Local Game") -> bool:
        """Create a new local game on a board read from a board file."""
        try:
            variant = read_board_file(path)
            game = GameEngine(name=game_name)
            game.create_board(variant)
        except (PersistenceError, GameEngineError) as e:
            self._fail(f"Could not load board file: {e}")
            return False

        self._attach(game)
        self._emit_state()
        return True

    def add_player(self, name: str, token: Optional[str] = None) -> Optional[str]:
        """
        Add a player to the game.

        Returns:
            Player ID if successful, None otherwise.
        """
        if not self._game:
            self._fail("No game created")
            return None

        if token is None:
            taken = {p.token for p in self._game.players}
            token = next((t for t in PLAYER_TOKENS if t not in taken), f"token_{len(taken) + 1}")

        try:
            player = Player(name=name, token=token)
        except ValueError as e:
            self._fail(str(e))
            return None

        success, msg = self._game.add_player(player)
        if not success:
            self._fail(msg)
            return None

        self._emit_state()
        return player.id

    def start_game(self) -> bool:
        """Start the game."""
        if not self._game:
            self._fail("No game created")
            return False

        success, msg = self._game.start_game()
        if not success:
            self._fail(msg)
            return False

        self._emit_state()
        self._schedule_next_turn()
        return True

    # =========================================================================
    # Turns
    # =========================================================================

    def roll_dice(self) -> bool:
        """Play the current player's turn."""
        if not self.is_game_active:
            self._fail("No active game")
            return False

        if self._turn_in_progress:
            self._fail("A turn is already in progress")
            return False

        self._turn_timer.stop()
        self._turn_in_progress = True
        error = None
        try:
            self._game.take_turn()
        except GameEngineError as e:
            error = e
        finally:
            self._turn_in_progress = False

        if error is not None:
            # Misconfigured board; stop driving turns until asked again
            self._auto_play = False
            self._fail(f"Turn failed: {error}")
            return False

        self._emit_state()
        self._schedule_next_turn()
        return True

    def set_auto_play(self, enabled: bool) -> None:
        """Play turns automatically, one every turn_delay_ms."""
        self._auto_play = enabled
        if enabled:
            self._schedule_next_turn()
        else:
            self._turn_timer.stop()

    def _schedule_next_turn(self) -> None:
        if self._auto_play and self.is_game_active and not self._turn_timer.isActive():
            self._turn_timer.start(self._settings.turn_delay_ms)

    def _on_turn_timer(self) -> None:
        if self._auto_play and self.is_game_active:
            self.roll_dice()

    def _on_engine_event(self, event: GameEvent) -> None:
        """Relay an engine event as Qt signals."""
        player = event.player
        self.game_event.emit(event.event_type.value, event.to_dict())

        if isinstance(event, PlayerMoved):
            self.player_moved.emit(
                player.id, event.from_tile_id, event.to_tile_id, event.dice_value
            )
        elif isinstance(event, ActionTriggered):
            self.action_triggered.emit(player.id, event.action_kind.value)
        elif isinstance(event, PlayerSkippedTurn):
            self.turn_skipped.emit(player.id, player.name)
        elif isinstance(event, CurrentPlayerChanged):
            self.player_switched.emit(player.id, player.name)
        elif isinstance(event, GameWon):
            self._turn_timer.stop()
            self.game_won.emit(player.id, player.name)
        elif isinstance(event, TurnCompleted):
            self.turn_completed.emit(event.turn_number)

    # =========================================================================
    # Save / Load
    # =========================================================================

    def _get_repository(self) -> GameRepository:
        if self._repository is None:
            self._repository = GameRepository()
        return self._repository

    def save_game(self) -> bool:
        """Save the current game."""
        if not self._game:
            self._fail("No game to save")
            return False

        if self._turn_in_progress:
            self._fail("Cannot save while a turn is in progress")
            return False

        try:
            save_game(self._game, self._get_repository())
        except (PersistenceError, sqlite3.Error) as e:
            self._fail(f"Failed to save game: {e}")
            return False

        return True

    def load_game(self, game_id: str) -> bool:
        """Replace the current game with a saved one."""
        try:
            game = load_game(game_id, self._get_repository())
        except (PersistenceError, GameEngineError, sqlite3.Error) as e:
            self._fail(f"Failed to load game: {e}")
            return False

        self._attach(game)
        self._emit_state()

        if game.current_player and self.is_game_active:
            self.player_switched.emit(game.current_player.id, game.current_player.name)
        self._schedule_next_turn()
        return True
