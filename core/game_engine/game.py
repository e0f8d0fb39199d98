"""
Main game orchestration - ties all components together.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional, Tuple, Union

from shared.constants import START_TILE_ID
from shared.enums import GamePhase
from core.config import settings

from .actions import TileAction, perform
from .board import Board, Tile
from .dice import Dice, DiceResult
from .errors import (
    BoardNotBuiltError, GameNotStartedError, GameOverError, GameFaultedError,
    GameEngineError,
)
from .events import (
    GameEvent, GameListener, PlayerMoved, PlayerSkippedTurn, ActionTriggered,
    CurrentPlayerChanged, GameWon, TurnCompleted,
)
from .player import Player
from .variants import VariantConfig, get_variant


logger = logging.getLogger(__name__)


@dataclass
class TurnResult:
    """Summary of one call to GameEngine.take_turn()."""
    player: Player
    skipped: bool = False
    dice: Optional[DiceResult] = None
    from_tile_id: Optional[int] = None
    landed_tile_id: Optional[int] = None
    final_tile_id: Optional[int] = None
    action: Optional[TileAction] = None
    won: bool = False

    @property
    def rerouted(self) -> bool:
        return self.final_tile_id != self.landed_tile_id


@dataclass
class GameEngine:
    """
    Turn-sequencing state machine for the ladder game.

    One call to take_turn() runs a whole turn: roll (or skip), move,
    resolve the tile action, check for a winner, advance to the next player.
    Pacing between turns belongs to the caller.
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = "Ladder Game"
    variant: str = field(default_factory=lambda: settings.DEFAULT_VARIANT)
    created_at: datetime = field(default_factory=datetime.utcnow)

    # Game components
    dice: Dice = field(default_factory=lambda: Dice(settings.DICE_SEED))
    _board: Optional[Board] = field(default=None, repr=False)

    # Players, in turn order
    players: List[Player] = field(default_factory=list)
    current_player_index: int = 0

    # Game state
    phase: GamePhase = GamePhase.WAITING
    turn_number: int = 0
    last_dice_roll: Optional[DiceResult] = None
    winner: Optional[Player] = None
    is_loaded_game: bool = False
    fault: Optional[str] = None

    # Event log
    events: List[GameEvent] = field(default_factory=list, repr=False)
    _listeners: List[GameListener] = field(default_factory=list, repr=False)

    # Configuration
    min_players: int = field(default_factory=lambda: settings.MIN_PLAYERS)
    max_players: int = field(default_factory=lambda: settings.MAX_PLAYERS)

    @property
    def board(self) -> Board:
        """The game board. Raises BoardNotBuiltError before create_board()."""
        if self._board is None:
            raise BoardNotBuiltError("The board has not been created yet")
        return self._board

    @property
    def has_board(self) -> bool:
        return self._board is not None

    @property
    def current_player(self) -> Optional[Player]:
        """Get the current player."""
        if not self.players:
            return None
        return self.players[self.current_player_index]

    @property
    def is_game_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    @property
    def is_started(self) -> bool:
        return self.phase != GamePhase.WAITING

    # =========== Listeners ===========

    def add_listener(self, listener: GameListener) -> None:
        """Subscribe to engine events."""
        if listener is None:
            raise ValueError("Listener cannot be None")
        self._listeners.append(listener)

    def remove_listener(self, listener: GameListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: GameEvent) -> GameEvent:
        """Log an event and deliver it to every listener."""
        self.events.append(event)
        for listener in list(self._listeners):
            listener(event)
        return event

    # =========== Setup ===========

    def create_board(self, variant: Union[str, VariantConfig, None] = None) -> Board:
        """
        Build the board for a variant.

        Args:
            variant: Variant name or a configuration read from a board file;
                defaults to the game's current variant
        """
        if isinstance(variant, VariantConfig):
            config = variant
        else:
            config = get_variant(variant or self.variant)
        self.variant = config.name
        self._board = config.build_board()
        logger.info(
            f"Created {config.display_name} board with {len(self._board)} tiles, "
            f"{len(self._board.action_tiles())} with actions"
        )
        return self._board

    def set_board(self, board: Board) -> None:
        """Use a board built elsewhere, e.g. read from a board file."""
        if board is None:
            raise ValueError("Board cannot be None")
        if self.is_started:
            raise GameEngineError("Cannot replace the board of a running game")
        self._board = board

    def add_player(self, player: Player) -> Tuple[bool, str]:
        """
        Add a player to the game.

        Returns:
            Tuple of (success, message)
        """
        if player is None:
            raise ValueError("Player cannot be None")

        if self.is_started:
            return False, "Game has already started"

        if len(self.players) >= self.max_players:
            return False, f"Game is full ({self.max_players} players maximum)"

        if any(p.name == player.name for p in self.players):
            return False, f"Name '{player.name}' is already taken"

        if any(p.token == player.token for p in self.players):
            return False, f"Token '{player.token}' is already taken"

        player.game_id = self.id
        self.players.append(player)
        logger.info(f"{player.name} joined game {self.id}")

        return True, f"{player.name} joined the game"

    def get_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def start_game(self) -> Tuple[bool, str]:
        """
        Start the game.

        New games put every player on the start tile; restored games keep
        the positions they were loaded with.
        """
        if self.is_started:
            return False, "Game has already started"

        if len(self.players) < self.min_players:
            return False, f"Need at least {self.min_players} players to start"

        board = self.board

        if not self.is_loaded_game:
            self.current_player_index = 0
            for player in self.players:
                player.place_on_tile(board.start_tile)

        self.phase = GamePhase.AWAITING_ROLL
        self.turn_number = max(self.turn_number, 1)

        logger.info(f"Game {self.id} started with {len(self.players)} players")
        self._emit(CurrentPlayerChanged(self.current_player))

        return True, "Game started!"

    def restore_player_position(self, player: Player, saved_tile_id: Any) -> Tile:
        """
        Put a player back on the tile recorded in a save.

        Falls back to the start tile when the saved id is missing, not a
        number, or not on the board.
        """
        if player is None:
            raise ValueError("Player cannot be None")

        board = self.board
        tile = None

        if saved_tile_id is None or str(saved_tile_id).strip() == "":
            logger.warning(f"No saved tile id for {player.name}, using start tile")
        else:
            try:
                tile_id = int(str(saved_tile_id).strip())
            except ValueError:
                logger.warning(
                    f"Could not parse saved tile id {saved_tile_id!r} for {player.name}, "
                    f"using start tile"
                )
            else:
                tile = board.get_tile(tile_id)
                if tile is None:
                    logger.warning(
                        f"Saved tile {tile_id} for {player.name} is not on the board, "
                        f"using start tile"
                    )

        if tile is None:
            tile = board.get_tile(START_TILE_ID)

        player.place_on_tile(tile)
        return tile

    # =========== Turns ===========

    def take_turn(self) -> TurnResult:
        """
        Play one full turn for the current player.

        Raises:
            GameNotStartedError: start_game() has not been called
            GameOverError: The game already has a winner
            GameFaultedError: An earlier turn stopped on a board error
            TileConfigurationError: A reroute on the landed tile points nowhere
        """
        if self.phase == GamePhase.GAME_OVER:
            raise GameOverError("The game is over, no further turns")
        if self.phase == GamePhase.WAITING:
            raise GameNotStartedError("The game has not been started")
        if self.phase == GamePhase.FAULTED:
            raise GameFaultedError(f"The game stopped on a board error: {self.fault}")

        player = self.current_player

        if player.will_wait_turn():
            return self._skip_turn(player)

        board = self.board
        roll = self.dice.roll_pair()
        self.last_dice_roll = roll
        distance = roll.total
        logger.info(f"{player.name} rolled {roll.die1} + {roll.die2} = {distance}")

        from_tile_id = player.tile_id
        destination = player.move(board, distance)
        self._emit(PlayerMoved(player, from_tile_id, destination.tile_id, distance))

        result = TurnResult(
            player=player,
            dice=roll,
            from_tile_id=from_tile_id,
            landed_tile_id=destination.tile_id,
            final_tile_id=destination.tile_id,
            action=destination.action,
        )

        if destination.action is not None:
            self.phase = GamePhase.ACTION_RESOLUTION
            self._resolve_action(player, destination.action)
            result.final_tile_id = player.tile_id

        if player.tile_id == board.winning_tile_id:
            self._declare_winner(player)
            result.won = True
        else:
            self.phase = GamePhase.TURN_COMPLETE
            self._advance_turn()

        self._emit(TurnCompleted(player, self.turn_number))
        if not result.won:
            self.turn_number += 1
        return result

    def _skip_turn(self, player: Player) -> TurnResult:
        """Consume the turn of a waiting player without rolling."""
        player.set_wait_turn(False)
        logger.info(f"{player.name} skips this turn")
        self._emit(PlayerSkippedTurn(player))

        self.phase = GamePhase.TURN_COMPLETE
        self._advance_turn()

        self._emit(TurnCompleted(player, self.turn_number))
        self.turn_number += 1
        return TurnResult(
            player=player,
            skipped=True,
            from_tile_id=player.tile_id,
            landed_tile_id=player.tile_id,
            final_tile_id=player.tile_id,
        )

    def _resolve_action(self, player: Player, action: TileAction) -> None:
        """Perform the action on the tile the player landed on."""
        self._emit(ActionTriggered(player, action.kind))

        before = player.tile_id
        try:
            perform(action, player, self.board)
        except GameEngineError as e:
            logger.error(f"Turn aborted for {player.name} on tile {before}: {e}")
            self.phase = GamePhase.FAULTED
            self.fault = str(e)
            raise

        if player.tile_id != before:
            self._emit(PlayerMoved(player, before, player.tile_id, 0))

    def _declare_winner(self, player: Player) -> None:
        self.winner = player
        self.phase = GamePhase.GAME_OVER
        logger.info(f"{player.name} won the game on turn {self.turn_number}")
        self._emit(GameWon(player))

    def _advance_turn(self) -> None:
        """Move to next player's turn."""
        if not self.players or self.is_game_over:
            return

        self.current_player_index = (self.current_player_index + 1) % len(self.players)
        self.phase = GamePhase.AWAITING_ROLL
        self._emit(CurrentPlayerChanged(self.current_player))

    def run_until_finished(self, max_turns: int = 1000) -> Optional[Player]:
        """
        Drive turns back to back until someone wins.

        Returns:
            The winner, or None if max_turns ran out first
        """
        if not self.is_started:
            success, msg = self.start_game()
            if not success:
                raise GameNotStartedError(msg)

        for _ in range(max_turns):
            if self.is_game_over:
                break
            self.take_turn()

        return self.winner

    # =========== Serialization ===========

    def to_dict(self) -> dict:
        """Convert game state to dictionary for saving."""
        return {
            "id": self.id,
            "name": self.name,
            "variant": self.variant,
            "created_at": self.created_at.isoformat(),
            "phase": self.phase.value,
            "turn_number": self.turn_number,
            "current_player_index": self.current_player_index,
            "winner_id": self.winner.id if self.winner else None,
            "last_dice_roll": self.last_dice_roll.to_list() if self.last_dice_roll else None,
            "players": [player.to_dict() for player in self.players],
            "board": self.board.to_dict() if self.has_board else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GameEngine":
        """
        Create game from dictionary.

        Player positions go through restore_player_position(), so a corrupt
        tile id puts that player back on the start tile. A saved board that
        cannot be used is replaced by the variant's board.
        """
        game = cls(
            id=data["id"],
            name=data.get("name", "Ladder Game"),
            variant=data.get("variant", settings.DEFAULT_VARIANT),
        )
        if data.get("created_at"):
            game.created_at = datetime.fromisoformat(data["created_at"])

        game._restore_board(data.get("board"))

        for pdata in data.get("players", []):
            player = Player.from_dict(pdata)
            player.game_id = game.id
            game.restore_player_position(player, pdata.get("tile_id"))
            game.players.append(player)

        game.is_loaded_game = True
        game.phase = GamePhase(data.get("phase", GamePhase.WAITING.value))
        game.turn_number = data.get("turn_number", 0)

        index = data.get("current_player_index", 0)
        game.current_player_index = index if 0 <= index < len(game.players) else 0

        if data.get("last_dice_roll"):
            roll = data["last_dice_roll"]
            game.last_dice_roll = DiceResult(die1=roll[0], die2=roll[1])

        winner_id = data.get("winner_id")
        if winner_id:
            game.winner = game.get_player(winner_id)
            game.phase = GamePhase.GAME_OVER
        elif game.phase in (
            GamePhase.ACTION_RESOLUTION, GamePhase.TURN_COMPLETE, GamePhase.FAULTED
        ):
            # Resume at the start of the current player's turn
            game.phase = GamePhase.AWAITING_ROLL

        return game

    def _restore_board(self, board_data: Optional[dict]) -> None:
        if board_data:
            try:
                self.set_board(Board.from_dict(board_data))
                return
            except (GameEngineError, KeyError, TypeError, ValueError) as e:
                logger.warning(
                    f"Saved board for game {self.id} is unusable ({e}), "
                    f"rebuilding the {self.variant} board"
                )
        try:
            self.create_board()
        except KeyError as e:
            raise GameEngineError(f"Game {self.id} has no usable board: {e}") from e

    def get_state(self) -> dict:
        """Game state formatted for a view."""
        return {
            "game_id": self.id,
            "game_name": self.name,
            "variant": self.variant,
            "phase": self.phase.value,
            "turn_number": self.turn_number,
            "current_player_id": self.current_player.id if self.current_player else None,
            "last_dice_roll": self.last_dice_roll.to_list() if self.last_dice_roll else None,
            "players": [player.to_dict() for player in self.players],
            "winning_tile_id": self.board.winning_tile_id if self.has_board else None,
            "winner_id": self.winner.id if self.winner else None,
        }
