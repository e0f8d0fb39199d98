"""
Game engine package.
"""
from .dice import Dice, DiceResult
from .actions import TileAction, Reroute, SkipNextTurn, NoOp, perform
from .board import Board, Tile
from .player import Player
from .variants import VariantConfig, VARIANTS, get_variant, get_available_variants
from .events import (
    GameEvent, PlayerMoved, PlayerSkippedTurn, ActionTriggered,
    CurrentPlayerChanged, GameWon, TurnCompleted,
)
from .errors import (
    GameEngineError, TileConfigurationError, BoardNotBuiltError,
    PlayerNotPlacedError, GameNotStartedError, GameOverError, GameFaultedError,
)
from .game import GameEngine, TurnResult

__all__ = [
    "Dice",
    "DiceResult",
    "TileAction",
    "Reroute",
    "SkipNextTurn",
    "NoOp",
    "perform",
    "Board",
    "Tile",
    "Player",
    "VariantConfig",
    "VARIANTS",
    "get_variant",
    "get_available_variants",
    "GameEvent",
    "PlayerMoved",
    "PlayerSkippedTurn",
    "ActionTriggered",
    "CurrentPlayerChanged",
    "GameWon",
    "TurnCompleted",
    "GameEngineError",
    "TileConfigurationError",
    "BoardNotBuiltError",
    "PlayerNotPlacedError",
    "GameNotStartedError",
    "GameOverError",
    "GameFaultedError",
    "GameEngine",
    "TurnResult",
]
