"""
Enumerations used throughout the game.
"""
from enum import Enum


class ActionKind(str, Enum):
    """Kinds of actions a tile can carry."""
    REROUTE = "reroute"
    SKIP_NEXT_TURN = "skip_next_turn"
    NO_OP = "no_op"


class GamePhase(str, Enum):
    """Where the engine is within the turn cycle."""
    WAITING = "WAITING"
    AWAITING_ROLL = "AWAITING_ROLL"
    ACTION_RESOLUTION = "ACTION_RESOLUTION"
    TURN_COMPLETE = "TURN_COMPLETE"
    GAME_OVER = "GAME_OVER"
    FAULTED = "FAULTED"


class EventType(str, Enum):
    """Notifications emitted by the engine to its listeners."""
    PLAYER_MOVED = "PLAYER_MOVED"
    PLAYER_SKIPPED_TURN = "PLAYER_SKIPPED_TURN"
    ACTION_TRIGGERED = "ACTION_TRIGGERED"
    CURRENT_PLAYER_CHANGED = "CURRENT_PLAYER_CHANGED"
    GAME_WON = "GAME_WON"
    TURN_COMPLETED = "TURN_COMPLETED"


class GameStatus(str, Enum):
    """Lifecycle status stored with a saved game."""
    WAITING = "waiting"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"
