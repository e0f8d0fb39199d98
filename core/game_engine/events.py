"""
Notifications emitted by the engine.

Within one turn events are delivered in this order:
PlayerSkippedTurn | (PlayerMoved, [ActionTriggered, PlayerMoved]),
then GameWon or CurrentPlayerChanged, then TurnCompleted.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, ClassVar, Union

from shared.enums import ActionKind, EventType

from .player import Player


def _utcnow() -> datetime:
    return datetime.utcnow()


@dataclass(frozen=True)
class PlayerMoved:
    """A player changed tile. dice_value is 0 for action-driven moves."""
    event_type: ClassVar[EventType] = EventType.PLAYER_MOVED

    player: Player
    from_tile_id: int
    to_tile_id: int
    dice_value: int
    timestamp: datetime = field(default_factory=_utcnow, compare=False)

    def to_dict(self) -> dict:
        return {
            "event_type": self.event_type.value,
            "player_id": self.player.id,
            "player_name": self.player.name,
            "from": self.from_tile_id,
            "to": self.to_tile_id,
            "dice_value": self.dice_value,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class PlayerSkippedTurn:
    event_type: ClassVar[EventType] = EventType.PLAYER_SKIPPED_TURN

    player: Player
    timestamp: datetime = field(default_factory=_utcnow, compare=False)

    def to_dict(self) -> dict:
        return {
            "event_type": self.event_type.value,
            "player_id": self.player.id,
            "player_name": self.player.name,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class ActionTriggered:
    event_type: ClassVar[EventType] = EventType.ACTION_TRIGGERED

    player: Player
    action_kind: ActionKind
    timestamp: datetime = field(default_factory=_utcnow, compare=False)

    def to_dict(self) -> dict:
        return {
            "event_type": self.event_type.value,
            "player_id": self.player.id,
            "player_name": self.player.name,
            "action_kind": self.action_kind.value,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class CurrentPlayerChanged:
    event_type: ClassVar[EventType] = EventType.CURRENT_PLAYER_CHANGED

    player: Player
    timestamp: datetime = field(default_factory=_utcnow, compare=False)

    def to_dict(self) -> dict:
        return {
            "event_type": self.event_type.value,
            "player_id": self.player.id,
            "player_name": self.player.name,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class GameWon:
    event_type: ClassVar[EventType] = EventType.GAME_WON

    player: Player
    timestamp: datetime = field(default_factory=_utcnow, compare=False)

    def to_dict(self) -> dict:
        return {
            "event_type": self.event_type.value,
            "player_id": self.player.id,
            "player_name": self.player.name,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class TurnCompleted:
    """The turn has run to completion; the driver may request the next one."""
    event_type: ClassVar[EventType] = EventType.TURN_COMPLETED

    player: Player
    turn_number: int
    timestamp: datetime = field(default_factory=_utcnow, compare=False)

    def to_dict(self) -> dict:
        return {
            "event_type": self.event_type.value,
            "player_id": self.player.id,
            "player_name": self.player.name,
            "turn_number": self.turn_number,
            "timestamp": self.timestamp.isoformat(),
        }


GameEvent = Union[
    PlayerMoved,
    PlayerSkippedTurn,
    ActionTriggered,
    CurrentPlayerChanged,
    GameWon,
    TurnCompleted,
]

GameListener = Callable[[GameEvent], None]
