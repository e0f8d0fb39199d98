"""
Tile actions.

The set of actions is closed: Reroute, SkipNextTurn and NoOp. Actions carry
configuration only; all state they touch lives on the Player and Board, so the
same instance can be performed on any number of turns.
"""
import logging
from dataclasses import dataclass
from typing import Union, TYPE_CHECKING

from shared.enums import ActionKind

from .errors import TileConfigurationError

if TYPE_CHECKING:
    from .board import Board
    from .player import Player


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reroute:
    """Sends the player to another tile (ladder up, chute down, back to start)."""
    destination_tile_id: int
    direction: str

    @property
    def kind(self) -> ActionKind:
        return ActionKind.REROUTE


@dataclass(frozen=True)
class SkipNextTurn:
    """The player sits out their next turn."""

    @property
    def kind(self) -> ActionKind:
        return ActionKind.SKIP_NEXT_TURN


@dataclass(frozen=True)
class NoOp:
    """Informational tile with no effect on the game."""
    label: str = ""

    @property
    def kind(self) -> ActionKind:
        return ActionKind.NO_OP


TileAction = Union[Reroute, SkipNextTurn, NoOp]


def perform(action: TileAction, player: "Player", board: "Board") -> None:
    """
    Apply a tile action to the player who landed on it.

    A reroute resolves its destination before touching the player, so a
    missing destination leaves the player exactly where it was.

    Raises:
        TileConfigurationError: Reroute destination does not exist on the board
        TypeError: Unknown action type
    """
    if isinstance(action, Reroute):
        destination = board.get_tile(action.destination_tile_id)
        if destination is None:
            raise TileConfigurationError(
                f"Destination tile does not exist: {action.destination_tile_id}",
                tile_id=action.destination_tile_id,
            )
        logger.info(
            f"{player.name} moves {action.direction} to tile {destination.tile_id}"
        )
        player.place_on_tile(destination)

    elif isinstance(action, SkipNextTurn):
        logger.info(f"{player.name} must wait a turn before rolling")
        player.set_wait_turn(True)

    elif isinstance(action, NoOp):
        return

    else:
        raise TypeError(f"Unknown tile action: {action!r}")


def action_to_dict(action: TileAction) -> dict:
    """Convert an action to a dictionary for serialization."""
    data = {"kind": action.kind.value}
    if isinstance(action, Reroute):
        data["destination"] = action.destination_tile_id
        data["direction"] = action.direction
    elif isinstance(action, NoOp) and action.label:
        data["label"] = action.label
    return data


def action_from_dict(data: dict) -> TileAction:
    """
    Create an action from a dictionary.

    Raises:
        KeyError: Required field missing
        ValueError: Unknown kind or bad field value
    """
    kind = ActionKind(data["kind"])

    if kind == ActionKind.REROUTE:
        return Reroute(
            destination_tile_id=int(data["destination"]),
            direction=str(data["direction"]),
        )
    elif kind == ActionKind.SKIP_NEXT_TURN:
        return SkipNextTurn()
    return NoOp(label=data.get("label", ""))
