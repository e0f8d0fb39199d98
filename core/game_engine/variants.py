"""
Board variants: which tiles carry which actions.
"""
from dataclasses import dataclass, field
from typing import Dict

from shared.constants import (
    BOARD_SIZE, WINNING_TILE_ID, START_TILE_ID,
    DIRECTION_UP, DIRECTION_DOWN, DIRECTION_START,
    COMMON_LADDERS, COMMON_WAIT_TILES, COMMON_BACK_TO_START_TILES,
    VARIANT_LAYOUTS, CLASSIC_VARIANT,
)

from .actions import TileAction, Reroute, SkipNextTurn
from .board import Board
from .errors import TileConfigurationError


@dataclass
class VariantConfig:
    """Everything needed to build the board for one variant."""

    name: str
    display_name: str
    path_length: int = BOARD_SIZE
    winning_tile_id: int = WINNING_TILE_ID
    actions: Dict[int, TileAction] = field(default_factory=dict)

    def build_board(self) -> Board:
        """
        Lay out the path and attach this variant's actions.

        Raises:
            TileConfigurationError: An action sits on, or points at, a tile off the path
        """
        if not 1 <= self.winning_tile_id <= self.path_length:
            raise TileConfigurationError(
                f"Winning tile {self.winning_tile_id} is not on a path of {self.path_length} tiles",
                tile_id=self.winning_tile_id,
            )

        board = Board.linear(self.path_length, winning_tile_id=self.winning_tile_id)

        for tile_id, action in sorted(self.actions.items()):
            if isinstance(action, Reroute) and action.destination_tile_id not in board:
                raise TileConfigurationError(
                    f"Tile {tile_id} reroutes to missing tile {action.destination_tile_id}",
                    tile_id=action.destination_tile_id,
                )
            board.set_action(tile_id, action)

        return board


def _ladder_direction(tile_id: int, destination: int) -> str:
    return DIRECTION_UP if destination > tile_id else DIRECTION_DOWN


def _layout_actions(layout: dict) -> Dict[int, TileAction]:
    actions: Dict[int, TileAction] = {}

    for tile_id, destination in layout["ladders"]:
        actions[tile_id] = Reroute(destination, _ladder_direction(tile_id, destination))
    for tile_id in layout["wait_tiles"]:
        actions[tile_id] = SkipNextTurn()
    for tile_id in layout["back_to_start_tiles"]:
        actions[tile_id] = Reroute(START_TILE_ID, DIRECTION_START)

    return actions


COMMON_LAYOUT = {
    "ladders": COMMON_LADDERS,
    "wait_tiles": COMMON_WAIT_TILES,
    "back_to_start_tiles": COMMON_BACK_TO_START_TILES,
}


def _build_variants() -> Dict[str, VariantConfig]:
    variants = {}
    for name, layout in VARIANT_LAYOUTS.items():
        actions = _layout_actions(layout)
        # Common tiles are laid last and win on overlap
        actions.update(_layout_actions(COMMON_LAYOUT))
        variants[name] = VariantConfig(
            name=name,
            display_name=layout["display_name"],
            actions=actions,
        )
    return variants


VARIANTS: Dict[str, VariantConfig] = _build_variants()


def get_available_variants() -> list[str]:
    """Variant names in the order they are offered to players."""
    return list(VARIANTS)


def get_variant(name: str | None = None) -> VariantConfig:
    """
    Look up a variant by name or display name.

    Raises:
        KeyError: No variant with that name
    """
    if name is None:
        return VARIANTS[CLASSIC_VARIANT]
    if name in VARIANTS:
        return VARIANTS[name]
    for variant in VARIANTS.values():
        if variant.display_name == name:
            return variant
    raise KeyError(f"Unknown game variant: {name}")
