"""
Board definition files.

A board file is a JSON document describing one variant:

    {
        "name": "Ladder Game Classic",
        "variantName": "ladder_classic",
        "pathLength": 90,
        "winningTileId": 90,
        "tiles": [
            {"id": 1},
            {"id": 5, "action": {"kind": "reroute", "destination": 17, "direction": "up"}},
            {"id": 37, "action": {"kind": "skip_next_turn"}}
        ]
    }
"""

import json
import logging
from pathlib import Path

from core.game_engine import Board, VariantConfig, Reroute
from core.game_engine.actions import action_to_dict, action_from_dict
from core.persistence.errors import BoardFileError, DataFormatError


logger = logging.getLogger(__name__)


def board_to_json(board: Board, variant_name: str, display_name: str | None = None) -> dict:
    """Describe a board as a board-file document."""
    if not variant_name:
        raise BoardFileError("Invalid board: missing variant name")

    tiles = []
    for tile_id in sorted(board.tiles):
        tile = board.tiles[tile_id]
        entry = {"id": tile.tile_id}
        if tile.action is not None:
            entry["action"] = action_to_dict(tile.action)
        tiles.append(entry)

    return {
        "name": display_name or variant_name,
        "variantName": variant_name,
        "description": f"A ladder game with {len(board)} tiles.",
        "pathLength": len(board),
        "winningTileId": board.winning_tile_id,
        "tiles": tiles,
    }


def write_board_file(
    filename: str | Path,
    board: Board,
    variant_name: str,
    display_name: str | None = None
) -> Path:
    """
    Write a board file.

    Raises:
        BoardFileError: Bad arguments or the file could not be written
    """
    if not filename:
        raise BoardFileError("Cannot write a null or empty file name.")
    if board is None:
        raise BoardFileError("Cannot serialize a missing board.", str(filename))

    path = Path(filename)
    document = board_to_json(board, variant_name, display_name)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(document, indent=2), encoding="utf-8")
    except OSError as e:
        raise BoardFileError(f"Could not write board file: {e}", str(path)) from e

    logger.info(f"Wrote board '{variant_name}' to {path}")
    return path


def _require_int(value, field: str, filename: str, entry: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise DataFormatError(f"'{field}' must be an integer, got {value!r}", filename, entry)
    return value


def read_board_file(filename: str | Path) -> VariantConfig:
    """
    Read a board file into a variant configuration.

    Raises:
        BoardFileError: The file is missing or unreadable
        DataFormatError: The content is not a valid board definition
    """
    if not filename:
        raise BoardFileError("Cannot read from a null or empty filename")

    path = Path(filename)
    name = str(path)

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise BoardFileError("Board file not found", name) from e
    except OSError as e:
        raise BoardFileError(f"Could not read board file: {e}", name) from e

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise DataFormatError(f"Invalid JSON syntax: {e}", name) from e

    if not isinstance(document, dict):
        raise DataFormatError("Board file must contain a JSON object", name)
    for required in ("variantName", "tiles"):
        if required not in document:
            raise DataFormatError(f"Missing required property: {required}", name)

    tiles = document["tiles"]
    if not isinstance(tiles, list):
        raise DataFormatError("'tiles' must be a list", name)

    path_length = document.get("pathLength")
    if path_length is None:
        ids = [t.get("id") for t in tiles if isinstance(t, dict)]
        path_length = max((i for i in ids if isinstance(i, int)), default=0)
    path_length = _require_int(path_length, "pathLength", name, None)
    if path_length < 1:
        raise DataFormatError("Board must have at least one tile", name)

    winning_tile_id = _require_int(
        document.get("winningTileId", path_length), "winningTileId", name, None
    )

    actions = {}
    for entry, tile_data in enumerate(tiles, start=1):
        if not isinstance(tile_data, dict) or "id" not in tile_data:
            raise DataFormatError("Tile is missing required 'id' property", name, entry)

        tile_id = _require_int(tile_data["id"], "id", name, entry)
        if not 1 <= tile_id <= path_length:
            raise DataFormatError(f"Invalid tile ID: {tile_id}", name, entry)

        if not tile_data.get("action"):
            continue

        try:
            action = action_from_dict(tile_data["action"])
        except KeyError as e:
            raise DataFormatError(f"Action missing required property {e}", name, entry) from e
        except (TypeError, ValueError) as e:
            raise DataFormatError(f"Invalid action at tile {tile_id}: {e}", name, entry) from e

        if isinstance(action, Reroute) and not 1 <= action.destination_tile_id <= path_length:
            raise DataFormatError(
                f"Tile {tile_id} reroutes to missing tile {action.destination_tile_id}",
                name, entry
            )
        actions[tile_id] = action

    variant_name = str(document["variantName"])
    logger.info(f"Read board '{variant_name}' with {len(actions)} action tiles from {path}")

    return VariantConfig(
        name=variant_name,
        display_name=str(document.get("name", variant_name)),
        path_length=path_length,
        winning_tile_id=winning_tile_id,
        actions=actions,
    )
