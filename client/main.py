"""
Ladder game entry point.

Runs a hot-seat game without a window: turns are played automatically on a
Qt timer and the moves are written to the log.

Usage:
    python -m client.main --players Alice Bob
    python -m client.main --variant ladder_extreme --players Alice Bob Carol
    python -m client.main --load <game_id>
"""

import sys
import argparse
import logging
from dataclasses import replace

from PyQt6.QtCore import QCoreApplication

from core.config import settings as engine_settings
from core.game_engine import get_variant, get_available_variants
from core.persistence import GameRepository, write_board_file
from client.config import settings
from client.local import LocalGameController


def setup_logging(level: str) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play a ladder game on the console")
    parser.add_argument(
        "--variant", choices=get_available_variants(), default=engine_settings.DEFAULT_VARIANT,
        help="Board variant to play"
    )
    parser.add_argument("--players", nargs="+", default=["Player 1", "Player 2"],
                        help="Player names, in turn order")
    parser.add_argument("--board-file", help="Read the board from a JSON board file")
    parser.add_argument("--export-board", metavar="FILE",
                        help="Write the chosen variant's board to a JSON file and exit")
    parser.add_argument("--turn-delay", type=int, default=settings.turn_delay_ms,
                        help="Milliseconds between turns")
    parser.add_argument("--load", metavar="GAME_ID", help="Resume a saved game")
    parser.add_argument("--save", action="store_true", help="Save the game when it ends")
    parser.add_argument("--list-saves", action="store_true", help="List saved games and exit")
    parser.add_argument("--log-level", default=engine_settings.LOG_LEVEL)
    return parser.parse_args(argv)


def export_board(variant_name: str, filename: str) -> int:
    variant = get_variant(variant_name)
    path = write_board_file(filename, variant.build_board(), variant.name, variant.display_name)
    print(f"Wrote {variant.display_name} board to {path}")
    return 0


def list_saves() -> int:
    summaries = GameRepository().list_games()
    if not summaries:
        print("No saved games")
    for summary in summaries:
        print(
            f"{summary.id}  {summary.name}  {summary.variant}  "
            f"{summary.status}  {summary.player_count} players  {summary.updated_at}"
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level)
    engine_settings.ensure_directories()

    if args.export_board:
        return export_board(args.variant, args.export_board)
    if args.list_saves:
        return list_saves()

    app = QCoreApplication(sys.argv[:1])
    app.setApplicationName("Ladder Game")

    controller = LocalGameController(
        settings=replace(settings, turn_delay_ms=args.turn_delay, auto_play=False)
    )
    exit_code = 0

    def on_game_won(player_id: str, player_name: str) -> None:
        print(f"{player_name} wins!")
        app.quit()

    def on_error(message: str) -> None:
        nonlocal exit_code
        print(f"Error: {message}", file=sys.stderr)
        exit_code = 1
        app.quit()

    def on_player_moved(player_id: str, from_tile: int, to_tile: int, dice_value: int) -> None:
        player = controller.game.get_player(player_id)
        if dice_value:
            print(f"{player.name} rolls {dice_value}: {from_tile} -> {to_tile}")
        else:
            print(f"{player.name} is moved from {from_tile} to {to_tile}")

    def on_turn_skipped(player_id: str, player_name: str) -> None:
        print(f"{player_name} waits this turn")

    controller.player_moved.connect(on_player_moved)
    controller.turn_skipped.connect(on_turn_skipped)

    if args.load:
        if not controller.load_game(args.load):
            return 1
        if controller.game.is_game_over:
            print(f"Game {args.load} is already finished")
            return 0
    else:
        if args.board_file:
            created = controller.create_game_from_board_file(args.board_file)
        else:
            created = controller.create_game(args.variant)
        if not created:
            return 1

        for name in args.players:
            if controller.add_player(name) is None:
                return 1

    if not controller.game.is_started and not controller.start_game():
        return 1

    controller.game_won.connect(on_game_won)
    controller.error_occurred.connect(on_error)
    controller.set_auto_play(True)
    app.exec()

    if args.save and controller.save_game():
        print(f"Saved game {controller.game.id}")

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
