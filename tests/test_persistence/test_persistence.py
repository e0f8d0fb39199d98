"""
Tests for the persistence layer.

Run with: python3 tests/test_persistence/test_persistence.py
"""

import itertools
import json
import sys
import tempfile
import unittest
import uuid
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from core.game_engine import GameEngine, Player, Board, Dice, Reroute, SkipNextTurn
from core.persistence.database import SCHEMA_VERSION
from core.persistence import (
    init_database,
    GameRepository,
    GameRecord,
    PlayerRecord,
    save_game,
    load_game,
    board_to_json,
    read_board_file,
    write_board_file,
    BoardFileError,
    DataFormatError,
    GameNotFoundError,
)
from shared.constants import CLASSIC_VARIANT, ADVANCED_VARIANT, START_TILE_ID
from shared.enums import GamePhase


class CycleDice(Dice):
    """Dice that repeat a fixed sequence of faces."""

    def __init__(self, faces):
        super().__init__(seed=0)
        self._faces = itertools.cycle(faces)

    def roll(self) -> int:
        return next(self._faces)


def make_game(variant: str = CLASSIC_VARIANT, dice: Dice | None = None) -> GameEngine:
    game = GameEngine(name="Test Game", dice=dice or CycleDice([2, 3]))
    game.create_board(variant)
    game.add_player(Player(name="Alice", token="blue"))
    game.add_player(Player(name="Bob", token="red"))
    game.start_game()
    return game


class PersistenceTestCase(unittest.TestCase):
    """Base test case with database setup/teardown."""

    def setUp(self):
        """Create a temporary database for each test."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = Path(self.temp_dir.name) / "test.db"

        self.db = init_database(self.db_path)
        self.repository = GameRepository(self.db)

    def tearDown(self):
        """Clean up the temporary database."""
        self.db.close_connection()
        self.temp_dir.cleanup()

    def save_sample_game(self, status: str = "in_progress") -> GameRecord:
        game = GameRecord(
            id=str(uuid.uuid4()),
            name="Sample",
            variant=CLASSIC_VARIANT,
            status=status,
        )
        players = [
            PlayerRecord(id=str(uuid.uuid4()), game_id=game.id, name="Alice",
                         token="blue", seat=0, tile_id=12),
            PlayerRecord(id=str(uuid.uuid4()), game_id=game.id, name="Bob",
                         token="red", seat=1, tile_id=40, is_waiting=True),
        ]
        self.repository.save_full_game(game, players)
        return game


class TestDatabase(PersistenceTestCase):

    def test_database_creation(self):
        self.assertTrue(self.db_path.exists())

        with self.db.transaction() as conn:
            cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = {row["name"] for row in cursor.fetchall()}

        self.assertIn("saved_games", tables)
        self.assertIn("saved_players", tables)
        self.assertIn("snapshots", tables)

        with self.db.transaction() as conn:
            version = conn.execute("PRAGMA user_version").fetchone()[0]
        self.assertEqual(version, SCHEMA_VERSION)

    def test_reset_database(self):
        self.save_sample_game()
        self.db.reset_database()
        self.assertEqual(self.repository.list_games(), [])


class TestRepository(PersistenceTestCase):

    def test_save_and_get_game(self):
        record = self.save_sample_game()

        loaded = self.repository.get_game(record.id)
        self.assertIsNotNone(loaded)
        self.assertEqual(loaded.name, "Sample")
        self.assertEqual(loaded.variant, CLASSIC_VARIANT)
        self.assertEqual(loaded.status, "in_progress")

    def test_get_nonexistent_game(self):
        self.assertIsNone(self.repository.get_game("does-not-exist"))
        self.assertIsNone(self.repository.load_full_game("does-not-exist"))

    def test_players_in_turn_order(self):
        record = self.save_sample_game()

        players = self.repository.get_players_for_game(record.id)
        self.assertEqual([p.name for p in players], ["Alice", "Bob"])
        self.assertEqual(players[0].tile_id, 12)
        self.assertTrue(players[1].is_waiting)

    def test_list_and_delete(self):
        first = self.save_sample_game()
        self.save_sample_game(status="finished")

        self.assertEqual(len(self.repository.list_games()), 2)
        finished = self.repository.list_games(status="finished")
        self.assertEqual(len(finished), 1)
        self.assertEqual(finished[0].player_count, 2)

        self.assertTrue(self.repository.delete_game(first.id))
        self.assertFalse(self.repository.delete_game(first.id))
        self.assertEqual(self.repository.get_players_for_game(first.id), [])

    def test_snapshots(self):
        record = self.save_sample_game()
        for turn in range(1, 6):
            record.turn_number = turn
            self.repository.save_full_game(record, [], {"turn": turn})

        latest = self.repository.get_latest_game_state(record.id)
        self.assertEqual(json.loads(latest.state_json), {"turn": 5})

        deleted = self.repository.cleanup_old_snapshots(record.id, keep_count=2)
        self.assertEqual(deleted, 3)


class TestSaveLoad(PersistenceTestCase):

    def test_round_trip(self):
        game = make_game()
        for _ in range(6):
            game.take_turn()
        positions = [p.tile_id for p in game.players]
        self.assertEqual(positions, [16, 16])

        save_game(game, self.repository)
        loaded = load_game(game.id, self.repository)

        self.assertEqual(loaded.id, game.id)
        self.assertEqual(loaded.variant, CLASSIC_VARIANT)
        self.assertEqual([p.tile_id for p in loaded.players], positions)
        self.assertEqual([p.name for p in loaded.players], ["Alice", "Bob"])
        self.assertEqual(loaded.turn_number, game.turn_number)
        self.assertEqual(loaded.current_player_index, game.current_player_index)
        self.assertEqual(loaded.phase, GamePhase.AWAITING_ROLL)
        self.assertTrue(loaded.is_loaded_game)
        self.assertEqual(loaded.board.get_tile(5).action, Reroute(17, "up"))

    def test_loaded_game_plays_on(self):
        game = make_game()
        game.take_turn()
        save_game(game, self.repository)

        loaded = load_game(game.id, self.repository)
        result = loaded.take_turn()

        self.assertEqual(result.player.name, "Bob")

    def test_waiting_flag_survives(self):
        game = make_game(ADVANCED_VARIANT)
        game.players[1].set_wait_turn(True)
        save_game(game, self.repository)

        loaded = load_game(game.id, self.repository)
        self.assertTrue(loaded.players[1].will_wait_turn())
        self.assertEqual(loaded.board.get_tile(18).action, SkipNextTurn())

    def test_finished_game(self):
        game = make_game(dice=Dice(seed=5))
        game.run_until_finished(max_turns=5000)
        save_game(game, self.repository)

        self.assertEqual(self.repository.get_game(game.id).status, "finished")
        loaded = load_game(game.id, self.repository)
        self.assertEqual(loaded.phase, GamePhase.GAME_OVER)
        self.assertEqual(loaded.winner.id, game.winner.id)

    def test_resave_updates_rows(self):
        game = make_game()
        save_game(game, self.repository)
        game.take_turn()
        save_game(game, self.repository)

        self.assertEqual(len(self.repository.list_games()), 1)
        players = self.repository.get_players_for_game(game.id)
        self.assertEqual(players[0].tile_id, game.players[0].tile_id)

    def test_malformed_saved_tile_falls_back_to_start(self):
        for bad_value in ("abc", 999, None, ""):
            game = make_game()
            game.take_turn()
            save_game(game, self.repository)
            with self.db.transaction() as conn:
                conn.execute("UPDATE saved_players SET tile_id = ? WHERE id = ?",
                             (bad_value, game.players[0].id))

            with self.assertLogs("core.game_engine.game", level="WARNING"):
                loaded = load_game(game.id, self.repository)

            self.assertEqual(loaded.players[0].tile_id, START_TILE_ID, bad_value)
            self.assertEqual(loaded.players[1].tile_id, game.players[1].tile_id)

    def test_corrupt_snapshot_rebuilds_board(self):
        game = make_game()
        save_game(game, self.repository)
        with self.db.transaction() as conn:
            conn.execute("UPDATE snapshots SET state_json = ? WHERE game_id = ?",
                         ("{not json", game.id))

        with self.assertLogs("core.persistence.saves", level="WARNING"):
            loaded = load_game(game.id, self.repository)

        self.assertEqual(len(loaded.board), 90)
        self.assertEqual(loaded.board.get_tile(5).action, Reroute(17, "up"))

    def replace_snapshot(self, game_id: str, state: dict) -> None:
        with self.db.transaction() as conn:
            conn.execute("UPDATE snapshots SET state_json = ? WHERE game_id = ?",
                         (json.dumps(state), game_id))

    def test_snapshot_without_start_tile_rebuilds_board(self):
        game = make_game()
        game.take_turn()
        save_game(game, self.repository)
        self.replace_snapshot(game.id, {"board": {"winning_tile_id": 90, "tiles": [{"id": 2}]}})

        with self.assertLogs("core.game_engine.game", level="WARNING"):
            loaded = load_game(game.id, self.repository)

        self.assertEqual(len(loaded.board), 90)
        self.assertEqual([p.tile_id for p in loaded.players], [p.tile_id for p in game.players])
        self.assertEqual(loaded.phase, GamePhase.AWAITING_ROLL)

    def test_snapshot_without_winning_tile_rebuilds_board(self):
        game = make_game()
        save_game(game, self.repository)
        self.replace_snapshot(
            game.id, {"board": Board.linear(10, winning_tile_id=90).to_dict()}
        )

        with self.assertLogs("core.game_engine.game", level="WARNING"):
            loaded = load_game(game.id, self.repository)

        self.assertEqual(len(loaded.board), 90)
        self.assertIn(loaded.board.winning_tile_id, loaded.board)

    def test_rows_win_over_snapshot(self):
        game = make_game()
        save_game(game, self.repository)
        state = game.to_dict()
        state["phase"] = GamePhase.GAME_OVER.value
        state["turn_number"] = 99
        self.replace_snapshot(game.id, state)

        loaded = load_game(game.id, self.repository)

        self.assertEqual(loaded.phase, GamePhase.AWAITING_ROLL)
        self.assertEqual(loaded.turn_number, game.turn_number)
        self.assertIsNone(loaded.winner)

    def test_load_nonexistent_game(self):
        with self.assertRaises(GameNotFoundError):
            load_game("does-not-exist", self.repository)


class TestBoardFiles(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.dir = Path(self.temp_dir.name)

    def tearDown(self):
        self.temp_dir.cleanup()

    def write_json(self, document, name: str = "board.json") -> Path:
        path = self.dir / name
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    def test_write_and_read(self):
        board = GameEngine().create_board(ADVANCED_VARIANT)
        path = write_board_file(self.dir / "boards" / "advanced.json", board,
                                ADVANCED_VARIANT, "Ladder Game Advanced")

        variant = read_board_file(path)

        self.assertEqual(variant.name, ADVANCED_VARIANT)
        self.assertEqual(variant.display_name, "Ladder Game Advanced")
        self.assertEqual(variant.path_length, 90)
        self.assertEqual(variant.winning_tile_id, 90)
        rebuilt = variant.build_board()
        for tile_id, tile in board.tiles.items():
            self.assertEqual(rebuilt.get_tile(tile_id).action, tile.action)

    def test_board_to_json(self):
        board = GameEngine().create_board(CLASSIC_VARIANT)
        document = board_to_json(board, CLASSIC_VARIANT)

        self.assertEqual(document["variantName"], CLASSIC_VARIANT)
        self.assertEqual(len(document["tiles"]), 90)
        self.assertEqual(document["tiles"][4], {
            "id": 5, "action": {"kind": "reroute", "destination": 17, "direction": "up"}
        })

    def test_minimal_file(self):
        path = self.write_json({
            "variantName": "tiny",
            "tiles": [{"id": 1}, {"id": 2, "action": {"kind": "skip_next_turn"}}, {"id": 3}],
        })
        variant = read_board_file(path)
        self.assertEqual(variant.path_length, 3)
        self.assertEqual(variant.winning_tile_id, 3)
        self.assertEqual(variant.actions, {2: SkipNextTurn()})

    def test_write_errors(self):
        board = GameEngine().create_board()
        with self.assertRaises(BoardFileError):
            write_board_file("", board, CLASSIC_VARIANT)
        with self.assertRaises(BoardFileError):
            write_board_file(self.dir / "x.json", None, CLASSIC_VARIANT)

    def test_missing_file(self):
        with self.assertRaises(BoardFileError) as ctx:
            read_board_file(self.dir / "missing.json")
        self.assertNotIsInstance(ctx.exception, DataFormatError)
        self.assertIn("missing.json", str(ctx.exception))

    def test_invalid_json(self):
        path = self.dir / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with self.assertRaises(DataFormatError):
            read_board_file(path)

    def test_invalid_documents(self):
        documents = [
            [1, 2, 3],
            {"tiles": []},
            {"variantName": "x"},
            {"variantName": "x", "tiles": {}},
            {"variantName": "x", "tiles": [{"action": {"kind": "no_op"}}]},
            {"variantName": "x", "tiles": [{"id": "one"}]},
            {"variantName": "x", "pathLength": 10, "tiles": [{"id": 11}]},
            {"variantName": "x", "tiles": [{"id": 1, "action": {"kind": "teleport"}}]},
            {"variantName": "x", "tiles": [{"id": 1, "action": {"kind": "reroute"}}]},
            {"variantName": "x", "pathLength": 10,
             "tiles": [{"id": 3, "action": {"kind": "reroute", "destination": 50, "direction": "up"}}]},
        ]
        for document in documents:
            path = self.write_json(document)
            with self.assertRaises(DataFormatError, msg=str(document)):
                read_board_file(path)

    def test_error_names_tile_entry(self):
        path = self.write_json({"variantName": "x", "tiles": [{"id": 1}, {"id": "two"}]})
        with self.assertRaises(DataFormatError) as ctx:
            read_board_file(path)
        self.assertEqual(ctx.exception.entry, 2)
        self.assertIn("tile entry 2", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
