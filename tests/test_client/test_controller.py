"""
Tests for the local game controller.

Runs headless on a QCoreApplication; no window is opened.

Run from project root: python -m pytest tests/test_client -v
"""

import sys
import tempfile
import unittest
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from PyQt6.QtCore import QCoreApplication, QEventLoop, QTimer

from client.config import ClientSettings
from client.local import LocalGameController
from core.game_engine import Board, Dice, Reroute
from core.persistence import GameRepository, init_database
from shared.constants import CLASSIC_VARIANT, PLAYER_TOKENS, WINNING_TILE_ID
from shared.enums import GamePhase


class ScriptedDice(Dice):
    """Dice that return a fixed sequence of faces."""

    def __init__(self, faces):
        super().__init__(seed=0)
        self.faces = list(faces)

    def roll(self) -> int:
        return self.faces.pop(0)


class Recorder:
    """Collects the arguments of every signal emission."""

    def __init__(self, signal):
        self.calls = []
        signal.connect(self)

    def __call__(self, *args):
        self.calls.append(args)


class ControllerTestCase(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db = init_database(Path(self.temp_dir.name) / "test.db")
        self.controller = LocalGameController(
            settings=ClientSettings(turn_delay_ms=0, auto_play=False),
            repository=GameRepository(self.db),
        )
        self.errors = Recorder(self.controller.error_occurred)

    def tearDown(self):
        self.controller.set_auto_play(False)
        self.db.close_connection()
        self.temp_dir.cleanup()

    def start(self, faces=None, board=None, names=("Alice", "Bob")):
        self.assertTrue(self.controller.create_game(CLASSIC_VARIANT))
        game = self.controller.game
        if faces is not None:
            game.dice = ScriptedDice(faces)
        if board is not None:
            game.set_board(board)
        ids = [self.controller.add_player(name) for name in names]
        self.assertTrue(self.controller.start_game())
        return ids


class TestSetup(ControllerTestCase):

    def test_tokens_assigned_in_order(self):
        self.controller.create_game()
        self.controller.add_player("Alice")
        self.controller.add_player("Bob")

        tokens = [p.token for p in self.controller.game.players]
        self.assertEqual(tokens, PLAYER_TOKENS[:2])

    def test_duplicate_name(self):
        self.controller.create_game()
        self.assertIsNotNone(self.controller.add_player("Alice"))
        self.assertIsNone(self.controller.add_player("Alice"))
        self.assertEqual(len(self.errors.calls), 1)

    def test_add_player_without_game(self):
        self.assertIsNone(self.controller.add_player("Alice"))
        self.assertEqual(self.errors.calls, [("No game created",)])

    def test_unknown_variant(self):
        self.assertFalse(self.controller.create_game("ladder_nonexistent"))
        self.assertIsNone(self.controller.game)
        self.assertEqual(len(self.errors.calls), 1)

    def test_missing_board_file(self):
        missing = Path(self.temp_dir.name) / "missing.json"
        self.assertFalse(self.controller.create_game_from_board_file(missing))
        self.assertEqual(len(self.errors.calls), 1)

    def test_start_needs_two_players(self):
        self.controller.create_game()
        self.controller.add_player("Alice")
        self.assertFalse(self.controller.start_game())
        self.assertFalse(self.controller.is_game_active)

    def test_roll_before_start(self):
        self.controller.create_game()
        self.assertFalse(self.controller.roll_dice())
        self.assertEqual(self.errors.calls, [("No active game",)])


class TestTurns(ControllerTestCase):

    def test_signals_for_plain_move(self):
        alice_id, bob_id = self.start(faces=[1, 2])
        moved = Recorder(self.controller.player_moved)
        switched = Recorder(self.controller.player_switched)
        completed = Recorder(self.controller.turn_completed)
        states = Recorder(self.controller.game_state_changed)

        self.assertTrue(self.controller.roll_dice())

        self.assertEqual(moved.calls, [(alice_id, 1, 4, 3)])
        self.assertEqual(switched.calls, [(bob_id, "Bob")])
        self.assertEqual(completed.calls, [(1,)])
        self.assertEqual(states.calls[-1][0]["current_player_id"], bob_id)
        self.assertEqual(self.errors.calls, [])

    def test_signals_for_reroute(self):
        alice_id, _ = self.start(faces=[2, 2])
        moved = Recorder(self.controller.player_moved)
        triggered = Recorder(self.controller.action_triggered)
        events = Recorder(self.controller.game_event)

        self.controller.roll_dice()

        self.assertEqual(moved.calls, [(alice_id, 1, 5, 4), (alice_id, 5, 17, 0)])
        self.assertEqual(triggered.calls, [(alice_id, "reroute")])
        self.assertEqual(
            [call[0] for call in events.calls],
            ["PLAYER_MOVED", "ACTION_TRIGGERED", "PLAYER_MOVED",
             "CURRENT_PLAYER_CHANGED", "TURN_COMPLETED"]
        )

    def test_win(self):
        alice_id, _ = self.start(faces=[3, 2])
        game = self.controller.game
        game.players[0].place_on_tile(game.board.get_tile(86))
        won = Recorder(self.controller.game_won)

        self.controller.roll_dice()

        self.assertEqual(won.calls, [(alice_id, "Alice")])
        self.assertFalse(self.controller.is_game_active)
        self.assertFalse(self.controller.roll_dice())

    def test_roll_refused_while_turn_in_progress(self):
        self.start(faces=[1, 2])
        nested = []

        def roll_again(*args):
            nested.append(self.controller.roll_dice())

        self.controller.player_moved.connect(roll_again)
        self.assertTrue(self.controller.roll_dice())

        self.assertEqual(nested, [False])
        self.assertEqual(self.errors.calls, [("A turn is already in progress",)])
        self.assertEqual(self.controller.game.turn_number, 2)
        self.assertFalse(self.controller.is_turn_in_progress)

    def test_failed_turn_stops_auto_play(self):
        board = Board.linear(10)
        board.set_action(5, Reroute(42, "up"))
        self.start(faces=[2, 2], board=board)
        self.controller.set_auto_play(True)

        self.assertFalse(self.controller.roll_dice())

        self.assertEqual(len(self.errors.calls), 1)
        self.assertTrue(self.errors.calls[0][0].startswith("Turn failed"))
        self.assertFalse(self.controller.is_next_turn_scheduled)
        self.assertFalse(self.controller.is_turn_in_progress)
        self.assertEqual(self.controller.game.phase, GamePhase.FAULTED)
        self.assertFalse(self.controller.is_game_active)

        self.assertFalse(self.controller.roll_dice())
        self.assertEqual(self.errors.calls[-1], ("No active game",))
        self.assertEqual(self.controller.game.players[0].tile_id, 5)


class TestAutoPlay(ControllerTestCase):

    def test_start_schedules_first_turn(self):
        self.controller.set_auto_play(True)
        self.start()
        self.assertTrue(self.controller.is_next_turn_scheduled)

        self.controller.set_auto_play(False)
        self.assertFalse(self.controller.is_next_turn_scheduled)

    def test_plays_until_someone_wins(self):
        self.start()
        self.controller.game.dice = Dice(seed=3)
        won = Recorder(self.controller.game_won)

        loop = QEventLoop()
        self.controller.game_won.connect(loop.quit)
        QTimer.singleShot(20000, loop.quit)
        self.controller.set_auto_play(True)
        loop.exec()

        self.assertEqual(len(won.calls), 1)
        winner = self.controller.game.winner
        self.assertEqual(winner.tile_id, WINNING_TILE_ID)
        self.assertFalse(self.controller.is_next_turn_scheduled)


class TestSaveLoad(ControllerTestCase):

    def test_save_and_load(self):
        self.start(faces=[2, 3, 2, 3, 2, 3])
        for _ in range(3):
            self.controller.roll_dice()
        game_id = self.controller.game.id
        positions = [p.tile_id for p in self.controller.game.players]

        self.assertTrue(self.controller.save_game())

        other = LocalGameController(
            settings=ClientSettings(turn_delay_ms=0),
            repository=GameRepository(self.db),
        )
        switched = Recorder(other.player_switched)
        self.assertTrue(other.load_game(game_id))

        self.assertEqual([p.tile_id for p in other.game.players], positions)
        self.assertTrue(other.is_game_active)
        self.assertEqual(switched.calls, [(other.game.current_player.id, "Bob")])

    def test_load_unknown_game(self):
        self.assertFalse(self.controller.load_game("does-not-exist"))
        self.assertEqual(len(self.errors.calls), 1)

    def test_save_without_game(self):
        self.assertFalse(self.controller.save_game())


if __name__ == "__main__":
    unittest.main()
