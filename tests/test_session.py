"""
Tests for the game session: turns, undo, end of game, leaderboard and persistence.
"""

import io
import json
from contextlib import redirect_stdout
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import TestCase, main

from slide2048.config import GAME_STATE_KEY, GameConfig
from slide2048.core.board import Board
from slide2048.core.resolver import Direction
from slide2048.envs import GameStatus, MoveOutcome, Session
from slide2048.storage import GameState, MemoryStore, Snapshot, StorageError, encode_state, load_state, save_state

# ##>: Only 2s are spawned, so that end-of-game boards are predictable.
ONLY_TWOS = GameConfig(tile_values=(2,), tile_probs=(1.0,))

# ##>: Moving right merges the leading pair and leaves (0, 0) as the only empty cell.
ALMOST_OVER = [[2, 2, 8, 16], [4, 8, 16, 32], [8, 16, 32, 64], [16, 32, 64, 128]]
OVER = [[2, 4, 8, 16], [4, 8, 16, 32], [8, 16, 32, 64], [16, 32, 64, 128]]


class FailingStore(MemoryStore):
    """Store whose writes always fail."""

    def set_item(self, key, value):
        raise StorageError('quota exceeded')


class UnreadableStore(MemoryStore):
    def get_item(self, key):
        raise StorageError('storage unavailable')


def saved_session(grid, score=0, previous=None, config=None, store=None) -> Session:
    """Session resumed from a game saved in ``store``, a fresh memory store by default."""
    store = store if store is not None else MemoryStore()
    save_state(store, GameState(Board(grid), score, previous))
    return Session(config=config, store=store, seed=0)


class TestStart(TestCase):
    def test_new_session(self):
        """Without a saved game, two tiles are placed and the game is saved."""
        store = MemoryStore()
        session = Session(store=store, seed=1)

        self.assertEqual(len(session.board.empty_cells()), 14)
        self.assertEqual(session.score, 0)
        self.assertEqual(session.status, GameStatus.ACTIVE)
        self.assertFalse(session.can_undo)
        self.assertEqual(load_state(store).board, session.board)

    def test_resume(self):
        grid = [[2, 0, 0, 0], [0, 4, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]]
        session = saved_session(grid, score=36, previous=Snapshot(Board(), 32))
        self.assertEqual(session.board, Board(grid))
        self.assertEqual(session.score, 36)
        self.assertTrue(session.can_undo)

    def test_empty_saved_board(self):
        """An empty saved board starts a new game."""
        session = saved_session([[0] * 4] * 4, score=10)
        self.assertEqual(len(session.board.empty_cells()), 14)
        self.assertEqual(session.score, 0)

    def test_corrupt_saved_game(self):
        store = MemoryStore({GAME_STATE_KEY: '{"gameBoard": 42}'})
        with self.assertLogs('slide2048.storage.gamestate', level='WARNING'):
            session = Session(store=store)
        self.assertEqual(len(session.board.empty_cells()), 14)

    def test_unreadable_store(self):
        with self.assertLogs('slide2048.envs.session', level='WARNING'):
            session = Session(store=UnreadableStore())
        self.assertEqual(len(session.board.empty_cells()), 14)

    def test_oversized_cell(self):
        """A cell beyond 64 bits is a corrupt save, a new game starts."""
        grid = [[2**70, 0, 0, 0], [0] * 4, [0] * 4, [0] * 4]
        store = MemoryStore({GAME_STATE_KEY: json.dumps({'gameBoard': grid, 'currentScore': 0})})
        with self.assertLogs('slide2048.storage.gamestate', level='WARNING'):
            session = Session(store=store)
        self.assertEqual(len(session.board.empty_cells()), 14)
        self.assertEqual(session.status, GameStatus.ACTIVE)

    def test_undecodable_save_file(self):
        """A save file that is not UTF-8 is a corrupt save, a new game starts."""
        with TemporaryDirectory() as directory:
            (Path(directory) / '2048-game-state.json').write_bytes(b'\xff\xfe\x00garbage')
            with self.assertLogs('slide2048.storage.gamestate', level='WARNING'):
                session = Session(config=GameConfig(storage_dir=Path(directory)))
            self.assertEqual(len(session.board.empty_cells()), 14)
            self.assertEqual(session.leaderboard, [])

    def test_resume_finished_game(self):
        """A saved blocked board comes back ended, its score can be submitted."""
        session = saved_session(OVER, score=500)
        self.assertTrue(session.is_ended)
        self.assertEqual(session.final_score, 500)
        self.assertFalse(session.apply_move('left').changed)

        entry = session.submit_score('Hana')
        self.assertEqual(entry.score, 500)

    def test_seed_reproducibility(self):
        self.assertEqual(Session(seed=3).board, Session(seed=3).board)


class TestApplyMove(TestCase):
    def test_changing_move(self):
        """A merge scores, spawns one tile and saves the game."""
        store = MemoryStore()
        session = saved_session([[2, 2, 0, 0], [0] * 4, [0] * 4, [0] * 4], score=8, store=store)
        outcome = session.apply_move('left')

        self.assertIsInstance(outcome, MoveOutcome)
        self.assertTrue(outcome.changed)
        self.assertEqual(outcome.score, 4)
        self.assertEqual(session.score, 12)
        self.assertEqual(session.board[0, 0], 4)
        self.assertEqual(len(session.board.empty_cells()), 14)
        self.assertIsNotNone(outcome.spawned)
        self.assertEqual(outcome.after, session.board)
        self.assertEqual(outcome.before, Board([[2, 2, 0, 0], [0] * 4, [0] * 4, [0] * 4]))
        self.assertEqual(session.previous_board, outcome.before)

        state = load_state(store)
        self.assertEqual(state.board, session.board)
        self.assertEqual(state.score, 12)
        self.assertEqual(state.previous.score, 8)

    def test_non_changing_move(self):
        """A blocked move changes nothing and saves nothing."""
        grid = [[2, 0, 0, 0], [4, 0, 0, 0], [0] * 4, [0] * 4]
        store = MemoryStore()
        session = saved_session(grid, score=4, store=store)
        payload = store.get_item(GAME_STATE_KEY)

        outcome = session.apply_move('left')
        self.assertFalse(outcome.changed)
        self.assertIsNone(outcome.spawned)
        self.assertEqual(session.board, Board(grid))
        self.assertEqual(session.score, 4)
        self.assertFalse(session.can_undo)
        self.assertEqual(store.get_item(GAME_STATE_KEY), payload)

    def test_non_changing_move_keeps_snapshot(self):
        before = Board([[0, 2, 0, 0], [0] * 4, [0] * 4, [0] * 4])
        session = saved_session([[2, 0, 0, 0], [0] * 4, [0] * 4, [0] * 4], score=0, previous=Snapshot(before, 0))

        self.assertFalse(session.apply_move('left').changed)
        self.assertTrue(session.undo())
        self.assertEqual(session.board, before)

    def test_invalid_direction(self):
        session = Session()
        with self.assertRaises(ValueError):
            session.apply_move('sideways')


class TestUndo(TestCase):
    def test_undo_restores_board_and_score(self):
        grid = [[2, 2, 4, 0], [0] * 4, [0] * 4, [0] * 4]
        store = MemoryStore()
        session = saved_session(grid, score=20, store=store)
        session.apply_move('left')
        self.assertEqual(session.score, 24)

        self.assertTrue(session.undo())
        self.assertEqual(session.board, Board(grid))
        self.assertEqual(session.score, 20)

        state = load_state(store)
        self.assertEqual(state.board, Board(grid))
        self.assertIsNone(state.previous)

    def test_second_undo_is_noop(self):
        session = saved_session([[2, 2, 0, 0], [0] * 4, [0] * 4, [0] * 4])
        session.apply_move('left')
        self.assertTrue(session.undo())
        board = session.board
        self.assertFalse(session.undo())
        self.assertEqual(session.board, board)

    def test_nothing_to_undo(self):
        self.assertFalse(Session().undo())

    def test_snapshot_is_latest_move(self):
        session = saved_session([[2, 2, 0, 0], [0] * 4, [0] * 4, [0] * 4])
        session.apply_move('left')
        middle, score = session.board, session.score
        session.apply_move('right')
        session.undo()
        self.assertEqual(session.board, middle)
        self.assertEqual(session.score, score)


class TestEndOfGame(TestCase):
    def setUp(self):
        self.session = saved_session(ALMOST_OVER, score=100, config=ONLY_TWOS)
        self.outcome = self.session.apply_move('right')

    def test_game_ends(self):
        self.assertTrue(self.outcome.changed)
        self.assertTrue(self.outcome.ended)
        self.assertEqual(self.session.board, Board(OVER))
        self.assertEqual(self.session.status, GameStatus.ENDED)
        self.assertEqual(self.session.final_score, 104)

    def test_moves_ignored(self):
        for direction in ('up', 'down', 'left', 'right'):
            outcome = self.session.apply_move(direction)
            self.assertFalse(outcome.changed)
            self.assertTrue(outcome.ended)
        self.assertEqual(self.session.score, 104)

    def test_undo_ignored(self):
        self.assertFalse(self.session.can_undo)
        self.assertFalse(self.session.undo())
        self.assertEqual(self.session.board, Board(OVER))

    def test_submit_score(self):
        self.assertIsNone(self.session.submit_score('   '))
        entry = self.session.submit_score(' Eve ')
        self.assertEqual((entry.name, entry.score), ('Eve', 104))
        self.assertIsNone(self.session.submit_score('Eve'))
        self.assertEqual(self.session.leaderboard, [entry])

    def test_new_game_after_end(self):
        self.session.new_game()
        self.assertEqual(self.session.status, GameStatus.ACTIVE)
        self.assertEqual(self.session.score, 0)
        self.assertIsNone(self.session.final_score)
        self.assertEqual(len(self.session.board.empty_cells()), 14)


class TestSubmitWhileActive(TestCase):
    def test_rejected(self):
        session = Session()
        self.assertIsNone(session.submit_score('Frank'))
        self.assertEqual(session.leaderboard, [])


class TestNewGame(TestCase):
    def test_reset(self):
        store = MemoryStore()
        session = saved_session([[2, 2, 0, 0], [0] * 4, [0] * 4, [0] * 4], score=50, store=store)
        session.apply_move('left')
        session.new_game()

        self.assertEqual(session.score, 0)
        self.assertFalse(session.can_undo)
        self.assertEqual(len(session.board.empty_cells()), 14)
        self.assertEqual(load_state(store).score, 0)


class TestPersistenceFailure(TestCase):
    def test_new_game_goes_on(self):
        """A failed first save is logged and the new game is still set up."""
        with self.assertLogs('slide2048.envs.session', level='WARNING'):
            session = Session(store=FailingStore(), seed=4)
        self.assertEqual(len(session.board.empty_cells()), 14)

    def test_moves_go_on(self):
        """Failed writes are logged and the in-memory game stays playable."""
        grid = [[2, 2, 0, 0], [0] * 4, [0] * 4, [0] * 4]
        store = FailingStore({GAME_STATE_KEY: encode_state(GameState(Board(grid), 0))})
        session = Session(store=store, seed=4)

        with self.assertLogs('slide2048.envs.session', level='WARNING'):
            outcome = session.apply_move('left')
        self.assertTrue(outcome.changed)
        self.assertEqual(session.score, 4)
        self.assertTrue(session.undo())
        self.assertEqual(session.board, Board(grid))


class TestFileStorage(TestCase):
    def test_resume_from_directory(self):
        with TemporaryDirectory() as directory:
            config = GameConfig(storage_dir=Path(directory))
            first = Session(config=config, seed=9)
            for direction in Direction:
                if first.apply_move(direction).changed:
                    break

            second = Session(config=config)
            self.assertEqual(second.board, first.board)
            self.assertEqual(second.score, first.score)


class TestDispatch(TestCase):
    def test_commands(self):
        session = saved_session([[2, 2, 0, 0], [0] * 4, [0] * 4, [0] * 4])
        self.assertTrue(session.dispatch('left').changed)
        self.assertTrue(session.dispatch('undo'))
        self.assertIsNone(session.dispatch('submit-score', 'Gina'))
        session.dispatch('new-game')
        self.assertEqual(session.score, 0)

    def test_unknown_command(self):
        with self.assertRaises(ValueError):
            Session().dispatch('redo')


class TestRender(TestCase):
    def test_render(self):
        session = saved_session([[2, 0, 0, 0], [0] * 4, [0] * 4, [0] * 4], score=16)
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            session.render()
        lines = buffer.getvalue().splitlines()
        self.assertEqual(lines[0], ' \t'.join(['2', '0', '0', '0']))
        self.assertEqual(lines[-1], 'Score: 16')


if __name__ == '__main__':
    main()
