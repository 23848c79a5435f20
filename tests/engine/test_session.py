import json
import os
import random
import tempfile
import unittest

from royal_ur.engine.board import get_cell_properties
from royal_ur.engine.config import session_config
from royal_ur.engine.errors import IllegalMoveError
from royal_ur.engine.game import initial_state, with_roll
from royal_ur.engine.snapshot import Snapshot, SnapshotStore
from royal_ur.engine.types import (
    GameMode,
    GameStatus,
    Journey,
    Move,
    OFF_BOARD,
    Player,
    Position,
    Stack,
)
from royal_ur.session import Session


def place(state, piece_id, label, journey=Journey.OUTBOUND):
    pos = Position.parse(label)
    if not pos.is_on_board:
        journey = Journey.NONE
    pieces = tuple(
        p.move_to(pos, journey) if p.piece_id == piece_id else p for p in state.pieces
    )
    stacks = dict(state.stacks)
    props = get_cell_properties(pos)
    if props.is_stackable:
        player = Player.BLACK if piece_id < 7 else Player.WHITE
        owner = player if props.requires_owner else None
        stacks[pos] = stacks.get(pos, Stack()).push(piece_id, owner)
    return state.evolve(pieces=pieces, stacks=stacks)


class TestSessionVsAI(unittest.TestCase):
    def setUp(self):
        self.session = Session(rng=random.Random(3))

    def test_starts_waiting_for_human(self):
        self.assertEqual(self.session.state.status, GameStatus.AWAITING_ROLL)
        self.assertIs(self.session.state.current_player, Player.BLACK)
        self.assertIsNone(self.session.next_delay)

    def test_full_exchange(self):
        s = self.session
        state = s.roll(2)
        self.assertEqual(state.status, GameStatus.AWAITING_MOVE)
        self.assertEqual(len(state.legal_moves), 7)

        state = s.choose(state.legal_moves[0])
        self.assertEqual(state.status, GameStatus.RESOLVING)
        self.assertEqual(s.next_delay, session_config.animation_delay)

        state = s.settle()
        self.assertEqual(state.status, GameStatus.OPPONENT_THINKING)
        self.assertIs(state.current_player, Player.WHITE)
        self.assertEqual(s.next_delay, session_config.ai_think_delay)

        state = s.play_ai_turn(2)
        self.assertEqual(state.status, GameStatus.RESOLVING)
        self.assertIn(state.last_move.piece_id, range(7, 14))

        state = s.advance()
        self.assertEqual(state.status, GameStatus.AWAITING_ROLL)
        self.assertIs(state.current_player, Player.BLACK)

    def test_human_rosette_keeps_turn(self):
        s = self.session
        s.choose(s.roll(4).legal_moves[0])
        state = s.settle()
        self.assertEqual(state.status, GameStatus.AWAITING_ROLL)
        self.assertIs(state.current_player, Player.BLACK)

    def test_ai_rosette_plays_again(self):
        s = self.session
        s.choose(s.roll(1).legal_moves[0])
        s.settle()
        s.play_ai_turn(4)
        state = s.settle()
        self.assertEqual(state.status, GameStatus.OPPONENT_THINKING)
        self.assertIs(state.current_player, Player.WHITE)

    def test_ai_without_moves_passes(self):
        s = self.session
        state = s.state.evolve(
            current_player=Player.WHITE, status=GameStatus.OPPONENT_THINKING
        )
        for pid in range(8, 14):
            state = place(state, pid, "finished")
        s.state = place(state, 7, "4", Journey.RETURN)
        state = s.play_ai_turn(3)
        self.assertEqual(state.status, GameStatus.AWAITING_ROLL)
        self.assertIs(state.current_player, Player.BLACK)
        self.assertEqual(state.dice_roll, 3)

    def test_human_pass_hands_to_ai(self):
        s = self.session
        state = s.state
        for pid in range(1, 7):
            state = place(state, pid, "finished")
        s.state = place(state, 0, "4", Journey.RETURN)
        state = s.roll(4)
        self.assertEqual(state.status, GameStatus.OPPONENT_THINKING)
        self.assertIs(state.current_player, Player.WHITE)

    def test_triggers_out_of_order(self):
        s = self.session
        with self.assertRaises(IllegalMoveError):
            s.settle()
        with self.assertRaises(IllegalMoveError):
            s.play_ai_turn()
        with self.assertRaises(IllegalMoveError):
            s.advance()
        state = s.roll(2)
        with self.assertRaises(IllegalMoveError):
            s.roll(2)
        s.choose(state.legal_moves[0])
        with self.assertRaises(IllegalMoveError):
            s.choose(state.legal_moves[0])

    def test_rejects_move_not_on_offer(self):
        s = self.session
        s.roll(2)
        bogus = Move(piece_id=0, start_position=OFF_BOARD, end_position=Position.parse("b3"))
        with self.assertRaises(IllegalMoveError):
            s.choose(bogus)

    def test_human_cannot_roll_for_ai(self):
        s = self.session
        s.choose(s.roll(2).legal_moves[0])
        s.settle()
        with self.assertRaises(IllegalMoveError):
            s.roll(2)

    def test_new_game_resets(self):
        s = self.session
        s.roll(2)
        state = s.new_game()
        self.assertEqual(state.status, GameStatus.AWAITING_ROLL)
        self.assertTrue(all(p.position == OFF_BOARD for p in state.pieces))


class TestSessionTwoPlayer(unittest.TestCase):
    def test_both_seats_roll(self):
        s = Session(rng=random.Random(1))
        s.roll(2)
        s.set_mode(GameMode.TWO_PLAYER)
        self.assertEqual(s.state.status, GameStatus.AWAITING_ROLL)
        s.choose(s.roll(2).legal_moves[0])
        state = s.settle()
        self.assertEqual(state.status, GameStatus.AWAITING_ROLL)
        self.assertIs(state.current_player, Player.WHITE)
        self.assertEqual(s.roll(1).status, GameStatus.AWAITING_MOVE)


class TestSessionPersistence(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "game.json")
        self.store = SnapshotStore(self.path)

    def tearDown(self):
        self.tmp.cleanup()

    def test_saves_each_transition_and_restores(self):
        s = Session(persist=True, store=self.store, rng=random.Random(4))
        s.roll(3)
        self.assertTrue(os.path.exists(self.path))
        restored = Session.restore(self.store)
        self.assertEqual(restored.state, s.state)
        self.assertTrue(restored.persist)
        self.assertIs(restored.mode, GameMode.VS_AI)

    def test_not_saved_without_persistence(self):
        s = Session(store=self.store)
        s.roll(3)
        self.assertFalse(os.path.exists(self.path))

    def test_disabling_persistence_clears_store(self):
        s = Session(store=self.store)
        s.set_persist(True)
        self.assertTrue(os.path.exists(self.path))
        s.set_persist(False)
        self.assertFalse(os.path.exists(self.path))

    def save(self, state, mode=GameMode.VS_AI):
        self.store.save(Snapshot(state=state, mode=mode, persist=True))

    def test_tampered_move_is_never_applied(self):
        self.save(with_roll(initial_state(Player.BLACK), 2))
        with open(self.path) as f:
            data = json.load(f)
        data["validMoves"][0]["endPosition"] = "w2"
        with open(self.path, "w") as f:
            json.dump(data, f)
        s = Session.restore(self.store)
        self.assertEqual(s.state.status, GameStatus.AWAITING_ROLL)
        self.assertTrue(all(p.position == OFF_BOARD for p in s.state.pieces))

    def test_restored_ai_turn_is_handed_to_ai(self):
        self.save(initial_state(Player.WHITE))
        s = Session.restore(self.store, rng=random.Random(2))
        self.assertEqual(s.state.status, GameStatus.OPPONENT_THINKING)
        self.assertEqual(s.advance().status, GameStatus.RESOLVING)

    def test_restored_thinking_on_human_turn_starts_fresh(self):
        state = initial_state(Player.BLACK).evolve(status=GameStatus.OPPONENT_THINKING)
        self.save(state)
        s = Session.restore(self.store)
        self.assertEqual(s.state.status, GameStatus.AWAITING_ROLL)
        self.assertIs(s.state.current_player, Player.BLACK)
        self.assertEqual(s.roll(2).status, GameStatus.AWAITING_MOVE)

    def test_restored_two_player_keeps_both_seats_human(self):
        self.save(initial_state(Player.WHITE), mode=GameMode.TWO_PLAYER)
        s = Session.restore(self.store)
        self.assertEqual(s.state.status, GameStatus.AWAITING_ROLL)
        self.assertEqual(s.roll(1).status, GameStatus.AWAITING_MOVE)

    def test_restore_falls_back_to_fresh_game(self):
        fresh = Session.restore(self.store)
        self.assertEqual(fresh.state.status, GameStatus.AWAITING_ROLL)
        with open(self.path, "w") as f:
            f.write("[]")
        fresh = Session.restore(self.store)
        self.assertTrue(all(p.position == OFF_BOARD for p in fresh.state.pieces))


if __name__ == "__main__":
    unittest.main()
