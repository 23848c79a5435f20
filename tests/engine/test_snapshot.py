import json
import os
import random
import tempfile
import unittest

from royal_ur.engine.dice import roll_die
from royal_ur.engine.errors import SnapshotError
from royal_ur.engine.game import apply_move, initial_state, resolve_turn, with_roll
from royal_ur.engine.snapshot import (
    Snapshot,
    SnapshotStore,
    snapshot_from_dict,
    snapshot_to_dict,
)
from royal_ur.engine.types import GameMode, GameStatus, Player
from royal_ur.strategy.random_strategy import RandomStrategy


def mid_game_state(seed=5, turns=40):
    """Play a few random turns and stop with a roll pending a move."""
    rng = random.Random(seed)
    strategy = RandomStrategy(rng=rng)
    state = initial_state(Player.BLACK)
    for _ in range(turns):
        state = with_roll(state, roll_die(rng))
        if state.status is GameStatus.AWAITING_MOVE:
            move = strategy.decide(state, state.legal_moves)
            state = resolve_turn(apply_move(state, move), move)
    while state.status is not GameStatus.AWAITING_MOVE:
        state = with_roll(state, roll_die(rng))
    return state


class TestSnapshotCodec(unittest.TestCase):
    def setUp(self):
        self.snapshot = Snapshot(
            state=mid_game_state(), mode=GameMode.TWO_PLAYER, persist=True
        )
        self.data = json.loads(json.dumps(snapshot_to_dict(self.snapshot)))

    def test_roundtrip(self):
        restored = snapshot_from_dict(self.data)
        self.assertEqual(restored, self.snapshot)

    def test_resolving_state_keeps_last_move(self):
        state = self.snapshot.state
        applied = apply_move(state, state.legal_moves[0])
        data = json.loads(json.dumps(snapshot_to_dict(Snapshot(applied))))
        self.assertEqual(data["lastMove"]["pieceId"], state.legal_moves[0].piece_id)
        self.assertEqual(snapshot_from_dict(data).state.last_move, applied.last_move)

    def test_wire_names(self):
        piece = self.data["pieces"][0]
        self.assertEqual(set(piece), {"id", "player", "position", "journey"})
        self.assertEqual(self.data["gameMode"], "two_player")
        self.assertIs(self.data["shouldPersistState"], True)
        off = [p for p in self.data["pieces"] if p["position"] == "off"]
        self.assertTrue(all(p["journey"] is None for p in off))

    def test_missing_field(self):
        del self.data["status"]
        with self.assertRaises(SnapshotError):
            snapshot_from_dict(self.data)

    def test_unknown_status(self):
        self.data["status"] = "thinking"
        with self.assertRaises(SnapshotError):
            snapshot_from_dict(self.data)

    def test_unknown_player(self):
        self.data["currentPlayer"] = "red"
        with self.assertRaises(SnapshotError):
            snapshot_from_dict(self.data)

    def test_bad_position_label(self):
        self.data["pieces"][0]["position"] = "w17"
        with self.assertRaises(SnapshotError):
            snapshot_from_dict(self.data)

    def test_boolean_roll_rejected(self):
        self.data["diceRoll"] = True
        with self.assertRaises(SnapshotError):
            snapshot_from_dict(self.data)

    def test_not_an_object(self):
        for data in (None, [], "state"):
            with self.assertRaises(SnapshotError):
                snapshot_from_dict(data)

    def test_board_invariant_violation(self):
        data = json.loads(json.dumps(snapshot_to_dict(Snapshot(initial_state(Player.BLACK)))))
        for raw in data["pieces"][:2]:
            raw["position"] = "5"
            raw["journey"] = "outbound"
        with self.assertRaises(SnapshotError):
            snapshot_from_dict(data)

    def test_winner_without_game_over(self):
        self.data["winner"] = "black"
        with self.assertRaises(SnapshotError):
            snapshot_from_dict(self.data)


class TestSnapshotTurnFields(unittest.TestCase):
    def encode(self, state):
        return json.loads(json.dumps(snapshot_to_dict(Snapshot(state))))

    def test_tampered_move_destination(self):
        data = self.encode(with_roll(initial_state(Player.BLACK), 2))
        data["validMoves"][0]["endPosition"] = "w2"
        with self.assertRaises(SnapshotError):
            snapshot_from_dict(data)

    def test_moves_not_matching_roll(self):
        data = self.encode(with_roll(initial_state(Player.BLACK), 2))
        data["diceRoll"] = 3
        with self.assertRaises(SnapshotError):
            snapshot_from_dict(data)

    def test_awaiting_move_needs_moves_and_roll(self):
        data = self.encode(initial_state(Player.BLACK))
        data["status"] = "awaiting_move"
        with self.assertRaises(SnapshotError):
            snapshot_from_dict(data)
        data["diceRoll"] = 2
        with self.assertRaises(SnapshotError):
            snapshot_from_dict(data)

    def test_moves_offered_while_awaiting_roll(self):
        data = self.encode(with_roll(initial_state(Player.BLACK), 2))
        data["status"] = "awaiting_roll"
        with self.assertRaises(SnapshotError):
            snapshot_from_dict(data)

    def test_resolving_needs_last_move(self):
        state = with_roll(initial_state(Player.BLACK), 2)
        data = self.encode(apply_move(state, state.legal_moves[0]))
        data["lastMove"] = None
        with self.assertRaises(SnapshotError):
            snapshot_from_dict(data)

    def test_last_move_must_match_board(self):
        state = with_roll(initial_state(Player.BLACK), 2)
        data = self.encode(apply_move(state, state.legal_moves[0]))
        data["lastMove"]["endPosition"] = "b2"
        with self.assertRaises(SnapshotError):
            snapshot_from_dict(data)

    def test_stale_last_move(self):
        state = with_roll(initial_state(Player.BLACK), 2)
        applied = apply_move(state, state.legal_moves[0])
        data = self.encode(applied)
        data["status"] = "awaiting_roll"
        with self.assertRaises(SnapshotError):
            snapshot_from_dict(data)


class TestSnapshotStore(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "saves", "game.json")
        self.store = SnapshotStore(self.path)

    def tearDown(self):
        self.tmp.cleanup()

    def test_missing_file(self):
        self.assertIsNone(self.store.load())

    def test_save_and_load(self):
        snapshot = Snapshot(state=mid_game_state(seed=11), persist=True)
        self.store.save(snapshot)
        self.assertTrue(os.path.exists(self.path))
        self.assertEqual(self.store.load(), snapshot)

    def test_garbage_is_discarded(self):
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w") as f:
            f.write("{not json")
        self.assertIsNone(self.store.load())

    def test_invalid_snapshot_is_discarded(self):
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w") as f:
            json.dump({"pieces": []}, f)
        self.assertIsNone(self.store.load())

    def test_clear(self):
        self.store.save(Snapshot(state=initial_state(Player.BLACK)))
        self.store.clear()
        self.assertFalse(os.path.exists(self.path))
        self.store.clear()


if __name__ == "__main__":
    unittest.main()
