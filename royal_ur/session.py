"""
Turn state machine driving one game on behalf of a host application.

States are the ``GameStatus`` values; each public method is one named trigger
and performs exactly one engine step. Presentation delays are only reported
through :attr:`Session.next_delay`: the host waits, then calls
:meth:`Session.advance`, which refuses to run a step twice.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Optional

from loguru import logger

from .engine.config import session_config
from .engine.dice import roll_die
from .engine.errors import CorruptStateError, IllegalMoveError
from .engine.game import apply_move, initial_state, pass_turn, resolve_turn, with_roll
from .engine.snapshot import Snapshot, SnapshotStore
from .engine.types import GameMode, GameState, GameStatus, Move, Player
from .strategy.base import BaseStrategy
from .strategy.heuristic import HeuristicStrategy


@dataclass(slots=True)
class Session:
    mode: GameMode = GameMode.VS_AI
    persist: bool = False
    ai_player: Player = Player.WHITE
    rng: random.Random = field(default_factory=random.Random)
    store: Optional[SnapshotStore] = None
    strategy: Optional[BaseStrategy] = None
    state: GameState = field(init=False)

    def __post_init__(self) -> None:
        if self.strategy is None:
            self.strategy = HeuristicStrategy(rng=self.rng)
        self.state = self._hand_over(initial_state())

    @classmethod
    def restore(cls, store: SnapshotStore, **kwargs) -> "Session":
        """Resume from the stored snapshot, or start fresh if there is none."""
        snapshot = store.load()
        if snapshot is None:
            return cls(store=store, **kwargs)
        session = cls(mode=snapshot.mode, persist=snapshot.persist, store=store, **kwargs)
        if session._fits_seat(snapshot.state):
            session.state = session._hand_over(snapshot.state)
        else:
            logger.warning(
                f"Saved game at {store.path} does not fit the {session.mode.value} seats, starting fresh"
            )
        return session

    # --- Queries ---
    def is_ai(self, player: Player) -> bool:
        return self.mode is GameMode.VS_AI and player is self.ai_player

    @property
    def next_delay(self) -> Optional[float]:
        """Seconds the host should wait before calling :meth:`advance`."""
        if self.state.status is GameStatus.RESOLVING:
            return session_config.animation_delay
        if self.state.status is GameStatus.OPPONENT_THINKING:
            return session_config.ai_think_delay
        return None

    def snapshot(self) -> Snapshot:
        return Snapshot(state=self.state, mode=self.mode, persist=self.persist)

    # --- Triggers ---
    def roll(self, value: Optional[int] = None) -> GameState:
        """RollRequested: a human player rolls the die."""
        self._expect(GameStatus.AWAITING_ROLL, "roll")
        if self.is_ai(self.state.current_player):
            raise IllegalMoveError("The computer player rolls for itself")
        roll = value if value is not None else roll_die(self.rng)
        return self._commit(self._hand_over(with_roll(self.state, roll)))

    def choose(self, move: Move) -> GameState:
        """MoveChosen: apply one of the current legal moves."""
        self._expect(GameStatus.AWAITING_MOVE, "choose a move")
        if move not in self.state.legal_moves:
            raise IllegalMoveError(f"Move {move} is not legal for the current roll")
        return self._commit(apply_move(self.state, move))

    def settle(self) -> GameState:
        """MoveSettled: the applied move has been shown; resolve the turn."""
        self._expect(GameStatus.RESOLVING, "resolve the turn")
        move = self.state.last_move
        if move is None:
            raise CorruptStateError("Resolving a turn with no applied move")
        return self._commit(self._hand_over(resolve_turn(self.state, move)))

    def play_ai_turn(self, value: Optional[int] = None) -> GameState:
        """The computer player rolls, picks and applies its move."""
        self._expect(GameStatus.OPPONENT_THINKING, "play the computer's turn")
        roll = value if value is not None else roll_die(self.rng)
        rolled = with_roll(self.state, roll)
        if rolled.status is not GameStatus.AWAITING_MOVE:
            return self._commit(self._hand_over(rolled))

        move = self.strategy.decide(rolled, rolled.legal_moves)
        if move is None:
            logger.warning(f"{self.strategy.name} returned no move, passing the turn")
            return self._commit(self._hand_over(pass_turn(rolled, roll)))
        return self._commit(apply_move(rolled, move))

    def advance(self) -> GameState:
        """Run the step a scheduled delay was waiting for."""
        if self.state.status is GameStatus.RESOLVING:
            return self.settle()
        if self.state.status is GameStatus.OPPONENT_THINKING:
            return self.play_ai_turn()
        raise IllegalMoveError(f"Nothing scheduled while {self.state.status.value}")

    def new_game(self) -> GameState:
        return self._commit(self._hand_over(initial_state()))

    def set_mode(self, mode: GameMode) -> GameState:
        self.mode = mode
        return self.new_game()

    def set_persist(self, persist: bool) -> None:
        self.persist = persist
        if self.store is None:
            return
        if persist:
            self.store.save(self.snapshot())
        else:
            self.store.clear()

    # --- Internals ---
    def _expect(self, status: GameStatus, action: str) -> None:
        if self.state.status is not status:
            raise IllegalMoveError(f"Cannot {action} while {self.state.status.value}")

    def _fits_seat(self, state: GameState) -> bool:
        """Only the computer thinks, and only humans pick from offered moves."""
        ai_turn = self.is_ai(state.current_player)
        if state.status is GameStatus.OPPONENT_THINKING:
            return ai_turn
        if state.status is GameStatus.AWAITING_MOVE:
            return not ai_turn
        return True

    def _hand_over(self, state: GameState) -> GameState:
        """Mark the turn as the computer's when it is the next to roll."""
        if state.status is GameStatus.AWAITING_ROLL and self.is_ai(state.current_player):
            return state.evolve(
                status=GameStatus.OPPONENT_THINKING,
                message=f"{state.message} AI is thinking...".strip(),
            )
        return state

    def _commit(self, state: GameState) -> GameState:
        logger.debug(
            f"{self.state.status.value} -> {state.status.value} ({state.current_player.value})"
        )
        self.state = state
        if self.persist and self.store is not None:
            self.store.save(self.snapshot())
        return state
