from __future__ import annotations

import random
from typing import ClassVar, Optional, Sequence

import numpy as np

from ..engine.types import GameState, Move
from .features import build_move_options
from .types import MoveOption, StrategyContext


class BaseStrategy:
    """Base class for move-picking strategies with shared selection.

    Subclasses score each option; the highest score wins and ties are broken
    uniformly at random.
    """

    name: ClassVar[str] = "base"
    rng: Optional[random.Random] = None

    def decide(self, state: GameState, moves: Sequence[Move]) -> Optional[Move]:
        ctx = build_move_options(state, moves)
        option = self.select_move(ctx)
        return option.move if option is not None else None

    def select_move(self, ctx: StrategyContext) -> Optional[MoveOption]:
        options = list(ctx.iter_legal())
        if not options:
            return None

        scores = np.asarray([self._score_move(ctx, o) for o in options], dtype=float)
        best = np.flatnonzero(scores == scores.max()).tolist()
        rng = self.rng or random
        return options[rng.choice(best)]

    def _score_move(
        self, ctx: StrategyContext, move: MoveOption
    ) -> float:  # pragma: no cover - abstract
        raise NotImplementedError
