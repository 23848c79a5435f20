from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import ClassVar, Optional, Sequence

from ..engine.config import AIWeights, ai_weights
from ..engine.types import GameState, Move
from .base import BaseStrategy
from .features import build_move_option
from .types import MoveOption, StrategyContext


@dataclass(slots=True)
class HeuristicStrategy(BaseStrategy):
    """Fixed-weight greedy opponent.

    Exits beat everything; otherwise rosettes, captures and safe landings are
    rewarded, plus a bonus for distance covered and for how far along the
    route the piece ends up.
    """

    name: ClassVar[str] = "heuristic"

    rng: Optional[random.Random] = None
    weights: AIWeights = field(default_factory=lambda: ai_weights)

    def _score_move(self, ctx: StrategyContext, move: MoveOption) -> float:
        return score_option(move, self.weights)


def score_option(option: MoveOption, weights: AIWeights = ai_weights) -> float:
    if option.is_exit:
        return weights.exit

    score = 0.0
    if option.lands_on_rosette:
        score += weights.rosette
    if option.can_capture:
        score += weights.capture
    if option.lands_safe:
        score += weights.safe
    if option.lands_on_return_safe:
        score += weights.return_safe_bonus

    if option.end_distance > option.start_distance:
        score += option.progress * weights.progress_per_step
        score += option.end_distance

    if option.enters_board:
        score += weights.enter_board
    return score


def score_move(move: Move, state: GameState) -> float:
    """Heuristic value of one legal move in ``state``."""
    return score_option(build_move_option(state, move))


def choose_ai_move(
    moves: Sequence[Move], state: GameState, rng: Optional[random.Random] = None
) -> Optional[Move]:
    """
    Pick the computer player's move.

    Args:
        moves: Legal moves for the side to play
        state: State the moves were generated from
        rng: Source for tie-breaking among equally scored moves

    Returns:
        Optional[Move]: The chosen move, or None when there is nothing to play
    """
    if not moves:
        return None
    if len(moves) == 1:
        return moves[0]
    return HeuristicStrategy(rng=rng).decide(state, moves)
