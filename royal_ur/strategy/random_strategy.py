from __future__ import annotations

import random
from dataclasses import dataclass
from typing import ClassVar, Optional

from .base import BaseStrategy
from .types import MoveOption, StrategyContext


@dataclass(slots=True)
class RandomStrategy(BaseStrategy):
    """Uniformly random legal move; a baseline for simulations."""

    name: ClassVar[str] = "random"

    rng: Optional[random.Random] = None

    def _score_move(self, ctx: StrategyContext, move: MoveOption) -> float:
        return 0.0
