from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..engine.types import GameState, Move


@dataclass(slots=True)
class MoveOption:
    """Structured metadata about a legal move."""

    move: Move
    piece_id: int
    start_distance: int  # index on the combined route, -1 off-board
    end_distance: int
    enters_board: bool
    is_exit: bool
    can_capture: bool
    lands_on_rosette: bool
    lands_safe: bool
    lands_on_return_safe: bool  # cell 4 while on the return journey

    @property
    def progress(self) -> int:
        return self.end_distance - self.start_distance


@dataclass(slots=True)
class StrategyContext:
    """Input payload shared by strategies."""

    state: GameState
    dice_roll: Optional[int]
    moves: List[MoveOption]

    def iter_legal(self) -> Iterable[MoveOption]:
        return iter(self.moves)
