from __future__ import annotations

from typing import Sequence

from ..engine.board import RETURN_SAFE_CELL, get_cell_properties, piece_by_id, route_index
from ..engine.types import GameState, Journey, Move, OFF_BOARD
from .types import MoveOption, StrategyContext


def _resulting_journey(current: Journey, move: Move) -> Journey:
    if move.is_exit:
        return Journey.NONE
    if move.starts_return_journey:
        return Journey.RETURN
    if current is Journey.NONE:
        return Journey.OUTBOUND
    return current


def build_move_option(state: GameState, move: Move) -> MoveOption:
    piece = piece_by_id(state, move.piece_id)
    journey = _resulting_journey(piece.journey, move)
    props = get_cell_properties(move.end_position, journey)

    return MoveOption(
        move=move,
        piece_id=move.piece_id,
        start_distance=route_index(piece.player, move.start_position, piece.journey),
        end_distance=route_index(piece.player, move.end_position, journey),
        enters_board=move.start_position == OFF_BOARD,
        is_exit=move.is_exit,
        can_capture=move.is_capture,
        lands_on_rosette=props.is_rosette,
        lands_safe=props.is_safe,
        lands_on_return_safe=(
            move.end_position == RETURN_SAFE_CELL and journey is Journey.RETURN
        ),
    )


def build_move_options(state: GameState, moves: Sequence[Move]) -> StrategyContext:
    """Convert a state and its legal moves into a strategy context."""
    return StrategyContext(
        state=state,
        dice_roll=state.dice_roll,
        moves=[build_move_option(state, move) for move in moves],
    )
