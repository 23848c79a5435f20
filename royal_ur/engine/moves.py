from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from loguru import logger

from .board import (
    get_cell_properties,
    get_outbound_path,
    get_return_path,
    movable_pieces,
    occupant_at,
    outbound_index,
    return_index,
    stack_at,
)
from .config import config
from .dice import is_valid_roll
from .types import FINISHED, GameState, Journey, Move, Piece, Position


@dataclass(frozen=True, slots=True)
class Destination:
    position: Position
    starts_return_journey: bool = False
    is_exit: bool = False


def next_position(piece: Piece, roll: int) -> Optional[Destination]:
    """Where ``roll`` steps take ``piece``, ignoring occupancy.

    Returns None when the piece cannot move that far (finished, or a return
    journey overshooting the exit).
    """
    if piece.is_finished:
        return None

    if piece.journey is Journey.RETURN:
        path = get_return_path(piece.player)
        target = return_index(piece.player, piece.position) + roll
        if target < len(path):
            return Destination(path[target])
        if target == len(path):
            # Exact step off the end of the return path
            return Destination(FINISHED, is_exit=True)
        return None

    # Outbound, or entering from off-board (index -1)
    path = get_outbound_path(piece.player)
    target = outbound_index(piece.player, piece.position) + roll
    if target < len(path):
        return Destination(path[target])
    overflow = target - (len(path) - 1)
    return_path = get_return_path(piece.player)
    if overflow > len(return_path):
        return None
    return Destination(return_path[overflow - 1], starts_return_journey=True)


def _build_move(state: GameState, piece: Piece, roll: int) -> Optional[Move]:
    dest = next_position(piece, roll)
    if dest is None:
        return None

    if dest.is_exit:
        return Move(
            piece_id=piece.piece_id,
            start_position=piece.position,
            end_position=FINISHED,
            is_exit=True,
        )

    if dest.starts_return_journey:
        journey = Journey.RETURN
    elif piece.journey is Journey.NONE:
        journey = Journey.OUTBOUND
    else:
        journey = piece.journey
    props = get_cell_properties(dest.position, journey)

    # Opponent's start area is never reachable
    if props.is_private and props.owner is not piece.player:
        return None

    if props.is_stackable:
        stack = stack_at(state, dest.position)
        others = sum(1 for pid in stack.piece_ids if pid != piece.piece_id)
        if others >= config.MAX_STACK_HEIGHT:
            return None
        if props.requires_owner and stack.owner not in (None, piece.player):
            return None
        # Stacks are safe: never a capture
        return Move(
            piece_id=piece.piece_id,
            start_position=piece.position,
            end_position=dest.position,
            is_rosette=props.is_rosette,
            starts_return_journey=dest.starts_return_journey,
        )

    captured_id = None
    occupant = occupant_at(state, dest.position, exclude_id=piece.piece_id)
    if occupant is not None:
        if occupant.player is piece.player:
            return None
        if props.is_safe:
            return None
        # Journeys must match. A piece starting its return this move compares
        # as RETURN, so it may take a piece already on its return journey.
        if occupant.journey is not journey:
            return None
        captured_id = occupant.piece_id

    return Move(
        piece_id=piece.piece_id,
        start_position=piece.position,
        end_position=dest.position,
        captured_piece_id=captured_id,
        is_rosette=props.is_rosette,
        starts_return_journey=dest.starts_return_journey,
    )


def calculate_valid_moves(state: GameState, dice_roll: int | None = None) -> List[Move]:
    """
    Enumerate every legal move of the current player.

    Args:
        state: Game state to move in
        dice_roll: Roll to use; defaults to ``state.dice_roll``

    Returns:
        List[Move]: Legal moves, empty when the roll cannot be used
    """
    roll = state.dice_roll if dice_roll is None else dice_roll
    if not is_valid_roll(roll):
        logger.warning(f"Invalid dice roll for move generation: {roll!r}")
        return []

    moves: List[Move] = []
    for piece in movable_pieces(state, state.current_player):
        move = _build_move(state, piece, roll)
        if move is not None:
            moves.append(move)

    logger.debug(
        f"{state.current_player.value} rolled {roll}: {len(moves)} legal move(s)"
    )
    return moves


def candidate_moves(state: GameState, piece: Piece) -> List[Move]:
    """Moves ``piece`` could legally make on each face of the die."""
    moves: List[Move] = []
    for roll in sorted(config.DIE_WEIGHTS):
        move = _build_move(state, piece, roll)
        if move is not None:
            moves.append(move)
    return moves
