from __future__ import annotations

from typing import Dict, Optional

from loguru import logger

from .board import get_cell_properties, is_movable, piece_by_id
from .config import config
from .errors import CorruptStateError, IllegalMoveError
from .moves import calculate_valid_moves, candidate_moves, next_position
from .types import (
    FINISHED,
    GameState,
    GameStatus,
    Journey,
    Move,
    Piece,
    Player,
    Position,
    Stack,
    TurnOutcome,
)


def initial_state(starting_player: Optional[Player] = None) -> GameState:
    player = starting_player or Player(config.STARTING_PLAYER)
    n = config.PIECES_PER_PLAYER
    pieces = tuple(Piece(piece_id=i, player=Player.BLACK) for i in range(n)) + tuple(
        Piece(piece_id=i + n, player=Player.WHITE) for i in range(n)
    )
    return GameState(
        pieces=pieces,
        current_player=player,
        status=GameStatus.AWAITING_ROLL,
        message=f"{player.display_name} to roll.",
    )


def winner_of(state: GameState) -> Optional[Player]:
    for player in Player:
        if all(p.is_finished for p in state.pieces_of(player)):
            return player
    return None


# --- Applying a move ---
def apply_move(state: GameState, move: Move) -> GameState:
    """
    Apply one legal move and return the resulting state.

    The result carries the move in ``last_move`` with status RESOLVING; the
    caller must hand it to :func:`resolve_turn` once any animation is done.

    Raises:
        CorruptStateError: the move names a piece that does not exist, or an
            end position off that piece's path
        IllegalMoveError: the move does not fit this state
    """
    piece = piece_by_id(state, move.piece_id)
    if piece.player is not state.current_player:
        raise IllegalMoveError(
            f"Piece #{piece.piece_id} belongs to {piece.player.value}, not {state.current_player.value}"
        )
    if piece.position != move.start_position:
        raise IllegalMoveError(
            f"Piece #{piece.piece_id} is on {piece.position}, move starts on {move.start_position}"
        )
    if not is_movable(state, piece):
        raise IllegalMoveError(f"Piece #{piece.piece_id} cannot move")
    if not _reachable(piece, move):
        raise CorruptStateError(
            f"Piece #{piece.piece_id} cannot reach {move.end_position} from {piece.position}"
        )
    if move not in candidate_moves(state, piece):
        raise IllegalMoveError(f"Move {move} is not legal in this position")

    pieces: Dict[int, Piece] = {p.piece_id: p for p in state.pieces}
    stacks: Dict[Position, Stack] = dict(state.stacks)

    # 1) Leave the origin stack
    _leave_stack(stacks, piece.position, piece.piece_id)

    # 2) Send a captured piece back off the board
    if move.captured_piece_id is not None:
        victim = piece_by_id(state, move.captured_piece_id)
        if victim.player is piece.player or victim.position != move.end_position:
            raise IllegalMoveError(
                f"Piece #{victim.piece_id} cannot be captured on {move.end_position}"
            )
        _leave_stack(stacks, victim.position, victim.piece_id)
        pieces[victim.piece_id] = victim.send_home()

    # 3) Relocate the mover
    if move.is_exit or move.end_position == FINISHED:
        moved = piece.move_to(FINISHED, Journey.NONE)
    else:
        if move.starts_return_journey:
            journey = Journey.RETURN
        elif piece.journey is Journey.NONE:
            journey = Journey.OUTBOUND
        else:
            journey = piece.journey
        moved = piece.move_to(move.end_position, journey)
    pieces[moved.piece_id] = moved

    # 4) Join the destination stack
    if moved.position.is_on_board:
        props = get_cell_properties(moved.position, moved.journey)
        if props.is_stackable:
            owner = piece.player if props.requires_owner else None
            stacks[moved.position] = stacks.get(moved.position, Stack()).push(
                moved.piece_id, owner
            )

    logger.debug(f"{piece.player.value} moved {move}")
    return state.evolve(
        pieces=tuple(pieces[p.piece_id] for p in state.pieces),
        stacks=stacks,
        dice_roll=None,
        legal_moves=(),
        status=GameStatus.RESOLVING,
        winner=None,
        message=f"Moving {move.start_position} -> {move.end_position}",
        last_move=move,
    )


def _reachable(piece: Piece, move: Move) -> bool:
    """Whether some face of the die takes ``piece`` along its path to the move's end."""
    for roll in sorted(config.DIE_WEIGHTS):
        dest = next_position(piece, roll)
        if dest is not None and dest.position == move.end_position:
            return True
    return False


def _leave_stack(stacks: Dict[Position, Stack], position: Position, piece_id: int) -> None:
    stack = stacks.get(position)
    if stack is None or piece_id not in stack:
        return
    remaining = stack.remove(piece_id)
    if remaining.piece_ids:
        stacks[position] = remaining
    else:
        del stacks[position]


# --- Turn resolution ---
def determine_next_state_after_move(state: GameState, move: Move) -> TurnOutcome:
    """Decide who acts next after ``move`` was applied to reach ``state``."""
    mover = piece_by_id(state, move.piece_id).player

    if all(p.is_finished for p in state.pieces_of(mover)):
        return TurnOutcome(
            status=GameStatus.GAME_OVER,
            current_player=mover,
            winner=mover,
            message=f"{mover.display_name} wins!",
        )
    if move.is_rosette:
        return TurnOutcome(
            status=GameStatus.AWAITING_ROLL,
            current_player=mover,
            winner=None,
            message=f"Landed on a rosette! {mover.display_name} rolls again.",
        )
    nxt = mover.opponent
    return TurnOutcome(
        status=GameStatus.AWAITING_ROLL,
        current_player=nxt,
        winner=None,
        message=f"{nxt.display_name} to roll.",
    )


def resolve_turn(state: GameState, move: Move) -> GameState:
    outcome = determine_next_state_after_move(state, move)
    if outcome.winner is not None:
        logger.info(outcome.message)
    return state.evolve(
        status=outcome.status,
        current_player=outcome.current_player,
        winner=outcome.winner,
        message=outcome.message,
        dice_roll=None,
        legal_moves=(),
        last_move=None,
    )


def pass_turn(state: GameState, roll: Optional[int]) -> GameState:
    """Record a roll that produced no legal move and hand the turn over."""
    nxt = state.current_player.opponent
    return state.evolve(
        current_player=nxt,
        dice_roll=roll,
        legal_moves=(),
        status=GameStatus.AWAITING_ROLL,
        message=f"Rolled {roll}. No valid moves. {nxt.display_name}'s turn.",
        last_move=None,
    )


def with_roll(state: GameState, roll: int) -> GameState:
    """Attach a roll and its legal moves, or pass the turn when there are none."""
    moves = calculate_valid_moves(state, roll)
    if not moves:
        return pass_turn(state, roll)
    return state.evolve(
        dice_roll=roll,
        legal_moves=tuple(moves),
        status=GameStatus.AWAITING_MOVE,
        message=f"Rolled {roll}. Select a move.",
    )
