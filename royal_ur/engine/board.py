"""
Board topology for the Royal Game of Ur.
Static path tables, the cell property table, and pure lookups over a state.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from .config import config
from .errors import CorruptStateError
from .types import (
    FINISHED,
    OFF_BOARD,
    GameState,
    Journey,
    Piece,
    Player,
    Position,
    PositionKind,
    Stack,
)


def _build_outbound_path(player: Player) -> Tuple[Position, ...]:
    return (
        tuple(Position.private(player, i) for i in range(4))
        + tuple(Position.shared(i) for i in range(4, 11))
        + (Position.side(player, 11), Position.side(player, 12))
    )


def _build_return_path(player: Player) -> Tuple[Position, ...]:
    # Home stretch runs back through the opponent's side cells.
    opponent = player.opponent
    return (
        Position.shared(13),
        Position.side(opponent, 12),
        Position.side(opponent, 11),
    ) + tuple(Position.shared(i) for i in range(10, 3, -1))


OUTBOUND_PATHS: Dict[Player, Tuple[Position, ...]] = {
    p: _build_outbound_path(p) for p in Player
}
RETURN_PATHS: Dict[Player, Tuple[Position, ...]] = {
    p: _build_return_path(p) for p in Player
}

_OUTBOUND_INDEX: Dict[Player, Dict[Position, int]] = {
    p: {pos: i for i, pos in enumerate(path)} for p, path in OUTBOUND_PATHS.items()
}
_RETURN_INDEX: Dict[Player, Dict[Position, int]] = {
    p: {pos: i for i, pos in enumerate(path)} for p, path in RETURN_PATHS.items()
}


@dataclass(frozen=True, slots=True)
class CellProperties:
    position: Position
    is_safe: bool = False
    is_rosette: bool = False
    is_stackable: bool = False
    requires_owner: bool = False
    is_private: bool = False
    owner: Optional[Player] = None


RETURN_SAFE_CELL = Position.shared(4)


def _build_cell_table() -> Dict[Position, CellProperties]:
    table: Dict[Position, CellProperties] = {}
    for player in Player:
        for i in range(4):
            pos = Position.private(player, i)
            table[pos] = CellProperties(
                position=pos,
                is_safe=True,
                is_private=True,
                is_rosette=i == 3,
                is_stackable=i == 1,
                owner=player,
            )
        outer = Position.side(player, 11)
        inner = Position.side(player, 12)
        table[outer] = CellProperties(position=outer, is_rosette=True, owner=player)
        table[inner] = CellProperties(position=inner, owner=player)

    for i in (6, 9):
        pos = Position.shared(i)
        table[pos] = CellProperties(position=pos, is_stackable=True, is_safe=True)
    gated = Position.shared(10)
    table[gated] = CellProperties(
        position=gated, is_stackable=True, is_safe=True, requires_owner=True
    )
    rosette = Position.shared(7)
    table[rosette] = CellProperties(position=rosette, is_rosette=True)
    return table


_CELL_TABLE = _build_cell_table()


def get_outbound_path(player: Player) -> Tuple[Position, ...]:
    return OUTBOUND_PATHS[player]


def get_return_path(player: Player) -> Tuple[Position, ...]:
    return RETURN_PATHS[player]


def get_cell_properties(
    position: Position, journey: Optional[Journey] = None
) -> CellProperties:
    """
    Look up the fixed properties of a cell.

    Args:
        position: Cell to describe (off-board and finished have no properties)
        journey: Journey of the piece that would land there; only shared cell
            4 depends on it (safe for pieces on their return journey)

    Returns:
        CellProperties: Properties of the cell
    """
    props = _CELL_TABLE.get(position)
    if props is None:
        props = CellProperties(position=position)
    if position == RETURN_SAFE_CELL and journey is Journey.RETURN:
        props = replace(props, is_safe=True)
    return props


def outbound_index(player: Player, position: Position) -> int:
    """Index along the player's outbound path; off-board counts as -1."""
    if position == OFF_BOARD:
        return -1
    try:
        return _OUTBOUND_INDEX[player][position]
    except KeyError:
        raise CorruptStateError(
            f"{position} is not on the outbound path of {player.value}"
        ) from None


def return_index(player: Player, position: Position) -> int:
    try:
        return _RETURN_INDEX[player][position]
    except KeyError:
        raise CorruptStateError(
            f"{position} is not on the return path of {player.value}"
        ) from None


def route_index(player: Player, position: Position, journey: Journey) -> int:
    """0-based index along the combined outbound + return route.

    Off-board is -1 and finished is one past the last return cell.
    """
    if position == OFF_BOARD:
        return -1
    if position == FINISHED:
        return config.ROUTE_LENGTH
    if journey is Journey.RETURN:
        return config.OUTBOUND_PATH_LENGTH + return_index(player, position)
    return outbound_index(player, position)


# --- Lookups over a state ---


def piece_by_id(state: GameState, piece_id: int) -> Piece:
    for piece in state.pieces:
        if piece.piece_id == piece_id:
            return piece
    raise CorruptStateError(f"Piece #{piece_id} does not exist in this game")


def stack_at(state: GameState, position: Position) -> Stack:
    return state.stacks.get(position, Stack())


def pieces_at(state: GameState, position: Position) -> List[Piece]:
    return [p for p in state.pieces if p.position == position]


def occupant_at(
    state: GameState, position: Position, exclude_id: Optional[int] = None
) -> Optional[Piece]:
    """Piece visible at a cell: the top of its stack, or its single occupant."""
    if not position.is_on_board:
        return None
    if get_cell_properties(position).is_stackable:
        for pid in reversed(stack_at(state, position).piece_ids):
            if pid != exclude_id:
                return piece_by_id(state, pid)
        return None
    for piece in pieces_at(state, position):
        if piece.piece_id != exclude_id:
            return piece
    return None


def is_movable(state: GameState, piece: Piece) -> bool:
    if piece.is_finished:
        return False
    if piece.position.is_on_board and get_cell_properties(piece.position).is_stackable:
        return stack_at(state, piece.position).top == piece.piece_id
    return True


def movable_pieces(state: GameState, player: Player) -> List[Piece]:
    return [p for p in state.pieces_of(player) if is_movable(state, p)]


def count_by_zone(state: GameState, player: Player) -> Dict[str, int]:
    counts = {"off_board": 0, "on_board": 0, "finished": 0}
    for piece in state.pieces_of(player):
        if piece.is_off_board:
            counts["off_board"] += 1
        elif piece.is_finished:
            counts["finished"] += 1
        else:
            counts["on_board"] += 1
    return counts


def validate_state(state: GameState) -> None:
    """Check the board invariants; raise CorruptStateError on the first violation."""
    ids = [p.piece_id for p in state.pieces]
    duplicates = [pid for pid, n in Counter(ids).items() if n > 1]
    if duplicates:
        raise CorruptStateError(f"Duplicate piece ids: {sorted(duplicates)}")

    for player in Player:
        owned = state.pieces_of(player)
        if len(owned) != config.PIECES_PER_PLAYER:
            raise CorruptStateError(
                f"{player.value} has {len(owned)} pieces, expected {config.PIECES_PER_PLAYER}"
            )

    for piece in state.pieces:
        _validate_piece(piece)

    for position, stack in state.stacks.items():
        props = get_cell_properties(position)
        if not props.is_stackable:
            raise CorruptStateError(f"Stack recorded on non-stackable cell {position}")
        if len(stack) > config.MAX_STACK_HEIGHT:
            raise CorruptStateError(f"Stack on {position} holds {len(stack)} pieces")
        if stack.owner is not None and (not props.requires_owner or not stack.piece_ids):
            raise CorruptStateError(f"Stack on {position} has an unexpected owner")
        for pid in stack.piece_ids:
            if piece_by_id(state, pid).position != position:
                raise CorruptStateError(f"Piece #{pid} is stacked on {position} but sits elsewhere")

    occupancy = Counter(p.position for p in state.pieces if p.position.is_on_board)
    for position, count in occupancy.items():
        if get_cell_properties(position).is_stackable:
            stack = stack_at(state, position)
            members = Counter(stack.piece_ids)
            if len(stack) != count or any(n > 1 for n in members.values()):
                raise CorruptStateError(f"Stack on {position} does not match its occupants")
        elif count > 1:
            raise CorruptStateError(f"{count} pieces share non-stackable cell {position}")


def _validate_piece(piece: Piece) -> None:
    if not piece.position.is_on_board:
        if piece.journey is not Journey.NONE:
            raise CorruptStateError(f"Piece #{piece.piece_id} is off the board mid-journey")
        return
    if piece.journey is Journey.NONE:
        raise CorruptStateError(f"Piece #{piece.piece_id} is on {piece.position} without a journey")
    if piece.position.kind is PositionKind.PRIVATE and piece.position.player is not piece.player:
        raise CorruptStateError(f"Piece #{piece.piece_id} sits in the opponent's start area")
    if piece.journey is Journey.RETURN:
        return_index(piece.player, piece.position)
    else:
        outbound_index(piece.player, piece.position)
