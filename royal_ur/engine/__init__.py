from .board import (
    OUTBOUND_PATHS,
    RETURN_PATHS,
    CellProperties,
    count_by_zone,
    get_cell_properties,
    get_outbound_path,
    get_return_path,
    is_movable,
    movable_pieces,
    occupant_at,
    piece_by_id,
    pieces_at,
    route_index,
    stack_at,
    validate_state,
)
from .config import ai_weights, config, session_config
from .dice import roll_die, roll_distribution
from .errors import CorruptStateError, EngineError, IllegalMoveError, SnapshotError
from .game import (
    apply_move,
    determine_next_state_after_move,
    initial_state,
    pass_turn,
    resolve_turn,
    winner_of,
    with_roll,
)
from .moves import calculate_valid_moves, next_position
from .snapshot import Snapshot, SnapshotStore, snapshot_from_dict, snapshot_to_dict
from .types import (
    FINISHED,
    OFF_BOARD,
    GameMode,
    GameState,
    GameStatus,
    Journey,
    Move,
    Piece,
    Player,
    Position,
    PositionKind,
    Stack,
    TurnOutcome,
)

__all__ = [
    "FINISHED",
    "OFF_BOARD",
    "OUTBOUND_PATHS",
    "RETURN_PATHS",
    "CellProperties",
    "CorruptStateError",
    "EngineError",
    "GameMode",
    "GameState",
    "GameStatus",
    "IllegalMoveError",
    "Journey",
    "Move",
    "Piece",
    "Player",
    "Position",
    "PositionKind",
    "Snapshot",
    "SnapshotError",
    "SnapshotStore",
    "Stack",
    "TurnOutcome",
    "ai_weights",
    "apply_move",
    "calculate_valid_moves",
    "config",
    "count_by_zone",
    "determine_next_state_after_move",
    "get_cell_properties",
    "get_outbound_path",
    "get_return_path",
    "initial_state",
    "is_movable",
    "movable_pieces",
    "next_position",
    "occupant_at",
    "pass_turn",
    "piece_by_id",
    "pieces_at",
    "resolve_turn",
    "roll_die",
    "roll_distribution",
    "route_index",
    "session_config",
    "snapshot_from_dict",
    "snapshot_to_dict",
    "stack_at",
    "validate_state",
    "winner_of",
    "with_roll",
]
