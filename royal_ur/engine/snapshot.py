"""
Serialized game snapshots.
Converts a game state plus the host preferences to a flat JSON-safe record and
back, refusing anything that does not have exactly the expected shape.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from loguru import logger

from .board import piece_by_id, validate_state
from .config import session_config
from .dice import is_valid_roll
from .errors import CorruptStateError, SnapshotError
from .moves import calculate_valid_moves
from .types import (
    GameMode,
    GameState,
    GameStatus,
    Journey,
    Move,
    Piece,
    Player,
    Position,
    Stack,
)

REQUIRED_FIELDS = (
    "pieces",
    "stacks",
    "currentPlayer",
    "diceRoll",
    "validMoves",
    "status",
    "winner",
    "message",
    "lastMove",
    "gameMode",
    "shouldPersistState",
)


@dataclass(frozen=True, slots=True)
class Snapshot:
    state: GameState
    mode: GameMode = GameMode.VS_AI
    persist: bool = False


# --- Encoding ---


def _journey_to_json(journey: Journey) -> Optional[str]:
    return None if journey is Journey.NONE else journey.value


def move_to_dict(move: Move) -> Dict[str, Any]:
    return {
        "pieceId": move.piece_id,
        "startPosition": move.start_position.label,
        "endPosition": move.end_position.label,
        "takesPieceId": move.captured_piece_id,
        "isRosette": move.is_rosette,
        "isExit": move.is_exit,
        "startsReturnJourney": move.starts_return_journey,
    }


def snapshot_to_dict(snapshot: Snapshot) -> Dict[str, Any]:
    state = snapshot.state
    return {
        "pieces": [
            {
                "id": p.piece_id,
                "player": p.player.value,
                "position": p.position.label,
                "journey": _journey_to_json(p.journey),
            }
            for p in state.pieces
        ],
        "stacks": {
            pos.label: {
                "pieces": list(stack.piece_ids),
                "owner": stack.owner.value if stack.owner else None,
            }
            for pos, stack in state.stacks.items()
        },
        "currentPlayer": state.current_player.value,
        "diceRoll": state.dice_roll,
        "validMoves": [move_to_dict(m) for m in state.legal_moves],
        "status": state.status.value,
        "winner": state.winner.value if state.winner else None,
        "message": state.message,
        "lastMove": move_to_dict(state.last_move) if state.last_move else None,
        "gameMode": snapshot.mode.value,
        "shouldPersistState": snapshot.persist,
    }


# --- Decoding ---


def _require(condition: bool, what: str) -> None:
    if not condition:
        raise SnapshotError(f"Invalid snapshot: {what}")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_enum(enum_cls, value: Any, what: str):
    _require(isinstance(value, str), f"{what} must be a string")
    try:
        return enum_cls(value)
    except ValueError:
        raise SnapshotError(f"Invalid snapshot: unknown {what} {value!r}") from None


def _parse_position(value: Any, what: str) -> Position:
    try:
        return Position.parse(value)
    except ValueError:
        raise SnapshotError(f"Invalid snapshot: bad {what} {value!r}") from None


def _parse_optional_player(value: Any, what: str) -> Optional[Player]:
    if value is None:
        return None
    return _parse_enum(Player, value, what)


def _parse_piece(raw: Any) -> Piece:
    _require(isinstance(raw, dict), "piece entries must be objects")
    for key in ("id", "player", "position", "journey"):
        _require(key in raw, f"piece is missing '{key}'")
    _require(_is_int(raw["id"]), "piece id must be an integer")
    journey = Journey.NONE if raw["journey"] is None else _parse_enum(Journey, raw["journey"], "journey")
    _require(journey is not Journey.NONE or raw["journey"] is None, "journey 'none' must be null")
    return Piece(
        piece_id=raw["id"],
        player=_parse_enum(Player, raw["player"], "player"),
        position=_parse_position(raw["position"], "piece position"),
        journey=journey,
    )


def _parse_stack(label: Any, raw: Any) -> tuple[Position, Stack]:
    position = _parse_position(label, "stack position")
    _require(isinstance(raw, dict), "stack entries must be objects")
    _require("pieces" in raw and "owner" in raw, "stack is missing 'pieces' or 'owner'")
    ids = raw["pieces"]
    _require(isinstance(ids, list) and all(_is_int(i) for i in ids), "stack pieces must be a list of ids")
    owner = _parse_optional_player(raw["owner"], "stack owner")
    return position, Stack(tuple(ids), owner)


def move_from_dict(raw: Any) -> Move:
    _require(isinstance(raw, dict), "moves must be objects")
    for key in ("pieceId", "startPosition", "endPosition", "isRosette", "isExit", "startsReturnJourney"):
        _require(key in raw, f"move is missing '{key}'")
    _require(_is_int(raw["pieceId"]), "move pieceId must be an integer")
    captured = raw.get("takesPieceId")
    _require(captured is None or _is_int(captured), "move takesPieceId must be an integer")
    flags = (raw["isRosette"], raw["isExit"], raw["startsReturnJourney"])
    _require(all(isinstance(f, bool) for f in flags), "move flags must be booleans")
    return Move(
        piece_id=raw["pieceId"],
        start_position=_parse_position(raw["startPosition"], "move start"),
        end_position=_parse_position(raw["endPosition"], "move end"),
        captured_piece_id=captured,
        is_rosette=raw["isRosette"],
        is_exit=raw["isExit"],
        starts_return_journey=raw["startsReturnJourney"],
    )


def _check_turn_fields(state: GameState) -> None:
    """The roll, offered moves and pending move must be what the status implies."""
    if state.status is GameStatus.AWAITING_MOVE:
        _require(is_valid_roll(state.dice_roll), "awaiting a move without a valid roll")
        expected = tuple(calculate_valid_moves(state, state.dice_roll))
        _require(bool(expected), "awaiting a move with nothing to play")
        _require(state.legal_moves == expected, "validMoves do not match the roll")
    else:
        _require(not state.legal_moves, f"validMoves offered while {state.status.value}")

    if state.status is GameStatus.RESOLVING:
        move = state.last_move
        _require(move is not None, "resolving without a lastMove")
        mover = piece_by_id(state, move.piece_id)
        _require(
            mover.player is state.current_player and mover.position == move.end_position,
            "lastMove does not match the board",
        )
    else:
        _require(state.last_move is None, f"lastMove kept while {state.status.value}")


def snapshot_from_dict(data: Any) -> Snapshot:
    """
    Rebuild a snapshot, validating shape first and board invariants second.

    Raises:
        SnapshotError: on any missing field, wrong type, unknown enum value,
            a decoded state that breaks the board invariants, or a roll,
            offered moves or pending move that its status does not allow
    """
    _require(isinstance(data, dict), "top level must be an object")
    missing = [key for key in REQUIRED_FIELDS if key not in data]
    _require(not missing, f"missing field(s) {missing}")

    _require(isinstance(data["pieces"], list), "pieces must be a list")
    _require(isinstance(data["stacks"], dict), "stacks must be an object")
    _require(isinstance(data["validMoves"], list), "validMoves must be a list")
    _require(isinstance(data["message"], str), "message must be a string")
    _require(isinstance(data["shouldPersistState"], bool), "shouldPersistState must be a boolean")
    roll = data["diceRoll"]
    _require(roll is None or _is_int(roll), "diceRoll must be an integer or null")

    pieces = tuple(_parse_piece(raw) for raw in data["pieces"])
    stacks = dict(_parse_stack(label, raw) for label, raw in data["stacks"].items())
    state = GameState(
        pieces=pieces,
        stacks=stacks,
        current_player=_parse_enum(Player, data["currentPlayer"], "currentPlayer"),
        dice_roll=roll,
        legal_moves=tuple(move_from_dict(m) for m in data["validMoves"]),
        status=_parse_enum(GameStatus, data["status"], "status"),
        winner=_parse_optional_player(data["winner"], "winner"),
        message=data["message"],
        last_move=None if data["lastMove"] is None else move_from_dict(data["lastMove"]),
    )

    try:
        validate_state(state)
    except CorruptStateError as exc:
        raise SnapshotError(f"Invalid snapshot: {exc}") from exc

    known_ids = {p.piece_id for p in state.pieces}
    referenced = [m.piece_id for m in state.legal_moves]
    if state.last_move is not None:
        referenced.append(state.last_move.piece_id)
    _require(all(pid in known_ids for pid in referenced), "moves reference unknown pieces")
    _require(
        (state.status is GameStatus.GAME_OVER) == (state.winner is not None),
        "winner and status disagree",
    )
    _check_turn_fields(state)

    return Snapshot(
        state=state,
        mode=_parse_enum(GameMode, data["gameMode"], "gameMode"),
        persist=data["shouldPersistState"],
    )


class SnapshotStore:
    """Keeps the latest snapshot in a JSON file."""

    def __init__(self, path: str | None = None):
        self.path = path or session_config.snapshot_path

    def save(self, snapshot: Snapshot) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(snapshot_to_dict(snapshot), f, indent=2)

    def load(self) -> Optional[Snapshot]:
        """Return the stored snapshot, or None when absent or untrustworthy."""
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
            return snapshot_from_dict(data)
        except (OSError, json.JSONDecodeError, SnapshotError) as e:
            logger.warning(f"Discarding saved game at {self.path}: {e}")
            return None

    def clear(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)
