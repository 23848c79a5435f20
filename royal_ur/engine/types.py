from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Optional, Tuple


class Player(str, Enum):
    BLACK = "black"
    WHITE = "white"

    @property
    def opponent(self) -> "Player":
        return Player.WHITE if self is Player.BLACK else Player.BLACK

    @property
    def prefix(self) -> str:
        """Single-letter tag used in cell labels (``b1``, ``w12``)."""
        return self.value[0]

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class Journey(str, Enum):
    NONE = "none"  # off-board or finished
    OUTBOUND = "outbound"
    RETURN = "return"


class PositionKind(str, Enum):
    OFF_BOARD = "off_board"
    PRIVATE = "private"  # b0..b3 / w0..w3
    SHARED = "shared"  # 4..10 and 13
    SIDE = "side"  # b11, b12 / w11, w12
    FINISHED = "finished"


PRIVATE_INDICES = frozenset(range(0, 4))
SHARED_INDICES = frozenset({4, 5, 6, 7, 8, 9, 10, 13})
SIDE_INDICES = frozenset({11, 12})


@dataclass(frozen=True, slots=True)
class Position:
    """A cell of the board, or one of the two off-board places.

    Every position is one of five kinds; ``index`` and ``player`` are only
    meaningful for the kinds that carry them. Use the named constructors
    rather than building one by hand.
    """

    kind: PositionKind
    index: int = -1
    player: Optional[Player] = None

    def __post_init__(self) -> None:
        if self.kind in (PositionKind.OFF_BOARD, PositionKind.FINISHED):
            valid = self.index == -1 and self.player is None
        elif self.kind is PositionKind.SHARED:
            valid = self.index in SHARED_INDICES and self.player is None
        elif self.kind is PositionKind.PRIVATE:
            valid = self.index in PRIVATE_INDICES and self.player is not None
        else:
            valid = self.index in SIDE_INDICES and self.player is not None
        if not valid:
            raise ValueError(
                f"Invalid position: kind={self.kind.value} index={self.index} player={self.player}"
            )

    @classmethod
    def private(cls, player: Player, index: int) -> "Position":
        return cls(PositionKind.PRIVATE, index, player)

    @classmethod
    def shared(cls, index: int) -> "Position":
        return cls(PositionKind.SHARED, index)

    @classmethod
    def side(cls, player: Player, index: int) -> "Position":
        return cls(PositionKind.SIDE, index, player)

    @property
    def is_on_board(self) -> bool:
        return self.kind not in (PositionKind.OFF_BOARD, PositionKind.FINISHED)

    @property
    def label(self) -> str:
        if self.kind is PositionKind.OFF_BOARD:
            return "off"
        if self.kind is PositionKind.FINISHED:
            return "finished"
        if self.kind is PositionKind.SHARED:
            return str(self.index)
        return f"{self.player.prefix}{self.index}"

    @classmethod
    def parse(cls, label: str) -> "Position":
        """Inverse of :attr:`label`. Raises ``ValueError`` on anything else."""
        if not isinstance(label, str) or not label:
            raise ValueError(f"Invalid position label: {label!r}")
        if label == "off":
            return OFF_BOARD
        if label == "finished":
            return FINISHED
        if label.isdigit():
            return cls.shared(int(label))
        owner = {"b": Player.BLACK, "w": Player.WHITE}.get(label[0])
        rest = label[1:]
        if owner is None or not rest.isdigit():
            raise ValueError(f"Invalid position label: {label!r}")
        index = int(rest)
        if index in PRIVATE_INDICES:
            return cls.private(owner, index)
        return cls.side(owner, index)

    def __str__(self) -> str:
        return self.label


OFF_BOARD = Position(PositionKind.OFF_BOARD)
FINISHED = Position(PositionKind.FINISHED)


@dataclass(frozen=True, slots=True)
class Piece:
    """Immutable piece record. Rule logic lives in the engine, not here."""

    piece_id: int  # 0..6 black, 7..13 white
    player: Player
    position: Position = OFF_BOARD
    journey: Journey = Journey.NONE

    @property
    def is_finished(self) -> bool:
        return self.position == FINISHED

    @property
    def is_off_board(self) -> bool:
        return self.position == OFF_BOARD

    def move_to(self, position: Position, journey: Journey) -> "Piece":
        return replace(self, position=position, journey=journey)

    def send_home(self) -> "Piece":
        return replace(self, position=OFF_BOARD, journey=Journey.NONE)


@dataclass(frozen=True, slots=True)
class Stack:
    """Ids of the pieces sharing a stackable cell, bottom to top."""

    piece_ids: Tuple[int, ...] = ()
    owner: Optional[Player] = None

    @property
    def top(self) -> Optional[int]:
        return self.piece_ids[-1] if self.piece_ids else None

    def __len__(self) -> int:
        return len(self.piece_ids)

    def __contains__(self, piece_id: object) -> bool:
        return piece_id in self.piece_ids

    def push(self, piece_id: int, owner: Optional[Player] = None) -> "Stack":
        new_owner = self.owner if self.owner is not None else owner
        return Stack(self.piece_ids + (piece_id,), new_owner)

    def remove(self, piece_id: int) -> "Stack":
        remaining = tuple(pid for pid in self.piece_ids if pid != piece_id)
        return Stack(remaining, self.owner if remaining else None)


@dataclass(frozen=True, slots=True)
class Move:
    piece_id: int
    start_position: Position
    end_position: Position
    captured_piece_id: Optional[int] = None
    is_rosette: bool = False
    is_exit: bool = False
    starts_return_journey: bool = False

    @property
    def is_capture(self) -> bool:
        return self.captured_piece_id is not None

    def __str__(self) -> str:
        text = f"#{self.piece_id} {self.start_position} -> {self.end_position}"
        if self.is_capture:
            text += f" x#{self.captured_piece_id}"
        return text


class GameStatus(str, Enum):
    AWAITING_ROLL = "awaiting_roll"
    AWAITING_MOVE = "awaiting_move"
    RESOLVING = "resolving"  # move applied, turn not yet resolved
    OPPONENT_THINKING = "opponent_thinking"
    GAME_OVER = "game_over"


@dataclass(frozen=True, slots=True)
class TurnOutcome:
    status: GameStatus
    current_player: Player
    winner: Optional[Player]
    message: str


@dataclass(frozen=True, slots=True)
class GameState:
    """Complete snapshot of a game. Never mutated; derive new ones instead."""

    pieces: Tuple[Piece, ...]
    stacks: Dict[Position, Stack] = field(default_factory=dict)
    current_player: Player = Player.BLACK
    dice_roll: Optional[int] = None
    legal_moves: Tuple[Move, ...] = ()
    status: GameStatus = GameStatus.AWAITING_ROLL
    winner: Optional[Player] = None
    message: str = ""
    # The move just applied, kept until the turn is resolved so a
    # presentation layer can animate it.
    last_move: Optional[Move] = None

    def evolve(self, **changes) -> "GameState":
        return replace(self, **changes)

    def pieces_of(self, player: Player) -> Tuple[Piece, ...]:
        return tuple(p for p in self.pieces if p.player is player)


class GameMode(str, Enum):
    VS_AI = "vs_ai"
    TWO_PLAYER = "two_player"
