"""Engine fault types.

None of these is fatal: the worst a host should do on catching one is throw
away its current game and start a fresh one.
"""


class EngineError(Exception):
    """Base class for every fault raised by the rules engine."""


class CorruptStateError(EngineError):
    """A state references a piece or position that cannot exist.

    Raised when a move names an unknown piece id, or a piece sits on a cell
    that is not on the path its journey says it is travelling.
    """


class IllegalMoveError(EngineError):
    """A move was not drawn from the legal moves of the given state."""


class SnapshotError(EngineError):
    """A serialized snapshot failed structural or invariant validation."""
