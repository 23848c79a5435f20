"""Rules engine, computer opponent and turn state machine for the Royal Game of Ur."""

from .session import Session

__all__ = ["Session"]
