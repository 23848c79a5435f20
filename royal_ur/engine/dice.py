from __future__ import annotations

import random

from .config import config


def roll_die(rng: random.Random | None = None) -> int:
    """
    Roll the four-sided die.
    A single uniform draw is mapped through the cumulative face weights, so
    2 comes up twice as often as each of 1, 3 and 4.
    Returns in {1,2,3,4}.
    """
    rng = rng or random
    draw = rng.random()
    cumulative = 0.0
    for face, weight in sorted(config.DIE_WEIGHTS.items()):
        cumulative += weight
        if draw < cumulative:
            return face
    return config.DIE_MAX


def roll_distribution() -> dict[int, float]:
    return dict(config.DIE_WEIGHTS)


def is_valid_roll(value: object) -> bool:
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and value in config.DIE_WEIGHTS
    )
