from __future__ import annotations

import random
from typing import Dict, Optional, Type

from .base import BaseStrategy
from .heuristic import HeuristicStrategy
from .random_strategy import RandomStrategy

STRATEGY_REGISTRY: Dict[str, Type[BaseStrategy]] = {
    HeuristicStrategy.name: HeuristicStrategy,
    RandomStrategy.name: RandomStrategy,
}


def create(strategy_name: str, rng: Optional[random.Random] = None) -> BaseStrategy:
    cls = STRATEGY_REGISTRY.get(strategy_name.lower())
    if cls is None:
        raise KeyError(f"Unknown strategy '{strategy_name}'.")
    return cls(rng=rng)


def available() -> Dict[str, Type[BaseStrategy]]:
    return dict(STRATEGY_REGISTRY)
