from .base import BaseStrategy
from .features import build_move_option, build_move_options
from .heuristic import HeuristicStrategy, choose_ai_move, score_move
from .random_strategy import RandomStrategy
from .registry import STRATEGY_REGISTRY, available, create
from .types import MoveOption, StrategyContext

__all__ = [
    "BaseStrategy",
    "HeuristicStrategy",
    "RandomStrategy",
    "MoveOption",
    "StrategyContext",
    "STRATEGY_REGISTRY",
    "available",
    "build_move_option",
    "build_move_options",
    "choose_ai_move",
    "create",
    "score_move",
]
