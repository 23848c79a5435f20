import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


@dataclass(slots=True)
class Config:
    # --- Rules (fixed, not tunable) ---
    PIECES_PER_PLAYER: int = 7
    MAX_STACK_HEIGHT: int = 4
    OUTBOUND_PATH_LENGTH: int = 13
    RETURN_PATH_LENGTH: int = 10

    # Tetrahedral die: face -> probability
    DIE_WEIGHTS: dict[int, float] = field(
        default_factory=lambda: {1: 0.2, 2: 0.4, 3: 0.2, 4: 0.2}
    )

    STARTING_PLAYER: str = os.getenv("UR_STARTING_PLAYER", "black")
    MAX_TURNS: int = int(os.getenv("UR_MAX_TURNS", 2000))

    # Derived (populated in __post_init__ due to slots)
    ROUTE_LENGTH: int = 0
    DIE_MIN: int = 0
    DIE_MAX: int = 0

    def __post_init__(self):
        self.ROUTE_LENGTH = self.OUTBOUND_PATH_LENGTH + self.RETURN_PATH_LENGTH
        self.DIE_MIN = min(self.DIE_WEIGHTS)
        self.DIE_MAX = max(self.DIE_WEIGHTS)

        if self.STARTING_PLAYER not in ("black", "white"):
            raise ValueError("UR_STARTING_PLAYER must be 'black' or 'white'")
        if abs(sum(self.DIE_WEIGHTS.values()) - 1.0) > 1e-9:
            raise ValueError("DIE_WEIGHTS must sum to 1")


@dataclass(slots=True)
class AIWeights:
    exit: float = 1000.0
    rosette: float = 100.0
    capture: float = 75.0
    safe: float = 50.0
    return_safe_bonus: float = 25.0
    progress_per_step: float = 5.0
    enter_board: float = 10.0


@dataclass(slots=True)
class SessionConfig:
    # Presentation hints (seconds); the engine never sleeps on them
    ai_think_delay: float = float(os.getenv("UR_AI_THINK_DELAY", 1.0))
    animation_delay: float = float(os.getenv("UR_ANIMATION_DELAY", 0.5))
    snapshot_path: str = os.getenv("UR_SNAPSHOT_PATH", "saved_states/game_state.json")


config = Config()
ai_weights = AIWeights()
session_config = SessionConfig()
