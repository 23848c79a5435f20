from __future__ import annotations

import argparse
import os
import random
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np
from loguru import logger

from royal_ur.engine.config import config
from royal_ur.engine.dice import roll_die
from royal_ur.engine.game import apply_move, initial_state, resolve_turn, with_roll
from royal_ur.engine.types import GameStatus, Player
from royal_ur.strategy.base import BaseStrategy
from royal_ur.strategy.registry import create
from royal_ur.strategy.registry import available as available_strategies


def seed_everything(seed: Optional[int]) -> None:
    random.seed(seed)
    np.random.seed(seed)


@dataclass
class GameResult:
    index: int
    winner: Optional[Player]
    turns: int


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Play computer-vs-computer games of the Royal Game of Ur"
    )
    parser.add_argument(
        "--games",
        type=int,
        default=int(os.getenv("NGAMES", "100")),
        help="Number of games to play",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Optional RNG seed to make the run reproducible",
    )
    parser.add_argument(
        "--black",
        type=str,
        default="heuristic",
        choices=sorted(available_strategies()),
        help="Strategy playing black",
    )
    parser.add_argument(
        "--white",
        type=str,
        default="random",
        choices=sorted(available_strategies()),
        help="Strategy playing white",
    )
    return parser.parse_args()


def play_game(
    seats: Dict[Player, BaseStrategy], rng: random.Random, index: int = 0
) -> GameResult:
    state = initial_state()
    turns = 0
    while state.status is not GameStatus.GAME_OVER and turns < config.MAX_TURNS:
        turns += 1
        state = with_roll(state, roll_die(rng))
        if state.status is not GameStatus.AWAITING_MOVE:
            continue
        move = seats[state.current_player].decide(state, state.legal_moves)
        state = resolve_turn(apply_move(state, move), move)

    if state.winner is None:
        logger.warning(f"Game {index} hit the {config.MAX_TURNS} turn cap")
    return GameResult(index=index, winner=state.winner, turns=turns)


def main() -> None:
    args = parse_args()
    seed_everything(args.seed)
    rng = random.Random(args.seed)

    seats = {
        Player.BLACK: create(args.black, rng=rng),
        Player.WHITE: create(args.white, rng=rng),
    }
    logger.info(
        f"Playing {args.games} game(s): black={args.black} white={args.white}"
    )

    results = [play_game(seats, rng, index=i) for i in range(args.games)]

    wins = {player: 0 for player in Player}
    for result in results:
        if result.winner is not None:
            wins[result.winner] += 1
    turns = np.array([r.turns for r in results], dtype=float)

    for player in Player:
        rate = wins[player] / max(1, len(results))
        name = args.black if player is Player.BLACK else args.white
        logger.info(f"{player.display_name} ({name}): {wins[player]} wins ({rate:.1%})")
    if len(turns):
        logger.info(f"Average game length: {turns.mean():.1f} turns (max {int(turns.max())})")


if __name__ == "__main__":
    main()
