#!/usr/bin/env python3
"""
Minefield - Main entry point.

Usage:
    python main.py play [--difficulty {beginner,intermediate,expert}] [--seed N]
    python main.py evaluate [--difficulty ...] [--games N]
"""
import argparse
import logging
import sys

import numpy as np

from src.minefield.console import GameSession, PlayConfig
from src.minefield.engine import Difficulty
from src.minefield.environment import MinefieldEnv


def play(args: argparse.Namespace) -> None:
    """Play one game on the terminal."""
    config = PlayConfig(
        difficulty=Difficulty.from_name(args.difficulty),
        seed=args.seed,
        style=args.style,
    )
    print(f"Minefield ({args.difficulty}): "
          "'o ROW COL' opens, 'f ROW COL' flags, 'q' quits.")
    session = GameSession(config)
    state = session.play(sys.stdin, prompt=sys.stdout)
    print(f"Final state: {state.name}")


def evaluate(args: argparse.Namespace) -> None:
    """Play random legal moves and report how often they win."""
    env = MinefieldEnv(Difficulty.from_name(args.difficulty))
    rng = np.random.default_rng(args.seed)

    wins = 0
    total_steps = 0
    for game in range(args.games):
        seed = None if args.seed is None else args.seed + game
        env.reset(seed=seed)
        done = False
        while not done:
            valid = np.flatnonzero(env.get_action_mask())
            action = int(rng.choice(valid))
            _, _, done, _, info = env.step(action)
            total_steps += 1
        if info["game_state"] == "WON":
            wins += 1

    print(f"Random play over {args.games} games:")
    print(f"  Win rate: {wins / args.games:.1%}")
    print(f"  Avg steps: {total_steps / args.games:.1f}")


def positive_int(text: str) -> int:
    """argparse type for counts that must be at least 1."""
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser."""
    parser = argparse.ArgumentParser(
        description="Minefield - a mine-clearing puzzle"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    difficulties = [member.name.lower() for member in Difficulty]

    # Play command
    play_parser = subparsers.add_parser("play", help="Play on the terminal")
    play_parser.add_argument(
        "--difficulty", choices=difficulties, default="beginner"
    )
    play_parser.add_argument(
        "--seed", type=int, default=None, help="Seed for mine placement"
    )
    play_parser.add_argument(
        "--style", choices=["ascii", "emoji"], default="ascii",
        help="Cell glyphs",
    )

    # Evaluate command
    eval_parser = subparsers.add_parser(
        "evaluate", help="Measure random play through the environment"
    )
    eval_parser.add_argument(
        "--difficulty", choices=difficulties, default="beginner"
    )
    eval_parser.add_argument(
        "--games",
        type=positive_int,
        default=100,
        help="Number of games to play",
    )
    eval_parser.add_argument("--seed", type=int, default=None)

    return parser


def main() -> None:
    """Parse arguments and run the appropriate command."""
    parser = build_parser()
    args = parser.parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level))

    if args.command == "play":
        play(args)
    elif args.command == "evaluate":
        evaluate(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
