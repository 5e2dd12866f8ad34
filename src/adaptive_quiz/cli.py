# Area: Shared
"""
adaptive_quiz.cli — Command-line interface
==========================================

Plays a quiz session in the terminal.

Usage:
    python -m adaptive_quiz --demo                        # Rule-based host
    python -m adaptive_quiz --difficulty hard --age 10    # Claude host
    python -m adaptive_quiz --demo --config quiz.json --seed 7

Demo mode can be enabled via:
    1. CLI flag: --demo
    2. Environment variable: DEMO_MODE=true

Type /quit to end the game early.
"""

import argparse
import logging
import os
import sys
from typing import Callable, List, Optional, TextIO

from dotenv import load_dotenv

from ._catalog.catalog import ContentCatalog, default_catalog, load_catalog
from ._config import EngineConfig, load_config
from ._session.state import SessionSummary
from ._shared.logging_config import setup_logging
from .callbacks import QuizGenerator
from .demo_generator import DemoGenerator
from .engine import QuizEngine, TurnOutcome

QUIT_COMMAND = "/quit"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Adaptive quiz - play a city-guessing game in the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m adaptive_quiz --demo
  python -m adaptive_quiz --demo --difficulty medium --age 8 --rounds 3
  DEMO_MODE=true python -m adaptive_quiz --config quiz.json
        """,
    )
    parser.add_argument("--demo", action="store_true",
                        help="Use the rule-based demo host (no API key needed)")
    parser.add_argument("--config", type=str, help="Path to JSON engine config")
    parser.add_argument("--catalog", type=str, help="Path to a JSON content catalog")
    parser.add_argument("--difficulty", choices=["easy", "medium", "hard"], default="easy")
    parser.add_argument("--age", type=int, default=7, help="Player age in years")
    parser.add_argument("--rounds", type=int, help="Number of rounds")
    parser.add_argument("--seed", type=str, help="Seed for replayable item selection")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def is_demo_mode(args: argparse.Namespace) -> bool:
    """Check if demo mode is enabled via CLI or environment."""
    if args.demo:
        return True
    return os.environ.get("DEMO_MODE", "").lower() in ("true", "1", "yes")


def get_generator(
    args: argparse.Namespace,
    catalog: ContentCatalog,
    config: Optional[EngineConfig] = None,
) -> QuizGenerator:
    """Demo host or the Anthropic-backed host."""
    if is_demo_mode(args):
        return DemoGenerator(catalog)
    from .llm_generator import AnthropicGenerator
    return AnthropicGenerator(config=config)


def print_outcome(outcome: TurnOutcome, out: TextIO) -> None:
    print(outcome.message, file=out)
    if outcome.fun_fact:
        print(f"  ✨ {outcome.fun_fact}", file=out)
    if outcome.opening_clue:
        print(f"\nNext round: {outcome.opening_clue}", file=out)
    if outcome.options and not outcome.summary:
        print_options(outcome.options, out)
    print(f"  Score: {outcome.result.score}", file=out)


def print_options(options, out: TextIO) -> None:
    for i, option in enumerate(options, start=1):
        print(f"  {i}. {option}", file=out)


def print_summary(summary: SessionSummary, out: TextIO) -> None:
    print("\n══ Game over ══", file=out)
    print(f"Score:    {summary.score}", file=out)
    print(f"Correct:  {summary.correct_count}/{summary.total_rounds}", file=out)
    print(f"Hints:    {summary.hints_used}", file=out)
    print(f"Bonus:    {'yes' if summary.bonus_earned else 'no'}", file=out)
    print(f"Duration: {summary.duration_ms / 1000:.1f}s", file=out)


def play(
    engine: QuizEngine,
    args: argparse.Namespace,
    input_fn: Callable[[str], str] = input,
    out: TextIO = sys.stdout,
) -> SessionSummary:
    """Run one interactive session until it finishes or the player quits."""
    start = engine.start_session(args.difficulty, args.age, args.rounds, args.seed)
    print(f"Round 1 of {start.total_rounds}: {start.opening_clue}", file=out)
    print_options(start.options, out)

    while True:
        try:
            text = input_fn("> ").strip()
        except EOFError:
            text = QUIT_COMMAND
        if text == QUIT_COMMAND:
            summary = engine.end_session(start.session_id)
            break
        if not text:
            continue
        outcome = engine.submit_turn(start.session_id, text)
        print_outcome(outcome, out)
        if outcome.summary is not None:
            if outcome.final_message:
                print(outcome.final_message, file=out)
            summary = outcome.summary
            break

    print_summary(summary, out)
    return summary


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    load_dotenv()
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        print(f"Error: Invalid config: {e}", file=sys.stderr)
        return 1
    setup_logging(config.log_file, getattr(logging, args.log_level))

    try:
        catalog = load_catalog(args.catalog) if args.catalog else default_catalog()
    except (OSError, ValueError) as e:
        print(f"Error: Could not load catalog: {e}", file=sys.stderr)
        return 1

    try:
        generator = get_generator(args, catalog, config)
    except ImportError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Use --demo to play without an LLM.", file=sys.stderr)
        return 1

    engine = QuizEngine(catalog, generator, config)
    play(engine, args)
    return 0
