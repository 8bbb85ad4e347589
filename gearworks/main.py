#!/usr/bin/env python3
"""
Gearworks - headless driver

Loads a board, turns every motor a number of times and reports which
gears are powered and how many characters each character gear spawned.

Usage:
    gearworks --revolutions 20
    gearworks --layout board.txt --log-level DEBUG
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from .config import Settings, get_settings
from .events import ThresholdReachedEvent
from .game import Game
from .layout import DEMO_LAYOUT, parse_layout, render_board

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Simulate a gear board from motors to characters",
    )
    parser.add_argument(
        "--layout",
        type=Path,
        default=None,
        help="Text layout file (default: built-in demo board)",
    )
    parser.add_argument(
        "--revolutions",
        type=int,
        default=10,
        help="Motor revolutions to simulate (default: 10)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: GEARWORKS_LOG_LEVEL or INFO)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        base = get_settings()
        text = args.layout.read_text() if args.layout is not None else DEMO_LAYOUT
        layout = parse_layout(text)
        settings = Settings(**{
            **base.model_dump(),
            "grid_width": layout.width,
            "grid_height": layout.height,
        })
    except (OSError, ValueError, ValidationError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    game = Game(settings=settings)
    game.load_layout(text)
    game.start()

    for _ in range(args.revolutions):
        game.run_motor_revolution()

    spawns = [e for e in game.drain_events() if isinstance(e, ThresholdReachedEvent)]

    print(render_board(game.grid))
    print()
    print(f"Active path: {sorted(game.active_path)}")
    for gear in game.characters():
        production = gear.production
        spawned = sum(1 for e in spawns if e.gear_id == gear.gear_id)
        print(
            f"{gear.label} at {gear.position}: "
            f"{'active' if gear.active else 'idle'}, "
            f"fill/rotation {production.fill_per_rotation:.3f}, "
            f"fill {production.accumulated:.3f}, spawned {spawned}"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
