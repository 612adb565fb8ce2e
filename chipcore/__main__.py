"""Headless runner: execute a ROM for a number of ticks and print the screen."""

import argparse
import sys

import numpy as np
from tqdm import tqdm

from chipcore.interpreter import Interpreter, InterpreterConfig
from chipcore.errors import RomLoadError
from chipcore.logging import LEVELS


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="chipcore", description="Run a CHIP-8 ROM without a window")
    parser.add_argument("rom", help="Path to the ROM file")
    parser.add_argument("--ticks", type=int, default=600, help="Host ticks to run (default: 600)")
    parser.add_argument("--cycles-per-tick", type=int, default=1, help="Cycles per tick (default: 1)")
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    parser.add_argument("--log-level", default="INFO", choices=LEVELS)
    parser.add_argument("--hold-key", type=lambda s: int(s, 16), action="append", default=[],
                        help="Hex key index held down for the whole run (repeatable)")
    parser.add_argument("--no-display", action="store_true", help="Do not print the final framebuffer")
    return parser.parse_args(argv)


def display_to_text(display: np.ndarray) -> str:
    """Render a framebuffer as lines of '#' and '.'."""
    return "\n".join("".join("#" if pixel else "." for pixel in row) for row in display)


def main(argv=None) -> int:
    args = parse_args(argv)
    config = InterpreterConfig(
        cycles_per_tick=args.cycles_per_tick,
        seed=args.seed,
        log_level=args.log_level,
    )
    interpreter = Interpreter(config)

    try:
        interpreter.load_rom(args.rom)
    except RomLoadError:
        return 1

    for key in args.hold_key:
        interpreter.set_key(key, True)

    frames = 0
    for _ in tqdm(range(args.ticks), desc="Running", unit="tick"):
        interpreter.tick()
        if interpreter.consume_display() is not None:
            frames += 1

    interpreter.logger.info(
        f"Ran {int(interpreter.state.cycles)} cycles, {frames} redraws, faults: {interpreter.fault_counts or 'none'}"
    )
    if not args.no_display:
        print(display_to_text(np.asarray(interpreter.state.display)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
