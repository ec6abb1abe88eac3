"""
c8asm -- assemble CHIP-8 source into a ROM image.

Usage::

    c8asm game.asm game.ch8
    python -m chip8emu.asm game.asm game.ch8 -v
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from chip8emu.asm.generator import assemble_file
from chip8emu.core.errors import AssemblerError


def _build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser."""
    parser = argparse.ArgumentParser(
        prog="c8asm",
        description="Assemble CHIP-8 mnemonics into a ROM image loaded at 0x200.",
    )
    parser.add_argument("input", help="Assembly source file")
    parser.add_argument("output", help="ROM image to write")
    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase log verbosity (-v for INFO, -vv for DEBUG).",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Assembler entry point.  Returns the process exit code."""
    args = _build_parser().parse_args(argv)

    level = logging.WARNING
    if args.verbose >= 2:
        level = logging.DEBUG
    elif args.verbose >= 1:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        assemble_file(args.input, args.output)
    except AssemblerError as exc:
        print(f"Error: {args.input}: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
