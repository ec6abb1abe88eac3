"""
chip8emu -- CHIP-8 virtual machine

Main entry point.  Parses command-line arguments, creates the emulated
machine from a ROM file, and launches the pygame display window.

Usage examples::

    # Run a ROM at the default 500 Hz
    chip8emu roms/pong.ch8

    # Faster CPU, green on black, QWERTY keypad layout
    chip8emu roms/tetris.ch8 -c 800 -f 33FF66 -k qwerty

    # Enable the load/store and shift quirks
    chip8emu roms/game.ch8 -l -s

    # Print ROM size and a disassembly listing without launching
    chip8emu roms/pong.ch8 --info
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from chip8emu.core.errors import Chip8Error, InvalidConfiguration
from chip8emu.core.options import MachineOptions, Quirks
from chip8emu.core.types import DEFAULT_CPU_HZ, MAX_CPU_HZ, MIN_CPU_HZ
from chip8emu.platform.audio import PygameBeeper
from chip8emu.platform.window import MAX_SCALE, MIN_SCALE, Window
from chip8emu.shell.keyboard_profiles import DEFAULT_PROFILE, get_profile, profile_names
from chip8emu.shell.palette import (
    DEFAULT_BACKGROUND,
    DEFAULT_FOREGROUND,
    Palette,
    format_color,
)
from chip8emu.shell.services.machine_factory import MachineFactory
from chip8emu.shell.services.rom_bytes_service import RomBytesService

_DEFAULT_SCALE: int = 10


# ---------------------------------------------------------------------------
# CLI definition
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser."""
    parser = argparse.ArgumentParser(
        prog="chip8emu",
        description=(
            "chip8emu -- CHIP-8 virtual machine.  "
            "Load a ROM file and play it in a pygame window."
        ),
    )

    parser.add_argument(
        "rom",
        help="Path to the ROM image (.ch8)",
    )

    # Machine
    parser.add_argument(
        "--cpu-frequency", "-c",
        type=int,
        default=DEFAULT_CPU_HZ,
        metavar="HZ",
        help=f"Instructions per second ({MIN_CPU_HZ}-{MAX_CPU_HZ}).  Default: {DEFAULT_CPU_HZ}.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the RND instruction's random generator.",
    )

    # Quirks
    parser.add_argument(
        "--load-store-ignores-i", "-l",
        action="store_true",
        default=False,
        help="LD [I], Vx and LD Vx, [I] leave I unchanged.",
    )
    parser.add_argument(
        "--shift-reads-vx", "-s",
        action="store_true",
        default=False,
        help="SHR and SHL shift Vx instead of Vy.",
    )
    parser.add_argument(
        "--draw-wraps-pixels", "-d",
        action="store_true",
        default=False,
        help="Sprites wrap around the screen edges instead of being clipped.",
    )

    # Display
    parser.add_argument(
        "--bg-color", "-b",
        default=format_color(DEFAULT_BACKGROUND),
        metavar="RRGGBB",
        help="Background colour.  Default: %(default)s.",
    )
    parser.add_argument(
        "--fg-color", "-f",
        default=format_color(DEFAULT_FOREGROUND),
        metavar="RRGGBB",
        help="Foreground colour.  Default: %(default)s.",
    )
    parser.add_argument(
        "--scale",
        type=int,
        default=_DEFAULT_SCALE,
        help=f"Display scale factor ({MIN_SCALE}-{MAX_SCALE}).  Default: {_DEFAULT_SCALE}.",
    )

    # Input
    parser.add_argument(
        "--kb-profile", "-k",
        default=DEFAULT_PROFILE,
        metavar="PROFILE",
        help="Keyboard layout: " + ", ".join(profile_names()) + ".  Default: %(default)s.",
    )

    # Audio
    parser.add_argument(
        "--no-audio",
        action="store_true",
        default=False,
        help="Disable audio output.",
    )

    # Debugging / info
    parser.add_argument(
        "--info",
        action="store_true",
        default=False,
        help="Print ROM information and exit without launching the emulator.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase log verbosity (-v for INFO, -vv for DEBUG instruction trace).",
    )

    return parser


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def _configure_logging(verbosity: int) -> None:
    """Set up the root logger based on requested verbosity."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# ---------------------------------------------------------------------------
# Info mode
# ---------------------------------------------------------------------------

def _print_rom_info(rom_path: str) -> int:
    """Print human-readable metadata and a disassembly listing for a ROM."""
    try:
        info = MachineFactory.describe(rom_path)
        data = RomBytesService.read(rom_path)
    except (OSError, Chip8Error) as exc:
        print(f"Error reading ROM: {exc}", file=sys.stderr)
        return 1

    print("chip8emu ROM Information")
    print("=" * 40)
    for key, value in info.items():
        label = key.replace("_", " ").title()
        print(f"  {label:20s}: {value}")
    print("-" * 40)
    for line in RomBytesService.listing(data):
        print(f"  {line}")
    print("=" * 40)
    return 0


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def _resolve_options(args: argparse.Namespace) -> MachineOptions:
    if not MIN_SCALE <= args.scale <= MAX_SCALE:
        raise InvalidConfiguration(
            f"scale must be in {MIN_SCALE}..{MAX_SCALE}, got {args.scale}"
        )
    return MachineOptions(
        cpu_frequency_hz=args.cpu_frequency,
        quirks=Quirks(
            load_store_ignores_i=args.load_store_ignores_i,
            shift_reads_vx=args.shift_reads_vx,
            draw_wraps_pixels=args.draw_wraps_pixels,
        ),
        seed=args.seed,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Application entry point.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` to use ``sys.argv``.

    Returns
    -------
    int
        Exit code (0 on success).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    logger = logging.getLogger("chip8emu.main")

    # Validate the ROM path early.
    rom_path: str = os.path.expanduser(args.rom)
    if not os.path.isfile(rom_path):
        print(f"Error: ROM file not found: {rom_path}", file=sys.stderr)
        return 1

    # Resolve configuration before touching pygame.
    try:
        options = _resolve_options(args)
        palette = Palette.from_strings(args.bg_color, args.fg_color)
        profile = get_profile(args.kb_profile)
    except InvalidConfiguration as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    # Info-only mode.
    if args.info:
        return _print_rom_info(rom_path)

    beeper = PygameBeeper(enabled=not args.no_audio)

    # Create the emulated machine.
    try:
        machine = MachineFactory.create(rom_path, options, beeper=beeper)
    except (OSError, Chip8Error) as exc:
        beeper.shutdown()
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    # Launch the window.
    logger.info("Starting emulation ...")
    try:
        window = Window(
            machine,
            scale=args.scale,
            palette=palette,
            profile=profile,
            audio=beeper,
            title=os.path.basename(rom_path),
        )
        window.run()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
    except Exception as exc:
        logger.exception("Fatal error during emulation")
        print(f"Fatal error: {exc}", file=sys.stderr)
        return 1

    if window.error is not None:
        print(f"Error: {window.error}", file=sys.stderr)
        return 1

    logger.info("Exited cleanly")
    return 0


if __name__ == "__main__":
    sys.exit(main())
