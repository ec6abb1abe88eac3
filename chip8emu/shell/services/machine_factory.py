"""
Machine creation factory for chip8emu.

Creates fully-configured :class:`Chip8Machine` instances from a ROM file
path, machine options and the host's IO ports.

Typical usage::

    machine = MachineFactory.create("pong.ch8")
    machine = MachineFactory.create(
        "pong.ch8",
        MachineOptions(cpu_frequency_hz=700, quirks=Quirks(shift_reads_vx=True)),
        beeper=PygameBeeper(),
    )
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from chip8emu.core.machine import Chip8Machine
from chip8emu.core.options import MachineOptions
from chip8emu.core.ports import Beeper, Keyboard, Screen
from chip8emu.shell.services.rom_bytes_service import RomBytesService

logger = logging.getLogger(__name__)


class MachineFactory:
    """Create an emulated CHIP-8 machine from a ROM file."""

    @staticmethod
    def create(
        rom_path: str,
        options: Optional[MachineOptions] = None,
        *,
        screen: Optional[Screen] = None,
        keyboard: Optional[Keyboard] = None,
        beeper: Optional[Beeper] = None,
    ) -> Chip8Machine:
        """Build and return a machine with the ROM loaded, ready to run.

        Parameters
        ----------
        rom_path:
            Filesystem path to the ROM image.
        options:
            CPU frequency, quirks and seed.  ``None`` uses the defaults.
        screen, keyboard, beeper:
            IO ports.  ``None`` picks the headless implementations.

        Raises
        ------
        FileNotFoundError
            If *rom_path* does not exist.
        RomTooLarge
            If the image does not fit in memory.
        """
        logger.info("Loading ROM: %s", rom_path)
        rom_bytes = RomBytesService.read(rom_path)

        machine = Chip8Machine(options, screen=screen, keyboard=keyboard, beeper=beeper)
        machine.load_rom(rom_bytes)
        logger.info("Machine created: %r", machine)
        return machine

    @staticmethod
    def describe(rom_path: str) -> Dict[str, object]:
        """Return ROM metadata without creating a machine."""
        return RomBytesService.describe(rom_path)
