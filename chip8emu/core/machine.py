"""
Chip8Machine -- one emulation session.

The machine owns the components that make up a CHIP-8 system:

* **Memory** -- the 4 KB address space with the font and the program.
* **RegisterFile** -- V0..VF, I, PC, the call stack and the timers.
* **TimerDriver** -- the 60 Hz delay/sound countdown and the beeper edges.
* **Cpu** -- the decode-execute engine.
* **Clock** -- the scheduler interleaving the two.

The IO ports are supplied by the host and only referenced.  Omitted ports
default to headless implementations, which is what tests and ``--info``
use.

Typical usage::

    machine = Chip8Machine(MachineOptions(cpu_frequency_hz=700), screen=screen)
    machine.load_rom(rom_bytes)
    while running:
        machine.advance(elapsed_seconds)
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import numpy as np

from chip8emu.core.cpu import Cpu
from chip8emu.core.devices import NullBeeper
from chip8emu.core.display import DisplayBuffer
from chip8emu.core.errors import Chip8Error, RomTooLarge
from chip8emu.core.input_state import KeypadState
from chip8emu.core.memory import Memory
from chip8emu.core.options import MachineOptions
from chip8emu.core.ports import Beeper, Keyboard, Screen
from chip8emu.core.registers import RegisterFile
from chip8emu.core.scheduler import Clock
from chip8emu.core.timer import TimerDriver
from chip8emu.core.types import StepResult

logger = logging.getLogger(__name__)


class Chip8Machine:
    """A complete CHIP-8 system bound to a set of IO ports.

    Parameters
    ----------
    options:
        CPU frequency, quirks and RNG seed.  Defaults to
        :class:`MachineOptions` defaults.
    screen, keyboard, beeper:
        IO ports.  Default to :class:`DisplayBuffer`, :class:`KeypadState`
        and :class:`NullBeeper`.
    """

    def __init__(
        self,
        options: Optional[MachineOptions] = None,
        *,
        screen: Optional[Screen] = None,
        keyboard: Optional[Keyboard] = None,
        beeper: Optional[Beeper] = None,
    ) -> None:
        self.options: MachineOptions = options if options is not None else MachineOptions()

        self.screen: Screen = screen if screen is not None else DisplayBuffer()
        self.keyboard: Keyboard = keyboard if keyboard is not None else KeypadState()
        self.beeper: Beeper = beeper if beeper is not None else NullBeeper()

        self.memory: Memory = Memory()
        self.registers: RegisterFile = RegisterFile()
        self.timers: TimerDriver = TimerDriver(self.registers, self.beeper)
        self.cpu: Cpu = Cpu(
            self.memory,
            self.registers,
            self.timers,
            self.screen,
            self.keyboard,
            quirks=self.options.quirks,
            rng=np.random.default_rng(self.options.seed),
        )
        self.clock: Clock = Clock(
            self.cpu.step,
            self.timers.tick,
            self.options.cpu_frequency_hz,
        )

        self.rom: bytes = b""
        self.machine_halt: bool = False
        self.last_error: Optional[Chip8Error] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load_rom(self, image: bytes) -> None:
        """Reset the machine and load *image* at the program origin.

        Raises:
            RomTooLarge: If the image does not fit in memory.
        """
        image = bytes(image)
        if len(image) > self.memory.rom_capacity:
            raise RomTooLarge(len(image), self.memory.rom_capacity)
        self.memory.clear()
        self.memory.load_rom(image)
        self.rom = image
        self._reset_state()
        logger.info("Loaded ROM image (%d bytes)", len(image))

    def reset(self) -> None:
        """Power-cycle the machine and reload the current ROM."""
        self.memory.clear()
        self.memory.load_rom(self.rom)
        self._reset_state()
        logger.info("Machine reset")

    def _reset_state(self) -> None:
        self.timers.reset()
        self.registers.reset()
        self.cpu.reset()
        self.clock.reset()
        self.screen.clear()
        self.keyboard.cancel_wait()
        self.machine_halt = False
        self.last_error = None

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def step(self) -> StepResult:
        """Execute one instruction, bypassing the scheduler."""
        return self._guard(self.cpu.step)

    def tick_timers(self) -> None:
        """Run one 60 Hz timer period, bypassing the scheduler."""
        self.timers.tick()

    def advance(self, seconds: float) -> Tuple[int, int]:
        """Run the instructions and timer ticks due in *seconds*.

        Does nothing once the machine has halted on an error.
        """
        if self.machine_halt:
            return 0, 0
        return self._guard(self.clock.advance, seconds)

    def run(self) -> None:
        """Run in real time on the calling thread until :meth:`stop`."""
        self._guard(self.clock.run)

    def stop(self) -> None:
        self.clock.stop()

    def _guard(self, fn, *args):
        try:
            return fn(*args)
        except Chip8Error as exc:
            self.machine_halt = True
            self.last_error = exc
            logger.error("Emulation halted at PC=0x%03X: %s", self.registers.pc, exc)
            raise

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"cpu_hz={self.options.cpu_frequency_hz}, "
            f"rom={len(self.rom)} bytes, "
            f"pc=0x{self.registers.pc:03X}, "
            f"halted={self.machine_halt})"
        )
