"""
RegisterFile -- the architectural state of the CHIP-8 CPU.

Holds the sixteen 8-bit general purpose registers ``V0``..``VF``, the
16-bit address register ``I``, the program counter, the bounded call
stack and the two 8-bit countdown timers.  The stack pointer is the
current stack depth.
"""

from __future__ import annotations

from typing import List

from chip8emu.core.errors import OutOfBounds, StackOverflow, StackUnderflow
from chip8emu.core.types import NUM_REGISTERS, PROGRAM_START, STACK_DEPTH


class RegisterFile:
    """CPU registers, call stack and timer values."""

    def __init__(self) -> None:
        self.v: bytearray = bytearray(NUM_REGISTERS)
        self.i: int = 0
        self.pc: int = PROGRAM_START
        self.stack: List[int] = []
        self.delay_timer: int = 0
        self.sound_timer: int = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Return every register to its power-on value."""
        self.v[:] = bytes(NUM_REGISTERS)
        self.i = 0
        self.pc = PROGRAM_START
        self.stack.clear()
        self.delay_timer = 0
        self.sound_timer = 0

    # ------------------------------------------------------------------
    # General purpose registers
    # ------------------------------------------------------------------

    def __getitem__(self, index: int) -> int:
        if not 0 <= index < NUM_REGISTERS:
            raise OutOfBounds(index, NUM_REGISTERS, "register")
        return self.v[index]

    def __setitem__(self, index: int, value: int) -> None:
        if not 0 <= index < NUM_REGISTERS:
            raise OutOfBounds(index, NUM_REGISTERS, "register")
        self.v[index] = value & 0xFF

    # ------------------------------------------------------------------
    # Call stack
    # ------------------------------------------------------------------

    @property
    def sp(self) -> int:
        """Stack pointer: the number of return addresses currently held."""
        return len(self.stack)

    def push(self, address: int) -> None:
        """Push a return address.

        Raises:
            StackOverflow: If the stack already holds :data:`STACK_DEPTH` frames.
        """
        if len(self.stack) >= STACK_DEPTH:
            raise StackOverflow(f"call stack full ({STACK_DEPTH} frames)")
        self.stack.append(address)

    def pop(self) -> int:
        """Pop the most recent return address.

        Raises:
            StackUnderflow: If the stack is empty.
        """
        if not self.stack:
            raise StackUnderflow("return with an empty call stack")
        return self.stack.pop()

    # ------------------------------------------------------------------
    # Snapshots (debugging / tests)
    # ------------------------------------------------------------------

    def snapshot(self) -> dict:
        return {
            "v": bytes(self.v),
            "i": self.i,
            "pc": self.pc,
            "stack": tuple(self.stack),
            "delay_timer": self.delay_timer,
            "sound_timer": self.sound_timer,
        }

    def restore(self, snapshot: dict) -> None:
        self.v[:] = snapshot["v"]
        self.i = snapshot["i"]
        self.pc = snapshot["pc"]
        self.stack[:] = list(snapshot["stack"])
        self.delay_timer = snapshot["delay_timer"]
        self.sound_timer = snapshot["sound_timer"]

    def __repr__(self) -> str:
        regs = " ".join(f"V{n:X}={val:02X}" for n, val in enumerate(self.v))
        return (
            f"RegisterFile(pc=0x{self.pc:03X}, i=0x{self.i:03X}, sp={self.sp}, "
            f"dt={self.delay_timer}, st={self.sound_timer}, {regs})"
        )
