"""CHIP-8 emulation core: memory, registers, CPU, timers and scheduler."""

from chip8emu.core.cpu import Cpu
from chip8emu.core.devices import NullBeeper, NullKeyboard
from chip8emu.core.display import DisplayBuffer
from chip8emu.core.errors import (
    AssemblerError,
    Chip8Error,
    InvalidConfiguration,
    InvalidOpcode,
    OutOfBounds,
    RomTooLarge,
    StackOverflow,
    StackUnderflow,
)
from chip8emu.core.input_state import KeypadState
from chip8emu.core.machine import Chip8Machine
from chip8emu.core.memory import Memory
from chip8emu.core.opcode import Instruction, Op, decode, disassemble, encode
from chip8emu.core.options import MachineOptions, Quirks
from chip8emu.core.ports import Beeper, Keyboard, Screen
from chip8emu.core.registers import RegisterFile
from chip8emu.core.scheduler import Clock
from chip8emu.core.timer import TimerDriver
from chip8emu.core.types import Key, StepResult

__all__ = [
    "AssemblerError",
    "Beeper",
    "Chip8Error",
    "Chip8Machine",
    "Clock",
    "Cpu",
    "DisplayBuffer",
    "Instruction",
    "InvalidConfiguration",
    "InvalidOpcode",
    "Key",
    "Keyboard",
    "KeypadState",
    "MachineOptions",
    "Memory",
    "NullBeeper",
    "NullKeyboard",
    "Op",
    "OutOfBounds",
    "Quirks",
    "RegisterFile",
    "RomTooLarge",
    "Screen",
    "StackOverflow",
    "StackUnderflow",
    "StepResult",
    "TimerDriver",
    "decode",
    "disassemble",
    "encode",
]
