"""
Core constants and enumerations for the CHIP-8 machine.

Address map
-----------

=============  ==================================================
Range          Contents
=============  ==================================================
0x000 - 0x04F  Built-in hexadecimal font (16 glyphs x 5 bytes)
0x050 - 0x1FF  Reserved interpreter area (left zeroed)
0x200 - 0xFFF  Program image and scratch data
=============  ==================================================
"""

from enum import IntEnum


# ---------------------------------------------------------------------------
# Memory
# ---------------------------------------------------------------------------

MEMORY_SIZE: int = 4096
PROGRAM_START: int = 0x200
FONT_START: int = 0x000
FONT_GLYPH_SIZE: int = 5

# Largest program image that fits between the load origin and the end of RAM.
MAX_ROM_SIZE: int = MEMORY_SIZE - PROGRAM_START

# ---------------------------------------------------------------------------
# Registers
# ---------------------------------------------------------------------------

NUM_REGISTERS: int = 16
STACK_DEPTH: int = 16
VF: int = 0xF

# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

DISPLAY_WIDTH: int = 64
DISPLAY_HEIGHT: int = 32

# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------

TIMER_HZ: int = 60
MIN_CPU_HZ: int = 1
MAX_CPU_HZ: int = 5000
DEFAULT_CPU_HZ: int = 500


class Key(IntEnum):
    """The sixteen keys of the hexadecimal keypad."""

    Key0 = 0x0
    Key1 = 0x1
    Key2 = 0x2
    Key3 = 0x3
    Key4 = 0x4
    Key5 = 0x5
    Key6 = 0x6
    Key7 = 0x7
    Key8 = 0x8
    Key9 = 0x9
    KeyA = 0xA
    KeyB = 0xB
    KeyC = 0xC
    KeyD = 0xD
    KeyE = 0xE
    KeyF = 0xF

    @staticmethod
    def is_valid(value: int) -> bool:
        return 0 <= value <= 0xF


class StepResult(IntEnum):
    """Outcome of a single :meth:`Cpu.step` call."""

    EXECUTED = 0
    AWAITING_KEY = 1
