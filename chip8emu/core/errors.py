"""
Exception hierarchy for the CHIP-8 core.

Every error raised by the core derives from :class:`Chip8Error`, so an
embedding application can catch one type to end a session.  All of them
are fatal to the step that raised them; the core never retries.
"""

from __future__ import annotations

from typing import Optional


class Chip8Error(Exception):
    """Base class for all CHIP-8 emulation errors."""


class OutOfBounds(Chip8Error, IndexError):
    """An address or coordinate fell outside the addressed resource.

    Parameters
    ----------
    address:
        The first offending address (or flattened pixel index).
    size:
        Capacity of the resource that was addressed.
    what:
        Short name of the resource, used in the message.
    """

    def __init__(self, address: int, size: int, what: str = "memory") -> None:
        self.address = address
        self.size = size
        self.what = what
        super().__init__(f"{what} access at 0x{address:03X} outside [0, 0x{size:03X})")


class RomTooLarge(OutOfBounds):
    """A ROM image does not fit between the load origin and the end of RAM."""

    def __init__(self, rom_size: int, capacity: int) -> None:
        super().__init__(rom_size, capacity, "rom")
        self.args = (f"ROM image of {rom_size} bytes exceeds the {capacity} bytes available",)


class InvalidOpcode(Chip8Error):
    """The fetched 16-bit word does not encode a CHIP-8 instruction."""

    def __init__(self, word: int, address: Optional[int] = None) -> None:
        self.word = word
        self.address = address
        where = f" at 0x{address:03X}" if address is not None else ""
        super().__init__(f"invalid opcode 0x{word:04X}{where}")


class StackOverflow(Chip8Error):
    """A CALL was attempted with the call stack already full."""


class StackUnderflow(Chip8Error):
    """A RET was attempted with an empty call stack."""


class InvalidConfiguration(Chip8Error, ValueError):
    """A configuration value was rejected at construction time."""


class AssemblerError(Chip8Error):
    """The assembler rejected its input.

    Parameters
    ----------
    message:
        Description of the problem.
    line_no:
        1-based source line, when known.
    """

    def __init__(self, message: str, line_no: Optional[int] = None) -> None:
        self.line_no = line_no
        if line_no is not None:
            message = f"line {line_no}: {message}"
        super().__init__(message)
