"""
Memory -- the flat 4 KB address space of the CHIP-8 machine.

The first 80 bytes hold the built-in hexadecimal font; programs are loaded
at :data:`~chip8emu.core.types.PROGRAM_START`.  Every accessor is bounds
checked and raises :class:`~chip8emu.core.errors.OutOfBounds` instead of
wrapping: address arithmetic (such as the 16-bit wrap of ``I``) belongs to
the CPU, not to the storage layer.
"""

from __future__ import annotations

from typing import Iterable

from chip8emu.core.errors import OutOfBounds, RomTooLarge
from chip8emu.core.types import FONT_GLYPH_SIZE, FONT_START, MEMORY_SIZE, PROGRAM_START


# fmt: off
FONT_SPRITES: bytes = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])
# fmt: on

assert len(FONT_SPRITES) == 16 * FONT_GLYPH_SIZE


def font_address(digit: int) -> int:
    """Return the address of the glyph for hexadecimal *digit*."""
    return FONT_START + (digit & 0xF) * FONT_GLYPH_SIZE


class Memory:
    """Bounds-checked byte-addressable RAM.

    Parameters
    ----------
    size:
        Capacity in bytes.  Defaults to the standard 4096.
    """

    def __init__(self, size: int = MEMORY_SIZE) -> None:
        if size <= PROGRAM_START:
            raise ValueError(f"memory size must exceed 0x{PROGRAM_START:03X}, got {size}")
        self._size: int = size
        self._bytes: bytearray = bytearray(size)
        self.load_font()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def size(self) -> int:
        return self._size

    @property
    def rom_capacity(self) -> int:
        """Number of bytes available from the load origin to the end of RAM."""
        return self._size - PROGRAM_START

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Zero all of RAM and restore the font."""
        self._bytes[:] = bytes(self._size)
        self.load_font()

    def load_font(self) -> None:
        self._bytes[FONT_START:FONT_START + len(FONT_SPRITES)] = FONT_SPRITES

    def load_rom(self, image: bytes) -> None:
        """Copy a program image verbatim to the load origin.

        Raises:
            RomTooLarge: If *image* does not fit in the remaining capacity.
        """
        if len(image) > self.rom_capacity:
            raise RomTooLarge(len(image), self.rom_capacity)
        self._bytes[PROGRAM_START:PROGRAM_START + len(image)] = image

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def read_word(self, addr: int) -> int:
        """Read a big-endian 16-bit word at *addr* and *addr + 1*."""
        self._check(addr, 2)
        return (self._bytes[addr] << 8) | self._bytes[addr + 1]

    def read_block(self, addr: int, length: int) -> bytes:
        """Return *length* bytes starting at *addr*."""
        self._check(addr, length)
        return bytes(self._bytes[addr:addr + length])

    def write_block(self, addr: int, data: Iterable[int]) -> None:
        """Write *data* starting at *addr*.

        The whole range is validated before the first byte is written, so a
        failing call leaves memory untouched.
        """
        data = bytes(data)
        self._check(addr, len(data))
        self._bytes[addr:addr + len(data)] = data

    def _check(self, addr: int, length: int) -> None:
        if addr < 0:
            raise OutOfBounds(addr, self._size)
        if addr + length > self._size:
            raise OutOfBounds(max(addr, self._size), self._size)

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return self._size

    def __getitem__(self, addr: int) -> int:
        self._check(addr, 1)
        return self._bytes[addr]

    def __setitem__(self, addr: int, value: int) -> None:
        self._check(addr, 1)
        self._bytes[addr] = value & 0xFF

    def __repr__(self) -> str:
        return f"Memory(size={self._size})"
