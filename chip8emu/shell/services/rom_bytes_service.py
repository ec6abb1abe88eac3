"""
ROM loading and inspection service for chip8emu.

Responsibilities:
  - Read ROM files from disk and reject images that cannot fit in memory.
  - Describe a ROM for the ``--info`` report: size, free capacity and a
    disassembly listing of the first instructions.

CHIP-8 ROMs are raw images with no header; everything in the file is
loaded at the program origin.
"""

from __future__ import annotations

import os
from typing import Dict, List

from chip8emu.core.errors import RomTooLarge
from chip8emu.core.opcode import disassemble_word
from chip8emu.core.types import MAX_ROM_SIZE, PROGRAM_START

# Instructions listed by :meth:`RomBytesService.describe`.
_LISTING_LENGTH: int = 16


class RomBytesService:
    """Static utility for loading ROM files and describing them."""

    # -- reading -----------------------------------------------------------

    @staticmethod
    def read(path: str) -> bytes:
        """Read a ROM image from *path*.

        Raises:
            FileNotFoundError: If *path* does not exist.
            RomTooLarge: If the image exceeds the space above the load origin.
            OSError: On general I/O failure.
        """
        with open(path, "rb") as fh:
            data = fh.read()
        RomBytesService.check_size(data)
        return data

    @staticmethod
    def check_size(data: bytes) -> None:
        if len(data) > MAX_ROM_SIZE:
            raise RomTooLarge(len(data), MAX_ROM_SIZE)

    # -- inspection --------------------------------------------------------

    @staticmethod
    def listing(data: bytes, count: int = _LISTING_LENGTH) -> List[str]:
        """Disassemble up to *count* words from the start of *data*.

        Each line is ``ADDR  WORD  MNEMONIC``, addressed from the load
        origin.  A trailing odd byte is listed as a single data byte.
        """
        lines: List[str] = []
        for offset in range(0, min(len(data), count * 2), 2):
            addr = PROGRAM_START + offset
            if offset + 1 >= len(data):
                lines.append(f"0x{addr:03X}  {data[offset]:02X}    {data[offset]:#04x}")
                break
            word = (data[offset] << 8) | data[offset + 1]
            lines.append(f"0x{addr:03X}  {word:04X}  {disassemble_word(word)}")
        return lines

    @staticmethod
    def describe(path: str) -> Dict[str, object]:
        """Return human-readable metadata for the ROM at *path*."""
        data = RomBytesService.read(path)
        return {
            "path": os.path.abspath(path),
            "size": f"{len(data)} bytes",
            "free": f"{MAX_ROM_SIZE - len(data)} bytes",
            "load_address": f"0x{PROGRAM_START:03X}",
            "instructions": (len(data) + 1) // 2,
        }
