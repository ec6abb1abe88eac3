"""
The c8asm assembler.

Use :func:`assemble(source) <generator.assemble>` to turn assembly text
into a ROM image.
"""

from chip8emu.asm.generator import assemble, assemble_file
from chip8emu.asm.parser import parse

__all__ = ["assemble", "assemble_file", "parse"]
