"""
Two-pass code generator for c8asm.

Pass one walks the parsed lines from the load origin and records the
address of every label.  Pass two resolves label operands and encodes each
statement with :func:`chip8emu.core.opcode.encode`, the same encoder the
emulator's decoder is tested against.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable

from chip8emu.asm.parser import Data, Line, Statement, parse
from chip8emu.core.errors import AssemblerError
from chip8emu.core.opcode import Instruction, encode
from chip8emu.core.types import MEMORY_SIZE, PROGRAM_START

logger = logging.getLogger(__name__)


def collect_labels(lines: Iterable[Line], origin: int = PROGRAM_START) -> Dict[str, int]:
    """First pass: map each label to its address.

    Raises:
        AssemblerError: On a duplicate label.
    """
    labels: Dict[str, int] = {}
    addr = origin
    for line in lines:
        if line.label is not None:
            if line.label in labels:
                raise AssemblerError(f"duplicate label {line.label!r}", line.line_no)
            labels[line.label] = addr
        addr += line.size
    return labels


def _resolve(stmt: Statement, labels: Dict[str, int], line_no: int) -> int:
    target = stmt.target
    if isinstance(target, str):
        if target not in labels:
            raise AssemblerError(f"unknown label {target!r}", line_no)
        target = labels[target]
    if not 0 <= target <= 0xFFF:
        raise AssemblerError(f"address 0x{target:X} out of range", line_no)
    return target


def generate(lines: Iterable[Line], origin: int = PROGRAM_START) -> bytes:
    """Second pass: emit the binary image for parsed *lines*."""
    lines = list(lines)
    labels = collect_labels(lines, origin)
    out = bytearray()
    for line in lines:
        item = line.item
        if isinstance(item, Data):
            out += item.values
        elif isinstance(item, Statement):
            word = encode(
                Instruction(
                    item.op,
                    x=item.x,
                    y=item.y,
                    n=item.n,
                    kk=item.kk,
                    nnn=_resolve(item, labels, line.line_no),
                )
            )
            out += word.to_bytes(2, "big")

    if origin + len(out) > MEMORY_SIZE:
        logger.warning(
            "Image of %d bytes extends past the end of memory from origin 0x%03X",
            len(out),
            origin,
        )
    return bytes(out)


def assemble(source: str, origin: int = PROGRAM_START) -> bytes:
    """Assemble *source* text into a ROM image loaded at *origin*."""
    return generate(parse(source), origin)


def assemble_file(input_path: str, output_path: str) -> int:
    """Assemble *input_path* and write the image to *output_path*.

    Returns the number of bytes written.
    """
    with open(input_path, "r", encoding="utf-8") as fh:
        source = fh.read()
    image = assemble(source)
    with open(output_path, "wb") as fh:
        fh.write(image)
    logger.info("Assembled %s -> %s (%d bytes)", input_path, output_path, len(image))
    return len(image)
