"""
Instruction decoding and encoding for the CHIP-8 instruction set.

A raw 16-bit word is split into nibbles::

    15..12  11..8  7..4  3..0
    class   x      y     n
                   kk (7..0)
            nnn (11..0)

:func:`decode` turns a word into an immutable :class:`Instruction`;
:func:`encode` is its exact inverse and is shared with the assembler.
Words that name no instruction raise :class:`InvalidOpcode`.  This
includes the ``0nnn`` machine-code call (``SYS``), which cannot be
emulated.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Tuple

from chip8emu.core.errors import InvalidOpcode


class Op(IntEnum):
    CLS = 0          # 00E0
    RET = 1          # 00EE
    JP = 2           # 1nnn
    CALL = 3         # 2nnn
    SE_IMM = 4       # 3xkk
    SNE_IMM = 5      # 4xkk
    SE_REG = 6       # 5xy0
    LD_IMM = 7       # 6xkk
    ADD_IMM = 8      # 7xkk
    LD_REG = 9       # 8xy0
    OR = 10          # 8xy1
    AND = 11         # 8xy2
    XOR = 12         # 8xy3
    ADD_REG = 13     # 8xy4
    SUB = 14         # 8xy5
    SHR = 15         # 8xy6
    SUBN = 16        # 8xy7
    SHL = 17         # 8xyE
    SNE_REG = 18     # 9xy0
    LD_I = 19        # Annn
    JP_V0 = 20       # Bnnn
    RND = 21         # Cxkk
    DRW = 22         # Dxyn
    SKP = 23         # Ex9E
    SKNP = 24        # ExA1
    LD_VX_DT = 25    # Fx07
    LD_VX_K = 26     # Fx0A
    LD_DT_VX = 27    # Fx15
    LD_ST_VX = 28    # Fx18
    ADD_I = 29       # Fx1E
    LD_F = 30        # Fx29
    LD_B = 31        # Fx33
    LD_MEM_VX = 32   # Fx55
    LD_VX_MEM = 33   # Fx65


# Operand layouts.
_NONE = "none"
_ADDR = "nnn"
_X_KK = "x,kk"
_X_Y = "x,y"
_X_Y_N = "x,y,n"
_X = "x"

# Op -> (fixed bits, operand layout)
_ENCODINGS: Dict[Op, Tuple[int, str]] = {
    Op.CLS: (0x00E0, _NONE),
    Op.RET: (0x00EE, _NONE),
    Op.JP: (0x1000, _ADDR),
    Op.CALL: (0x2000, _ADDR),
    Op.SE_IMM: (0x3000, _X_KK),
    Op.SNE_IMM: (0x4000, _X_KK),
    Op.SE_REG: (0x5000, _X_Y),
    Op.LD_IMM: (0x6000, _X_KK),
    Op.ADD_IMM: (0x7000, _X_KK),
    Op.LD_REG: (0x8000, _X_Y),
    Op.OR: (0x8001, _X_Y),
    Op.AND: (0x8002, _X_Y),
    Op.XOR: (0x8003, _X_Y),
    Op.ADD_REG: (0x8004, _X_Y),
    Op.SUB: (0x8005, _X_Y),
    Op.SHR: (0x8006, _X_Y),
    Op.SUBN: (0x8007, _X_Y),
    Op.SHL: (0x800E, _X_Y),
    Op.SNE_REG: (0x9000, _X_Y),
    Op.LD_I: (0xA000, _ADDR),
    Op.JP_V0: (0xB000, _ADDR),
    Op.RND: (0xC000, _X_KK),
    Op.DRW: (0xD000, _X_Y_N),
    Op.SKP: (0xE09E, _X),
    Op.SKNP: (0xE0A1, _X),
    Op.LD_VX_DT: (0xF007, _X),
    Op.LD_VX_K: (0xF00A, _X),
    Op.LD_DT_VX: (0xF015, _X),
    Op.LD_ST_VX: (0xF018, _X),
    Op.ADD_I: (0xF01E, _X),
    Op.LD_F: (0xF029, _X),
    Op.LD_B: (0xF033, _X),
    Op.LD_MEM_VX: (0xF055, _X),
    Op.LD_VX_MEM: (0xF065, _X),
}

_ARITH_OPS: Dict[int, Op] = {
    0x0: Op.LD_REG,
    0x1: Op.OR,
    0x2: Op.AND,
    0x3: Op.XOR,
    0x4: Op.ADD_REG,
    0x5: Op.SUB,
    0x6: Op.SHR,
    0x7: Op.SUBN,
    0xE: Op.SHL,
}

_KEY_OPS: Dict[int, Op] = {
    0x9E: Op.SKP,
    0xA1: Op.SKNP,
}

_MISC_OPS: Dict[int, Op] = {
    0x07: Op.LD_VX_DT,
    0x0A: Op.LD_VX_K,
    0x15: Op.LD_DT_VX,
    0x18: Op.LD_ST_VX,
    0x1E: Op.ADD_I,
    0x29: Op.LD_F,
    0x33: Op.LD_B,
    0x55: Op.LD_MEM_VX,
    0x65: Op.LD_VX_MEM,
}


@dataclass(frozen=True)
class Instruction:
    """A decoded instruction.

    Only the operand fields used by :attr:`op` carry meaning; the others
    are zero.
    """

    op: Op
    x: int = 0
    y: int = 0
    n: int = 0
    kk: int = 0
    nnn: int = 0

    def __str__(self) -> str:
        return disassemble(self)


def decode(word: int) -> Instruction:
    """Decode a 16-bit instruction word.

    Raises:
        InvalidOpcode: If *word* does not encode one of the instructions in
            :class:`Op`.
    """
    word &= 0xFFFF
    cls = word >> 12
    x = (word >> 8) & 0xF
    y = (word >> 4) & 0xF
    n = word & 0xF
    kk = word & 0xFF
    nnn = word & 0xFFF

    if word == 0x00E0:
        return Instruction(Op.CLS)
    if word == 0x00EE:
        return Instruction(Op.RET)
    if cls == 0x1:
        return Instruction(Op.JP, nnn=nnn)
    if cls == 0x2:
        return Instruction(Op.CALL, nnn=nnn)
    if cls == 0x3:
        return Instruction(Op.SE_IMM, x=x, kk=kk)
    if cls == 0x4:
        return Instruction(Op.SNE_IMM, x=x, kk=kk)
    if cls == 0x5 and n == 0:
        return Instruction(Op.SE_REG, x=x, y=y)
    if cls == 0x6:
        return Instruction(Op.LD_IMM, x=x, kk=kk)
    if cls == 0x7:
        return Instruction(Op.ADD_IMM, x=x, kk=kk)
    if cls == 0x8 and n in _ARITH_OPS:
        return Instruction(_ARITH_OPS[n], x=x, y=y)
    if cls == 0x9 and n == 0:
        return Instruction(Op.SNE_REG, x=x, y=y)
    if cls == 0xA:
        return Instruction(Op.LD_I, nnn=nnn)
    if cls == 0xB:
        return Instruction(Op.JP_V0, nnn=nnn)
    if cls == 0xC:
        return Instruction(Op.RND, x=x, kk=kk)
    if cls == 0xD:
        return Instruction(Op.DRW, x=x, y=y, n=n)
    if cls == 0xE and kk in _KEY_OPS:
        return Instruction(_KEY_OPS[kk], x=x)
    if cls == 0xF and kk in _MISC_OPS:
        return Instruction(_MISC_OPS[kk], x=x)
    raise InvalidOpcode(word)


def encode(instr: Instruction) -> int:
    """Encode *instr* back into its 16-bit word.

    Operand fields are masked to their encoded width.
    """
    base, layout = _ENCODINGS[instr.op]
    if layout == _NONE:
        return base
    if layout == _ADDR:
        return base | (instr.nnn & 0xFFF)
    word = base | ((instr.x & 0xF) << 8)
    if layout == _X_KK:
        return word | (instr.kk & 0xFF)
    if layout == _X_Y:
        return word | ((instr.y & 0xF) << 4)
    if layout == _X_Y_N:
        return word | ((instr.y & 0xF) << 4) | (instr.n & 0xF)
    return word


# ---------------------------------------------------------------------------
# Disassembly
# ---------------------------------------------------------------------------

_MNEMONICS: Dict[Op, str] = {
    Op.CLS: "CLS",
    Op.RET: "RET",
    Op.JP: "JP {nnn}",
    Op.CALL: "CALL {nnn}",
    Op.SE_IMM: "SE V{x}, {kk}",
    Op.SNE_IMM: "SNE V{x}, {kk}",
    Op.SE_REG: "SE V{x}, V{y}",
    Op.LD_IMM: "LD V{x}, {kk}",
    Op.ADD_IMM: "ADD V{x}, {kk}",
    Op.LD_REG: "LD V{x}, V{y}",
    Op.OR: "OR V{x}, V{y}",
    Op.AND: "AND V{x}, V{y}",
    Op.XOR: "XOR V{x}, V{y}",
    Op.ADD_REG: "ADD V{x}, V{y}",
    Op.SUB: "SUB V{x}, V{y}",
    Op.SHR: "SHR V{x}, V{y}",
    Op.SUBN: "SUBN V{x}, V{y}",
    Op.SHL: "SHL V{x}, V{y}",
    Op.SNE_REG: "SNE V{x}, V{y}",
    Op.LD_I: "LD I, {nnn}",
    Op.JP_V0: "JP V0, {nnn}",
    Op.RND: "RND V{x}, {kk}",
    Op.DRW: "DRW V{x}, V{y}, {n}",
    Op.SKP: "SKP V{x}",
    Op.SKNP: "SKNP V{x}",
    Op.LD_VX_DT: "LD V{x}, DT",
    Op.LD_VX_K: "LD V{x}, K",
    Op.LD_DT_VX: "LD DT, V{x}",
    Op.LD_ST_VX: "LD ST, V{x}",
    Op.ADD_I: "ADD I, V{x}",
    Op.LD_F: "LD F, V{x}",
    Op.LD_B: "LD B, V{x}",
    Op.LD_MEM_VX: "LD [I], V{x}",
    Op.LD_VX_MEM: "LD V{x}, [I]",
}


def disassemble(instr: Instruction) -> str:
    """Render *instr* in the assembler's mnemonic syntax."""
    return _MNEMONICS[instr.op].format(
        x=f"{instr.x:X}",
        y=f"{instr.y:X}",
        n=instr.n,
        kk=f"0x{instr.kk:02X}",
        nnn=f"0x{instr.nnn:03X}",
    )


def disassemble_word(word: int) -> str:
    """Disassemble a raw word, rendering invalid words as a data directive."""
    try:
        return disassemble(decode(word))
    except InvalidOpcode:
        return f"{(word >> 8) & 0xFF:#04x}, {word & 0xFF:#04x}"
