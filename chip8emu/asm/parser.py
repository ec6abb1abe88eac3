"""
Line parser for the c8asm assembly language.

Source format
-------------

The language is line oriented::

    # comments run from '#' to the end of the line
    start:                  # a label starts in column 0 and ends with ':'
        CLS                 # instructions are indented
        LD   V0, 5
        DRW  V0, V0, 1
        JP   start
    sprite: 0b10000000, 0x3C, 255   # data bytes, comma separated

* Labels begin with a letter and continue with letters, digits or ``_``.
  A label on a line of its own names the address of the next statement.
* Mnemonics and keywords (``I``, ``DT``, ``ST``, ``K``, ``F``, ``B``,
  ``[I]``, ``V0``..``VF``) are case-insensitive.
* Numbers are decimal, ``0x`` hexadecimal or ``0b`` binary.
* Operands are separated by commas.

:func:`parse` produces one :class:`Line` per source line; address
resolution happens later in :mod:`chip8emu.asm.generator`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

from chip8emu.core.errors import AssemblerError
from chip8emu.core.opcode import Op

_LABEL_RE = re.compile(r"[A-Za-z][A-Za-z0-9_]*")
_LINE_RE = re.compile(r"^(?:(?P<label>[A-Za-z][A-Za-z0-9_]*):)?(?P<body>.*)$")
_REGISTER_RE = re.compile(r"^V([0-9A-F])$", re.IGNORECASE)
_KEYWORDS = frozenset({"I", "DT", "ST", "K", "F", "B", "[I]"})

# Operand pattern tokens.
_REG = "V"
_REG0 = "V0"
_ADDR = "ADDR"
_BYTE = "BYTE"
_NIBBLE = "NIBBLE"

# mnemonic -> candidate (operand pattern, op) pairs, tried in order.
_FORMS: Dict[str, List[Tuple[Tuple[str, ...], Op]]] = {
    "CLS": [((), Op.CLS)],
    "RET": [((), Op.RET)],
    "JP": [
        ((_ADDR,), Op.JP),
        ((_REG0, _ADDR), Op.JP_V0),
    ],
    "CALL": [((_ADDR,), Op.CALL)],
    "SE": [
        ((_REG, _BYTE), Op.SE_IMM),
        ((_REG, _REG), Op.SE_REG),
    ],
    "SNE": [
        ((_REG, _BYTE), Op.SNE_IMM),
        ((_REG, _REG), Op.SNE_REG),
    ],
    "LD": [
        ((_REG, _BYTE), Op.LD_IMM),
        ((_REG, _REG), Op.LD_REG),
        (("I", _ADDR), Op.LD_I),
        ((_REG, "DT"), Op.LD_VX_DT),
        ((_REG, "K"), Op.LD_VX_K),
        (("DT", _REG), Op.LD_DT_VX),
        (("ST", _REG), Op.LD_ST_VX),
        (("F", _REG), Op.LD_F),
        (("B", _REG), Op.LD_B),
        (("[I]", _REG), Op.LD_MEM_VX),
        ((_REG, "[I]"), Op.LD_VX_MEM),
    ],
    "ADD": [
        ((_REG, _BYTE), Op.ADD_IMM),
        ((_REG, _REG), Op.ADD_REG),
        (("I", _REG), Op.ADD_I),
    ],
    "OR": [((_REG, _REG), Op.OR)],
    "AND": [((_REG, _REG), Op.AND)],
    "XOR": [((_REG, _REG), Op.XOR)],
    "SUB": [((_REG, _REG), Op.SUB)],
    "SHR": [((_REG, _REG), Op.SHR)],
    "SUBN": [((_REG, _REG), Op.SUBN)],
    "SHL": [((_REG, _REG), Op.SHL)],
    "RND": [((_REG, _BYTE), Op.RND)],
    "DRW": [((_REG, _REG, _NIBBLE), Op.DRW)],
    "SKP": [((_REG,), Op.SKP)],
    "SKNP": [((_REG,), Op.SKNP)],
}
_FORMS["SKPN"] = _FORMS["SKNP"]

# A parsed operand: ("reg", index) | ("kw", name) | ("num", value) | ("label", name)
_Operand = Tuple[str, Union[int, str]]


@dataclass(frozen=True)
class Statement:
    """An instruction whose address operand may still be a label name."""

    op: Op
    x: int = 0
    y: int = 0
    n: int = 0
    kk: int = 0
    target: Union[int, str] = 0

    @property
    def size(self) -> int:
        return 2


@dataclass(frozen=True)
class Data:
    """Raw bytes emitted verbatim."""

    values: bytes

    @property
    def size(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class Line:
    line_no: int
    label: Optional[str] = None
    item: Optional[Union[Statement, Data]] = None

    @property
    def size(self) -> int:
        return self.item.size if self.item is not None else 0


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse(source: str) -> List[Line]:
    """Parse assembly *source* into lines.

    Raises:
        AssemblerError: On the first malformed line.
    """
    return [parse_line(text, line_no) for line_no, text in enumerate(source.splitlines(), 1)]


def parse_line(text: str, line_no: int = 1) -> Line:
    code = text.split("#", 1)[0].rstrip()
    match = _LINE_RE.match(code)
    label = match.group("label")
    body = match.group("body")

    if body and not body[0].isspace():
        if label is None:
            raise AssemblerError(f"instructions must be indented: {code.strip()!r}", line_no)
        raise AssemblerError(f"expected whitespace after label {label!r}", line_no)

    body = body.strip()
    if not body:
        return Line(line_no, label)
    if body[0].isdigit():
        return Line(line_no, label, _parse_data(body, line_no))
    return Line(line_no, label, _parse_statement(body, line_no))


def parse_number(token: str) -> int:
    """Parse a decimal, ``0x`` hexadecimal or ``0b`` binary literal.

    Raises:
        ValueError: If *token* is not a number literal.
    """
    lowered = token.lower()
    if lowered.startswith("0x"):
        return int(lowered[2:], 16)
    if lowered.startswith("0b"):
        return int(lowered[2:], 2)
    if not lowered.isdigit():
        raise ValueError(f"not a number: {token!r}")
    return int(lowered, 10)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _split_operands(text: str) -> List[str]:
    if not text.strip():
        return []
    return [part.strip() for part in text.split(",")]


def _parse_data(body: str, line_no: int) -> Data:
    values = []
    for token in _split_operands(body):
        try:
            value = parse_number(token)
        except ValueError:
            raise AssemblerError(f"invalid data byte {token!r}", line_no) from None
        if not 0 <= value <= 0xFF:
            raise AssemblerError(f"data byte {token} out of range 0..255", line_no)
        values.append(value)
    return Data(bytes(values))


def _parse_operand(token: str, line_no: int) -> _Operand:
    upper = token.upper()
    reg = _REGISTER_RE.match(token)
    if reg:
        return "reg", int(reg.group(1), 16)
    if upper in _KEYWORDS:
        return "kw", upper
    if token[:1].isdigit():
        try:
            return "num", parse_number(token)
        except ValueError:
            raise AssemblerError(f"invalid number {token!r}", line_no) from None
    if _LABEL_RE.fullmatch(token):
        return "label", token
    raise AssemblerError(f"invalid operand {token!r}", line_no)


def _matches(pattern: str, operand: _Operand) -> bool:
    kind, value = operand
    if pattern == _REG:
        return kind == "reg"
    if pattern == _REG0:
        return kind == "reg" and value == 0
    if pattern == _BYTE:
        return kind == "num" and 0 <= value <= 0xFF
    if pattern == _NIBBLE:
        return kind == "num" and 0 <= value <= 0xF
    if pattern == _ADDR:
        return kind == "label" or (kind == "num" and 0 <= value <= 0xFFF)
    return kind == "kw" and value == pattern


def _build(op: Op, pattern: Sequence[str], operands: Sequence[_Operand]) -> Statement:
    fields: Dict[str, Union[int, str]] = {}
    regs = [value for p, (_, value) in zip(pattern, operands) if p == _REG]
    if regs:
        fields["x"] = regs[0]
    if len(regs) > 1:
        fields["y"] = regs[1]
    for p, (_, value) in zip(pattern, operands):
        if p == _BYTE:
            fields["kk"] = value
        elif p == _NIBBLE:
            fields["n"] = value
        elif p == _ADDR:
            fields["target"] = value
    return Statement(op, **fields)


def _parse_statement(body: str, line_no: int) -> Statement:
    parts = body.split(None, 1)
    mnemonic = parts[0].upper()
    forms = _FORMS.get(mnemonic)
    if forms is None:
        raise AssemblerError(f"unknown mnemonic {parts[0]!r}", line_no)

    tokens = _split_operands(parts[1] if len(parts) > 1 else "")
    if any(not token for token in tokens):
        raise AssemblerError(f"empty operand in {body!r}", line_no)
    operands = [_parse_operand(token, line_no) for token in tokens]

    for pattern, op in forms:
        if len(pattern) == len(operands) and all(
            _matches(p, operand) for p, operand in zip(pattern, operands)
        ):
            return _build(op, pattern, operands)

    raise AssemblerError(
        f"invalid operands for {mnemonic}: {', '.join(tokens) or '(none)'}", line_no
    )
