"""
CHIP-8 decode-execute engine.

Each call to :meth:`Cpu.step` executes exactly one instruction:

1. **Fetch** the big-endian word at ``PC``.
2. **Advance** ``PC`` by two *before* the handler runs, so branch handlers
   overwrite it and skip handlers add another two.
3. **Decode** the word into an :class:`~chip8emu.core.opcode.Instruction`.
4. **Dispatch** through a table indexed by :class:`~chip8emu.core.opcode.Op`.

A failing instruction is not committed: operand ranges are checked before
any register or memory write, and the pre-advanced ``PC`` is rolled back
before the error propagates.

``LD Vx, K`` never blocks.  When no key has been pressed yet the handler
rewinds ``PC`` onto itself and the step returns
:attr:`StepResult.AWAITING_KEY`; the scheduler then stops stepping for the
current cycle and the instruction re-polls the keyboard on the next one.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

import numpy as np

from chip8emu.core.errors import Chip8Error, InvalidOpcode
from chip8emu.core.memory import Memory, font_address
from chip8emu.core.opcode import Instruction, Op, decode, disassemble
from chip8emu.core.options import Quirks
from chip8emu.core.ports import Keyboard, Screen
from chip8emu.core.registers import RegisterFile
from chip8emu.core.timer import TimerDriver
from chip8emu.core.types import DISPLAY_HEIGHT, DISPLAY_WIDTH, VF, Key, StepResult

logger = logging.getLogger(__name__)

_Handler = Callable[[Instruction], Optional[StepResult]]


class Cpu:
    """The CHIP-8 interpreter core.

    Parameters
    ----------
    memory:
        The 4 KB address space.
    registers:
        The register file; ``pc`` must already point at the first
        instruction.
    timers:
        The timer driver, used for ``LD DT, Vx`` and ``LD ST, Vx``.
    screen, keyboard:
        IO ports.  The CPU only holds references; the host owns them.
    quirks:
        Behavioural toggles, read as plain conditionals by the handlers.
    rng:
        Random source for ``RND``.  Defaults to an unseeded
        :func:`numpy.random.default_rng`.
    """

    def __init__(
        self,
        memory: Memory,
        registers: RegisterFile,
        timers: TimerDriver,
        screen: Screen,
        keyboard: Keyboard,
        quirks: Optional[Quirks] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.mem = memory
        self.regs = registers
        self.timers = timers
        self.screen = screen
        self.keyboard = keyboard
        self.quirks: Quirks = quirks if quirks is not None else Quirks()
        self.rng: np.random.Generator = rng if rng is not None else np.random.default_rng()

        self.cycles: int = 0
        self._awaiting_key: bool = False

        self._handlers: List[_Handler] = self._build_dispatch_table()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def awaiting_key(self) -> bool:
        """``True`` while suspended on ``LD Vx, K``."""
        return self._awaiting_key

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def step(self) -> StepResult:
        """Execute one instruction.

        Returns:
            :attr:`StepResult.EXECUTED`, or :attr:`StepResult.AWAITING_KEY`
            if the instruction is a key-wait with no key pressed yet.

        Raises:
            OutOfBounds: If the fetch or a memory operand leaves RAM.
            InvalidOpcode: If the fetched word is not an instruction.
            StackOverflow, StackUnderflow: On ``CALL``/``RET`` at the bound.
        """
        regs = self.regs
        pc = regs.pc
        word = self.mem.read_word(pc)
        try:
            instr = decode(word)
        except InvalidOpcode:
            raise InvalidOpcode(word, pc) from None

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%03X: %04X  %s", pc, word, disassemble(instr))

        regs.pc = (pc + 2) & 0xFFFF
        try:
            result = self._handlers[instr.op](instr)
        except Chip8Error:
            regs.pc = pc
            raise

        if result is StepResult.AWAITING_KEY:
            return result
        self.cycles += 1
        return StepResult.EXECUTED

    def reset(self) -> None:
        self.cycles = 0
        self._awaiting_key = False

    def _skip(self) -> None:
        self.regs.pc = (self.regs.pc + 2) & 0xFFFF

    # ------------------------------------------------------------------
    # Dispatch table
    # ------------------------------------------------------------------

    def _build_dispatch_table(self) -> List[_Handler]:
        table = {
            Op.CLS: self._cls,
            Op.RET: self._ret,
            Op.JP: self._jp,
            Op.CALL: self._call,
            Op.SE_IMM: self._se_imm,
            Op.SNE_IMM: self._sne_imm,
            Op.SE_REG: self._se_reg,
            Op.LD_IMM: self._ld_imm,
            Op.ADD_IMM: self._add_imm,
            Op.LD_REG: self._ld_reg,
            Op.OR: self._or,
            Op.AND: self._and,
            Op.XOR: self._xor,
            Op.ADD_REG: self._add_reg,
            Op.SUB: self._sub,
            Op.SHR: self._shr,
            Op.SUBN: self._subn,
            Op.SHL: self._shl,
            Op.SNE_REG: self._sne_reg,
            Op.LD_I: self._ld_i,
            Op.JP_V0: self._jp_v0,
            Op.RND: self._rnd,
            Op.DRW: self._drw,
            Op.SKP: self._skp,
            Op.SKNP: self._sknp,
            Op.LD_VX_DT: self._ld_vx_dt,
            Op.LD_VX_K: self._ld_vx_k,
            Op.LD_DT_VX: self._ld_dt_vx,
            Op.LD_ST_VX: self._ld_st_vx,
            Op.ADD_I: self._add_i,
            Op.LD_F: self._ld_f,
            Op.LD_B: self._ld_b,
            Op.LD_MEM_VX: self._ld_mem_vx,
            Op.LD_VX_MEM: self._ld_vx_mem,
        }
        return [table[op] for op in Op]

    # ------------------------------------------------------------------
    # Control flow
    # ------------------------------------------------------------------

    def _cls(self, ins: Instruction) -> None:  # 00E0
        self.screen.clear()

    def _ret(self, ins: Instruction) -> None:  # 00EE
        self.regs.pc = self.regs.pop()

    def _jp(self, ins: Instruction) -> None:  # 1nnn
        self.regs.pc = ins.nnn

    def _call(self, ins: Instruction) -> None:  # 2nnn
        self.regs.push(self.regs.pc)
        self.regs.pc = ins.nnn

    def _jp_v0(self, ins: Instruction) -> None:  # Bnnn
        self.regs.pc = ins.nnn + self.regs[0]

    def _se_imm(self, ins: Instruction) -> None:  # 3xkk
        if self.regs[ins.x] == ins.kk:
            self._skip()

    def _sne_imm(self, ins: Instruction) -> None:  # 4xkk
        if self.regs[ins.x] != ins.kk:
            self._skip()

    def _se_reg(self, ins: Instruction) -> None:  # 5xy0
        if self.regs[ins.x] == self.regs[ins.y]:
            self._skip()

    def _sne_reg(self, ins: Instruction) -> None:  # 9xy0
        if self.regs[ins.x] != self.regs[ins.y]:
            self._skip()

    # ------------------------------------------------------------------
    # Register arithmetic
    # ------------------------------------------------------------------

    def _ld_imm(self, ins: Instruction) -> None:  # 6xkk
        self.regs[ins.x] = ins.kk

    def _add_imm(self, ins: Instruction) -> None:  # 7xkk, VF untouched
        self.regs[ins.x] = self.regs[ins.x] + ins.kk

    def _ld_reg(self, ins: Instruction) -> None:  # 8xy0
        self.regs[ins.x] = self.regs[ins.y]

    def _or(self, ins: Instruction) -> None:  # 8xy1
        self.regs[ins.x] = self.regs[ins.x] | self.regs[ins.y]

    def _and(self, ins: Instruction) -> None:  # 8xy2
        self.regs[ins.x] = self.regs[ins.x] & self.regs[ins.y]

    def _xor(self, ins: Instruction) -> None:  # 8xy3
        self.regs[ins.x] = self.regs[ins.x] ^ self.regs[ins.y]

    # The flag is written after the result in every handler below, so
    # VF as a destination ends up holding the flag.

    def _add_reg(self, ins: Instruction) -> None:  # 8xy4
        total = self.regs[ins.x] + self.regs[ins.y]
        self.regs[ins.x] = total
        self.regs[VF] = 1 if total > 0xFF else 0

    def _sub(self, ins: Instruction) -> None:  # 8xy5
        vx, vy = self.regs[ins.x], self.regs[ins.y]
        self.regs[ins.x] = vx - vy
        self.regs[VF] = 1 if vx >= vy else 0

    def _subn(self, ins: Instruction) -> None:  # 8xy7
        vx, vy = self.regs[ins.x], self.regs[ins.y]
        self.regs[ins.x] = vy - vx
        self.regs[VF] = 1 if vy >= vx else 0

    def _shift_source(self, ins: Instruction) -> int:
        return self.regs[ins.x if self.quirks.shift_reads_vx else ins.y]

    def _shr(self, ins: Instruction) -> None:  # 8xy6
        src = self._shift_source(ins)
        self.regs[ins.x] = src >> 1
        self.regs[VF] = src & 0x1

    def _shl(self, ins: Instruction) -> None:  # 8xyE
        src = self._shift_source(ins)
        self.regs[ins.x] = src << 1
        self.regs[VF] = (src >> 7) & 0x1

    def _rnd(self, ins: Instruction) -> None:  # Cxkk
        self.regs[ins.x] = int(self.rng.integers(0, 256)) & ins.kk

    # ------------------------------------------------------------------
    # Address register and memory
    # ------------------------------------------------------------------

    def _ld_i(self, ins: Instruction) -> None:  # Annn
        self.regs.i = ins.nnn

    def _add_i(self, ins: Instruction) -> None:  # Fx1E
        self.regs.i = (self.regs.i + self.regs[ins.x]) & 0xFFFF

    def _ld_f(self, ins: Instruction) -> None:  # Fx29
        self.regs.i = font_address(self.regs[ins.x])

    def _ld_b(self, ins: Instruction) -> None:  # Fx33
        value = self.regs[ins.x]
        self.mem.write_block(self.regs.i, (value // 100, (value // 10) % 10, value % 10))

    def _ld_mem_vx(self, ins: Instruction) -> None:  # Fx55
        count = ins.x + 1
        self.mem.write_block(self.regs.i, self.regs.v[:count])
        if not self.quirks.load_store_ignores_i:
            self.regs.i = (self.regs.i + count) & 0xFFFF

    def _ld_vx_mem(self, ins: Instruction) -> None:  # Fx65
        count = ins.x + 1
        self.regs.v[:count] = self.mem.read_block(self.regs.i, count)
        if not self.quirks.load_store_ignores_i:
            self.regs.i = (self.regs.i + count) & 0xFFFF

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def _drw(self, ins: Instruction) -> None:  # Dxyn
        sprite = self.mem.read_block(self.regs.i, ins.n)
        screen = self.screen
        width, height = DISPLAY_WIDTH, DISPLAY_HEIGHT
        wrap = self.quirks.draw_wraps_pixels

        # The origin always wraps; the quirk decides what happens to the
        # pixels that run past the right and bottom edges.
        x0 = self.regs[ins.x] % width
        y0 = self.regs[ins.y] % height

        collision = False
        for row, bits in enumerate(sprite):
            py = y0 + row
            if py >= height:
                if not wrap:
                    break
                py %= height
            for col in range(8):
                if not bits & (0x80 >> col):
                    continue
                px = x0 + col
                if px >= width:
                    if not wrap:
                        break
                    px %= width
                if screen.get_pixel(px, py):
                    screen.set_pixel(px, py, False)
                    collision = True
                else:
                    screen.set_pixel(px, py, True)

        self.regs[VF] = 1 if collision else 0

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------

    def _skp(self, ins: Instruction) -> None:  # Ex9E
        key = self.regs[ins.x]
        if Key.is_valid(key) and self.keyboard.is_key_down(key):
            self._skip()

    def _sknp(self, ins: Instruction) -> None:  # ExA1
        key = self.regs[ins.x]
        if Key.is_valid(key) and not self.keyboard.is_key_down(key):
            self._skip()

    def _ld_vx_k(self, ins: Instruction) -> Optional[StepResult]:  # Fx0A
        key = self.keyboard.wait_for_key()
        if key is None:
            self.regs.pc = (self.regs.pc - 2) & 0xFFFF
            self._awaiting_key = True
            return StepResult.AWAITING_KEY
        self._awaiting_key = False
        self.regs[ins.x] = key
        return None

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _ld_vx_dt(self, ins: Instruction) -> None:  # Fx07
        self.regs[ins.x] = self.regs.delay_timer

    def _ld_dt_vx(self, ins: Instruction) -> None:  # Fx15
        self.timers.load_delay(self.regs[ins.x])

    def _ld_st_vx(self, ins: Instruction) -> None:  # Fx18
        self.timers.load_sound(self.regs[ins.x])

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return f"Cpu(pc=0x{self.regs.pc:03X}, cycles={self.cycles}, awaiting_key={self._awaiting_key})"
