"""
TimerDriver -- the 60 Hz delay and sound timers.

The driver owns every write to the timer fields of the
:class:`~chip8emu.core.registers.RegisterFile`:

* :meth:`tick` is called by the scheduler at 60 Hz, independently of the
  CPU frequency, and decrements each nonzero timer by one.
* :meth:`load_delay` / :meth:`load_sound` are called by the CPU for
  ``LD DT, Vx`` and ``LD ST, Vx``.

The beeper is signalled on edges of the sound timer only: a transition
from zero to nonzero calls :meth:`Beeper.start`, a transition to zero
calls :meth:`Beeper.stop`.  Reloading a running sound timer is not an
edge.
"""

from __future__ import annotations

import logging

from chip8emu.core.ports import Beeper
from chip8emu.core.registers import RegisterFile

logger = logging.getLogger(__name__)


class TimerDriver:
    """Decrements the delay and sound timers and drives the beeper.

    Parameters
    ----------
    registers:
        The register file holding ``delay_timer`` and ``sound_timer``.
    beeper:
        The beeper port.
    """

    def __init__(self, registers: RegisterFile, beeper: Beeper) -> None:
        self._regs = registers
        self._beeper = beeper
        self._beeping: bool = False
        self.ticks: int = 0

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def beeping(self) -> bool:
        """``True`` between a Beeper.start() and the matching stop()."""
        return self._beeping

    @property
    def delay(self) -> int:
        return self._regs.delay_timer

    @property
    def sound(self) -> int:
        return self._regs.sound_timer

    # ------------------------------------------------------------------
    # Clocking
    # ------------------------------------------------------------------

    def tick(self) -> None:
        """Advance both timers by one 60 Hz period."""
        self.ticks += 1
        regs = self._regs
        if regs.delay_timer > 0:
            regs.delay_timer -= 1
        if regs.sound_timer > 0:
            regs.sound_timer -= 1
            self._sync_beeper()

    # ------------------------------------------------------------------
    # CPU-side loads
    # ------------------------------------------------------------------

    def load_delay(self, value: int) -> None:
        self._regs.delay_timer = value & 0xFF

    def load_sound(self, value: int) -> None:
        self._regs.sound_timer = value & 0xFF
        self._sync_beeper()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Zero both timers, silencing the beeper if it was on."""
        self._regs.delay_timer = 0
        self._regs.sound_timer = 0
        self.ticks = 0
        self._sync_beeper()

    def _sync_beeper(self) -> None:
        on = self._regs.sound_timer > 0
        if on and not self._beeping:
            self._beeping = True
            logger.debug("Sound timer started (%d)", self._regs.sound_timer)
            self._beeper.start()
        elif not on and self._beeping:
            self._beeping = False
            logger.debug("Sound timer expired")
            self._beeper.stop()
