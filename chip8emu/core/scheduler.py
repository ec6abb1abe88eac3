"""
Clock -- converts wall-clock time into CPU steps and 60 Hz timer ticks.

The CPU and the timers are two independently clocked periodic tasks run
on one thread.  Instruction *k* is due at ``k / cpu_hz`` seconds and
timer tick *j* at ``j / timer_hz`` seconds (both counted from the last
reset).  :meth:`Clock.advance` runs every event that became due, in time
order, with a timer tick ordered before an instruction due at the same
instant.  The comparison is done on integers, so the interleaving is
deterministic for a given sequence of ``advance`` calls.

Key-wait suspension
-------------------
When a step reports :attr:`StepResult.AWAITING_KEY` the remaining
instruction slots of the current ``advance`` call are dropped while timer
ticks keep running.  The keyboard is therefore polled once per scheduler
cycle, whatever the CPU frequency.

Catch-up
--------
A late ``advance`` runs the whole backlog, up to :attr:`max_catchup`
seconds.  Anything older (the host was suspended, a debugger paused it)
is discarded with a warning rather than replayed.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Tuple

from chip8emu.core.errors import InvalidConfiguration
from chip8emu.core.options import check_cpu_frequency
from chip8emu.core.types import TIMER_HZ, StepResult

logger = logging.getLogger(__name__)

# Tolerance when converting accumulated float seconds into event counts.
_EPSILON: float = 1e-9


class Clock:
    """Cooperative scheduler for one emulation session.

    Parameters
    ----------
    step:
        Callable executing one instruction (normally ``Cpu.step``).
    tick:
        Callable advancing the timers by one period (``TimerDriver.tick``).
    cpu_frequency_hz:
        Instructions per second.
    timer_hz:
        Timer ticks per second.  60 for CHIP-8.
    max_catchup:
        Longest backlog, in seconds, that one ``advance`` call will replay.
    time_source, sleep:
        Injected for tests; default to :func:`time.monotonic` and
        :func:`time.sleep`.
    """

    def __init__(
        self,
        step: Callable[[], StepResult],
        tick: Callable[[], None],
        cpu_frequency_hz: int,
        *,
        timer_hz: int = TIMER_HZ,
        max_catchup: float = 0.25,
        time_source: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        check_cpu_frequency(cpu_frequency_hz)
        if timer_hz <= 0:
            raise InvalidConfiguration(f"timer frequency must be positive, got {timer_hz}")
        if max_catchup <= 0:
            raise InvalidConfiguration(f"max_catchup must be positive, got {max_catchup}")

        self._step = step
        self._tick = tick
        self.cpu_hz: int = cpu_frequency_hz
        self.timer_hz: int = timer_hz
        self.max_catchup: float = max_catchup
        self._time = time_source
        self._sleep = sleep

        # Events done within the current one-second window, and the time
        # elapsed in that window.
        self._elapsed: float = 0.0
        self._steps: int = 0
        self._ticks: int = 0

        # Lifetime totals.
        self.total_steps: int = 0
        self.total_ticks: int = 0
        self.dropped_seconds: float = 0.0

        self._running: bool = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._running

    @property
    def period(self) -> float:
        """Interval between consecutive events of the faster task."""
        return 1.0 / max(self.cpu_hz, self.timer_hz)

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def reset(self) -> None:
        self._elapsed = 0.0
        self._steps = 0
        self._ticks = 0

    def advance(self, seconds: float) -> Tuple[int, int]:
        """Account for *seconds* of wall-clock time and run what is due.

        Returns:
            ``(steps, ticks)`` -- instructions executed and timer ticks run.
        """
        if seconds < 0:
            raise ValueError(f"cannot advance by a negative duration ({seconds})")
        if seconds > self.max_catchup:
            logger.warning(
                "Scheduler fell %.3f s behind; dropping %.3f s of backlog",
                seconds,
                seconds - self.max_catchup,
            )
            self.dropped_seconds += seconds - self.max_catchup
            seconds = self.max_catchup

        self._elapsed += seconds
        target_steps = int(self._elapsed * self.cpu_hz + _EPSILON)
        target_ticks = int(self._elapsed * self.timer_hz + _EPSILON)

        steps = ticks = 0
        suspended = False
        while self._steps < target_steps or self._ticks < target_ticks:
            if self._tick_is_next(target_steps, target_ticks):
                self._tick()
                self._ticks += 1
                ticks += 1
                continue

            self._steps += 1
            if suspended:
                continue
            if self._step() is StepResult.AWAITING_KEY:
                suspended = True
            else:
                steps += 1

        self.total_steps += steps
        self.total_ticks += ticks
        self._rebase()
        return steps, ticks

    def _tick_is_next(self, target_steps: int, target_ticks: int) -> bool:
        if self._ticks >= target_ticks:
            return False
        if self._steps >= target_steps:
            return True
        # tick j+1 at (j+1)/timer_hz, step k+1 at (k+1)/cpu_hz
        return (self._ticks + 1) * self.cpu_hz <= (self._steps + 1) * self.timer_hz

    def _rebase(self) -> None:
        """Fold whole seconds out of the window to keep the floats small."""
        while (
            self._elapsed >= 1.0
            and self._steps >= self.cpu_hz
            and self._ticks >= self.timer_hz
        ):
            self._elapsed -= 1.0
            self._steps -= self.cpu_hz
            self._ticks -= self.timer_hz

    # ------------------------------------------------------------------
    # Blocking loop (headless hosts)
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Advance in real time until :meth:`stop` is called.

        Errors raised by the step or tick callables propagate to the caller
        and end the loop.
        """
        self._running = True
        last = self._time()
        logger.info("Clock running (cpu=%d Hz, timers=%d Hz)", self.cpu_hz, self.timer_hz)
        try:
            while self._running:
                now = self._time()
                self.advance(max(0.0, now - last))
                last = now
                self._sleep(self.period)
        finally:
            self._running = False

    def stop(self) -> None:
        """Request :meth:`run` to return after the current cycle."""
        self._running = False

    def __repr__(self) -> str:
        return (
            f"Clock(cpu_hz={self.cpu_hz}, timer_hz={self.timer_hz}, "
            f"steps={self.total_steps}, ticks={self.total_ticks})"
        )
