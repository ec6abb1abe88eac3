"""
Construction-time configuration for a CHIP-8 session.

Both classes are frozen: a session reads them, never changes them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from chip8emu.core.errors import InvalidConfiguration
from chip8emu.core.types import DEFAULT_CPU_HZ, MAX_CPU_HZ, MIN_CPU_HZ


def check_cpu_frequency(hz: int) -> None:
    """Raise :class:`InvalidConfiguration` unless *hz* is an integer in range."""
    if isinstance(hz, bool) or not isinstance(hz, int):
        raise InvalidConfiguration(f"CPU frequency must be an integer, got {hz!r}")
    if not MIN_CPU_HZ <= hz <= MAX_CPU_HZ:
        raise InvalidConfiguration(
            f"CPU frequency {hz} Hz outside the supported range "
            f"{MIN_CPU_HZ}..{MAX_CPU_HZ} Hz"
        )


@dataclass(frozen=True)
class Quirks:
    """Behavioural toggles away from baseline CHIP-8 semantics.

    Attributes
    ----------
    load_store_ignores_i:
        ``LD [I], Vx`` and ``LD Vx, [I]`` leave ``I`` unchanged instead of
        advancing it past the last byte accessed.
    shift_reads_vx:
        ``SHR``/``SHL`` shift ``Vx`` in place instead of reading ``Vy``.
    draw_wraps_pixels:
        ``DRW`` wraps sprite pixels around the screen edges instead of
        clipping them.
    """

    load_store_ignores_i: bool = False
    shift_reads_vx: bool = False
    draw_wraps_pixels: bool = False


@dataclass(frozen=True)
class MachineOptions:
    """Options for a :class:`~chip8emu.core.machine.Chip8Machine`.

    Raises:
        InvalidConfiguration: If ``cpu_frequency_hz`` is not an integer in
            ``[MIN_CPU_HZ, MAX_CPU_HZ]``.
    """

    cpu_frequency_hz: int = DEFAULT_CPU_HZ
    quirks: Quirks = field(default_factory=Quirks)
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        check_cpu_frequency(self.cpu_frequency_hz)
        if not isinstance(self.quirks, Quirks):
            raise InvalidConfiguration(f"quirks must be a Quirks instance, got {self.quirks!r}")
