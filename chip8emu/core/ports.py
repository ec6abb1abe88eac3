"""
IO port contracts between the CHIP-8 core and its host.

The core calls these interfaces and never implements them.  A host
supplies one object per port; headless implementations live in
:mod:`chip8emu.core.display`, :mod:`chip8emu.core.input_state` and
:mod:`chip8emu.core.devices`, and the pygame ones in
:mod:`chip8emu.platform`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class Screen(ABC):
    """A 64x32 monochrome pixel grid.

    Coordinates passed by the core are always in range: wrapping or
    clipping is decided by the CPU, not by the screen.
    """

    @abstractmethod
    def clear(self) -> None:
        """Turn every pixel off."""
        ...

    @abstractmethod
    def get_pixel(self, x: int, y: int) -> bool:
        ...

    @abstractmethod
    def set_pixel(self, x: int, y: int, on: bool) -> None:
        ...


class Keyboard(ABC):
    """The sixteen-key hexadecimal keypad."""

    @abstractmethod
    def is_key_down(self, key: int) -> bool:
        """Return ``True`` if *key* (0..15) is currently held."""
        ...

    @abstractmethod
    def wait_for_key(self) -> Optional[int]:
        """Poll for a key press while the CPU is suspended on ``LD Vx, K``.

        The first call arms the wait.  Returns the key pressed since the
        wait was armed, or ``None`` if none has been pressed yet.  Must not
        block: the scheduler calls it once per cycle.
        """
        ...

    def cancel_wait(self) -> None:
        """Disarm a pending wait so that earlier presses are not delivered."""


class Beeper(ABC):
    """The single-tone buzzer driven by the sound timer."""

    @abstractmethod
    def start(self) -> None:
        ...

    @abstractmethod
    def stop(self) -> None:
        ...
