"""
No-op port implementations.

Used when the host has no audio device or no keyboard (``--no-audio``,
headless runs, ROM info mode).
"""

from __future__ import annotations

from typing import Optional

from chip8emu.core.ports import Beeper, Keyboard


class NullBeeper(Beeper):
    """A beeper that ignores start/stop requests."""

    _instance: Optional[NullBeeper] = None

    def __new__(cls) -> NullBeeper:
        """NullBeeper is a singleton -- every call returns the same instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def start(self) -> None:
        pass

    def stop(self) -> None:
        pass

    def __repr__(self) -> str:
        return "NullBeeper()"


class NullKeyboard(Keyboard):
    """A keypad with no key ever pressed.  ``LD Vx, K`` waits forever."""

    _instance: Optional[NullKeyboard] = None

    def __new__(cls) -> NullKeyboard:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def is_key_down(self, key: int) -> bool:
        return False

    def wait_for_key(self) -> Optional[int]:
        return None

    def __repr__(self) -> str:
        return "NullKeyboard()"
