"""
KeypadState -- headless :class:`~chip8emu.core.ports.Keyboard`.

The host writes key events with :meth:`press` / :meth:`release` (the
pygame :class:`~chip8emu.platform.input_handler.InputHandler` does this
from window events; tests call them directly).  The CPU reads the state
through the port contract.

Key-wait protocol
-----------------
``LD Vx, K`` polls :meth:`wait_for_key` once per scheduler cycle.  The
first poll arms the wait; a key *pressed* after that is latched and handed
to the next poll, which also disarms the wait.  Keys already held when the
wait was armed do not satisfy it.
"""

from __future__ import annotations

from typing import List, Optional

from chip8emu.core.ports import Keyboard
from chip8emu.core.types import Key


class KeypadState(Keyboard):
    """Sixteen-key pressed/released state with a latched key-wait."""

    def __init__(self) -> None:
        self._down: List[bool] = [False] * len(Key)
        self._waiting: bool = False
        self._latched: Optional[int] = None

    # ------------------------------------------------------------------
    # Host-side input event injection
    # ------------------------------------------------------------------

    def press(self, key: int) -> None:
        key = Key(key)
        was_down = self._down[key]
        self._down[key] = True
        if self._waiting and not was_down and self._latched is None:
            self._latched = int(key)

    def release(self, key: int) -> None:
        self._down[Key(key)] = False

    def release_all(self) -> None:
        for k in range(len(self._down)):
            self._down[k] = False

    # ------------------------------------------------------------------
    # Keyboard contract
    # ------------------------------------------------------------------

    def is_key_down(self, key: int) -> bool:
        if not Key.is_valid(key):
            return False
        return self._down[key]

    def wait_for_key(self) -> Optional[int]:
        if not self._waiting:
            self._waiting = True
            self._latched = None
            return None
        key = self._latched
        if key is not None:
            self._waiting = False
            self._latched = None
        return key

    @property
    def waiting(self) -> bool:
        return self._waiting

    def cancel_wait(self) -> None:
        self._waiting = False
        self._latched = None

    def __repr__(self) -> str:
        held = ",".join(f"{k:X}" for k, down in enumerate(self._down) if down)
        return f"KeypadState(down=[{held}], waiting={self._waiting})"
