"""
Physical-to-virtual keyboard layouts.

The CHIP-8 keypad is a 4x4 grid of hexadecimal keys::

    1 2 3 C
    4 5 6 D
    7 8 9 E
    A 0 B F

A profile maps a physical key *name* (as reported by
``pygame.key.name``, i.e. lower-case characters) to a virtual key.

=========  ================================================================
Profile    Layout
=========  ================================================================
default    Each hex digit is typed directly: ``0``-``9`` and ``a``-``f``.
qwerty     The 4x4 block ``1234 / qwer / asdf / zxcv`` mirrors the grid.
azerty     The 4x4 block ``1234 / azer / qsdf / wxcv`` mirrors the grid.
=========  ================================================================
"""

from __future__ import annotations

from typing import Dict, List

from chip8emu.core.errors import InvalidConfiguration
from chip8emu.core.types import Key

KeyProfile = Dict[str, Key]

# Virtual keys in grid order, row by row.
_GRID: List[Key] = [
    Key.Key1, Key.Key2, Key.Key3, Key.KeyC,
    Key.Key4, Key.Key5, Key.Key6, Key.KeyD,
    Key.Key7, Key.Key8, Key.Key9, Key.KeyE,
    Key.KeyA, Key.Key0, Key.KeyB, Key.KeyF,
]


def _grid_profile(rows: str) -> KeyProfile:
    physical = rows.replace(" ", "")
    return dict(zip(physical, _GRID))


_PROFILES: Dict[str, KeyProfile] = {
    "default": {f"{k:x}": k for k in Key},
    "qwerty": _grid_profile("1234 qwer asdf zxcv"),
    "azerty": _grid_profile("1234 azer qsdf wxcv"),
}

DEFAULT_PROFILE: str = "default"


def profile_names() -> List[str]:
    return list(_PROFILES)


def get_profile(name: str) -> KeyProfile:
    """Return a copy of the named profile.

    Raises:
        InvalidConfiguration: If *name* is not a built-in profile.
    """
    try:
        return dict(_PROFILES[name.lower()])
    except (KeyError, AttributeError):
        raise InvalidConfiguration(
            f"unknown keyboard profile {name!r}, expected one of: "
            + ", ".join(_PROFILES)
        ) from None
