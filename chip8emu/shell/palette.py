"""
Colour configuration for the chip8emu display.

The display is monochrome, so a "palette" is just two colours: the
background (pixel off) and the foreground (pixel on).  Colours are given
on the command line in HTML-like hexadecimal notation, ``#RRGGBB`` or
``RRGGBB``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Tuple

from chip8emu.core.errors import InvalidConfiguration

RGB = Tuple[int, int, int]

_HEX_COLOR = re.compile(r"^#?([0-9A-Fa-f]{6})$")

DEFAULT_BACKGROUND: RGB = (0x00, 0x00, 0x00)
DEFAULT_FOREGROUND: RGB = (0x80, 0x80, 0x80)


def parse_color(text: str) -> RGB:
    """Parse ``#RRGGBB`` / ``RRGGBB`` into an ``(r, g, b)`` tuple.

    Raises:
        InvalidConfiguration: If *text* is not six hexadecimal digits with
            an optional leading ``#``.
    """
    match = _HEX_COLOR.match(text.strip()) if isinstance(text, str) else None
    if match is None:
        raise InvalidConfiguration(f"malformed colour {text!r}, expected #RRGGBB")
    value = int(match.group(1), 16)
    return (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF


def format_color(rgb: RGB) -> str:
    return "#{:02X}{:02X}{:02X}".format(*rgb)


@dataclass(frozen=True)
class Palette:
    """Background/foreground colour pair."""

    background: RGB = DEFAULT_BACKGROUND
    foreground: RGB = DEFAULT_FOREGROUND

    @classmethod
    def from_strings(cls, background: str, foreground: str) -> Palette:
        return cls(parse_color(background), parse_color(foreground))

    def __repr__(self) -> str:
        return (
            f"Palette(background={format_color(self.background)}, "
            f"foreground={format_color(self.foreground)})"
        )
