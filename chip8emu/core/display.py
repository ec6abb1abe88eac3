"""
DisplayBuffer -- headless :class:`~chip8emu.core.ports.Screen` backed by numpy.

The buffer is a ``(DISPLAY_HEIGHT, DISPLAY_WIDTH)`` boolean array laid out
in row order, so ``pixels[y, x]`` is the pixel at column *x* of row *y*.
Renderers poll :attr:`dirty` once per frame and call
:meth:`acknowledge` after drawing.
"""

from __future__ import annotations

import numpy as np

from chip8emu.core.errors import OutOfBounds
from chip8emu.core.ports import Screen
from chip8emu.core.types import DISPLAY_HEIGHT, DISPLAY_WIDTH


class DisplayBuffer(Screen):
    """Monochrome frame buffer.

    Parameters
    ----------
    width, height:
        Dimensions in pixels.  Default to the standard 64x32.
    """

    def __init__(self, width: int = DISPLAY_WIDTH, height: int = DISPLAY_HEIGHT) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"display dimensions must be positive, got {width}x{height}")
        self.width: int = width
        self.height: int = height
        self._pixels: np.ndarray = np.zeros((height, width), dtype=np.bool_)
        self._dirty: bool = True

    # ------------------------------------------------------------------
    # Screen contract
    # ------------------------------------------------------------------

    def clear(self) -> None:
        self._pixels.fill(False)
        self._dirty = True

    def get_pixel(self, x: int, y: int) -> bool:
        self._check(x, y)
        return bool(self._pixels[y, x])

    def set_pixel(self, x: int, y: int, on: bool) -> None:
        self._check(x, y)
        if self._pixels[y, x] != on:
            self._pixels[y, x] = on
            self._dirty = True

    def _check(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise OutOfBounds(y * self.width + x, self.width * self.height, "display")

    # ------------------------------------------------------------------
    # Renderer helpers
    # ------------------------------------------------------------------

    @property
    def pixels(self) -> np.ndarray:
        """Read-only view of the pixel array."""
        view = self._pixels.view()
        view.flags.writeable = False
        return view

    @property
    def dirty(self) -> bool:
        """``True`` if the buffer changed since the last :meth:`acknowledge`."""
        return self._dirty

    def acknowledge(self) -> None:
        self._dirty = False

    def lit_count(self) -> int:
        """Number of pixels currently on."""
        return int(np.count_nonzero(self._pixels))

    def __repr__(self) -> str:
        return f"DisplayBuffer(width={self.width}, height={self.height}, lit={self.lit_count()})"
