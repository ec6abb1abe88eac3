"""
Frame renderer for chip8emu.
Converts the machine's monochrome DisplayBuffer into an RGB pygame Surface.

The emulation core stores one boolean per pixel.  This module maps each
pixel through a two-entry colour table (background, foreground) and writes
the result into a pygame Surface at native 64x32 resolution; the window
scales it to the display size.

Performance notes
-----------------
The look-up is a single **numpy** fancy-index of the whole frame followed
by ``pygame.surfarray.blit_array``, so no per-pixel Python loop runs.
"""

from __future__ import annotations

import logging

import numpy as np
import pygame

from chip8emu.core.display import DisplayBuffer
from chip8emu.shell.palette import Palette

logger = logging.getLogger(__name__)


class FrameRenderer:
    """Convert a :class:`DisplayBuffer` into an RGB :class:`pygame.Surface`.

    Parameters
    ----------
    display:
        The machine's display buffer.
    palette:
        Background/foreground colours.  Defaults to black on grey.
    """

    def __init__(self, display: DisplayBuffer, palette: Palette = Palette()) -> None:
        self._display = display
        self._lut: np.ndarray = np.zeros((2, 3), dtype=np.uint8)
        self.update_palette(palette)

        self._surface: pygame.Surface = pygame.Surface((display.width, display.height))

        logger.info(
            "FrameRenderer: %dx%d, %r",
            display.width,
            display.height,
            palette,
        )

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self._display.width

    @property
    def height(self) -> int:
        return self._display.height

    @property
    def surface(self) -> pygame.Surface:
        """The internal pygame Surface (updated on each :meth:`render` call)."""
        return self._surface

    def render(self) -> pygame.Surface:
        """Render the current frame and return the surface.

        The same :class:`pygame.Surface` object is reused each frame.
        Acknowledges the display so its ``dirty`` flag clears.
        """
        rgb = self.to_rgb(self._display.pixels)
        # pygame surfarray expects (W, H, 3) -- transpose width and height.
        pygame.surfarray.blit_array(self._surface, rgb.transpose(1, 0, 2))
        self._display.acknowledge()
        return self._surface

    def to_rgb(self, pixels: np.ndarray) -> np.ndarray:
        """Map an ``(H, W)`` boolean frame to an ``(H, W, 3)`` uint8 image."""
        return self._lut[pixels.astype(np.uint8)]

    def update_palette(self, palette: Palette) -> None:
        """Replace the colours at runtime."""
        self._palette = palette
        self._lut[0] = palette.background
        self._lut[1] = palette.foreground
