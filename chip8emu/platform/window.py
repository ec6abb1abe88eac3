"""
Main application window for chip8emu.
Uses pygame to create a display, drive the emulation main loop, and
coordinate audio, video, and input subsystems.

Typical usage::

    from chip8emu.platform.window import Window

    machine = MachineFactory.create("pong.ch8", beeper=beeper)
    window = Window(machine, scale=10, audio=beeper)
    window.run()

Each loop iteration hands the wall-clock time elapsed since the previous
one to :meth:`Chip8Machine.advance`, which runs the instructions and timer
ticks due in that span.  The loop itself is throttled to 60 fps.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import pygame

from chip8emu.core.errors import Chip8Error
from chip8emu.core.machine import Chip8Machine
from chip8emu.platform.audio import PygameBeeper
from chip8emu.platform.input_handler import InputHandler
from chip8emu.shell.frame_renderer import FrameRenderer
from chip8emu.shell.keyboard_profiles import KeyProfile
from chip8emu.shell.palette import Palette

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_WINDOW_TITLE: str = "chip8emu"

MIN_SCALE: int = 1
MAX_SCALE: int = 20

_FRAME_HZ: int = 60


class Window:
    """Pygame window that owns the emulation main loop.

    Parameters
    ----------
    machine:
        A machine with a ROM loaded.  Its screen must be a
        :class:`~chip8emu.core.display.DisplayBuffer` and its keyboard a
        :class:`~chip8emu.core.input_state.KeypadState`.
    scale:
        Integer scale factor applied to the native 64x32 resolution.
    palette:
        Background/foreground colours.
    profile:
        Keyboard profile for the input handler.
    audio:
        The machine's beeper when it is a :class:`PygameBeeper`; shut down
        together with the window.
    title:
        Shown in the window caption after the program name.
    """

    def __init__(
        self,
        machine: Chip8Machine,
        scale: int = 10,
        *,
        palette: Palette = Palette(),
        profile: Optional[KeyProfile] = None,
        audio: Optional[PygameBeeper] = None,
        title: str = "",
    ) -> None:
        # ---- basic state -------------------------------------------------
        self._machine = machine
        self._scale: int = max(MIN_SCALE, min(MAX_SCALE, scale))
        self._running: bool = False
        self._paused: bool = False
        self._audio = audio
        self._title: str = f"{_WINDOW_TITLE} - {title}" if title else _WINDOW_TITLE
        self.error: Optional[Chip8Error] = None

        display = machine.screen
        self._native_width: int = display.width
        self._native_height: int = display.height

        # ---- init pygame display -----------------------------------------
        if not pygame.get_init():
            pygame.init()

        self._display_width: int = self._native_width * self._scale
        self._display_height: int = self._native_height * self._scale
        self._screen: pygame.Surface = pygame.display.set_mode(
            (self._display_width, self._display_height),
            pygame.RESIZABLE,
        )
        pygame.display.set_caption(self._title)

        self._clock: pygame.time.Clock = pygame.time.Clock()
        self._last_time: float = 0.0

        # ---- subsystems --------------------------------------------------
        self._frame_renderer: FrameRenderer = FrameRenderer(display, palette)
        self._input: InputHandler = InputHandler(machine.keyboard, profile)

        logger.info(
            "Window: %dx%d native, %dx%d display (scale=%d)",
            self._native_width,
            self._native_height,
            self._display_width,
            self._display_height,
            self._scale,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._running

    @property
    def paused(self) -> bool:
        return self._paused

    @paused.setter
    def paused(self, value: bool) -> None:
        if value == self._paused:
            return
        self._paused = value
        if self._audio is not None and self._machine.timers.beeping:
            if value:
                self._audio.stop()
            else:
                self._audio.start()
        pygame.display.set_caption(f"{self._title}  [paused]" if value else self._title)
        logger.info("Emulation %s", "paused" if value else "resumed")

    @property
    def scale(self) -> int:
        return self._scale

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Enter the main emulation loop.

        Blocks until the user closes the window, presses Escape, or the
        machine halts on an error (stored in :attr:`error`).
        """
        self._running = True
        self._last_time = time.monotonic()

        logger.info("Entering main loop (target %d fps)", _FRAME_HZ)

        try:
            while self._running:
                self._tick()
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
        finally:
            self._shutdown()

    def _tick(self) -> None:
        """Execute one iteration of the main loop."""
        # ---- input -------------------------------------------------------
        self._input.poll()
        if self._input.quit_requested:
            self._running = False
            return
        if self._input.take_pause_toggles() % 2:
            self.paused = not self._paused
        if self._input.take_reset_request():
            self._machine.reset()
            self._last_time = time.monotonic()

        # ---- emulation ---------------------------------------------------
        now = time.monotonic()
        elapsed = now - self._last_time
        self._last_time = now
        if not self._paused:
            try:
                self._machine.advance(elapsed)
            except Chip8Error as exc:
                logger.exception("Emulation stopped")
                self.error = exc
                self._running = False
                return

        # ---- video -------------------------------------------------------
        redraw = self._input.take_redraw_request()
        if self._machine.screen.dirty or redraw:
            surface = self._frame_renderer.render()
            current_size = self._screen.get_size()
            scaled = pygame.transform.scale(surface, current_size)
            self._screen.blit(scaled, (0, 0))
            pygame.display.flip()

        # ---- timing ------------------------------------------------------
        self._clock.tick(_FRAME_HZ)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def _shutdown(self) -> None:
        """Clean up all subsystems."""
        logger.info("Shutting down")
        if self._audio is not None:
            self._audio.shutdown()
        pygame.quit()
