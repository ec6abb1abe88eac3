"""
Input handler for chip8emu.
Maps keyboard keys to the sixteen CHIP-8 keypad keys.

The physical layout comes from a keyboard profile (see
:mod:`chip8emu.shell.keyboard_profiles`).  On top of the profile a few
keys control the emulator itself:

===================  ============================
Key                  Action
===================  ============================
Escape               Quit
F5                   Reset the machine
P                    Pause / resume
===================  ============================

P is only a control key when the active profile does not map it.
"""

from __future__ import annotations

import logging
from typing import Optional

import pygame

from chip8emu.core.input_state import KeypadState
from chip8emu.shell.keyboard_profiles import KeyProfile, get_profile

logger = logging.getLogger(__name__)


class InputHandler:
    """Translates pygame keyboard events into keypad presses.

    Parameters
    ----------
    keypad:
        The machine's keyboard port.
    profile:
        Physical key name -> virtual key map.  Defaults to the ``default``
        profile.
    """

    def __init__(self, keypad: KeypadState, profile: Optional[KeyProfile] = None) -> None:
        self._keypad = keypad
        self._profile: KeyProfile = profile if profile is not None else get_profile("default")
        self._quit_requested: bool = False
        self._reset_requested: bool = False
        self._pause_toggles: int = 0
        self._redraw_requested: bool = False

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    @property
    def quit_requested(self) -> bool:
        """``True`` if the user pressed Escape or closed the window."""
        return self._quit_requested

    def take_reset_request(self) -> bool:
        """Return and clear the pending reset request."""
        requested = self._reset_requested
        self._reset_requested = False
        return requested

    def take_pause_toggles(self) -> int:
        """Return and clear the number of pause key presses since last call."""
        toggles = self._pause_toggles
        self._pause_toggles = 0
        return toggles

    def take_redraw_request(self) -> bool:
        """Return and clear the pending request to repaint the window."""
        requested = self._redraw_requested
        self._redraw_requested = False
        return requested

    def poll(self) -> None:
        """Pump the pygame event queue and process all pending events.

        This should be called once at the top of each frame.
        """
        for event in pygame.event.get():
            self.handle_event(event)

    def handle_event(self, event: pygame.event.Event) -> None:
        """Process a single pygame event."""
        if event.type == pygame.QUIT:
            self._quit_requested = True
        elif event.type == pygame.KEYDOWN:
            self._on_key_down(event)
        elif event.type == pygame.KEYUP:
            self._on_key_up(event)
        elif event.type in (pygame.VIDEORESIZE, pygame.WINDOWEXPOSED):
            self._redraw_requested = True
        elif event.type == pygame.WINDOWFOCUSLOST:
            # Key-up events are lost while unfocused.
            self._keypad.release_all()

    # ------------------------------------------------------------------
    # Keyboard handlers
    # ------------------------------------------------------------------

    def _on_key_down(self, event: pygame.event.Event) -> None:
        key = event.key

        if key == pygame.K_ESCAPE:
            self._quit_requested = True
            return
        if key == pygame.K_F5:
            self._reset_requested = True
            return

        virtual = self._profile.get(pygame.key.name(key))
        if virtual is not None:
            self._keypad.press(virtual)
        elif key == pygame.K_p:
            self._pause_toggles += 1

    def _on_key_up(self, event: pygame.event.Event) -> None:
        virtual = self._profile.get(pygame.key.name(event.key))
        if virtual is not None:
            self._keypad.release(virtual)
