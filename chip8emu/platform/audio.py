"""
Audio output device for chip8emu.
Uses pygame.mixer to play the CHIP-8 buzzer.

The machine has a single tone that is either on or off: it sounds while
the sound timer is nonzero.  The core reports the edges through the
:class:`~chip8emu.core.ports.Beeper` port, so this module does not stream
samples per frame.  Instead it renders one second of a square wave with
**numpy**, wraps it in a ``pygame.mixer.Sound`` and loops it on a
dedicated channel between :meth:`PygameBeeper.start` and
:meth:`PygameBeeper.stop`.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import pygame

from chip8emu.core.ports import Beeper

logger = logging.getLogger(__name__)

_MIXER_RATE: int = 44100

# Smaller values reduce latency but may cause underruns on slower machines.
_MIXER_BUFFER_SAMPLES: int = 512

_TONE_HZ: int = 440
_AMPLITUDE: int = 6000


def square_wave(rate: int, tone_hz: int = _TONE_HZ, amplitude: int = _AMPLITUDE) -> np.ndarray:
    """One second of a signed 16-bit square wave at *tone_hz*.

    The length is a whole number of periods so the buffer loops without a
    click.
    """
    period = max(2, rate // tone_hz)
    samples = (rate // period) * period
    t = np.arange(samples)
    wave = np.where((t % period) < period // 2, amplitude, -amplitude)
    return wave.astype(np.int16)


class PygameBeeper(Beeper):
    """Play a looping tone while the sound timer runs.

    Parameters
    ----------
    enabled:
        Set to ``False`` to create the device in a silent / no-op mode.
    tone_hz:
        Pitch of the buzzer.
    """

    def __init__(self, *, enabled: bool = True, tone_hz: int = _TONE_HZ) -> None:
        self._enabled: bool = enabled
        self._tone_hz: int = tone_hz
        self._channel: Optional[pygame.mixer.Channel] = None
        self._sound: Optional[pygame.mixer.Sound] = None
        self._playing: bool = False

        if not self._enabled:
            logger.info("PygameBeeper: disabled (silent mode)")
            return

        self._init_mixer()

    # ------------------------------------------------------------------
    # Beeper contract
    # ------------------------------------------------------------------

    def start(self) -> None:
        if not self._enabled or self._channel is None or self._sound is None:
            return
        self._channel.play(self._sound, loops=-1)
        self._playing = True

    def stop(self) -> None:
        if self._channel is not None:
            self._channel.stop()
        self._playing = False

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def playing(self) -> bool:
        return self._playing

    def set_volume(self, volume: float) -> None:
        """Set the playback volume (0.0 = mute, 1.0 = full)."""
        volume = max(0.0, min(1.0, volume))
        if self._channel is not None:
            self._channel.set_volume(volume)

    def shutdown(self) -> None:
        """Stop playback and release the mixer."""
        self.stop()
        self._sound = None
        self._channel = None
        if pygame.mixer.get_init() is not None:
            pygame.mixer.quit()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _init_mixer(self) -> None:
        try:
            pygame.mixer.init(
                frequency=_MIXER_RATE,
                size=-16,       # signed 16-bit
                channels=1,     # mono
                buffer=_MIXER_BUFFER_SAMPLES,
            )
        except pygame.error as exc:
            logger.error("PygameBeeper: mixer init failed: %s", exc)
            self._enabled = False
            return

        actual_freq, actual_size, actual_channels = pygame.mixer.get_init()
        wave = square_wave(actual_freq, self._tone_hz)
        if actual_channels > 1:
            # Interleave the mono wave across every output channel.
            wave = np.repeat(wave, actual_channels)
        self._sound = pygame.mixer.Sound(buffer=wave.tobytes())

        pygame.mixer.set_num_channels(8)
        self._channel = pygame.mixer.Channel(0)

        logger.info(
            "PygameBeeper: mixer ready at %d Hz, %d-bit, %d ch (tone %d Hz)",
            actual_freq,
            abs(actual_size),
            actual_channels,
            self._tone_hz,
        )

    def __repr__(self) -> str:
        return f"PygameBeeper(enabled={self._enabled}, playing={self._playing})"
