"""Shared fixtures for the chip8emu test suite.

Programs are written as hex strings, one instruction word per group, e.g.
``"00E0 6005 D001 1200"``.  ``bytes.fromhex`` ignores the spaces.
"""

import os

# pygame must never touch a real display or sound card in tests.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest

from chip8emu.core.display import DisplayBuffer
from chip8emu.core.input_state import KeypadState
from chip8emu.core.machine import Chip8Machine
from chip8emu.core.options import MachineOptions, Quirks
from chip8emu.core.ports import Beeper


class RecordingBeeper(Beeper):
    """Records start/stop calls in order."""

    def __init__(self):
        self.events = []

    def start(self):
        self.events.append("start")

    def stop(self):
        self.events.append("stop")


@pytest.fixture
def beeper():
    return RecordingBeeper()


@pytest.fixture
def keypad():
    return KeypadState()


@pytest.fixture
def display():
    return DisplayBuffer()


@pytest.fixture
def make_machine(display, keypad, beeper):
    """Build a machine wired to the fixture ports with *hex_program* loaded."""

    def _make(hex_program="", *, quirks=None, cpu_hz=500, seed=1234):
        options = MachineOptions(
            cpu_frequency_hz=cpu_hz,
            quirks=quirks if quirks is not None else Quirks(),
            seed=seed,
        )
        machine = Chip8Machine(options, screen=display, keyboard=keypad, beeper=beeper)
        machine.load_rom(bytes.fromhex(hex_program))
        return machine

    return _make
