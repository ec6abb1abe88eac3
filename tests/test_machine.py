import pytest

from chip8emu.core.devices import NullBeeper
from chip8emu.core.display import DisplayBuffer
from chip8emu.core.errors import InvalidOpcode, RomTooLarge
from chip8emu.core.input_state import KeypadState
from chip8emu.core.machine import Chip8Machine
from chip8emu.core.types import MAX_ROM_SIZE, StepResult

FRAME = 1 / 60


def test_defaults_are_headless():
    m = Chip8Machine()
    assert isinstance(m.screen, DisplayBuffer)
    assert isinstance(m.keyboard, KeypadState)
    assert m.beeper is NullBeeper()
    assert m.options.cpu_frequency_hz == 500


def test_clear_draw_loop_scenario(make_machine, display):
    # CLS; LD V0, 5; DRW V0, V0, 1; JP start
    m = make_machine("00E0 6005 D001 1200")
    for _ in range(4):
        assert m.step() is StepResult.EXECUTED

    assert m.registers[0] == 5
    assert m.registers.pc == 0x200
    # first font byte is F0: four pixels from (5, 5)
    assert [display.get_pixel(x, 5) for x in range(4, 10)] == [False, True, True, True, True, False]
    assert display.lit_count() == 4

    for _ in range(1000):
        m.advance(FRAME)
    assert not m.machine_halt


def test_draw_twice_restores_screen(make_machine, display):
    m = make_machine("6005 A000 D005 D005")
    for _ in range(3):
        m.step()
    drawn = display.pixels.copy()
    m.step()
    assert display.lit_count() == 0
    assert m.registers[0xF] == 1
    assert drawn.sum() == 14


def test_key_wait_scenario(make_machine, keypad):
    # LD DT, V0 with V0 = 60, wait for a key, then idle
    m = make_machine("603C F015 F10A 1206")
    m.step()
    m.step()
    for _ in range(30):
        m.advance(FRAME)
        assert m.registers.pc == 0x204
    assert m.registers.delay_timer == 30

    keypad.press(0xB)
    m.advance(FRAME)
    assert m.registers[1] == 0xB
    assert m.registers.pc == 0x206


def test_sound_scenario_exactly_one_start_and_stop(make_machine, beeper):
    # LD V0, 10; LD ST, V0; then busy-loop
    m = make_machine("600A F018 1204")
    for _ in range(60):
        m.advance(FRAME)
    assert beeper.events == ["start", "stop"]
    assert m.registers.sound_timer == 0


def test_load_rom_resets_state(make_machine):
    m = make_machine("6005 2200")
    m.step()
    m.step()
    m.load_rom(bytes.fromhex("00E0"))
    assert m.registers.pc == 0x200
    assert m.registers[0] == 0
    assert m.registers.sp == 0
    assert m.memory.read_word(0x200) == 0x00E0
    assert m.memory.read_word(0x202) == 0


def test_reset_reloads_current_rom(make_machine, display):
    m = make_machine("6005 A000 D005")
    for _ in range(3):
        m.step()
    m.memory[0x200] = 0x00
    m.reset()
    assert display.lit_count() == 0
    assert m.memory.read_word(0x200) == 0x6005
    assert m.registers.pc == 0x200


def test_oversized_rom_rejected():
    with pytest.raises(RomTooLarge):
        Chip8Machine().load_rom(bytes(MAX_ROM_SIZE + 1))


def test_rejected_rom_keeps_previous_program(make_machine):
    m = make_machine("6005 1202")
    m.step()
    with pytest.raises(RomTooLarge):
        m.load_rom(bytes(MAX_ROM_SIZE + 1))
    assert m.rom == bytes.fromhex("6005 1202")
    assert m.registers.pc == 0x202
    assert m.step() is StepResult.EXECUTED
    assert m.registers.pc == 0x202
    assert m.registers.v[0] == 5


def test_reset_disarms_pending_key_wait(make_machine, keypad):
    m = make_machine("F00A 1202")
    assert m.step() is StepResult.AWAITING_KEY
    m.reset()
    keypad.press(5)
    keypad.release(5)
    assert m.step() is StepResult.AWAITING_KEY
    keypad.press(7)
    assert m.step() is StepResult.EXECUTED
    assert m.registers.v[0] == 7


def test_load_rom_disarms_pending_key_wait(make_machine, keypad):
    m = make_machine("F00A")
    assert m.step() is StepResult.AWAITING_KEY
    m.load_rom(bytes.fromhex("F10A"))
    keypad.press(3)
    assert m.step() is StepResult.AWAITING_KEY
    assert m.registers.pc == 0x200


def test_halts_after_error(make_machine):
    m = make_machine("0000")
    with pytest.raises(InvalidOpcode):
        m.advance(FRAME)
    assert m.machine_halt
    assert isinstance(m.last_error, InvalidOpcode)
    assert m.advance(FRAME) == (0, 0)

    m.reset()
    assert not m.machine_halt


def test_repr_mentions_pc(make_machine):
    assert "pc=0x200" in repr(make_machine("1200"))
