import pytest

from chip8emu.core.errors import InvalidOpcode, OutOfBounds, StackOverflow, StackUnderflow
from chip8emu.core.options import Quirks
from chip8emu.core.types import StepResult


def run(machine, count):
    for _ in range(count):
        assert machine.step() is StepResult.EXECUTED


# ---------------------------------------------------------------------------
# Control flow
# ---------------------------------------------------------------------------

def test_jump(make_machine):
    m = make_machine("1234")
    run(m, 1)
    assert m.registers.pc == 0x234


def test_jump_to_self_is_an_idle_loop(make_machine):
    m = make_machine("1200")
    run(m, 5)
    assert m.registers.pc == 0x200


def test_call_and_return(make_machine):
    m = make_machine("2206 0000 0000 00EE")
    run(m, 1)
    assert m.registers.pc == 0x206
    assert m.registers.stack == [0x202]
    run(m, 1)
    assert m.registers.pc == 0x202
    assert m.registers.sp == 0


def run_until(machine, address, limit=1000):
    for _ in range(limit):
        if machine.registers.pc == address:
            return
        assert machine.step() is StepResult.EXECUTED
    raise AssertionError(f"pc never reached 0x{address:03X}")


def test_many_call_return_round_trips(make_machine):
    # 20 iterations of CALL 0x20C; RET, then park at 0x20A
    m = make_machine("6000 220C 7001 3014 1202 120A 00EE")
    run_until(m, 0x20A)
    assert m.registers.v[0] == 20
    assert m.registers.sp == 0


def test_sixteen_nested_calls_unwind(make_machine):
    # recurse while V0 < 16, then return all the way out to 0x204
    m = make_machine("6000 2206 1204 7001 3010 2206 00EE")
    deepest = 0
    for _ in range(200):
        if m.registers.pc == 0x204:
            break
        run(m, 1)
        deepest = max(deepest, m.registers.sp)
    assert m.registers.pc == 0x204
    assert deepest == 16
    assert m.registers.v[0] == 16
    assert m.registers.sp == 0


def test_sixteen_nested_calls_then_overflow(make_machine):
    m = make_machine("2200")
    run(m, 16)
    assert m.registers.sp == 16
    with pytest.raises(StackOverflow):
        m.step()
    assert m.registers.sp == 16
    assert m.registers.pc == 0x200


def test_return_with_empty_stack(make_machine):
    m = make_machine("00EE")
    with pytest.raises(StackUnderflow):
        m.step()
    assert m.registers.pc == 0x200


def test_jump_plus_v0(make_machine):
    m = make_machine("6004 B300")
    run(m, 2)
    assert m.registers.pc == 0x304


def test_jump_plus_v0_past_memory_fails_on_next_fetch(make_machine):
    m = make_machine("60FF BFFF")
    run(m, 2)
    assert m.registers.pc == 0x10FE
    with pytest.raises(OutOfBounds):
        m.step()


@pytest.mark.parametrize(
    "program, expected_pc",
    [
        ("6005 3005", 0x206),  # SE Vx, byte taken
        ("6005 3006", 0x204),  # SE Vx, byte not taken
        ("6005 4006", 0x206),  # SNE Vx, byte taken
        ("6005 4005", 0x204),  # SNE Vx, byte not taken
    ],
)
def test_skip_immediate(make_machine, program, expected_pc):
    m = make_machine(program)
    run(m, 2)
    assert m.registers.pc == expected_pc


@pytest.mark.parametrize(
    "program, expected_pc",
    [
        ("6005 6105 5010", 0x208),
        ("6005 6106 5010", 0x206),
        ("6005 6106 9010", 0x208),
        ("6005 6105 9010", 0x206),
    ],
)
def test_skip_register(make_machine, program, expected_pc):
    m = make_machine(program)
    run(m, 3)
    assert m.registers.pc == expected_pc


# ---------------------------------------------------------------------------
# Arithmetic and flags
# ---------------------------------------------------------------------------

def test_add_immediate_wraps_without_touching_vf(make_machine):
    m = make_machine("60FF 6F07 7002")
    run(m, 3)
    assert m.registers[0] == 0x01
    assert m.registers[0xF] == 0x07


@pytest.mark.parametrize(
    "program, v0, vf",
    [
        ("60FF 6102 8014", 0x01, 1),  # ADD with carry
        ("6010 6102 8014", 0x12, 0),  # ADD without carry
        ("6005 6103 8015", 0x02, 1),  # SUB no borrow
        ("6005 6105 8015", 0x00, 1),  # SUB equal operands
        ("6003 6105 8015", 0xFE, 0),  # SUB with borrow
        ("6003 6105 8017", 0x02, 1),  # SUBN no borrow
        ("6005 6103 8017", 0xFE, 0),  # SUBN with borrow
    ],
)
def test_arithmetic_flags(make_machine, program, v0, vf):
    m = make_machine(program)
    run(m, 3)
    assert m.registers[0] == v0
    assert m.registers[0xF] == vf


def test_flag_wins_when_vf_is_the_destination(make_machine):
    m = make_machine("6F03 6105 8F15")
    run(m, 3)
    assert m.registers[0xF] == 0


@pytest.mark.parametrize(
    "op, expected",
    [("1", 0x0F | 0x35), ("2", 0x0F & 0x35), ("3", 0x0F ^ 0x35), ("0", 0x35)],
)
def test_bitwise(make_machine, op, expected):
    m = make_machine(f"600F 6135 801{op}")
    run(m, 3)
    assert m.registers[0] == expected


def test_shift_right_reads_vy_by_default(make_machine):
    m = make_machine("6004 6105 8016")
    run(m, 3)
    assert m.registers[0] == 0x02
    assert m.registers[0xF] == 1


def test_shift_right_reads_vx_with_quirk(make_machine):
    m = make_machine("6004 6105 8016", quirks=Quirks(shift_reads_vx=True))
    run(m, 3)
    assert m.registers[0] == 0x02
    assert m.registers[0xF] == 0


def test_shift_left(make_machine):
    m = make_machine("6001 6181 801E")
    run(m, 3)
    assert m.registers[0] == 0x02
    assert m.registers[0xF] == 1

    m = make_machine("6001 6181 801E", quirks=Quirks(shift_reads_vx=True))
    run(m, 3)
    assert m.registers[0] == 0x02
    assert m.registers[0xF] == 0


def test_random_is_masked_and_seeded(make_machine):
    m = make_machine("C00F C100")
    run(m, 2)
    assert 0 <= m.registers[0] <= 0x0F
    assert m.registers[1] == 0

    first = make_machine("C0FF C1FF", seed=99)
    second = make_machine("C0FF C1FF", seed=99)
    run(first, 2)
    run(second, 2)
    assert first.registers.v[:2] == second.registers.v[:2]


# ---------------------------------------------------------------------------
# Address register and memory
# ---------------------------------------------------------------------------

def test_load_and_add_i(make_machine):
    m = make_machine("AFFF 60FF F01E")
    run(m, 3)
    assert m.registers.i == 0x10FE


def test_font_address(make_machine):
    m = make_machine("600A F029")
    run(m, 2)
    assert m.registers.i == 50


def test_bcd(make_machine):
    m = make_machine("60FE A300 F033")
    run(m, 3)
    assert m.memory.read_block(0x300, 3) == bytes([2, 5, 4])
    assert m.registers.i == 0x300


def test_store_registers_advances_i(make_machine):
    m = make_machine("6001 6102 6203 A300 F255")
    run(m, 5)
    assert m.memory.read_block(0x300, 3) == bytes([1, 2, 3])
    assert m.registers.i == 0x303


def test_store_registers_with_load_store_quirk(make_machine):
    m = make_machine("6001 6102 6203 A300 F255", quirks=Quirks(load_store_ignores_i=True))
    run(m, 5)
    assert m.memory.read_block(0x300, 3) == bytes([1, 2, 3])
    assert m.registers.i == 0x300


def test_load_registers(make_machine):
    m = make_machine("A300 F265")
    m.memory.write_block(0x300, [9, 8, 7, 6])
    run(m, 2)
    assert list(m.registers.v[:4]) == [9, 8, 7, 0]
    assert m.registers.i == 0x303


def test_load_registers_with_load_store_quirk(make_machine):
    m = make_machine("A300 F265", quirks=Quirks(load_store_ignores_i=True))
    m.memory.write_block(0x300, [9, 8, 7, 6])
    run(m, 2)
    assert list(m.registers.v[:4]) == [9, 8, 7, 0]
    assert m.registers.i == 0x300


def test_store_out_of_bounds_commits_nothing(make_machine):
    m = make_machine("6001 6102 AFFF F155")
    run(m, 3)
    with pytest.raises(OutOfBounds):
        m.step()
    assert m.memory[0xFFF] == 0
    assert m.registers.i == 0xFFF
    assert m.registers.pc == 0x206


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

def test_draw_sets_pixels_and_collision(make_machine, display):
    # glyph "0" is F0 90 90 90 F0
    m = make_machine("6000 F029 D005 D005")
    run(m, 3)
    assert display.get_pixel(0, 0) and display.get_pixel(3, 0)
    assert display.get_pixel(0, 1) and not display.get_pixel(1, 1)
    assert display.lit_count() == 14
    assert m.registers[0xF] == 0

    run(m, 1)
    assert display.lit_count() == 0
    assert m.registers[0xF] == 1


def test_draw_clips_at_the_right_edge(make_machine, display):
    m = make_machine("603E 6100 A000 D011")
    run(m, 4)
    assert display.get_pixel(62, 0) and display.get_pixel(63, 0)
    assert not display.get_pixel(0, 0) and not display.get_pixel(1, 0)


def test_draw_wraps_with_quirk(make_machine, display):
    m = make_machine("603E 6100 A000 D011", quirks=Quirks(draw_wraps_pixels=True))
    run(m, 4)
    assert display.lit_count() == 4
    assert display.get_pixel(0, 0) and display.get_pixel(1, 0)


def test_draw_clips_at_the_bottom_edge(make_machine, display):
    m = make_machine("6000 611E A000 D015")
    run(m, 4)
    assert display.get_pixel(0, 30) and display.get_pixel(0, 31)
    assert display.lit_count() == 4 + 2
    assert not any(display.get_pixel(x, 0) for x in range(4))


def test_draw_origin_always_wraps(make_machine, display):
    m = make_machine("6042 6121 A000 D011")
    run(m, 4)
    assert display.get_pixel(2, 1)


def test_clear_screen(make_machine, display):
    m = make_machine("A000 D005 00E0")
    run(m, 2)
    assert display.lit_count() > 0
    run(m, 1)
    assert display.lit_count() == 0


# ---------------------------------------------------------------------------
# Keyboard
# ---------------------------------------------------------------------------

def test_skip_if_key_pressed(make_machine, keypad):
    keypad.press(5)
    m = make_machine("6005 E09E")
    run(m, 2)
    assert m.registers.pc == 0x206

    m = make_machine("6005 E0A1")
    run(m, 2)
    assert m.registers.pc == 0x204


def test_skip_with_out_of_range_key_never_skips(make_machine, keypad):
    keypad.press(0)
    for program in ("6010 E09E", "6010 E0A1"):
        m = make_machine(program)
        run(m, 2)
        assert m.registers.pc == 0x204


def test_wait_for_key(make_machine, keypad):
    m = make_machine("F00A")
    assert m.step() is StepResult.AWAITING_KEY
    assert m.registers.pc == 0x200
    assert m.cpu.awaiting_key
    assert m.step() is StepResult.AWAITING_KEY

    keypad.press(7)
    assert m.step() is StepResult.EXECUTED
    assert m.registers[0] == 7
    assert m.registers.pc == 0x202
    assert not m.cpu.awaiting_key


def test_wait_for_key_ignores_keys_held_before_the_wait(make_machine, keypad):
    keypad.press(3)
    m = make_machine("F10A")
    assert m.step() is StepResult.AWAITING_KEY
    assert m.step() is StepResult.AWAITING_KEY
    keypad.release(3)
    keypad.press(3)
    assert m.step() is StepResult.EXECUTED
    assert m.registers[1] == 3


# ---------------------------------------------------------------------------
# Timers
# ---------------------------------------------------------------------------

def test_timer_loads_and_reads(make_machine, beeper):
    m = make_machine("6010 F015 F107 F018")
    run(m, 3)
    assert m.registers.delay_timer == 0x10
    assert m.registers[1] == 0x10
    run(m, 1)
    assert m.registers.sound_timer == 0x10
    assert beeper.events == ["start"]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

def test_invalid_opcode_reports_word_and_address(make_machine):
    m = make_machine("6001 5561")
    run(m, 1)
    with pytest.raises(InvalidOpcode) as excinfo:
        m.step()
    assert excinfo.value.word == 0x5561
    assert excinfo.value.address == 0x202
    assert m.registers.pc == 0x202
    assert m.machine_halt


def test_fetch_past_end_of_memory(make_machine):
    m = make_machine("1FFF")
    run(m, 1)
    with pytest.raises(OutOfBounds):
        m.step()
