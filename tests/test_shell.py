import pytest

from chip8emu.core.errors import InvalidConfiguration, RomTooLarge
from chip8emu.core.machine import Chip8Machine
from chip8emu.core.options import MachineOptions
from chip8emu.core.types import Key, MAX_ROM_SIZE
from chip8emu.shell.keyboard_profiles import get_profile, profile_names
from chip8emu.shell.palette import Palette, format_color, parse_color
from chip8emu.shell.services.machine_factory import MachineFactory
from chip8emu.shell.services.rom_bytes_service import RomBytesService


# ---------------------------------------------------------------------------
# Palette
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "text, rgb",
    [("#FF8000", (255, 128, 0)), ("ff8000", (255, 128, 0)), ("#000000", (0, 0, 0))],
)
def test_parse_color(text, rgb):
    assert parse_color(text) == rgb


@pytest.mark.parametrize("text", ["", "#FFF", "12345", "#GG0000", "##000000", "#0000000"])
def test_parse_color_rejects_malformed(text):
    with pytest.raises(InvalidConfiguration):
        parse_color(text)


def test_palette_defaults_and_format():
    palette = Palette()
    assert format_color(palette.background) == "#000000"
    assert format_color(palette.foreground) == "#808080"
    assert Palette.from_strings("102030", "#405060").foreground == (0x40, 0x50, 0x60)


# ---------------------------------------------------------------------------
# Keyboard profiles
# ---------------------------------------------------------------------------

def test_profile_names():
    assert profile_names() == ["default", "qwerty", "azerty"]


def test_default_profile_types_hex_digits():
    profile = get_profile("default")
    assert len(profile) == 16
    assert profile["0"] == Key.Key0
    assert profile["f"] == Key.KeyF


@pytest.mark.parametrize(
    "name, physical, virtual",
    [
        ("qwerty", "1", Key.Key1),
        ("qwerty", "4", Key.KeyC),
        ("qwerty", "q", Key.Key4),
        ("qwerty", "x", Key.Key0),
        ("qwerty", "v", Key.KeyF),
        ("azerty", "a", Key.Key4),
        ("azerty", "q", Key.Key7),
        ("azerty", "w", Key.KeyA),
    ],
)
def test_grid_profiles(name, physical, virtual):
    assert get_profile(name)[physical] == virtual


def test_profiles_cover_all_keys():
    for name in profile_names():
        assert sorted(get_profile(name).values()) == list(Key)


def test_unknown_profile():
    with pytest.raises(InvalidConfiguration):
        get_profile("dvorak")


def test_profile_is_a_copy():
    get_profile("qwerty")["1"] = Key.KeyF
    assert get_profile("qwerty")["1"] == Key.Key1


# ---------------------------------------------------------------------------
# ROM service and factory
# ---------------------------------------------------------------------------

@pytest.fixture
def rom_file(tmp_path):
    path = tmp_path / "scene.ch8"
    path.write_bytes(bytes.fromhex("00E0 6005 D001 1200 0000 FF"))
    return path


def test_read_rom(rom_file):
    assert RomBytesService.read(str(rom_file))[:2] == b"\x00\xE0"


def test_read_oversized_rom(tmp_path):
    path = tmp_path / "big.ch8"
    path.write_bytes(bytes(MAX_ROM_SIZE + 1))
    with pytest.raises(RomTooLarge):
        RomBytesService.read(str(path))


def test_read_missing_rom(tmp_path):
    with pytest.raises(FileNotFoundError):
        RomBytesService.read(str(tmp_path / "missing.ch8"))


def test_listing(rom_file):
    lines = RomBytesService.listing(RomBytesService.read(str(rom_file)))
    assert lines[0] == "0x200  00E0  CLS"
    assert lines[2] == "0x204  D001  DRW V0, V0, 1"
    assert lines[4] == "0x208  0000  0x00, 0x00"
    assert lines[5].startswith("0x20A  FF")
    assert len(lines) == 6


def test_describe(rom_file):
    info = MachineFactory.describe(str(rom_file))
    assert info["size"] == "11 bytes"
    assert info["free"] == f"{MAX_ROM_SIZE - 11} bytes"
    assert info["load_address"] == "0x200"


def test_factory_creates_loaded_machine(rom_file, beeper):
    machine = MachineFactory.create(str(rom_file), MachineOptions(cpu_frequency_hz=700), beeper=beeper)
    assert isinstance(machine, Chip8Machine)
    assert machine.options.cpu_frequency_hz == 700
    assert machine.beeper is beeper
    assert machine.memory.read_word(0x200) == 0x00E0
