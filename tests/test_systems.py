"""Tests for the chip and system preset tables."""

import pytest

from charrom.model import BitOrder, Padding
from charrom.systems import (
    CHIP_INDEX,
    CHIPS,
    DEFAULT_BINARY_FORMAT,
    SYSTEM_INDEX,
    SYSTEMS,
    BinaryFormat,
    ChipReference,
    DirectRom,
    ResolvedRom,
    SystemInfo,
    binary_format_source,
    config_for_system,
    resolve_binary_format,
    resolve_character_rom,
    select_chip,
    select_system,
)


class TestTables:
    def test_ids_unique(self):
        assert len(CHIP_INDEX) == len(CHIPS)
        assert len(SYSTEM_INDEX) == len(SYSTEMS)

    def test_chip_references_resolve(self):
        for system in SYSTEMS:
            if isinstance(system.character_rom, ChipReference):
                for chip_id in system.character_rom.chip_ids:
                    assert chip_id in CHIP_INDEX, f"{system.id} references unknown chip {chip_id}"

    def test_select_chip(self):
        chip = select_chip("saa5050")
        assert (chip.glyph_width, chip.glyph_height, chip.glyph_count) == (5, 9, 96)

    def test_select_unknown_chip(self):
        with pytest.raises(ValueError, match="Unknown chip"):
            select_chip("z80")

    def test_select_unknown_system(self):
        with pytest.raises(ValueError, match="Unknown system"):
            select_system("amiga-9000")


class TestResolveBinaryFormat:
    def test_inherited_from_chip(self):
        system = select_system("acorn-atom")
        fmt = resolve_binary_format(system)
        assert fmt.padding is Padding.LEFT
        assert fmt.bit_order is BitOrder.MSB
        assert binary_format_source(system) == "MC6847"

    def test_system_override_wins(self):
        system = select_system("bbc-micro-b")
        fmt = resolve_binary_format(system)
        assert fmt.padding is Padding.RIGHT
        assert fmt.bit_order is BitOrder.MSB
        assert binary_format_source(system) == "BBC Micro Model B"

    def test_chip_without_override(self):
        fmt = resolve_binary_format(select_system("philips-p2000"))
        assert fmt.padding is Padding.LEFT
        assert fmt.bit_order is BitOrder.LSB

    def test_default(self):
        system = SystemInfo("test", "Test", "Nobody")
        assert resolve_binary_format(system) == DEFAULT_BINARY_FORMAT
        assert binary_format_source(system) == "default"
        assert DEFAULT_BINARY_FORMAT == BinaryFormat(padding=Padding.RIGHT, bit_order=BitOrder.MSB)


class TestResolveCharacterRom:
    def test_direct(self):
        assert resolve_character_rom(DirectRom(6, 8, 128)) == ResolvedRom(width=6, height=8, count=128)

    def test_chip_reference_uses_first_chip(self):
        rom = resolve_character_rom(ChipReference(("mc6847", "saa5050")))
        assert rom == ResolvedRom(width=5, height=7, count=64)

    def test_unknown_chip(self):
        assert resolve_character_rom(ChipReference(("nope",))) is None

    def test_empty_reference(self):
        assert resolve_character_rom(ChipReference(())) is None

    def test_none(self):
        assert resolve_character_rom(None) is None


class TestConfigForSystem:
    def test_c64(self):
        config = config_for_system("c64")
        assert (config.width, config.height) == (8, 8)
        assert config.bit_order is BitOrder.MSB
        assert config.padding is Padding.RIGHT
        assert config.byte_order is None

    def test_direct_rom_system(self):
        config = config_for_system("atari-st")
        assert (config.width, config.height) == (8, 16)

    def test_teletext(self):
        config = config_for_system("philips-p2000")
        assert (config.width, config.height) == (5, 9)
        assert config.bit_order is BitOrder.LSB

    def test_system_without_rom(self):
        with pytest.raises(ValueError, match="no character ROM"):
            config_for_system("tandy-model-100")

    def test_every_system_with_rom_builds_config(self):
        for system in SYSTEMS:
            if resolve_character_rom(system.character_rom) is not None:
                config_for_system(system.id)
