"""Character generator chips and the computer systems that use them.

Immutable lookup tables, loaded once at import time. A system either
describes its character ROM directly or references one or more chips, and
inherits the binary format of its first chip unless it overrides it.

Resolution order for a system's binary format:
1. The system's own ``binary_format``
2. The ``binary_format`` of the first referenced chip
3. ``DEFAULT_BINARY_FORMAT`` (right padding, MSB first)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .model import BitOrder, ByteOrder, GlyphSetConfig, Padding


@dataclass(frozen=True)
class BinaryFormat:
    padding: Padding = Padding.RIGHT
    bit_order: BitOrder = BitOrder.MSB
    byte_order: ByteOrder | None = None


@dataclass(frozen=True)
class DirectRom:
    """Character ROM described in place."""

    width: int
    height: int
    count: int


@dataclass(frozen=True)
class ChipReference:
    """Character ROM provided by one or more chips, first one authoritative."""

    chip_ids: tuple[str, ...]


CharacterRomSource = Union[DirectRom, ChipReference]


@dataclass(frozen=True)
class ChipInfo:
    """A character generator chip.

    Attributes:
        id: Unique identifier (lowercase, hyphenated).
        part_number: Manufacturer part number.
        manufacturer: Chip manufacturer name.
        glyph_width: Glyph width in pixels.
        glyph_height: Glyph height in pixels.
        glyph_count: Number of glyphs in the ROM.
        binary_format: Default binary layout, if known.
    """

    id: str
    part_number: str
    manufacturer: str
    glyph_width: int
    glyph_height: int
    glyph_count: int
    binary_format: BinaryFormat | None = None


@dataclass(frozen=True)
class SystemInfo:
    """A computer system and its character ROM."""

    id: str
    name: str
    manufacturer: str
    character_rom: CharacterRomSource | None = None
    binary_format: BinaryFormat | None = None


@dataclass(frozen=True)
class ResolvedRom:
    width: int
    height: int
    count: int


DEFAULT_BINARY_FORMAT = BinaryFormat()

_MSB_RIGHT = BinaryFormat(padding=Padding.RIGHT, bit_order=BitOrder.MSB)
_MSB_LEFT = BinaryFormat(padding=Padding.LEFT, bit_order=BitOrder.MSB)

CHIPS: list[ChipInfo] = [
    ChipInfo("atari-os-rom", "Atari OS ROM", "Atari Inc", 8, 8, 128, _MSB_RIGHT),
    ChipInfo("colecovision-bios", "ColecoVision BIOS", "Coleco Industries", 8, 8, 256, _MSB_RIGHT),
    ChipInfo("gi-ro-3-2513", "RO-3-2513", "General Instrument", 5, 7, 64, _MSB_RIGHT),
    ChipInfo("intellivision-grom", "GROM", "General Instrument", 8, 8, 213, _MSB_RIGHT),
    ChipInfo("mos-901225-01", "901225-01", "MOS Technology", 8, 8, 256, _MSB_RIGHT),
    ChipInfo("mos-901447-10", "901447-10", "MOS Technology", 8, 8, 256, _MSB_RIGHT),
    ChipInfo("mos-901460-03", "901460-03", "MOS Technology", 8, 8, 256, _MSB_RIGHT),
    ChipInfo("mc6847", "MC6847", "Motorola", 5, 7, 64, _MSB_LEFT),
    ChipInfo("mc6847t1", "MC6847T1", "Motorola", 5, 7, 96, _MSB_LEFT),
    ChipInfo("mcm6673", "MCM6673", "Motorola", 5, 8, 128, _MSB_RIGHT),
    ChipInfo("mcm6674", "MCM6674", "Motorola", 5, 8, 128, _MSB_RIGHT),
    ChipInfo(
        "saa5050",
        "SAA5050",
        "Mullard/Philips",
        5,
        9,
        96,
        BinaryFormat(padding=Padding.LEFT, bit_order=BitOrder.LSB),
    ),
    ChipInfo("signetics-2513", "2513", "Signetics", 5, 7, 64, _MSB_RIGHT),
    ChipInfo("sinclair-spectrum-rom", "Spectrum ROM", "Sinclair Research Ltd", 8, 8, 96, _MSB_RIGHT),
    ChipInfo("gime", "GIME", "Tandy Corporation", 8, 8, 256, _MSB_RIGHT),
    ChipInfo("tms9918", "TMS9918A", "Texas Instruments", 8, 8, 256, _MSB_RIGHT),
]

SYSTEMS: list[SystemInfo] = [
    SystemInfo("acorn-atom", "Acorn Atom", "Acorn", ChipReference(("mc6847",))),
    SystemInfo("bbc-micro-b", "BBC Micro Model B", "Acorn", ChipReference(("saa5050",)), _MSB_RIGHT),
    SystemInfo("bbc-master-128", "BBC Master 128", "Acorn", ChipReference(("saa5050",)), _MSB_RIGHT),
    SystemInfo("acorn-electron", "Acorn Electron", "Acorn", DirectRom(8, 8, 256), _MSB_RIGHT),
    SystemInfo("amstrad-cpc-464", "Amstrad CPC 464", "Amstrad", DirectRom(8, 8, 256), _MSB_RIGHT),
    SystemInfo("apple-i", "Apple I", "Apple", ChipReference(("signetics-2513",))),
    SystemInfo("apple-ii", "Apple II", "Apple", ChipReference(("signetics-2513",))),
    SystemInfo("apple-iie", "Apple IIe", "Apple", DirectRom(7, 8, 256), _MSB_RIGHT),
    SystemInfo("atari-800", "Atari 800", "Atari", ChipReference(("atari-os-rom",))),
    SystemInfo("atari-st", "Atari ST", "Atari", DirectRom(8, 16, 256), _MSB_RIGHT),
    SystemInfo("colecovision", "ColecoVision", "Coleco", ChipReference(("tms9918",))),
    SystemInfo("commodore-pet-2001", "Commodore PET 2001", "Commodore", ChipReference(("mos-901447-10",))),
    SystemInfo("vic-20", "VIC-20", "Commodore", ChipReference(("mos-901460-03",))),
    SystemInfo("c64", "Commodore 64", "Commodore", ChipReference(("mos-901225-01",))),
    SystemInfo("dragon-32", "Dragon 32", "Dragon Data", ChipReference(("mc6847",))),
    SystemInfo("intellivision", "Intellivision", "Mattel", ChipReference(("intellivision-grom",))),
    SystemInfo("msx", "MSX", "ASCII/Microsoft", ChipReference(("tms9918",))),
    SystemInfo("oric-1", "Oric-1", "Oric", DirectRom(6, 8, 128), _MSB_RIGHT),
    SystemInfo("philips-p2000", "Philips P2000", "Philips", ChipReference(("saa5050",))),
    SystemInfo("zx81", "ZX81", "Sinclair", DirectRom(8, 8, 64), _MSB_RIGHT),
    SystemInfo("zx-spectrum", "ZX Spectrum", "Sinclair", ChipReference(("sinclair-spectrum-rom",))),
    SystemInfo("ti-99-4a", "TI-99/4A", "Texas Instruments", ChipReference(("tms9918",))),
    SystemInfo("tandy-model-100", "TRS-80 Model 100", "Tandy", None, _MSB_RIGHT),
]

CHIP_INDEX: dict[str, ChipInfo] = {c.id: c for c in CHIPS}
SYSTEM_INDEX: dict[str, SystemInfo] = {s.id: s for s in SYSTEMS}


def select_chip(chip_id: str) -> ChipInfo:
    """Look up a chip by id.

    Raises:
        ValueError: If chip_id is not recognized.
    """
    if chip_id not in CHIP_INDEX:
        raise ValueError(f"Unknown chip '{chip_id}'")
    return CHIP_INDEX[chip_id]


def select_system(system_id: str) -> SystemInfo:
    """Look up a system by id.

    Raises:
        ValueError: If system_id is not recognized.
    """
    if system_id not in SYSTEM_INDEX:
        raise ValueError(f"Unknown system '{system_id}'")
    return SYSTEM_INDEX[system_id]


def _first_chip(rom: CharacterRomSource | None) -> ChipInfo | None:
    if isinstance(rom, ChipReference) and rom.chip_ids:
        return CHIP_INDEX.get(rom.chip_ids[0])
    return None


def resolve_binary_format(system: SystemInfo) -> BinaryFormat:
    if system.binary_format is not None:
        return system.binary_format
    chip = _first_chip(system.character_rom)
    if chip is not None and chip.binary_format is not None:
        return chip.binary_format
    return DEFAULT_BINARY_FORMAT


def binary_format_source(system: SystemInfo) -> str:
    """Where a system's binary format comes from: system name, chip part number or "default"."""
    if system.binary_format is not None:
        return system.name
    chip = _first_chip(system.character_rom)
    if chip is not None and chip.binary_format is not None:
        return chip.part_number
    return "default"


def resolve_character_rom(rom: CharacterRomSource | None) -> ResolvedRom | None:
    """Glyph dimensions and count for a ROM definition, following chip references."""
    if isinstance(rom, DirectRom):
        return ResolvedRom(width=rom.width, height=rom.height, count=rom.count)
    chip = _first_chip(rom)
    if chip is not None:
        return ResolvedRom(width=chip.glyph_width, height=chip.glyph_height, count=chip.glyph_count)
    return None


def config_for_system(system_id: str) -> GlyphSetConfig:
    """GlyphSetConfig for a system's character ROM.

    Raises:
        ValueError: If the system is unknown or has no character ROM.
    """
    system = select_system(system_id)
    rom = resolve_character_rom(system.character_rom)
    if rom is None:
        raise ValueError(f"System '{system_id}' has no character ROM definition")
    fmt = resolve_binary_format(system)
    return GlyphSetConfig(
        width=rom.width,
        height=rom.height,
        bit_order=fmt.bit_order,
        padding=fmt.padding,
        byte_order=fmt.byte_order,
    )
