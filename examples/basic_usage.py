#!/usr/bin/env python3
"""Basic usage example for charrom.

Demonstrates decoding a ROM image into glyphs, exporting them again,
recognizing glyphs from a rendered font sheet and parsing pasted C source.

Usage:
    python examples/basic_usage.py
"""

import sys
import os

# Add parent directory to path for direct script execution
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from charrom.model import GlyphSet, GlyphSetConfig, RecognitionConfig
from charrom.recognizer import recognize
from charrom.renderer import render_sheet
from charrom.rom import parse_rom, serialize_rom
from charrom.systems import binary_format_source, config_for_system, select_system
from charrom.textimport import parse_text_to_glyphs, summarize
from charrom.transport import deserialize_set, envelope_to_dict, serialize_set

# "A" followed by a checkerboard, 8x8 MSB-first
SAMPLE_ROM = bytes(
    [0x18, 0x3C, 0x66, 0x7E, 0x66, 0x66, 0x66, 0x00]
    + [0xAA, 0x55, 0xAA, 0x55, 0xAA, 0x55, 0xAA, 0x55]
)


def show(glyph):
    for row in glyph:
        print("    " + "".join("#" if pixel else "." for pixel in row))


def example_rom_roundtrip():
    """Decode raw ROM bytes and encode them back."""
    print("=" * 60)
    print("Example 1: ROM Decode/Encode Roundtrip")
    print("=" * 60)

    config = GlyphSetConfig(width=8, height=8)
    glyphs = parse_rom(SAMPLE_ROM, config)
    print(f"  ROM size:    {len(SAMPLE_ROM)} bytes")
    print(f"  Glyphs:      {len(glyphs)}")
    show(glyphs[0])

    data = serialize_rom(glyphs, config)
    print(f"  Match:       {data == SAMPLE_ROM}")
    print()


def example_bit_layouts():
    """Same glyph, different bit layouts."""
    print("=" * 60)
    print("Example 2: Bit Layouts")
    print("=" * 60)

    glyph = [[True] * 6]
    for padding in ("right", "left"):
        for bit_order in ("msb", "lsb"):
            config = GlyphSetConfig(width=6, height=1, padding=padding, bit_order=bit_order)
            data = serialize_rom([glyph], config)
            print(f"  padding={padding:5s} bit_order={bit_order}: 0x{data[0]:02X}")
    print()


def example_system_preset():
    """Resolve the binary layout of a known system."""
    print("=" * 60)
    print("Example 3: System Presets")
    print("=" * 60)

    for system_id in ("c64", "bbc-micro-b", "acorn-atom", "atari-st"):
        system = select_system(system_id)
        config = config_for_system(system_id)
        print(
            f"  {system.name:18s} {config.width}x{config.height} "
            f"{config.padding.value}/{config.bit_order.value} "
            f"(from {binary_format_source(system)})"
        )
    print()


def example_recognition():
    """Render a font sheet and read the glyphs back out of it."""
    print("=" * 60)
    print("Example 4: Recognition")
    print("=" * 60)

    glyphs = parse_rom(SAMPLE_ROM, GlyphSetConfig(width=8, height=8))
    layout = RecognitionConfig(pixel_width=3, pixel_height=3, gap_x=2, gap_y=2, offset_x=4, offset_y=4)
    sheet = render_sheet(glyphs, columns=2, layout=layout)
    print(f"  Sheet size:  {sheet.width}x{sheet.height}")

    result = recognize(sheet, layout)
    print(f"  Grid:        {result.columns}x{result.rows}")
    print(f"  Match:       {result.glyphs == glyphs}")
    print()


def example_text_import_and_envelope():
    """Parse pasted C source, then store the set as an envelope."""
    print("=" * 60)
    print("Example 5: Text Import and Storage Envelope")
    print("=" * 60)

    source = "const uint8_t font[] = { 0x00, 0x7E, 0x42, 0x42, 0x7E, 0x00, 0x00, 0x00 };"
    config = GlyphSetConfig(width=8, height=8)
    result = parse_text_to_glyphs(source, config)
    print(f"  {summarize(result.parsed, len(result.glyphs))}")

    glyph_set = GlyphSet(metadata={"name": "Box"}, config=config, glyphs=result.glyphs)
    envelope = envelope_to_dict(serialize_set(glyph_set))
    print(f"  Envelope:    {envelope}")

    restored = deserialize_set(serialize_set(glyph_set))
    print(f"  Roundtrip:   {restored == glyph_set}")
    print()


if __name__ == "__main__":
    example_rom_roundtrip()
    example_bit_layouts()
    example_system_preset()
    example_recognition()
    example_text_import_and_envelope()
    print("All examples completed successfully.")
