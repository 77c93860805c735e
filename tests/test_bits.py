"""Tests for row bit geometry."""

import pytest

from charrom.bits import (
    bit_position_for_column,
    bytes_per_glyph,
    bytes_per_row,
    column_bit_map,
    glyph_count_for_size,
)
from charrom.model import GlyphSetConfig


class TestBytesPerRow:
    @pytest.mark.parametrize("width,expected", [(1, 1), (5, 1), (8, 1), (9, 2), (16, 2), (17, 3)])
    def test_ceil_of_width(self, width, expected):
        assert bytes_per_row(GlyphSetConfig(width=width, height=1)) == expected

    def test_bytes_per_glyph(self):
        assert bytes_per_glyph(GlyphSetConfig(width=8, height=8)) == 8
        assert bytes_per_glyph(GlyphSetConfig(width=12, height=16)) == 32
        assert bytes_per_glyph(GlyphSetConfig(width=5, height=7)) == 7


class TestBitPositionForColumn:
    def test_msb_right_leftmost_is_high_bit(self):
        config = GlyphSetConfig(width=8, height=8)
        assert bit_position_for_column(0, config) == (0, 7)
        assert bit_position_for_column(7, config) == (0, 0)

    def test_lsb_right_leftmost_is_low_bit(self):
        config = GlyphSetConfig(width=8, height=8, bit_order="lsb")
        assert bit_position_for_column(0, config) == (0, 0)
        assert bit_position_for_column(7, config) == (0, 7)

    def test_left_padding_skips_unused_bits(self):
        config = GlyphSetConfig(width=6, height=1, padding="left")
        # two unused high bits, so column 0 lands on bit 5
        assert bit_position_for_column(0, config) == (0, 5)
        assert bit_position_for_column(5, config) == (0, 0)

    def test_right_padding_multi_byte(self):
        config = GlyphSetConfig(width=12, height=1)
        assert bit_position_for_column(7, config) == (0, 0)
        assert bit_position_for_column(8, config) == (1, 7)
        assert bit_position_for_column(11, config) == (1, 4)

    def test_left_padding_multi_byte(self):
        config = GlyphSetConfig(width=12, height=1, padding="left")
        assert bit_position_for_column(0, config) == (0, 3)
        assert bit_position_for_column(4, config) == (1, 7)
        assert bit_position_for_column(11, config) == (1, 0)

    def test_little_endian_reverses_byte_index(self):
        config = GlyphSetConfig(width=12, height=1, byte_order="little")
        assert bit_position_for_column(0, config) == (1, 7)
        assert bit_position_for_column(8, config) == (0, 7)

    def test_explicit_big_matches_absent(self):
        absent = GlyphSetConfig(width=16, height=1)
        big = GlyphSetConfig(width=16, height=1, byte_order="big")
        assert column_bit_map(absent) == column_bit_map(big)

    def test_positions_are_unique(self):
        for width in range(1, 25):
            for padding in ("left", "right"):
                for bit_order in ("msb", "lsb"):
                    config = GlyphSetConfig(width=width, height=1, padding=padding, bit_order=bit_order)
                    positions = column_bit_map(config)
                    assert len(set(positions)) == width
                    assert all(0 <= b < bytes_per_row(config) and 0 <= s < 8 for b, s in positions)


class TestGlyphCountForSize:
    def test_whole_glyphs_only(self):
        config = GlyphSetConfig(width=8, height=8)
        assert glyph_count_for_size(2048, config) == 256
        assert glyph_count_for_size(17, config) == 2
        assert glyph_count_for_size(7, config) == 0

    def test_negative_size(self):
        assert glyph_count_for_size(-8, GlyphSetConfig(width=8, height=8)) == 0
