"""Tests for glyph sheet rendering."""

import pytest

from charrom.imaging import PixelBuffer
from charrom.model import RecognitionConfig
from charrom.renderer import render_grid_overlay, render_sheet

T, F = True, False

WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)


def _checker(width=8, height=8):
    return [[(row + col) % 2 == 0 for col in range(width)] for row in range(height)]


class TestRenderSheet:
    def test_single_glyph_size(self):
        sheet = render_sheet([_checker()], columns=1)
        assert isinstance(sheet, PixelBuffer)
        assert (sheet.width, sheet.height) == (8, 8)

    def test_pixels(self):
        sheet = render_sheet([_checker()], columns=1)
        assert sheet.pixel(0, 0) == BLACK
        assert sheet.pixel(1, 0) == WHITE
        assert sheet.pixel(1, 1) == BLACK

    def test_sheet_size_with_layout(self):
        layout = RecognitionConfig(pixel_width=2, pixel_height=3, gap_x=1, gap_y=2, offset_x=5, offset_y=4)
        sheet = render_sheet([_checker()] * 5, columns=2, layout=layout)
        # 3 rows of 2 columns, trailing gaps included
        assert sheet.width == 5 + 2 * (16 + 1)
        assert sheet.height == 4 + 3 * (24 + 2)

    def test_offset_and_gap_are_background(self):
        layout = RecognitionConfig(gap_x=2, offset_x=3)
        glyph = [[T] * 8 for _ in range(8)]
        sheet = render_sheet([glyph, glyph], columns=2, layout=layout)
        assert sheet.pixel(0, 0) == WHITE
        assert sheet.pixel(3, 0) == BLACK
        assert sheet.pixel(11, 0) == WHITE
        assert sheet.pixel(13, 0) == BLACK

    def test_pixel_scaling(self):
        layout = RecognitionConfig(char_width=2, char_height=1, pixel_width=3, pixel_height=2)
        sheet = render_sheet([[[T, F]]], columns=1, layout=layout)
        assert (sheet.width, sheet.height) == (6, 2)
        assert [sheet.pixel(x, 1) for x in range(6)] == [BLACK] * 3 + [WHITE] * 3

    def test_custom_colors(self):
        sheet = render_sheet([[[T, F]]], columns=1, layout=RecognitionConfig(char_width=2, char_height=1),
                             foreground="#33FF00", background="#000000")
        assert sheet.pixel(0, 0) == (0x33, 0xFF, 0x00, 255)
        assert sheet.pixel(1, 0) == (0, 0, 0, 255)

    def test_ragged_glyph_padded(self):
        sheet = render_sheet([[[T]]], columns=1)
        assert sheet.pixel(0, 0) == BLACK
        assert sheet.pixel(7, 7) == WHITE

    def test_empty_glyph_list(self):
        sheet = render_sheet([], columns=4)
        assert (sheet.width, sheet.height) == (32, 0)

    def test_zero_columns_rejected(self):
        with pytest.raises(ValueError, match="columns"):
            render_sheet([_checker()], columns=0)

    def test_bad_color_rejected(self):
        with pytest.raises(ValueError, match="hex color"):
            render_sheet([_checker()], columns=1, foreground="#FFF")


class TestRenderGridOverlay:
    def test_lines_at_cell_starts(self):
        sheet = render_sheet([[[F] * 8 for _ in range(8)]] * 4, columns=2)
        overlay = render_grid_overlay(sheet, color="#FF0000FF")
        red = (255, 0, 0, 255)
        assert overlay.pixel(0, 5) == red
        assert overlay.pixel(8, 5) == red
        assert overlay.pixel(5, 8) == red
        assert overlay.pixel(5, 5) == WHITE

    def test_respects_offset(self):
        sheet = render_sheet([[[F] * 8 for _ in range(8)]], columns=1, layout=RecognitionConfig(offset_x=3, offset_y=3))
        overlay = render_grid_overlay(sheet, RecognitionConfig(offset_x=3, offset_y=3), color="#FF0000")
        assert overlay.pixel(0, 0) == WHITE
        assert overlay.pixel(3, 6) == (255, 0, 0, 255)

    def test_source_unchanged(self):
        sheet = render_sheet([[[F] * 8 for _ in range(8)]], columns=1)
        render_grid_overlay(sheet)
        assert sheet.pixel(0, 0) == WHITE
