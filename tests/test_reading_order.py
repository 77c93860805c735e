"""Tests for reading-order mapping."""

import pytest

from charrom.model import ReadingOrder
from charrom.reading_order import map_to_logical_index, reorder_glyphs


class TestMapToLogicalIndex:
    def test_ltr_ttb_is_raster(self):
        assert map_to_logical_index(1, 2, 3, 4, ReadingOrder.LTR_TTB) == 6

    def test_rtl_ttb(self):
        assert map_to_logical_index(0, 0, 2, 2, "rtl-ttb") == 1
        assert map_to_logical_index(0, 1, 2, 2, "rtl-ttb") == 0
        assert map_to_logical_index(1, 0, 2, 2, "rtl-ttb") == 3

    def test_ltr_btt(self):
        assert map_to_logical_index(0, 0, 2, 3, "ltr-btt") == 3
        assert map_to_logical_index(1, 2, 2, 3, "ltr-btt") == 2

    def test_ttb_ltr_is_column_major(self):
        assert map_to_logical_index(1, 0, 2, 3, "ttb-ltr") == 1
        assert map_to_logical_index(0, 1, 2, 3, "ttb-ltr") == 2

    def test_btt_rtl(self):
        assert map_to_logical_index(0, 0, 2, 3, "btt-rtl") == 5
        assert map_to_logical_index(1, 2, 2, 3, "btt-rtl") == 0

    @pytest.mark.parametrize("order", list(ReadingOrder))
    def test_every_order_is_a_permutation(self, order):
        rows, columns = 3, 5
        indices = {
            map_to_logical_index(row, col, rows, columns, order)
            for row in range(rows)
            for col in range(columns)
        }
        assert indices == set(range(rows * columns))

    def test_unknown_order(self):
        with pytest.raises(ValueError):
            map_to_logical_index(0, 0, 1, 1, "diagonal")


class TestReorderGlyphs:
    def test_raster_order_unchanged(self):
        assert reorder_glyphs(["a", "b", "c", "d"], 2, 2, "ltr-ttb") == ["a", "b", "c", "d"]

    def test_rtl_ttb(self):
        assert reorder_glyphs(["a", "b", "c", "d"], 2, 2, "rtl-ttb") == ["b", "a", "d", "c"]

    def test_ttb_ltr(self):
        assert reorder_glyphs(["a", "b", "c", "d"], 2, 2, "ttb-ltr") == ["a", "c", "b", "d"]

    def test_short_list(self):
        assert reorder_glyphs(["a", "b", "c"], 2, 2, "rtl-ttb") == ["b", "a", "c"]

    def test_extra_items_ignored(self):
        assert len(reorder_glyphs(list("abcdef"), 2, 2, "ltr-ttb")) == 4
