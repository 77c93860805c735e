"""Reading-order mapping from grid positions to logical character indices.

The recognizer emits glyphs in raster order. Fonts laid out in other
conventions (right-to-left sheets, column-major tables) are mapped onto
character codes here, on the consumer side.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from .model import ReadingOrder

T = TypeVar("T")


def map_to_logical_index(
    row: int,
    col: int,
    rows: int,
    columns: int,
    order: ReadingOrder | str,
) -> int:
    """Logical character index of the cell at (row, col).

    No bounds checking is done; callers pass ``row < rows`` and
    ``col < columns``.
    """
    order = ReadingOrder(order)
    effective_row = row if order.top_to_bottom else rows - 1 - row
    effective_col = col if order.left_to_right else columns - 1 - col

    if order.row_major:
        return effective_row * columns + effective_col
    return effective_col * rows + effective_row


def reorder_glyphs(
    glyphs: Sequence[T],
    rows: int,
    columns: int,
    order: ReadingOrder | str,
) -> list[T]:
    """Permute a raster-order list into logical order.

    ``glyphs[row * columns + col]`` lands at
    ``map_to_logical_index(row, col, ...)``. Cells missing from a short list
    are skipped, so the result always has ``len(glyphs)`` entries (up to
    ``rows * columns``).
    """
    order = ReadingOrder(order)
    placed: dict[int, T] = {}
    for raster_index, glyph in enumerate(glyphs[: rows * columns]):
        row, col = divmod(raster_index, columns)
        placed[map_to_logical_index(row, col, rows, columns, order)] = glyph
    return [placed[index] for index in sorted(placed)]
