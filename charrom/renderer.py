"""Glyph sheet rendering.

Draws glyphs into a PixelBuffer on the same grid geometry the recognizer
reads (offset, pixel size, gaps), so a rendered sheet can be fed straight
back into ``recognize``. Also draws the grid overlay shown while the user
tunes the import geometry.

Colors are hex strings (``#RRGGBB`` or ``#RRGGBBAA``).
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import structlog

from .geometry import resize_glyph
from .imaging import PixelBuffer
from .model import DEFAULT_RECOGNITION_CONFIG, RecognitionConfig
from .recognizer import cell_origin

logger = structlog.get_logger(__name__)

DEFAULT_FOREGROUND = "#000000"
DEFAULT_BACKGROUND = "#FFFFFF"
GRID_COLOR = "#00FFFF80"  # semi-transparent cyan


def _hex_to_rgba(hex_color: str) -> tuple[int, int, int, int]:
    """Convert a hex color string to an (r, g, b, a) tuple."""
    h = hex_color.lstrip("#")
    if len(h) not in (6, 8):
        raise ValueError(f"Invalid hex color '{hex_color}'")
    r, g, b = int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    a = int(h[6:8], 16) if len(h) == 8 else 255
    return (r, g, b, a)


def render_sheet(
    glyphs: Sequence[Sequence[Sequence[bool]]],
    columns: int,
    layout: RecognitionConfig = DEFAULT_RECOGNITION_CONFIG,
    foreground: str = DEFAULT_FOREGROUND,
    background: str = DEFAULT_BACKGROUND,
) -> PixelBuffer:
    """Render glyphs as a grid image.

    Args:
        glyphs: Glyphs in raster order.
        columns: Glyphs per sheet row (>= 1).
        layout: Grid geometry; ``char_width``/``char_height`` give the glyph
            size, rotation and thresholding fields are ignored.
        foreground: Color of set pixels.
        background: Color of unset pixels, offsets and gaps.

    Returns:
        PixelBuffer just large enough for every cell including trailing gaps.

    Raises:
        ValueError: If columns < 1 or a color is malformed.
    """
    if columns < 1:
        raise ValueError(f"columns must be >= 1, got {columns}")

    rows = -(-len(glyphs) // columns)
    width = layout.offset_x + columns * layout.stride_x
    height = layout.offset_y + rows * layout.stride_y

    canvas = np.empty((height, width, 4), dtype=np.uint8)
    canvas[...] = _hex_to_rgba(background)
    fg = np.array(_hex_to_rgba(foreground), dtype=np.uint8)

    block_w = layout.char_width * layout.pixel_width
    block_h = layout.char_height * layout.pixel_height

    for index, glyph in enumerate(glyphs):
        row, col = divmod(index, columns)
        x, y = cell_origin(row, col, layout)
        mask = np.array(resize_glyph(glyph, layout.char_width, layout.char_height), dtype=bool)
        mask = np.repeat(np.repeat(mask, layout.pixel_height, axis=0), layout.pixel_width, axis=1)
        canvas[y : y + block_h, x : x + block_w][mask] = fg

    logger.debug("sheet_rendered", glyphs=len(glyphs), columns=columns, size=f"{width}x{height}")
    return PixelBuffer.from_array(canvas)


def render_grid_overlay(
    buffer: PixelBuffer,
    layout: RecognitionConfig = DEFAULT_RECOGNITION_CONFIG,
    color: str = GRID_COLOR,
) -> PixelBuffer:
    """Copy of ``buffer`` with a line at the start of every cell column and row."""
    canvas = buffer.to_array()
    rgba = np.array(_hex_to_rgba(color), dtype=np.uint8)

    canvas[:, layout.offset_x : buffer.width : layout.stride_x] = rgba
    canvas[layout.offset_y : buffer.height : layout.stride_y, :] = rgba

    return PixelBuffer.from_array(canvas)
