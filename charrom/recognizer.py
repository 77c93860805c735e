"""Recognition engine: extract a glyph grid from a decoded image.

Pipeline:
1. Rotate the buffer if a rotation is configured (expanded canvas, white
   background, nearest-neighbour resampling)
2. Convert every source pixel to linear relative luminance, compositing
   transparent pixels onto white
3. Work out the cell stride and the column/row count (forced or auto-detected)
4. For each cell in raster order, average each ``pixel_width x pixel_height``
   block of luminance and threshold it

Glyphs are always emitted in raster order (row-major, top to bottom, left to
right). Reading order is applied by consumers through
``charrom.reading_order``. Cells whose sampled area reaches outside the image
come back blank; the engine never raises on grid geometry.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import structlog
from PIL import Image

from .geometry import blank_glyph
from .imaging import PixelBuffer
from .model import DEFAULT_RECOGNITION_CONFIG, Glyph, RecognitionConfig

logger = structlog.get_logger(__name__)

# Rec. 709 / sRGB luminance weights, applied to linearized channels
LUMA_WEIGHTS = np.array([0.2126, 0.7152, 0.0722], dtype=np.float64)
BACKGROUND = (255, 255, 255, 255)

# Common character cell sizes and the glyph counts that usually go with them
COMMON_SIZES = [(8, 8), (8, 16), (6, 8), (8, 10), (8, 12), (16, 16)]
PREFERRED_COUNTS = {16, 64, 96, 128, 256}


@dataclass
class RecognitionResult:
    """Result of extracting glyphs from an image.

    Attributes:
        columns: Number of glyph columns in the grid.
        rows: Number of glyph rows in the grid.
        glyphs: ``columns * rows`` glyphs, index ``row * columns + col``.
        image_width: Width of the sampled (possibly rotated) image.
        image_height: Height of the sampled (possibly rotated) image.
    """

    columns: int
    rows: int
    glyphs: list[Glyph] = field(default_factory=list)
    image_width: int = 0
    image_height: int = 0


@dataclass(frozen=True)
class DimensionSuggestion:
    width: int
    height: int
    columns: int
    rows: int


def rotate_buffer(buffer: PixelBuffer, degrees: float) -> PixelBuffer:
    """Rotate a buffer without clipping.

    Positive angles rotate counter-clockwise. The canvas grows to the bounding
    box of the rotated source, so the result is the rotation about the
    top-left corner translated back into view; uncovered areas are white.
    """
    if degrees == 0 or buffer.width == 0 or buffer.height == 0:
        return buffer

    rotated = buffer.to_image().rotate(
        degrees,
        resample=Image.Resampling.NEAREST,
        expand=True,
        fillcolor=BACKGROUND,
    )
    logger.debug(
        "buffer_rotated",
        degrees=degrees,
        source=f"{buffer.width}x{buffer.height}",
        rotated=f"{rotated.width}x{rotated.height}",
    )
    return PixelBuffer.from_image(rotated)


def luminance_map(buffer: PixelBuffer) -> np.ndarray:
    """Linear relative luminance in [0, 1] for every pixel, shape ``(h, w)``."""
    rgba = buffer.to_array().astype(np.float64)
    alpha = rgba[..., 3:4] / 255.0
    rgb = (rgba[..., :3] * alpha + 255.0 * (1.0 - alpha)) / 255.0

    linear = np.where(rgb <= 0.04045, rgb / 12.92, ((rgb + 0.055) / 1.055) ** 2.4)
    return linear @ LUMA_WEIGHTS


def grid_size(image_width: int, image_height: int, config: RecognitionConfig) -> tuple[int, int]:
    """(columns, rows) of the glyph grid: forced counts, or whole cells that fit."""
    columns = config.force_columns or max(0, (image_width - config.offset_x) // config.stride_x)
    rows = config.force_rows or max(0, (image_height - config.offset_y) // config.stride_y)
    return columns, rows


def cell_origin(row: int, col: int, config: RecognitionConfig) -> tuple[int, int]:
    """Source-pixel (x, y) of the top-left corner of a grid cell."""
    return (
        config.offset_x + col * config.stride_x,
        config.offset_y + row * config.stride_y,
    )


def _extract_cell(
    luminance: np.ndarray,
    x: int,
    y: int,
    config: RecognitionConfig,
) -> Glyph:
    height, width = luminance.shape
    block_w = config.char_width * config.pixel_width
    block_h = config.char_height * config.pixel_height

    if x + block_w > width or y + block_h > height:
        return blank_glyph(config.char_width, config.char_height)

    block = luminance[y : y + block_h, x : x + block_w]
    levels = block.reshape(
        config.char_height, config.pixel_height, config.char_width, config.pixel_width
    ).mean(axis=(1, 3))
    # Rounded so pure white never dips under a threshold of 255 from float error
    brightness = np.round(levels * 255.0, 6)

    on = brightness < config.threshold
    if config.invert:
        on = ~on
    return on.tolist()


def recognize(
    buffer: PixelBuffer,
    config: RecognitionConfig = DEFAULT_RECOGNITION_CONFIG,
) -> RecognitionResult:
    """Extract a grid of glyphs from an image.

    Args:
        buffer: Decoded source image.
        config: Grid geometry, threshold and polarity.

    Returns:
        RecognitionResult with glyphs in raster order.
    """
    source = rotate_buffer(buffer, config.rotation_degrees)
    columns, rows = grid_size(source.width, source.height, config)
    luminance = luminance_map(source)

    glyphs: list[Glyph] = []
    for row in range(rows):
        for col in range(columns):
            x, y = cell_origin(row, col, config)
            glyphs.append(_extract_cell(luminance, x, y, config))

    logger.info(
        "recognition_complete",
        image=f"{source.width}x{source.height}",
        columns=columns,
        rows=rows,
        glyphs=len(glyphs),
        rotation=config.rotation_degrees,
    )

    return RecognitionResult(
        columns=columns,
        rows=rows,
        glyphs=glyphs,
        image_width=source.width,
        image_height=source.height,
    )


def suggest_dimensions(image_width: int, image_height: int) -> list[DimensionSuggestion]:
    """Guess plausible glyph sizes for an image of the given size.

    Sizes giving a common character count (16, 64, 96, 128, 256) come first,
    other sizes giving 16-512 glyphs after them. Falls back to 8x8.
    """
    preferred: list[DimensionSuggestion] = []
    others: list[DimensionSuggestion] = []

    for w, h in COMMON_SIZES:
        columns = image_width // w
        rows = image_height // h
        if columns <= 0 or rows <= 0:
            continue
        suggestion = DimensionSuggestion(width=w, height=h, columns=columns, rows=rows)
        total = columns * rows
        if total in PREFERRED_COUNTS:
            preferred.insert(0, suggestion)
        elif 16 <= total <= 512:
            others.append(suggestion)

    suggestions = preferred + others
    if not suggestions:
        suggestions.append(
            DimensionSuggestion(
                width=8, height=8, columns=max(0, image_width // 8), rows=max(0, image_height // 8)
            )
        )
    return suggestions
