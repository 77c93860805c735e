"""Geometry conversion and pixel transforms for glyphs.

All functions are pure: they return new glyphs with full rows and never
alias the input lists. Ragged input glyphs are read with missing pixels as
unset.
"""

from __future__ import annotations

from collections.abc import Sequence
import math
from dataclasses import dataclass
from enum import Enum

from .model import Glyph, GlyphSetConfig


class Anchor(str, Enum):
    """Alignment point used when cropping or padding a glyph."""

    TOP_LEFT = "tl"
    TOP_CENTER = "tc"
    TOP_RIGHT = "tr"
    MIDDLE_LEFT = "ml"
    MIDDLE_CENTER = "mc"
    MIDDLE_RIGHT = "mr"
    BOTTOM_LEFT = "bl"
    BOTTOM_CENTER = "bc"
    BOTTOM_RIGHT = "br"


class ScaleAlgorithm(str, Enum):
    """Resampling used by scale_glyph."""

    NEAREST = "nearest"
    THRESHOLD = "threshold"


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class BoundingBox:
    """Inclusive extent of the set pixels of a glyph."""

    top: int
    left: int
    bottom: int
    right: int

    @property
    def width(self) -> int:
        return self.right - self.left + 1

    @property
    def height(self) -> int:
        return self.bottom - self.top + 1


def _dimensions(glyph: Sequence[Sequence[bool]]) -> tuple[int, int]:
    """(width, height) of a glyph, width taken from its first row."""
    height = len(glyph)
    width = len(glyph[0]) if height else 0
    return width, height


def _pixel(glyph: Sequence[Sequence[bool]], row: int, col: int) -> bool:
    if row < 0 or col < 0 or row >= len(glyph):
        return False
    pixels = glyph[row]
    return col < len(pixels) and bool(pixels[col])


def _anchor_offsets(
    anchor: Anchor,
    source_width: int,
    source_height: int,
    target_width: int,
    target_height: int,
) -> tuple[int, int]:
    horizontal = anchor.value[1]
    vertical = anchor.value[0]

    if horizontal == "l":
        offset_x = 0
    elif horizontal == "c":
        offset_x = (target_width - source_width) // 2
    else:
        offset_x = target_width - source_width

    if vertical == "t":
        offset_y = 0
    elif vertical == "m":
        offset_y = (target_height - source_height) // 2
    else:
        offset_y = target_height - source_height

    return offset_x, offset_y


def blank_glyph(width: int, height: int) -> Glyph:
    """Glyph with every pixel unset."""
    return [[False] * width for _ in range(height)]


def clone_glyph(glyph: Sequence[Sequence[bool]]) -> Glyph:
    """Deep copy of a glyph."""
    return [[bool(p) for p in row] for row in glyph]


def _place(
    glyph: Sequence[Sequence[bool]],
    source_width: int,
    source_height: int,
    target_width: int,
    target_height: int,
    anchor: Anchor,
) -> Glyph:
    offset_x, offset_y = _anchor_offsets(
        anchor, source_width, source_height, target_width, target_height
    )
    placed = blank_glyph(target_width, target_height)
    for row in range(source_height):
        for col in range(source_width):
            target_row = row + offset_y
            target_col = col + offset_x
            if 0 <= target_row < target_height and 0 <= target_col < target_width:
                placed[target_row][target_col] = _pixel(glyph, row, col)
    return placed


def convert_glyph(
    glyph: Sequence[Sequence[bool]],
    from_config: GlyphSetConfig,
    to_config: GlyphSetConfig,
    anchor: Anchor | str = Anchor.TOP_LEFT,
) -> Glyph:
    """Crop or pad a glyph to another configuration's dimensions.

    The source is overlaid onto a blank canvas of the target size, aligned
    at ``anchor``. Target pixels outside the source are unset and source
    pixels outside the target are dropped. No scaling is performed.

    Args:
        glyph: Source glyph laid out for ``from_config``.
        from_config: Configuration the glyph was created for.
        to_config: Configuration giving the target dimensions.
        anchor: Corner (or edge centre) kept fixed.

    Returns:
        New glyph of ``to_config.height`` x ``to_config.width``.
    """
    anchor = Anchor(anchor)
    return _place(
        glyph,
        from_config.width,
        from_config.height,
        to_config.width,
        to_config.height,
        anchor,
    )


def resize_glyph(
    glyph: Sequence[Sequence[bool]],
    width: int,
    height: int,
    anchor: Anchor | str = Anchor.TOP_LEFT,
) -> Glyph:
    """Crop or pad a glyph to ``width`` x ``height``, using its own dimensions as the source."""
    source_width, source_height = _dimensions(glyph)
    return _place(glyph, source_width, source_height, width, height, Anchor(anchor))


def invert_glyph(glyph: Sequence[Sequence[bool]]) -> Glyph:
    return [[not p for p in row] for row in glyph]


def flip_horizontal(glyph: Sequence[Sequence[bool]]) -> Glyph:
    return [[bool(p) for p in reversed(row)] for row in glyph]


def flip_vertical(glyph: Sequence[Sequence[bool]]) -> Glyph:
    return [[bool(p) for p in row] for row in reversed(glyph)]


def rotate_glyph(glyph: Sequence[Sequence[bool]], direction: Direction | str) -> Glyph:
    """Rotate 90 degrees clockwise (RIGHT) or counter-clockwise (LEFT).

    The glyph keeps its dimensions; on non-square glyphs, pixels that rotate
    outside the canvas are dropped and uncovered pixels are unset.
    """
    direction = Direction(direction)
    if direction not in (Direction.LEFT, Direction.RIGHT):
        raise ValueError(f"Rotation direction must be left or right, got {direction.value}")

    width, height = _dimensions(glyph)
    rotated: Glyph = []
    for row in range(height):
        new_row = []
        for col in range(width):
            if direction is Direction.RIGHT:
                source_row, source_col = width - 1 - col, row
            else:
                source_row, source_col = col, height - 1 - row
            in_bounds = 0 <= source_row < height and 0 <= source_col < width
            new_row.append(in_bounds and _pixel(glyph, source_row, source_col))
        rotated.append(new_row)
    return rotated


def shift_glyph(
    glyph: Sequence[Sequence[bool]],
    direction: Direction | str,
    wrap: bool = True,
) -> Glyph:
    """Shift pixels one step, wrapping around the edge or filling with unset pixels."""
    direction = Direction(direction)
    width, height = _dimensions(glyph)
    d_row, d_col = {
        Direction.UP: (1, 0),
        Direction.DOWN: (-1, 0),
        Direction.LEFT: (0, 1),
        Direction.RIGHT: (0, -1),
    }[direction]

    shifted: Glyph = []
    for row in range(height):
        new_row = []
        for col in range(width):
            source_row, source_col = row + d_row, col + d_col
            if wrap:
                source_row %= height
                source_col %= width
            in_bounds = 0 <= source_row < height and 0 <= source_col < width
            new_row.append(in_bounds and _pixel(glyph, source_row, source_col))
        shifted.append(new_row)
    return shifted


def bounding_box(glyph: Sequence[Sequence[bool]]) -> BoundingBox | None:
    """Smallest box containing every set pixel, or None for an empty glyph."""
    rows = [r for r, pixels in enumerate(glyph) if any(pixels)]
    if not rows:
        return None
    cols = [c for pixels in glyph for c, p in enumerate(pixels) if p]
    return BoundingBox(top=rows[0], left=min(cols), bottom=rows[-1], right=max(cols))


def center_glyph(glyph: Sequence[Sequence[bool]]) -> Glyph:
    """Move the set pixels so their bounding box is centred on the canvas.

    Odd leftover space goes to the right and bottom. Empty glyphs come back
    unchanged.
    """
    width, height = _dimensions(glyph)
    box = bounding_box(glyph)
    if box is None:
        return clone_glyph(glyph)

    shift_x = (width - box.width) // 2 - box.left
    shift_y = (height - box.height) // 2 - box.top
    return [
        [_pixel(glyph, row - shift_y, col - shift_x) for col in range(width)]
        for row in range(height)
    ]


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _coverage(
    glyph: Sequence[Sequence[bool]],
    width: int,
    height: int,
    row_start: float,
    row_end: float,
    col_start: float,
    col_end: float,
) -> float:
    """Fraction of the source rectangle covered by set pixels."""
    total = 0.0
    covered = 0.0
    for row in range(max(0, math.floor(row_start)), min(height - 1, math.floor(row_end)) + 1):
        overlap_y = min(row + 1, row_end) - max(row, row_start)
        for col in range(max(0, math.floor(col_start)), min(width - 1, math.floor(col_end)) + 1):
            area = overlap_y * (min(col + 1, col_end) - max(col, col_start))
            total += area
            if _pixel(glyph, row, col):
                covered += area
    return covered / total if total else 0.0


def scale_glyph(
    glyph: Sequence[Sequence[bool]],
    scale: float,
    anchor: Anchor | str = Anchor.MIDDLE_CENTER,
    algorithm: ScaleAlgorithm | str = ScaleAlgorithm.NEAREST,
    threshold: float = 0.5,
) -> Glyph:
    """Scale glyph content by ``scale`` inside the original canvas.

    The content is resampled to ``round(width * scale)`` x ``round(height *
    scale)`` and placed at ``anchor`` on a canvas of the original size, so
    enlarged content is clipped and reduced content is padded with unset
    pixels.

    Args:
        glyph: Source glyph.
        scale: Scale factor (> 0).
        anchor: Point of the canvas the scaled content is aligned to.
        algorithm: ``NEAREST`` copies the nearest source pixel. ``THRESHOLD``
            sets a pixel when the covered share of its source area reaches
            ``threshold``.
        threshold: Coverage needed by ``THRESHOLD`` (0-1).

    Returns:
        New glyph with the source dimensions.
    """
    if scale <= 0:
        raise ValueError(f"Scale must be positive, got {scale}")
    anchor = Anchor(anchor)
    algorithm = ScaleAlgorithm(algorithm)
    if scale == 1:
        return clone_glyph(glyph)

    width, height = _dimensions(glyph)
    scaled_width = _round_half_up(width * scale)
    scaled_height = _round_half_up(height * scale)

    if algorithm is ScaleAlgorithm.NEAREST:
        scaled = [
            [
                _pixel(glyph, min(int(row / scale), height - 1), min(int(col / scale), width - 1))
                for col in range(scaled_width)
            ]
            for row in range(scaled_height)
        ]
    else:
        scaled = [
            [
                _coverage(
                    glyph,
                    width,
                    height,
                    row / scale,
                    (row + 1) / scale,
                    col / scale,
                    (col + 1) / scale,
                )
                >= threshold
                for col in range(scaled_width)
            ]
            for row in range(scaled_height)
        ]

    return _place(scaled, scaled_width, scaled_height, width, height, anchor)
