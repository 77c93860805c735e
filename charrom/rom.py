"""Glyph codec: pixel grids to and from packed ROM bytes.

The codec is forgiving about data and strict about configuration:
- short input decodes as zero-filled rows,
- a trailing partial glyph in a ROM stream is discarded,
- missing rows or columns of a ragged glyph are read as unset pixels,
- the configuration itself was validated when it was constructed.

Encoding rewrites every bit position the decoder reads, so
``serialize_rom(parse_rom(data))`` reproduces ``data`` bit for bit whenever
its length is a whole number of glyphs.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import structlog

from .bits import bytes_per_glyph, bytes_per_row, column_bit_map
from .model import Glyph, GlyphSetConfig

logger = structlog.get_logger(__name__)


def _as_bytes(data: bytes | bytearray | memoryview | Iterable[int]) -> bytes:
    if isinstance(data, bytes):
        return data
    return bytes(data)


def _pixel(glyph: Sequence[Sequence[bool]], row: int, col: int) -> bool:
    """Read a pixel, treating anything outside a ragged glyph as unset."""
    if row >= len(glyph):
        return False
    pixels = glyph[row]
    if col >= len(pixels):
        return False
    return bool(pixels[col])


def bytes_to_glyph(
    data: bytes | bytearray | memoryview | Iterable[int],
    config: GlyphSetConfig,
) -> Glyph:
    """Decode one glyph from its packed bytes.

    Args:
        data: Raw bytes for one glyph. May be shorter than a full glyph;
            missing bytes read as 0.
        config: Glyph set configuration.

    Returns:
        Glyph of ``config.height`` rows by ``config.width`` columns.
    """
    raw = _as_bytes(data)
    row_bytes = bytes_per_row(config)
    positions = column_bit_map(config)

    glyph: Glyph = []
    for row in range(config.height):
        start = row * row_bytes
        chunk = raw[start : start + row_bytes]
        if len(chunk) < row_bytes:
            chunk = chunk + bytes(row_bytes - len(chunk))
        glyph.append([((chunk[byte_idx] >> bit_idx) & 1) == 1 for byte_idx, bit_idx in positions])
    return glyph


def glyph_to_bytes(glyph: Sequence[Sequence[bool]], config: GlyphSetConfig) -> bytes:
    """Encode one glyph into ``height * bytes_per_row`` bytes.

    Args:
        glyph: Pixel grid ``[row][col]``. Missing rows/columns count as unset;
            extra rows/columns beyond the configured size are ignored.
        config: Glyph set configuration.

    Returns:
        Packed bytes; unused padding bits are always 0.
    """
    row_bytes = bytes_per_row(config)
    positions = column_bit_map(config)
    out = bytearray(bytes_per_glyph(config))

    for row in range(config.height):
        base = row * row_bytes
        for col, (byte_idx, bit_idx) in enumerate(positions):
            if _pixel(glyph, row, col):
                out[base + byte_idx] |= 1 << bit_idx
    return bytes(out)


def parse_rom(
    data: bytes | bytearray | memoryview | Iterable[int],
    config: GlyphSetConfig,
) -> list[Glyph]:
    """Split a ROM byte stream into glyphs.

    Trailing bytes that do not fill a complete glyph are discarded. Empty
    input yields an empty list.
    """
    raw = _as_bytes(data)
    glyph_size = bytes_per_glyph(config)
    count, trailing = divmod(len(raw), glyph_size)

    glyphs = [
        bytes_to_glyph(raw[i * glyph_size : (i + 1) * glyph_size], config) for i in range(count)
    ]

    logger.debug(
        "rom_parsed",
        bytes=len(raw),
        glyphs=count,
        trailing_bytes=trailing,
        width=config.width,
        height=config.height,
    )
    return glyphs


def serialize_rom(glyphs: Iterable[Sequence[Sequence[bool]]], config: GlyphSetConfig) -> bytes:
    """Concatenate the packed bytes of each glyph, in order."""
    out = bytearray()
    count = 0
    for glyph in glyphs:
        out += glyph_to_bytes(glyph, config)
        count += 1

    logger.debug("rom_serialized", glyphs=count, bytes=len(out))
    return bytes(out)
