"""Bit geometry for packed glyph rows.

Maps each pixel column of a glyph row to a (byte, bit) position inside the
row's byte group. Every encode and decode path goes through
``bit_position_for_column``, so the two directions cannot disagree.

Layout of a row:
1. The row occupies ``ceil(width / 8)`` bytes, treated as one bit string
   whose offset 0 is the most significant bit of the first byte.
2. Padding decides where the unused bits go: after the data (RIGHT) or
   before it (LEFT).
3. Bit order decides which end of each byte an offset counts from:
   MSB-first maps offset ``k`` to shift ``7 - k % 8``, LSB-first mirrors it.
4. Little-endian byte order reverses the byte index within the row.
"""

from __future__ import annotations

from functools import lru_cache

from .model import BitOrder, ByteOrder, GlyphSetConfig, Padding


def bytes_per_row(config: GlyphSetConfig) -> int:
    """Number of bytes one glyph row occupies (``ceil(width / 8)``)."""
    return (config.width + 7) // 8


def bytes_per_glyph(config: GlyphSetConfig) -> int:
    """Number of bytes one complete glyph occupies."""
    return bytes_per_row(config) * config.height


def bit_position_for_column(col: int, config: GlyphSetConfig) -> tuple[int, int]:
    """Locate the bit holding a pixel column.

    Args:
        col: Pixel column, 0 = leftmost.
        config: Glyph set configuration.

    Returns:
        ``(byte_index, bit_index)`` where ``byte_index`` is relative to the
        start of the row and ``bit_index`` is the shift amount, so the pixel
        is ``(row_bytes[byte_index] >> bit_index) & 1``.
    """
    row_bytes = bytes_per_row(config)
    unused_bits = row_bytes * 8 - config.width

    offset = col + unused_bits if config.padding is Padding.LEFT else col
    byte_index, position = divmod(offset, 8)

    if config.bit_order is BitOrder.LSB:
        bit_index = position
    else:
        bit_index = 7 - position

    if config.effective_byte_order is ByteOrder.LITTLE:
        byte_index = row_bytes - 1 - byte_index

    return byte_index, bit_index


@lru_cache(maxsize=128)
def column_bit_map(config: GlyphSetConfig) -> tuple[tuple[int, int], ...]:
    """Bit positions for every column of a row, in column order."""
    return tuple(bit_position_for_column(col, config) for col in range(config.width))


def glyph_count_for_size(size: int, config: GlyphSetConfig) -> int:
    """Number of complete glyphs in ``size`` bytes of ROM data."""
    return max(0, size) // bytes_per_glyph(config)
