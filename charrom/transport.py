"""Transport codec: base64 text encoding and the serialized glyph set envelope.

Persisted glyph sets store their glyphs as the base64 encoding of the raw ROM
byte stream, next to the configuration needed to parse it back. Decoding is
strict: anything outside the standard base64 alphabet and padding grammar is
rejected with MalformedEncodingError instead of being skipped.
"""

from __future__ import annotations

import base64
import binascii
import copy
import zlib
from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from .errors import InvalidConfigError, MalformedEncodingError
from .model import BitOrder, ByteOrder, GlyphSet, GlyphSetConfig, Padding, SerializedGlyphSet
from .rom import parse_rom, serialize_rom

logger = structlog.get_logger(__name__)


def encode_base64(data: bytes | bytearray | memoryview | Iterable[int]) -> str:
    """Encode bytes as standard base64 with ``=`` padding.

    Args:
        data: Raw bytes.

    Returns:
        ASCII base64 string; empty input gives an empty string.
    """
    raw = data if isinstance(data, (bytes, bytearray, memoryview)) else bytes(data)
    return base64.b64encode(raw).decode("ascii")


def decode_base64(text: str) -> bytes:
    """Decode a standard base64 string.

    Args:
        text: Base64 string.

    Returns:
        Decoded bytes.

    Raises:
        MalformedEncodingError: If ``text`` is not a string or contains
            characters outside the base64 alphabet/padding grammar.
    """
    if not isinstance(text, str):
        raise MalformedEncodingError(f"base64 data must be a string, got {type(text).__name__}")
    try:
        raw = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedEncodingError(f"Invalid base64 data: {e}") from e
    # b64decode tolerates surplus padding and stray bits in the final group
    if len(text) % 4 != 0 or base64.b64encode(raw).decode("ascii") != text:
        raise MalformedEncodingError("Invalid base64 data: non-canonical padding")
    return raw


def serialize_set(glyph_set: GlyphSet) -> SerializedGlyphSet:
    """Project a glyph set onto its storage form.

    Metadata is deep-copied; the returned object shares no mutable state
    with ``glyph_set``.
    """
    binary = serialize_rom(glyph_set.glyphs, glyph_set.config)
    return SerializedGlyphSet(
        metadata=copy.deepcopy(dict(glyph_set.metadata)),
        config=glyph_set.config,
        binary_data=encode_base64(binary),
    )


def deserialize_set(serialized: SerializedGlyphSet) -> GlyphSet:
    """Rebuild a glyph set from its storage form.

    Raises:
        MalformedEncodingError: If ``binary_data`` is not valid base64.
    """
    binary = decode_base64(serialized.binary_data)
    glyphs = parse_rom(binary, serialized.config)
    logger.debug("set_deserialized", glyphs=len(glyphs), bytes=len(binary))
    return GlyphSet(
        metadata=copy.deepcopy(dict(serialized.metadata)),
        config=serialized.config,
        glyphs=glyphs,
    )


def envelope_to_dict(serialized: SerializedGlyphSet) -> dict[str, Any]:
    """JSON-ready envelope ``{metadata, config, binaryData}``."""
    return {
        "metadata": copy.deepcopy(dict(serialized.metadata)),
        "config": serialized.config.to_dict(),
        "binaryData": serialized.binary_data,
    }


def envelope_from_dict(payload: Mapping[str, Any]) -> SerializedGlyphSet:
    """Parse a JSON envelope produced by ``envelope_to_dict``.

    Raises:
        InvalidConfigError: If the config block is missing or invalid.
        MalformedEncodingError: If ``binaryData`` is missing or not a string,
            or ``metadata`` is not an object.
    """
    if "config" not in payload:
        raise InvalidConfigError("config", "is required")
    config = GlyphSetConfig.from_dict(payload["config"])

    binary_data = payload.get("binaryData")
    if not isinstance(binary_data, str):
        raise MalformedEncodingError("binaryData must be a base64 string")

    metadata = payload.get("metadata") or {}
    if not isinstance(metadata, Mapping):
        raise MalformedEncodingError(f"metadata must be an object, got {type(metadata).__name__}")

    return SerializedGlyphSet(
        metadata=copy.deepcopy(dict(metadata)),
        config=config,
        binary_data=binary_data,
    )


# --------------------------------------------------------------------------
# Share links
# --------------------------------------------------------------------------

SHARE_PREFIX = "2:"

FLAG_LEFT_PADDING = 0x01
FLAG_LSB = 0x02
FLAG_LITTLE_ENDIAN = 0x04

_RAW_DEFLATE = -zlib.MAX_WBITS


def _share_flags(config: GlyphSetConfig) -> int:
    flags = 0
    if config.padding is Padding.LEFT:
        flags |= FLAG_LEFT_PADDING
    if config.bit_order is BitOrder.LSB:
        flags |= FLAG_LSB
    if config.byte_order is ByteOrder.LITTLE:
        flags |= FLAG_LITTLE_ENDIAN
    return flags


def encode_share(glyph_set: GlyphSet) -> str:
    """Pack a glyph set into a compact URL-safe share string.

    The payload is ``[width][height][flags][name]\\0[description]\\0[ROM
    bytes]``, compressed with raw deflate at level 9 and written as unpadded
    base64url behind the ``2:`` version prefix. Name and description come
    from the set's metadata and default to empty strings.

    Raises:
        InvalidConfigError: If width or height does not fit in a byte.
    """
    config = glyph_set.config
    for field_name, value in (("width", config.width), ("height", config.height)):
        if value > 255:
            raise InvalidConfigError(field_name, f"must be at most 255 to share, got {value}")

    name = str(glyph_set.metadata.get("name") or "")
    description = str(glyph_set.metadata.get("description") or "")
    rom = serialize_rom(glyph_set.glyphs, config)

    payload = b"".join(
        [
            bytes([config.width, config.height, _share_flags(config)]),
            name.encode("utf-8"),
            b"\x00",
            description.encode("utf-8"),
            b"\x00",
            rom,
        ]
    )
    compressor = zlib.compressobj(9, zlib.DEFLATED, _RAW_DEFLATE)
    compressed = compressor.compress(payload) + compressor.flush()
    encoded = base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")

    logger.debug(
        "share_encoded",
        glyphs=len(glyph_set.glyphs),
        payload_bytes=len(payload),
        encoded_length=len(encoded) + len(SHARE_PREFIX),
    )
    return SHARE_PREFIX + encoded


def _split_terminated(data: bytes, start: int, field_name: str) -> tuple[str, int]:
    end = data.find(b"\x00", start)
    if end == -1:
        raise MalformedEncodingError(f"Invalid share data: {field_name} not terminated")
    return data[start:end].decode("utf-8", errors="replace"), end + 1


def decode_share(text: str) -> GlyphSet:
    """Rebuild a glyph set from a string produced by ``encode_share``.

    The returned set's metadata holds ``name`` and ``description``.

    Raises:
        MalformedEncodingError: If the prefix, base64url text, deflate stream
            or packed header is invalid.
    """
    if not isinstance(text, str) or not text.startswith(SHARE_PREFIX):
        raise MalformedEncodingError("Invalid share data: missing version prefix")

    body = text[len(SHARE_PREFIX) :]
    try:
        compressed = base64.b64decode(body + "=" * (-len(body) % 4), altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedEncodingError(f"Invalid share data: {e}") from e
    try:
        data = zlib.decompress(compressed, _RAW_DEFLATE)
    except zlib.error as e:
        raise MalformedEncodingError(f"Invalid share data: {e}") from e

    if len(data) < 3:
        raise MalformedEncodingError("Invalid share data: header truncated")
    width, height, flags = data[0], data[1], data[2]
    try:
        config = GlyphSetConfig(
            width=width,
            height=height,
            bit_order=BitOrder.LSB if flags & FLAG_LSB else BitOrder.MSB,
            padding=Padding.LEFT if flags & FLAG_LEFT_PADDING else Padding.RIGHT,
            byte_order=ByteOrder.LITTLE if flags & FLAG_LITTLE_ENDIAN else None,
        )
    except InvalidConfigError as e:
        raise MalformedEncodingError(f"Invalid share data: {e}") from e

    name, offset = _split_terminated(data, 3, "name")
    description, offset = _split_terminated(data, offset, "description")
    glyphs = parse_rom(data[offset:], config)

    logger.debug("share_decoded", glyphs=len(glyphs), width=width, height=height)
    return GlyphSet(
        metadata={"name": name, "description": description},
        config=config,
        glyphs=glyphs,
    )
