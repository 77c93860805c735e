"""Byte values pasted as source code text.

Accepts the array literals people copy out of C headers, assembler listings,
JavaScript or Python: ``0x7E``, ``$7E``, ``0b01111110`` and bare decimals.
Everything between tokens (commas, braces, directives, comments) is ignored.
Prefixes are matched lowercase only, as they are written in practice.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

import structlog

from .model import Glyph, GlyphSetConfig
from .rom import parse_rom

logger = structlog.get_logger(__name__)

TOKEN_PATTERN = re.compile(r"0x[0-9a-fA-F]{1,2}|\$[0-9a-fA-F]{1,2}|0b[01]{1,8}|\b\d{1,3}\b", re.ASCII)

FORMAT_HEX = "hex"
FORMAT_DECIMAL = "decimal"
FORMAT_BINARY = "binary"
FORMAT_MIXED = "mixed"


@dataclass
class TextParseResult:
    """Result of scanning text for byte values.

    Attributes:
        data: Parsed byte values in order of appearance.
        detected_format: ``hex``, ``decimal``, ``binary`` or ``mixed``.
        invalid_count: Tokens skipped because they fell outside 0-255.
        error: Message when nothing usable was found, else None.
    """

    data: bytes = b""
    detected_format: str = FORMAT_HEX
    invalid_count: int = 0
    error: str | None = None


@dataclass
class TextGlyphResult:
    parsed: TextParseResult
    glyphs: list[Glyph] = field(default_factory=list)


def _token_format(token: str) -> str:
    if token.startswith(("0x", "$")):
        return FORMAT_HEX
    if token.startswith("0b"):
        return FORMAT_BINARY
    return FORMAT_DECIMAL


def _token_value(token: str) -> int:
    if token.startswith("0x"):
        return int(token[2:], 16)
    if token.startswith("$"):
        return int(token[1:], 16)
    if token.startswith("0b"):
        return int(token[2:], 2)
    return int(token, 10)


def parse_text_to_bytes(text: str) -> TextParseResult:
    """Extract byte values from free-form text.

    Args:
        text: Pasted source text.

    Returns:
        TextParseResult. ``error`` is set (and ``data`` empty) when the input
        is blank, holds no tokens, or every token is out of range.
    """
    if not text.strip():
        return TextParseResult(error="No input provided")

    tokens = TOKEN_PATTERN.findall(text)
    if not tokens:
        return TextParseResult(error="No valid byte values found in input")

    values: list[int] = []
    formats: set[str] = set()
    invalid = 0
    for token in tokens:
        value = _token_value(token)
        if value > 255:
            invalid += 1
            continue
        values.append(value)
        formats.add(_token_format(token))

    if not values:
        return TextParseResult(
            invalid_count=invalid,
            error="No valid byte values found (all values were out of range 0-255)",
        )

    detected = formats.pop() if len(formats) == 1 else FORMAT_MIXED
    logger.debug("text_parsed", tokens=len(tokens), data=len(values), format=detected, invalid=invalid)
    return TextParseResult(data=bytes(values), detected_format=detected, invalid_count=invalid)


def parse_text_to_glyphs(text: str, config: GlyphSetConfig) -> TextGlyphResult:
    """Parse text into bytes, then decode them as a ROM with ``config``."""
    parsed = parse_text_to_bytes(text)
    if parsed.error:
        return TextGlyphResult(parsed=parsed)
    return TextGlyphResult(parsed=parsed, glyphs=parse_rom(parsed.data, config))


def summarize(result: TextParseResult, glyph_count: int = 0) -> str:
    """One-line human summary, e.g. ``8 bytes detected (hexadecimal) -> 1 glyph``."""
    if result.error:
        return result.error

    names = {
        FORMAT_HEX: "hexadecimal",
        FORMAT_DECIMAL: "decimal",
        FORMAT_BINARY: "binary",
        FORMAT_MIXED: "mixed formats",
    }
    summary = f"{len(result.data)} bytes detected ({names[result.detected_format]})"
    if glyph_count > 0:
        summary += f" -> {glyph_count} glyph{'s' if glyph_count != 1 else ''}"
    if result.invalid_count > 0:
        plural = "s" if result.invalid_count != 1 else ""
        summary += f" ({result.invalid_count} invalid value{plural} skipped)"
    return summary
