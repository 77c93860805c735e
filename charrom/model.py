"""Data model shared by the ROM codec and the recognition engine.

A glyph is a plain ``list[list[bool]]`` indexed ``[row][column]``. The
configuration objects are frozen dataclasses that validate themselves on
construction, so the codec loops never have to re-check dimensions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from .errors import InvalidConfigError

Glyph = list[list[bool]]


class BitOrder(str, Enum):
    """Which end of a byte the leftmost pixel of a row occupies."""

    MSB = "msb"
    LSB = "lsb"


class Padding(str, Enum):
    """Side of a row on which unused bits sit when width is not a multiple of 8."""

    LEFT = "left"
    RIGHT = "right"


class ByteOrder(str, Enum):
    """Byte order for rows spanning more than one byte."""

    BIG = "big"
    LITTLE = "little"


class ReadingOrder(str, Enum):
    """Scan convention mapping a grid position to a logical character index.

    The first axis named is the primary scan axis: ``ltr-ttb`` reads rows
    left to right, top to bottom; ``ttb-ltr`` reads columns top to bottom,
    left to right.
    """

    LTR_TTB = "ltr-ttb"
    RTL_TTB = "rtl-ttb"
    LTR_BTT = "ltr-btt"
    RTL_BTT = "rtl-btt"
    TTB_LTR = "ttb-ltr"
    TTB_RTL = "ttb-rtl"
    BTT_LTR = "btt-ltr"
    BTT_RTL = "btt-rtl"

    @property
    def row_major(self) -> bool:
        return self.value.startswith(("ltr", "rtl"))

    @property
    def left_to_right(self) -> bool:
        return "ltr" in self.value

    @property
    def top_to_bottom(self) -> bool:
        return "ttb" in self.value


def _coerce_enum(enum_cls: type[Enum], value: Any, field_name: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.lower())
        except ValueError:
            pass
    valid = ", ".join(str(member.value) for member in enum_cls)
    raise InvalidConfigError(field_name, f"must be one of {valid}, got {value!r}")


def _require_int(value: Any, field_name: str, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfigError(field_name, f"must be an integer, got {value!r}")
    if value < minimum:
        raise InvalidConfigError(field_name, f"must be >= {minimum}, got {value}")


def _require_number(value: Any, field_name: str, low: float, high: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidConfigError(field_name, f"must be a number, got {value!r}")
    if not low <= value <= high:
        raise InvalidConfigError(field_name, f"must be between {low} and {high}, got {value}")
    return float(value)


@dataclass(frozen=True)
class GlyphSetConfig:
    """Binary layout of a glyph set.

    Attributes:
        width: Glyph width in pixels (>= 1).
        height: Glyph height in pixels (>= 1).
        bit_order: Bit position of the leftmost pixel within a byte.
        padding: Side of the unused bits in a row.
        byte_order: Byte order for multi-byte rows. ``None`` means the field
            was not specified and is read as ``ByteOrder.BIG``.
    """

    width: int
    height: int
    bit_order: BitOrder = BitOrder.MSB
    padding: Padding = Padding.RIGHT
    byte_order: ByteOrder | None = None

    def __post_init__(self) -> None:
        _require_int(self.width, "width", 1)
        _require_int(self.height, "height", 1)
        object.__setattr__(self, "bit_order", _coerce_enum(BitOrder, self.bit_order, "bit_order"))
        object.__setattr__(self, "padding", _coerce_enum(Padding, self.padding, "padding"))
        if self.byte_order is not None:
            object.__setattr__(
                self, "byte_order", _coerce_enum(ByteOrder, self.byte_order, "byte_order")
            )

    @property
    def effective_byte_order(self) -> ByteOrder:
        return ByteOrder.BIG if self.byte_order is None else self.byte_order

    def to_dict(self) -> dict[str, Any]:
        """Envelope form, using the persisted camelCase keys."""
        payload: dict[str, Any] = {
            "width": self.width,
            "height": self.height,
            "bitOrder": self.bit_order.value,
            "padding": self.padding.value,
        }
        if self.byte_order is not None:
            payload["byteOrder"] = self.byte_order.value
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> GlyphSetConfig:
        if not isinstance(payload, Mapping):
            raise InvalidConfigError("config", f"must be an object, got {type(payload).__name__}")
        for required in ("width", "height"):
            if required not in payload:
                raise InvalidConfigError(required, "is required")
        return cls(
            width=payload["width"],
            height=payload["height"],
            bit_order=payload.get("bitOrder", BitOrder.MSB),
            padding=payload.get("padding", Padding.RIGHT),
            byte_order=payload.get("byteOrder"),
        )


@dataclass
class GlyphSet:
    """A glyph set: opaque metadata, binary layout and glyphs in index order."""

    metadata: dict[str, Any]
    config: GlyphSetConfig
    glyphs: list[Glyph] = field(default_factory=list)


@dataclass
class SerializedGlyphSet:
    """Storage projection of a GlyphSet; ``binary_data`` is base64 ROM bytes."""

    metadata: dict[str, Any]
    config: GlyphSetConfig
    binary_data: str


@dataclass(frozen=True)
class RecognitionConfig:
    """Grid geometry and thresholding used to extract glyphs from an image.

    Offsets and gaps are in source pixels. ``pixel_width`` x ``pixel_height``
    source pixels make up one logical glyph pixel. A forced column or row
    count of 0 means auto-detect from the image size.
    """

    char_width: int = 8
    char_height: int = 8
    offset_x: int = 0
    offset_y: int = 0
    pixel_width: int = 1
    pixel_height: int = 1
    gap_x: int = 0
    gap_y: int = 0
    force_columns: int = 0
    force_rows: int = 0
    threshold: float = 128
    invert: bool = False
    rotation_degrees: float = 0.0
    reading_order: ReadingOrder = ReadingOrder.LTR_TTB

    def __post_init__(self) -> None:
        for name in ("char_width", "char_height", "pixel_width", "pixel_height"):
            _require_int(getattr(self, name), name, 1)
        for name in ("offset_x", "offset_y", "gap_x", "gap_y", "force_columns", "force_rows"):
            _require_int(getattr(self, name), name, 0)
        _require_number(self.threshold, "threshold", 0, 255)
        object.__setattr__(
            self,
            "rotation_degrees",
            _require_number(self.rotation_degrees, "rotation_degrees", -2.0, 2.0),
        )
        object.__setattr__(self, "invert", bool(self.invert))
        object.__setattr__(
            self,
            "reading_order",
            _coerce_enum(ReadingOrder, self.reading_order, "reading_order"),
        )

    @property
    def stride_x(self) -> int:
        return self.char_width * self.pixel_width + self.gap_x

    @property
    def stride_y(self) -> int:
        return self.char_height * self.pixel_height + self.gap_y

    def glyph_config(self, **overrides: Any) -> GlyphSetConfig:
        """GlyphSetConfig matching the logical glyph dimensions."""
        return GlyphSetConfig(width=self.char_width, height=self.char_height, **overrides)


DEFAULT_CONFIG = GlyphSetConfig(width=8, height=8)
DEFAULT_RECOGNITION_CONFIG = RecognitionConfig()
