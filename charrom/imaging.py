"""Pixel buffers and the image file collaborators.

The recognition engine only ever sees a PixelBuffer: width, height and
row-major RGBA bytes. Turning files into buffers (and buffers back into
displayable PNGs) is done here with Pillow, at the edge of the system.
"""

from __future__ import annotations

import io
from dataclasses import dataclass

import numpy as np
import structlog
from PIL import Image, UnidentifiedImageError

from .errors import FileTooLargeError, UnsupportedFormatError

logger = structlog.get_logger(__name__)

MAX_IMAGE_BYTES = 10 * 1024 * 1024  # 10MB
SUPPORTED_FORMATS = frozenset({"PNG", "JPEG", "GIF", "WEBP", "BMP"})


@dataclass(frozen=True)
class PixelBuffer:
    """Decoded image: ``width * height`` RGBA pixels, row-major.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        data: ``width * height * 4`` bytes, R, G, B, A per pixel.
    """

    width: int
    height: int
    data: bytes

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Invalid buffer size {self.width}x{self.height}")
        expected = self.width * self.height * 4
        if len(self.data) != expected:
            raise ValueError(
                f"Pixel data length {len(self.data)} does not match "
                f"{self.width}x{self.height} RGBA ({expected} bytes)"
            )
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        """RGBA value at ``(x, y)``."""
        index = (y * self.width + x) * 4
        r, g, b, a = self.data[index : index + 4]
        return r, g, b, a

    def to_array(self) -> np.ndarray:
        """Copy of the pixels as a ``(height, width, 4)`` uint8 array."""
        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.width, 4).copy()

    def to_image(self) -> Image.Image:
        return Image.frombytes("RGBA", (self.width, self.height), self.data)

    @classmethod
    def from_array(cls, array: np.ndarray) -> PixelBuffer:
        """Build a buffer from a ``(h, w, 4)`` RGBA or ``(h, w, 3)`` RGB uint8 array."""
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise ValueError(f"Expected (h, w, 3) or (h, w, 4) array, got shape {array.shape}")
        rgba = np.asarray(array, dtype=np.uint8)
        if rgba.shape[2] == 3:
            alpha = np.full(rgba.shape[:2] + (1,), 255, dtype=np.uint8)
            rgba = np.concatenate([rgba, alpha], axis=2)
        height, width = rgba.shape[:2]
        return cls(width=width, height=height, data=np.ascontiguousarray(rgba).tobytes())

    @classmethod
    def from_image(cls, img: Image.Image) -> PixelBuffer:
        rgba = img.convert("RGBA")
        return cls(width=rgba.width, height=rgba.height, data=rgba.tobytes())


def decode_image_file(image_bytes: bytes, max_bytes: int = MAX_IMAGE_BYTES) -> PixelBuffer:
    """Decode an image file into an RGBA pixel buffer.

    Args:
        image_bytes: Raw file contents (PNG, JPEG, GIF, WebP or BMP).
        max_bytes: Size limit for the encoded file.

    Returns:
        PixelBuffer of the first frame.

    Raises:
        FileTooLargeError: If ``image_bytes`` exceeds ``max_bytes``.
        UnsupportedFormatError: If the data is not a supported image.
    """
    if len(image_bytes) > max_bytes:
        raise FileTooLargeError(f"Image too large ({len(image_bytes)} bytes, max {max_bytes})")

    try:
        img = Image.open(io.BytesIO(image_bytes))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        logger.warning("decode_image_open_failed", error=str(e))
        raise UnsupportedFormatError(f"Cannot open image: {e}") from e

    if img.format not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError(f"Unsupported image format: {img.format}")

    buffer = PixelBuffer.from_image(img)
    logger.debug("image_decoded", format=img.format, width=buffer.width, height=buffer.height)
    return buffer


def encode_pixel_buffer(buffer: PixelBuffer) -> bytes:
    """Encode a pixel buffer as PNG bytes."""
    out = io.BytesIO()
    buffer.to_image().save(out, format="PNG")
    return out.getvalue()
