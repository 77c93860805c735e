"""Error taxonomy for the character ROM codec.

Only configuration problems and malformed transport encodings are reported
as errors. Incomplete binary input (short ROM dumps, trailing partial glyphs,
ragged pixel arrays) is recovered silently by the codec.
"""

from __future__ import annotations


class CharRomError(Exception):
    """Base class for all charrom errors."""


class MalformedEncodingError(CharRomError, ValueError):
    """Raised when base64 data does not follow the standard alphabet/padding grammar."""


class InvalidConfigError(CharRomError, ValueError):
    """Raised when a configuration object is constructed with invalid values.

    Attributes:
        field: Name of the offending configuration field.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


class UnsupportedFormatError(CharRomError):
    """Raised by the image decoding collaborator for unreadable image data."""


class FileTooLargeError(CharRomError):
    """Raised by the image decoding collaborator when input exceeds the size limit."""
