"""Tests for base64 transport and the serialized set envelope."""

import base64
import zlib

import pytest

from charrom.errors import InvalidConfigError, MalformedEncodingError
from charrom.model import BitOrder, ByteOrder, GlyphSet, GlyphSetConfig, Padding, SerializedGlyphSet
from charrom.rom import serialize_rom
from charrom.transport import (
    decode_base64,
    decode_share,
    deserialize_set,
    encode_base64,
    encode_share,
    envelope_from_dict,
    envelope_to_dict,
    serialize_set,
)


def _sample_set(config=None):
    config = config or GlyphSetConfig(width=8, height=8)
    glyphs = [
        [[(row + col + index) % 2 == 0 for col in range(config.width)] for row in range(config.height)]
        for index in range(3)
    ]
    metadata = {"id": "abc", "name": "Sample", "tags": ["retro"], "isBuiltIn": False}
    return GlyphSet(metadata=metadata, config=config, glyphs=glyphs)


class TestBase64:
    def test_known_vector(self):
        assert encode_base64([72, 101, 108, 108, 111]) == "SGVsbG8="

    def test_decode_known_vector(self):
        assert decode_base64("SGVsbG8=") == b"Hello"

    def test_empty(self):
        assert encode_base64(b"") == ""
        assert decode_base64("") == b""

    def test_roundtrip_all_byte_values(self):
        data = bytes(range(256))
        assert decode_base64(encode_base64(data)) == data

    def test_invalid_characters_rejected(self):
        with pytest.raises(MalformedEncodingError):
            decode_base64("!!!invalid!!!")

    def test_missing_padding_rejected(self):
        with pytest.raises(MalformedEncodingError):
            decode_base64("SGVsbG8")

    def test_surplus_padding_rejected(self):
        with pytest.raises(MalformedEncodingError):
            decode_base64("ABCD==")
        with pytest.raises(MalformedEncodingError):
            decode_base64("SGVsbG8==")

    def test_stray_bits_in_last_group_rejected(self):
        with pytest.raises(MalformedEncodingError):
            decode_base64("SGVsbG9=")

    def test_non_string_rejected(self):
        with pytest.raises(MalformedEncodingError):
            decode_base64(b"SGVsbG8=")

    def test_malformed_is_value_error(self):
        with pytest.raises(ValueError):
            decode_base64("@@@@")


class TestSerializeSet:
    def test_binary_data_is_base64_rom(self):
        glyph_set = _sample_set()
        serialized = serialize_set(glyph_set)
        assert serialized.binary_data == encode_base64(serialize_rom(glyph_set.glyphs, glyph_set.config))
        assert serialized.config == glyph_set.config

    def test_roundtrip(self):
        glyph_set = _sample_set()
        assert deserialize_set(serialize_set(glyph_set)) == glyph_set

    def test_roundtrip_odd_layout(self):
        config = GlyphSetConfig(width=5, height=9, bit_order="lsb", padding="left", byte_order="little")
        glyph_set = _sample_set(config)
        restored = deserialize_set(serialize_set(glyph_set))
        assert restored == glyph_set
        assert restored.config.byte_order is not None

    def test_metadata_not_shared(self):
        glyph_set = _sample_set()
        serialized = serialize_set(glyph_set)
        glyph_set.metadata["tags"].append("changed")
        assert serialized.metadata["tags"] == ["retro"]

    def test_deserialize_malformed(self):
        serialized = SerializedGlyphSet(metadata={}, config=GlyphSetConfig(width=8, height=8), binary_data="%%%")
        with pytest.raises(MalformedEncodingError):
            deserialize_set(serialized)

    def test_deserialize_drops_partial_glyph(self):
        serialized = SerializedGlyphSet(
            metadata={},
            config=GlyphSetConfig(width=8, height=8),
            binary_data=encode_base64(bytes(12)),
        )
        assert len(deserialize_set(serialized).glyphs) == 1


class TestEnvelope:
    def test_to_dict_shape(self):
        envelope = envelope_to_dict(serialize_set(_sample_set()))
        assert set(envelope) == {"metadata", "config", "binaryData"}
        assert envelope["config"] == {"width": 8, "height": 8, "bitOrder": "msb", "padding": "right"}

    def test_dict_roundtrip(self):
        serialized = serialize_set(_sample_set())
        assert envelope_from_dict(envelope_to_dict(serialized)) == serialized

    def test_absent_byte_order_stays_absent(self):
        serialized = envelope_from_dict(
            {"metadata": {}, "config": {"width": 8, "height": 8}, "binaryData": ""}
        )
        assert serialized.config.byte_order is None
        assert "byteOrder" not in envelope_to_dict(serialized)["config"]

    def test_missing_config(self):
        with pytest.raises(InvalidConfigError):
            envelope_from_dict({"metadata": {}, "binaryData": ""})

    def test_invalid_config(self):
        with pytest.raises(InvalidConfigError) as exc_info:
            envelope_from_dict({"config": {"width": 8, "height": 0}, "binaryData": ""})
        assert exc_info.value.field == "height"

    def test_binary_data_must_be_string(self):
        with pytest.raises(MalformedEncodingError):
            envelope_from_dict({"config": {"width": 8, "height": 8}, "binaryData": 42})

    def test_metadata_must_be_mapping(self):
        with pytest.raises(MalformedEncodingError):
            envelope_from_dict({"metadata": ["x"], "config": {"width": 8, "height": 8}, "binaryData": ""})


def _raw_share(payload):
    compressor = zlib.compressobj(9, zlib.DEFLATED, -zlib.MAX_WBITS)
    compressed = compressor.compress(payload) + compressor.flush()
    return "2:" + base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")


class TestShare:
    def test_roundtrip(self):
        glyph_set = _sample_set()
        decoded = decode_share(encode_share(glyph_set))
        assert decoded.metadata == {"name": "Sample", "description": ""}
        assert decoded.config == glyph_set.config
        assert decoded.glyphs == glyph_set.glyphs

    def test_url_safe_output(self):
        encoded = encode_share(_sample_set())
        assert encoded.startswith("2:")
        assert not set(encoded) & {"+", "/", "="}

    def test_layout_flags_preserved(self):
        config = GlyphSetConfig(width=5, height=7, bit_order=BitOrder.LSB, padding=Padding.LEFT)
        decoded = decode_share(encode_share(_sample_set(config)))
        assert decoded.config == config
        assert decoded.glyphs == _sample_set(config).glyphs

    def test_little_byte_order_preserved(self):
        config = GlyphSetConfig(width=12, height=10, byte_order=ByteOrder.LITTLE)
        decoded = decode_share(encode_share(_sample_set(config)))
        assert decoded.config.byte_order is ByteOrder.LITTLE
        assert decoded.glyphs == _sample_set(config).glyphs

    def test_name_and_description(self):
        glyph_set = GlyphSet(
            metadata={"name": "Zeichensatz ä", "description": "Demo set"},
            config=GlyphSetConfig(width=8, height=8),
            glyphs=[[[True] * 8] * 8],
        )
        decoded = decode_share(encode_share(glyph_set))
        assert decoded.metadata == {"name": "Zeichensatz ä", "description": "Demo set"}

    def test_packed_payload_layout(self):
        encoded = _raw_share(b"\x08\x01\x03ab\x00\x00\xff\x80")
        decoded = decode_share(encoded)
        assert decoded.metadata == {"name": "ab", "description": ""}
        assert decoded.config.padding is Padding.LEFT
        assert decoded.config.bit_order is BitOrder.LSB
        assert decoded.glyphs == [[[True] * 8], [[False] * 7 + [True]]]

    def test_missing_prefix(self):
        with pytest.raises(MalformedEncodingError, match="prefix"):
            decode_share(encode_share(_sample_set())[2:])

    def test_invalid_base64url(self):
        with pytest.raises(MalformedEncodingError):
            decode_share("2:!!!!")

    def test_invalid_deflate_stream(self):
        with pytest.raises(MalformedEncodingError):
            decode_share("2:" + base64.urlsafe_b64encode(b"\xff\xff\xff\xff").decode("ascii"))

    def test_unterminated_name(self):
        with pytest.raises(MalformedEncodingError, match="name not terminated"):
            decode_share(_raw_share(b"\x08\x08\x00abc"))

    def test_zero_width_header(self):
        with pytest.raises(MalformedEncodingError):
            decode_share(_raw_share(b"\x00\x08\x00\x00\x00"))

    def test_oversized_glyph_cannot_be_shared(self):
        glyph_set = GlyphSet(metadata={}, config=GlyphSetConfig(width=256, height=1), glyphs=[])
        with pytest.raises(InvalidConfigError):
            encode_share(glyph_set)
