"""Test METADATA_BLOCK_PICTURE encoding and decoding"""

import base64
import struct

import pytest

from oggify_tagger.core.exceptions import FormatError
from oggify_tagger.tagging.picture import (
    PICTURE_COMMENT_KEY,
    PictureBlock,
    build_picture_comment,
    decode_picture_block,
    encode_picture_block,
)


def unpack_block(raw):
    """Split a binary picture block into its fields."""
    offset = 0

    def read_u32():
        nonlocal offset
        (value,) = struct.unpack(">I", raw[offset:offset + 4])
        offset += 4
        return value

    fields = {"type": read_u32()}
    mime_length = read_u32()
    fields["mime"] = raw[offset:offset + mime_length]
    offset += mime_length
    desc_length = read_u32()
    fields["desc"] = raw[offset:offset + desc_length]
    offset += desc_length
    fields["width"] = read_u32()
    fields["height"] = read_u32()
    fields["depth"] = read_u32()
    fields["colors"] = read_u32()
    data_length = read_u32()
    fields["data_length"] = data_length
    fields["data"] = raw[offset:offset + data_length]
    fields["trailing"] = raw[offset + data_length:]
    return fields


class TestEncodePictureBlock:
    """Test the binary layout of encoded picture blocks"""

    def test_layout(self, image_bytes):
        raw = base64.b64decode(encode_picture_block(image_bytes, "image/jpeg"))
        fields = unpack_block(raw)

        assert fields["type"] == 3
        assert fields["mime"] == b"image/jpeg"
        assert fields["desc"] == b""
        assert (fields["width"], fields["height"], fields["depth"], fields["colors"]) == (0, 0, 0, 0)
        assert fields["data_length"] == len(image_bytes)
        assert fields["data"] == image_bytes
        assert fields["trailing"] == b""

    def test_total_length(self, image_bytes):
        """Block length is 32 + mime length + image length"""
        raw = base64.b64decode(encode_picture_block(image_bytes, "image/jpeg"))
        assert len(raw) == 32 + len("image/jpeg") + len(image_bytes)

    def test_exact_bytes_for_small_image(self):
        raw = base64.b64decode(encode_picture_block(b"\x01\x02\x03", "image/png"))
        expected = (
            struct.pack(">II", 3, 9) + b"image/png"
            + struct.pack(">IIIIII", 0, 0, 0, 0, 0, 3) + b"\x01\x02\x03"
        )
        assert raw == expected

    def test_no_line_wrapping(self):
        """Large images still encode to a single line of base64"""
        encoded = encode_picture_block(b"\xab" * 100_000)
        assert "\n" not in encoded
        assert "\r" not in encoded

    def test_deterministic(self, image_bytes):
        assert encode_picture_block(image_bytes) == encode_picture_block(image_bytes)

    def test_default_mime_type(self, image_bytes):
        raw = base64.b64decode(encode_picture_block(image_bytes))
        assert unpack_block(raw)["mime"] == b"image/jpeg"

    def test_zero_length_image(self):
        """Empty image data still gives a valid block"""
        raw = base64.b64decode(encode_picture_block(b""))
        fields = unpack_block(raw)
        assert fields["data_length"] == 0
        assert fields["data"] == b""
        assert len(raw) == 32 + len("image/jpeg")

    def test_build_picture_comment(self, image_bytes):
        key, value = build_picture_comment(image_bytes, "image/png")
        assert key == PICTURE_COMMENT_KEY == "metadata_block_picture"
        assert value == encode_picture_block(image_bytes, "image/png")


class TestDecodePictureBlock:
    """Test decoding picture comment values"""

    def test_decode_encoded(self, image_bytes):
        block = decode_picture_block(encode_picture_block(image_bytes, "image/png"))
        assert block == PictureBlock(image_data=image_bytes, mime_type="image/png")
        assert block.picture_type == 3

    def test_decode_empty_image(self):
        block = decode_picture_block(encode_picture_block(b""))
        assert block.image_data == b""

    def test_invalid_base64(self):
        with pytest.raises(FormatError):
            decode_picture_block("not base64!!")

    def test_truncated_block(self, image_bytes):
        raw = base64.b64decode(encode_picture_block(image_bytes))
        truncated = base64.b64encode(raw[:-10]).decode("ascii")
        with pytest.raises(FormatError):
            decode_picture_block(truncated)

    def test_short_header(self):
        with pytest.raises(FormatError):
            decode_picture_block(base64.b64encode(b"\x00\x00\x00\x03").decode("ascii"))
