"""
METADATA_BLOCK_PICTURE encoding for Vorbis comments.

Ogg containers have no native picture block, so cover art is stored as
a Vorbis comment whose value is the base64 text of a FLAC picture block.
See: https://xiph.org/flac/format.html#metadata_block_picture

Block Layout (all integers 32-bit big-endian):
    picture type          3 (front cover)
    MIME type length      n
    MIME type             n bytes
    description length    0
    description           (empty)
    width                 0 (unknown)
    height                0 (unknown)
    color depth           0 (unknown)
    color count           0 (unknown)
    picture data length   len(image bytes)
    picture data          image bytes

mutagen.flac.Picture serializes exactly this layout, so the block is
built and parsed through it rather than packed by hand.

Usage:
    from oggify_tagger.tagging.picture import build_picture_comment

    key, value = build_picture_comment(image_bytes, "image/jpeg")
    # key == "metadata_block_picture", value is base64 text
"""

import base64
import binascii
import struct
from dataclasses import dataclass

from mutagen.flac import Picture, error as FLACError
from mutagen.id3 import PictureType

from oggify_tagger.core.exceptions import FormatError


PICTURE_COMMENT_KEY = "metadata_block_picture"
DEFAULT_MIME_TYPE = "image/jpeg"
FRONT_COVER = int(PictureType.COVER_FRONT)


@dataclass(frozen=True)
class PictureBlock:
    """
    One METADATA_BLOCK_PICTURE structure.

    The defaults describe what this tool always writes: a front cover with
    no description and unknown geometry.

    Attributes:
        image_data: Raw image bytes, embedded unchanged.
        mime_type: MIME type of image_data.
        picture_type: FLAC picture type (3 = front cover).
        description: Picture description.
        width, height, color_depth, color_count: Geometry (0 = unknown).
    """

    image_data: bytes
    mime_type: str = DEFAULT_MIME_TYPE
    picture_type: int = FRONT_COVER
    description: str = ""
    width: int = 0
    height: int = 0
    color_depth: int = 0
    color_count: int = 0

    def to_picture(self) -> Picture:
        """Convert to a mutagen Picture ready for serialization."""
        picture = Picture()
        picture.type = self.picture_type
        picture.mime = self.mime_type
        picture.desc = self.description
        picture.width = self.width
        picture.height = self.height
        picture.depth = self.color_depth
        picture.colors = self.color_count
        picture.data = self.image_data
        return picture

    @classmethod
    def from_picture(cls, picture: Picture) -> "PictureBlock":
        return cls(
            image_data=bytes(picture.data),
            mime_type=picture.mime,
            picture_type=int(picture.type),
            description=picture.desc,
            width=picture.width,
            height=picture.height,
            color_depth=picture.depth,
            color_count=picture.colors,
        )

    def serialize(self) -> bytes:
        """Binary block, every length field equal to the bytes that follow it."""
        return self.to_picture().write()

    def encode(self) -> str:
        """Base64 text of the binary block, as stored in the comment value."""
        return base64.b64encode(self.serialize()).decode("ascii")


def encode_picture_block(image_bytes: bytes, mime_type: str = DEFAULT_MIME_TYPE) -> str:
    """
    Encode an image as the value of a metadata_block_picture comment.

    Pure and deterministic. Zero-length image_bytes still produce a
    structurally valid block whose data length is 0.

    Args:
        image_bytes: Raw image file content.
        mime_type: MIME type of the image. Defaults to "image/jpeg".

    Returns:
        Base64 text of the serialized front-cover picture block.
    """
    return PictureBlock(image_data=bytes(image_bytes), mime_type=mime_type).encode()


def build_picture_comment(
    image_bytes: bytes,
    mime_type: str = DEFAULT_MIME_TYPE
) -> tuple[str, str]:
    """Return the (key, value) pair of the encoded picture comment."""
    return PICTURE_COMMENT_KEY, encode_picture_block(image_bytes, mime_type)


def decode_picture_block(encoded: str) -> PictureBlock:
    """
    Parse the value of a metadata_block_picture comment.

    Args:
        encoded: Base64 text as stored in the comment.

    Returns:
        The decoded PictureBlock.

    Raises:
        FormatError: If the text is not base64 or the block is truncated.
    """
    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise FormatError(
            f"Picture comment is not valid base64: {e}",
            details={"original_error": str(e)}
        ) from e

    try:
        picture = Picture(raw)
    except (FLACError, struct.error) as e:
        raise FormatError(
            f"Malformed picture block: {e}",
            details={"block_length": len(raw), "original_error": str(e)}
        ) from e

    return PictureBlock.from_picture(picture)
