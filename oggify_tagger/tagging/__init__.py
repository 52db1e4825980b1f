"""
Tagging module for oggify-tagger.

This module turns track fields and a cover image into Vorbis comments:
    - models: TrackMetadata and CommentSet
    - tags: textual KEY=VALUE lines (SPOTIFY_ID, TITLE, ALBUM, ARTIST)
    - picture: METADATA_BLOCK_PICTURE encoding/decoding
    - comments: comment stores and the picture-replacing merge

Usage:
    from oggify_tagger.tagging import (
        TrackMetadata, compose_tag_lines, build_picture_comment,
        CommentMerger, get_comment_store
    )
"""

from oggify_tagger.tagging.comments import (
    CommentMerger,
    CommentStore,
    MutagenCommentStore,
    VorbisCommentToolStore,
    get_comment_store,
    merge_comments,
)
from oggify_tagger.tagging.models import CommentSet, TrackMetadata
from oggify_tagger.tagging.picture import (
    PICTURE_COMMENT_KEY,
    PictureBlock,
    build_picture_comment,
    decode_picture_block,
    encode_picture_block,
)
from oggify_tagger.tagging.tags import compose_tag_lines

__all__ = [
    # Models
    "TrackMetadata",
    "CommentSet",
    # Tags
    "compose_tag_lines",
    # Picture
    "PICTURE_COMMENT_KEY",
    "PictureBlock",
    "build_picture_comment",
    "decode_picture_block",
    "encode_picture_block",
    # Comments
    "CommentStore",
    "MutagenCommentStore",
    "VorbisCommentToolStore",
    "CommentMerger",
    "get_comment_store",
    "merge_comments",
]
