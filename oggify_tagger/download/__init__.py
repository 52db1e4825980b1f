"""
Download module for oggify-tagger.

Handles the two steps that put bytes on disk:
    - writer: persist the raw audio stream to the destination path
    - cover: fetch the cover image into a scoped temporary file

Usage:
    from oggify_tagger.download import write_track, fetch_cover

    write_track(stream, destination)
    with fetch_cover(cover_url) as cover_path:
        image_bytes = cover_path.read_bytes()
"""

from oggify_tagger.download.cover import (
    create_session,
    download_cover_bytes,
    fetch_cover,
)
from oggify_tagger.download.writer import write_track

__all__ = [
    "create_session",
    "download_cover_bytes",
    "fetch_cover",
    "write_track",
]
