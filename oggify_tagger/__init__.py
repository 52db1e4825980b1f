"""
oggify-tagger: Write and tag Ogg Vorbis streams with track metadata and cover art.

This package takes a raw Ogg Vorbis byte stream (as produced by a
streaming downloader), stores it at a destination path and attaches the
track's identity as Vorbis comments, including an embedded front cover.

Architecture:
    Tagging one track is a fixed, fail-fast sequence of steps
    (see pipeline.py):

    STEP 1 (download/writer): Write the stream verbatim to disk
    STEP 2 (tagging/tags): Compose SPOTIFY_ID, TITLE, ALBUM, ARTIST lines
        - One ARTIST line per artist, in credit order
        - Line breaks inside artist names become single spaces
    STEP 3 (download/cover): Download the cover image
        - Into a temporary file removed on every exit path
    STEP 4 (tagging/picture): Encode the METADATA_BLOCK_PICTURE value
        - Front cover, given MIME type, empty description, 0 dimensions
        - Base64 without line wrapping
    STEP 5 (tagging/comments): Merge comments into the file
        - Existing comments kept in order
        - Any previous metadata_block_picture dropped
        - New lines appended, then the new picture

Modules:
    core/       - Configuration, logging, exceptions
    tagging/    - Comment model, tag lines, picture block, comment stores
    download/   - Track stream writer and cover download
    utils/      - Filesystem helpers
    pipeline.py - Step sequencing and per-step results
    cli.py      - Command-line interface

Usage:
    Command Line:
        ... | tag-ogg ID "Title" "Album" song.ogg "https://..." "Artist"

    Python API:
        from oggify_tagger import TagPipeline, TagRequest, load_config

        config = load_config()
        request = TagRequest(
            source_id="spotify:track:abc",
            title="Song",
            album="Album",
            destination=Path("song.ogg"),
            cover_url="https://i.scdn.co/image/...",
            artists=("Artist",),
        )
        with open("raw.ogg", "rb") as stream:
            result = TagPipeline.from_config(config).run(request, stream)
        result.raise_for_failure()
"""

__version__ = "0.1.0"

from oggify_tagger.core import Config, TaggerError, load_config, setup_logging
from oggify_tagger.pipeline import PipelineResult, StepResult, TagPipeline, TagRequest

__all__ = [
    "__version__",
    "Config",
    "TaggerError",
    "load_config",
    "setup_logging",
    "TagPipeline",
    "TagRequest",
    "PipelineResult",
    "StepResult",
]
