"""
Textual tag composition for oggify-tagger.

Turns TrackMetadata into the ordered KEY=VALUE comment lines that end
up in the track's Vorbis comment block.

Tag Mapping:
    TrackMetadata field  -> Vorbis comment key
    -------------------     ------------------
    source_id            -> SPOTIFY_ID
    title                -> TITLE
    album                -> ALBUM
    artists[i]           -> ARTIST (one line per artist, in order)

The comment listing is line-oriented, so artist names are flattened to
a single line: every line break becomes one space. The escaped two-character
sequence backslash-n, which some sources deliver instead of a real
newline, is flattened the same way.

Usage:
    from oggify_tagger.tagging.tags import compose_tag_lines

    lines = compose_tag_lines(metadata)
    # ["SPOTIFY_ID=spotify:track:abc", "TITLE=Song", "ALBUM=Album",
    #  "ARTIST=Artist1", "ARTIST=Artist2"]
"""

import re

from oggify_tagger.tagging.models import TrackMetadata


SOURCE_ID_KEY = "SPOTIFY_ID"
TITLE_KEY = "TITLE"
ALBUM_KEY = "ALBUM"
ARTIST_KEY = "ARTIST"

# CRLF first so it collapses into one space, then lone CR/LF, then "\n" escapes
_LINE_BREAK_PATTERN = re.compile(r"\r\n|\r|\n|\\n")


def flatten_value(value: str) -> str:
    """Replace each line break sequence in value with a single space."""
    return _LINE_BREAK_PATTERN.sub(" ", value)


def compose_tag_lines(metadata: TrackMetadata) -> list[str]:
    """
    Build the textual comment lines for a track.

    Args:
        metadata: Track fields to tag with.

    Returns:
        Lines in this order: SPOTIFY_ID, TITLE, ALBUM, then one ARTIST
        line per artist. An empty artist list gives no ARTIST lines.

    Example:
        compose_tag_lines(TrackMetadata("id", "Song", "Album", ("Artist\\nOne",)))
        # ["SPOTIFY_ID=id", "TITLE=Song", "ALBUM=Album", "ARTIST=Artist One"]
    """
    lines = [
        f"{SOURCE_ID_KEY}={metadata.source_id}",
        f"{TITLE_KEY}={metadata.title}",
        f"{ALBUM_KEY}={metadata.album}",
    ]
    lines.extend(f"{ARTIST_KEY}={flatten_value(artist)}" for artist in metadata.artists)
    return lines
