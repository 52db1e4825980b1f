"""
Utility functions for oggify-tagger.

Small filesystem helpers shared by the download and pipeline modules.

Functions:
    ensure_directory: Create a directory (and parents) if missing
    sanitize_filename: Make a string safe to use as a filename
    build_track_filename: "{title} - {artist1, artist2}.{extension}"
"""

import re
from pathlib import Path
from typing import Sequence


# Characters that are invalid in filenames on various operating systems
_INVALID_CHARS_PATTERN = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

# Maximum filename length (conservative for cross-platform compatibility)
_MAX_FILENAME_LENGTH = 200


def ensure_directory(path: Path) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Path to the directory.

    Returns:
        The same path (for chaining).

    Raises:
        OSError: If directory cannot be created (permissions, etc.)
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def sanitize_filename(name: str) -> str:
    """
    Sanitize a string for use in a filename.

    Behavior:
        - Replaces invalid characters (and control characters) with underscores
        - Strips leading/trailing whitespace and dots
        - Truncates to maximum length
        - Returns "Unknown" if result is empty

    Example:
        sanitize_filename("AC/DC: Live?")  # "AC_DC_ Live_"
    """
    if not name:
        return "Unknown"

    result = _INVALID_CHARS_PATTERN.sub("_", name)

    # Dots at start can hide files on Unix
    result = result.strip(" .")

    if len(result) > _MAX_FILENAME_LENGTH:
        result = result[:_MAX_FILENAME_LENGTH].rstrip(" .")

    return result if result else "Unknown"


def build_track_filename(title: str, artists: Sequence[str], extension: str = "ogg") -> str:
    """
    Build the filename a track is saved under inside a directory.

    Args:
        title: Track title.
        artists: Artist names, joined with ", ".
        extension: File extension without dot.

    Example:
        build_track_filename("One More Time", ["Daft Punk"])
        # "One More Time - Daft Punk.ogg"
    """
    stem = title
    if artists:
        stem = f"{title} - {', '.join(artists)}"
    return f"{sanitize_filename(stem)}.{extension}"
