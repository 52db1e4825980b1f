"""
Track stream persistence for oggify-tagger.

Writes the raw audio stream, exactly as received, to the destination
path. No transcoding, no validation: if the bytes are not a valid
container the comment merge will say so later.

Usage:
    from oggify_tagger.download.writer import write_track

    size = write_track(sys.stdin.buffer, Path("/data/tracks/song.ogg"))
"""

import shutil
from pathlib import Path
from typing import BinaryIO

from oggify_tagger.core.exceptions import TrackIOError
from oggify_tagger.core.logger import get_logger
from oggify_tagger.utils import ensure_directory

logger = get_logger(__name__)


WRITE_CHUNK_SIZE = 64 * 1024


def write_track(stream: BinaryIO, destination: Path, chunk_size: int = WRITE_CHUNK_SIZE) -> int:
    """
    Write a byte stream verbatim to destination.

    Args:
        stream: Readable binary stream, consumed until EOF.
        destination: Target file. Missing parent directories are created;
                     an existing file is overwritten.
        chunk_size: Read size used while copying.

    Returns:
        Number of bytes written.

    Raises:
        TrackIOError: If the directory or file cannot be created, or any
                      read/write fails (permissions, disk full, ...).
    """
    try:
        ensure_directory(destination.parent)
        with open(destination, "wb") as f:
            shutil.copyfileobj(stream, f, chunk_size)
            size = f.tell()
    except OSError as e:
        raise TrackIOError(
            f"Failed to write track to {destination}: {e}",
            details={"file_path": str(destination), "original_error": str(e)}
        ) from e

    logger.debug(f"Wrote {size} bytes to {destination.name}")
    return size
