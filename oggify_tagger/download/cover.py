"""
Cover image download for oggify-tagger.

Fetches the cover image into a temporary file that only lives as long
as the caller's with-block. The file is removed on every exit path,
including when the download itself fails halfway.

Behavior:
    - No retries: the first transport error or non-2xx status is raised
    - No timeout unless one is configured: the request blocks until the
      transport resolves or errors
    - An empty response body gives an empty file, not an error

Dependencies:
    - requests: HTTP client

Usage:
    from oggify_tagger.download.cover import fetch_cover

    with fetch_cover("https://i.scdn.co/image/ab67616d...") as cover_path:
        image_bytes = cover_path.read_bytes()
    # cover_path no longer exists here
"""

import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import requests

from oggify_tagger.core.config import DEFAULT_USER_AGENT
from oggify_tagger.core.exceptions import NetworkError, TrackIOError
from oggify_tagger.core.logger import get_logger

logger = get_logger(__name__)


DOWNLOAD_CHUNK_SIZE = 64 * 1024


def create_session(user_agent: str = DEFAULT_USER_AGENT) -> requests.Session:
    """Create a requests session sending the configured User-Agent."""
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent})
    return session


@contextmanager
def fetch_cover(
    url: str,
    session: requests.Session | None = None,
    timeout: float | None = None
) -> Iterator[Path]:
    """
    Download a cover image into a scoped temporary file.

    Args:
        url: URL of the cover image.
        session: requests session to use. A new one is created (and
                 closed afterwards) when None.
        timeout: Request timeout in seconds, None for no timeout.

    Yields:
        Path of the temporary file holding the downloaded bytes.

    Raises:
        NetworkError: On any transport failure or non-success status.
        TrackIOError: If the temporary file cannot be created or written.
    """
    owns_session = session is None
    if session is None:
        session = create_session()

    try:
        try:
            temp_storage = tempfile.TemporaryDirectory(prefix="oggify_cover_")
        except OSError as e:
            raise TrackIOError(
                f"Failed to create temporary storage for cover: {e}",
                details={"url": url, "original_error": str(e)}
            ) from e

        with temp_storage as temp_dir:
            cover_path = Path(temp_dir) / "cover.img"
            size = _download_to(session, url, cover_path, timeout)
            logger.debug(f"Downloaded cover ({size} bytes) from {url}")
            yield cover_path
    finally:
        if owns_session:
            session.close()


def _download_to(
    session: requests.Session,
    url: str,
    destination: Path,
    timeout: float | None
) -> int:
    """Stream url into destination and return the number of bytes written."""
    try:
        response = session.get(url, timeout=timeout, stream=True)
    except requests.RequestException as e:
        raise NetworkError(
            f"Cover download failed: {e}",
            details={"url": url, "original_error": str(e)}
        ) from e

    with response:
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise NetworkError(
                f"Cover download failed with HTTP {response.status_code}",
                details={"url": url, "status_code": response.status_code},
                status_code=response.status_code
            ) from e

        size = 0
        try:
            with open(destination, "wb") as f:
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
                        size += len(chunk)
        except requests.RequestException as e:
            raise NetworkError(
                f"Cover download interrupted: {e}",
                details={"url": url, "bytes_received": size, "original_error": str(e)}
            ) from e
        except OSError as e:
            raise TrackIOError(
                f"Failed to store cover image: {e}",
                details={"url": url, "file_path": str(destination), "original_error": str(e)}
            ) from e

    return size


def download_cover_bytes(
    url: str,
    session: requests.Session | None = None,
    timeout: float | None = None
) -> bytes:
    """
    Convenience function returning the cover bytes directly.

    Raises:
        NetworkError: On any transport failure or non-success status.
        TrackIOError: If the temporary file cannot be created or written.
    """
    with fetch_cover(url, session=session, timeout=timeout) as cover_path:
        return cover_path.read_bytes()
