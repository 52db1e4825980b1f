"""Test configuration and fixtures"""

import io
import logging
import struct
import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest
import requests
from mutagen.ogg import OggPage

from oggify_tagger.core.exceptions import TrackIOError
from oggify_tagger.core.logger import shutdown_logging
from oggify_tagger.tagging.comments import CommentStore
from oggify_tagger.tagging.models import CommentSet, TrackMetadata


VENDOR = b"oggify-tests"

# Stand-in for a JPEG: SOI marker, filler, EOI marker
SAMPLE_IMAGE = b"\xff\xd8\xff\xe0" + bytes(range(256)) + bytes(range(238)) + b"\xff\xd9"


def build_ogg_vorbis(comments=()):
    """
    Build the bytes of a minimal Ogg Vorbis file mutagen can open.

    Three pages: identification header, comment + setup headers, and one
    final "audio" page so the stream has a length.
    """
    ident = (
        b"\x01vorbis"
        + struct.pack("<IBIiiiBB", 0, 2, 44100, 0, 128000, 0, 0xB8, 1)
    )

    comment = b"\x03vorbis" + struct.pack("<I", len(VENDOR)) + VENDOR
    comment += struct.pack("<I", len(comments))
    for line in comments:
        data = line.encode("utf-8")
        comment += struct.pack("<I", len(data)) + data
    comment += b"\x01"

    setup = b"\x05vorbis" + b"\x00" * 32

    first = OggPage()
    first.serial = 1
    first.sequence = 0
    first.first = True
    first.packets = [ident]

    headers = OggPage()
    headers.serial = 1
    headers.sequence = 1
    headers.packets = [comment, setup]

    audio = OggPage()
    audio.serial = 1
    audio.sequence = 2
    audio.position = 44100
    audio.last = True
    audio.packets = [b"\x00" * 64]

    return first.write() + headers.write() + audio.write()


class InMemoryCommentStore(CommentStore):
    """CommentStore keeping comments in a dict, keyed by path."""

    def __init__(self, initial=None):
        self.files = {Path(k): CommentSet(v) for k, v in (initial or {}).items()}
        self.reads = []
        self.writes = []

    def read(self, path):
        self.reads.append(Path(path))
        if not Path(path).exists() and Path(path) not in self.files:
            raise TrackIOError(f"Audio file not found: {path}")
        return self.files.get(Path(path), CommentSet()).copy()

    def write(self, path, comments):
        self.writes.append(Path(path))
        self.files[Path(path)] = comments.copy()


def make_response(content=b"", status_code=200, url="https://covers.test/cover.jpg"):
    """Real requests.Response backed by an in-memory body."""
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response.raw = io.BytesIO(content)
    return response


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def ogg_bytes():
    """Bytes of a minimal untagged Ogg Vorbis file"""
    return build_ogg_vorbis()


@pytest.fixture
def ogg_file(temp_dir):
    """Minimal Ogg Vorbis file with a couple of existing comments"""
    path = temp_dir / "existing.ogg"
    path.write_bytes(build_ogg_vorbis(["ENCODER=test", "GENRE=Rock"]))
    return path


@pytest.fixture
def memory_store():
    """In-memory comment store"""
    return InMemoryCommentStore()


@pytest.fixture
def sample_metadata():
    """Sample track metadata for testing"""
    return TrackMetadata(
        source_id="spotify:track:4cOdK2wGLETKBW3PvgPWqT",
        title="Test Song",
        album="Test Album",
        artists=("Artist One", "Artist Two"),
    )


@pytest.fixture
def image_bytes():
    """Sample cover image bytes"""
    return SAMPLE_IMAGE


@pytest.fixture
def cover_session(image_bytes):
    """Mocked requests session serving the sample cover"""
    session = Mock(spec=requests.Session)
    session.get.side_effect = lambda url, **kwargs: make_response(image_bytes, url=url)
    return session


@pytest.fixture
def make_store():
    """Factory for in-memory comment stores with initial content"""
    return InMemoryCommentStore


@pytest.fixture
def response_factory():
    """Factory for in-memory requests responses"""
    return make_response


@pytest.fixture
def clean_logging():
    """Restore the root logger after tests that configure it"""
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    yield
    shutdown_logging()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
