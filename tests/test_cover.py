"""Test cover image download"""

import tempfile
from unittest.mock import Mock

import pytest
import requests

from oggify_tagger.core.exceptions import NetworkError, TrackIOError
from oggify_tagger.download import cover
from oggify_tagger.download.cover import create_session, download_cover_bytes, fetch_cover


COVER_URL = "https://covers.test/image/ab67616d"


@pytest.fixture
def temp_root(temp_dir, monkeypatch):
    """Redirect temporary files into a directory the test can inspect"""
    root = temp_dir / "tmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


class TestFetchCover:
    """Test the scoped cover download"""

    def test_downloads_into_temp_file(self, cover_session, image_bytes, temp_root):
        with fetch_cover(COVER_URL, session=cover_session) as cover_path:
            assert cover_path.read_bytes() == image_bytes
            assert temp_root in cover_path.parents

        assert not cover_path.exists()
        assert list(temp_root.iterdir()) == []

    def test_request_arguments(self, cover_session):
        with fetch_cover(COVER_URL, session=cover_session, timeout=12.5):
            pass

        cover_session.get.assert_called_once_with(COVER_URL, timeout=12.5, stream=True)

    def test_no_timeout_by_default(self, cover_session):
        with fetch_cover(COVER_URL, session=cover_session):
            pass

        assert cover_session.get.call_args.kwargs["timeout"] is None

    def test_http_error(self, response_factory, temp_root):
        session = Mock(spec=requests.Session)
        session.get.return_value = response_factory(b"Not Found", status_code=404, url=COVER_URL)

        with pytest.raises(NetworkError) as exc_info:
            with fetch_cover(COVER_URL, session=session):
                pytest.fail("body should not run")

        assert exc_info.value.status_code == 404
        assert exc_info.value.details["url"] == COVER_URL
        assert list(temp_root.iterdir()) == []

    def test_transport_error(self, temp_root):
        session = Mock(spec=requests.Session)
        session.get.side_effect = requests.ConnectionError("Name or service not known")

        with pytest.raises(NetworkError) as exc_info:
            with fetch_cover(COVER_URL, session=session):
                pass

        assert exc_info.value.status_code is None
        assert list(temp_root.iterdir()) == []

    def test_interrupted_body(self, response_factory, temp_root):
        response = response_factory(url=COVER_URL)
        response.raw = Mock(spec=["read", "close"])
        response.raw.read.side_effect = requests.ConnectionError("Connection reset by peer")
        session = Mock(spec=requests.Session)
        session.get.return_value = response

        with pytest.raises(NetworkError):
            with fetch_cover(COVER_URL, session=session):
                pass

        assert list(temp_root.iterdir()) == []

    def test_empty_body(self, response_factory):
        session = Mock(spec=requests.Session)
        session.get.return_value = response_factory(b"", url=COVER_URL)

        with fetch_cover(COVER_URL, session=session) as cover_path:
            assert cover_path.read_bytes() == b""

    def test_temp_file_removed_when_body_raises(self, cover_session, temp_root):
        with pytest.raises(RuntimeError):
            with fetch_cover(COVER_URL, session=cover_session):
                raise RuntimeError("caller failed")

        assert list(temp_root.iterdir()) == []

    def test_temp_storage_unavailable(self, cover_session, temp_dir, monkeypatch):
        monkeypatch.setattr(tempfile, "tempdir", str(temp_dir / "does-not-exist"))

        with pytest.raises(TrackIOError):
            with fetch_cover(COVER_URL, session=cover_session):
                pytest.fail("body should not run")

        cover_session.get.assert_not_called()

    def test_own_session_closed(self, monkeypatch, cover_session):
        monkeypatch.setattr(cover, "create_session", lambda *args: cover_session)

        with fetch_cover(COVER_URL):
            pass

        cover_session.close.assert_called_once()

    def test_caller_session_left_open(self, cover_session):
        with fetch_cover(COVER_URL, session=cover_session):
            pass

        cover_session.close.assert_not_called()


class TestCoverHelpers:
    """Test session creation and the bytes helper"""

    def test_create_session_user_agent(self):
        session = create_session("oggify-tests/1.0")
        try:
            assert session.headers["User-Agent"] == "oggify-tests/1.0"
        finally:
            session.close()

    def test_download_cover_bytes(self, cover_session, image_bytes):
        assert download_cover_bytes(COVER_URL, session=cover_session) == image_bytes
