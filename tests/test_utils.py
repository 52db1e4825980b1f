"""Test utilities and helpers"""

from oggify_tagger.utils import build_track_filename, ensure_directory, sanitize_filename


class TestHelpers:
    """Test helper functions"""

    def test_sanitize_filename(self):
        """Test filename sanitization"""
        assert sanitize_filename("AC/DC: Live?") == "AC_DC_ Live_"
        assert sanitize_filename('a<b>c"d|e*f') == "a_b_c_d_e_f"
        assert sanitize_filename("  .hidden. ") == "hidden"
        assert sanitize_filename("") == "Unknown"
        assert sanitize_filename("...") == "Unknown"
        assert sanitize_filename("tab\there") == "tab_here"

    def test_sanitize_filename_length(self):
        assert len(sanitize_filename("x" * 500)) == 200

    def test_build_track_filename(self):
        """Test track filename construction"""
        assert build_track_filename("One More Time", ["Daft Punk"]) == "One More Time - Daft Punk.ogg"
        assert build_track_filename("Song", ("A", "B")) == "Song - A, B.ogg"
        assert build_track_filename("Song", []) == "Song.ogg"
        assert build_track_filename("What?", ["A/B"], extension="opus") == "What_ - A_B.opus"

    def test_ensure_directory(self, temp_dir):
        target = temp_dir / "a" / "b"
        assert ensure_directory(target) == target
        assert target.is_dir()
        # Existing directory is fine
        ensure_directory(target)
