"""
Vorbis comment reading, merging and writing for oggify-tagger.

The merge itself does not care how comments get in and out of a file, so
that part sits behind the CommentStore interface:

    CommentStore.read(path)  -> CommentSet   (full existing comment block)
    CommentStore.write(path, CommentSet)     (replaces the block entirely)

Implementations:
    MutagenCommentStore     - edits the block in-process with mutagen.
                              Works on any container mutagen exposes a
                              Vorbis comment block for (Ogg Vorbis, Ogg Opus,
                              FLAC, ...). Audio packets are left untouched.
    VorbisCommentToolStore  - drives the vorbiscomment executable from
                              vorbis-tools. The listing handed to the tool is
                              kept in a temporary directory that is removed
                              on every exit path.

Merge Rules (CommentMerger.merge):
    1. Read the existing comment set, preserving line order
    2. Drop every metadata_block_picture line (exact key match)
    3. Append the new textual lines, then the single new picture line
    4. Write the whole set back

Running the merge twice with the same picture never leaves two picture
lines behind.

Usage:
    from oggify_tagger.tagging.comments import CommentMerger, MutagenCommentStore

    merger = CommentMerger(MutagenCommentStore())
    merger.merge(Path("song.ogg"), tag_lines, build_picture_comment(image_bytes))
"""

import subprocess
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable

import mutagen
from mutagen._vorbis import VComment

from oggify_tagger.core.config import CommentsConfig
from oggify_tagger.core.exceptions import FormatError, TrackIOError
from oggify_tagger.core.logger import get_logger
from oggify_tagger.tagging.models import CommentSet
from oggify_tagger.tagging.picture import PICTURE_COMMENT_KEY

logger = get_logger(__name__)


class CommentStore(ABC):
    """Reads and writes the complete Vorbis comment set of a file."""

    @abstractmethod
    def read(self, path: Path) -> CommentSet:
        """
        Read every comment of the file, in stored order.

        Raises:
            TrackIOError: If the file does not exist or cannot be read.
            FormatError: If the file is not a Vorbis comment container.
        """

    @abstractmethod
    def write(self, path: Path, comments: CommentSet) -> None:
        """
        Replace the file's comments with exactly the given set.

        Raises:
            TrackIOError: If the file cannot be written.
            FormatError: If the file is not a Vorbis comment container
                         or a comment cannot be stored in it.
        """


def _require_file(path: Path) -> None:
    if not path.is_file():
        raise TrackIOError(
            f"Audio file not found: {path}",
            details={"file_path": str(path)}
        )


def _os_error_cause(error: Exception) -> OSError | None:
    """The OSError a mutagen error was converted from, if any."""
    if error.args and isinstance(error.args[0], OSError):
        return error.args[0]
    cause = error.__cause__ or error.__context__
    return cause if isinstance(cause, OSError) else None


class MutagenCommentStore(CommentStore):
    """
    CommentStore backed by mutagen.

    Keys are read back with their stored case. Comment bytes that are not
    valid UTF-8 come back with replacement characters (mutagen's default),
    so such a file can still be re-tagged.
    """

    def read(self, path: Path) -> CommentSet:
        audio = self._open(path)
        return CommentSet(list(audio.tags))

    def write(self, path: Path, comments: CommentSet) -> None:
        audio = self._open(path)

        audio.tags.clear()
        audio.tags.extend(comments.items())

        try:
            audio.save()
        except ValueError as e:
            # VComment.validate() rejects keys outside printable ASCII or with '='
            raise FormatError(
                f"Invalid comment for {path.name}: {e}",
                details={"file_path": str(path), "original_error": str(e)}
            ) from e
        except mutagen.MutagenError as e:
            # mutagen re-raises OSError from the file write as its own error type
            error_class = TrackIOError if _os_error_cause(e) is not None else FormatError
            raise error_class(
                f"Failed to write comments to {path.name}: {e}",
                details={"file_path": str(path), "original_error": str(e)}
            ) from e

        logger.debug(f"Wrote {len(comments)} comments to {path.name}")

    @staticmethod
    def _open(path: Path):
        """
        Open path with mutagen, checking it can hold Vorbis comments.

        Raises:
            TrackIOError: If the file is missing or unreadable.
            FormatError: If mutagen does not recognize the file, or the
                         container uses a different tag system (ID3, MP4...).
        """
        _require_file(path)

        try:
            audio = mutagen.File(path)
        except mutagen.MutagenError as e:
            if _os_error_cause(e) is not None:
                raise TrackIOError(
                    f"Failed to read {path.name}: {e}",
                    details={"file_path": str(path), "original_error": str(e)}
                ) from e
            raise FormatError(
                f"Not a valid audio container: {path.name}: {e}",
                details={"file_path": str(path), "original_error": str(e)}
            ) from e
        except OSError as e:
            raise TrackIOError(
                f"Failed to read {path.name}: {e}",
                details={"file_path": str(path), "original_error": str(e)}
            ) from e

        if audio is None:
            raise FormatError(
                f"Not a recognized audio container: {path.name}",
                details={"file_path": str(path)}
            )

        if audio.tags is None:
            # In memory only, nothing reaches disk before save()
            try:
                audio.add_tags()
            except mutagen.MutagenError as e:
                raise FormatError(
                    f"{type(audio).__name__} files cannot carry comments: {path.name}",
                    details={"file_path": str(path), "original_error": str(e)}
                ) from e

        if not isinstance(audio.tags, VComment):
            raise FormatError(
                f"{type(audio).__name__} files do not use Vorbis comments: {path.name}",
                details={"file_path": str(path), "container": type(audio).__name__}
            )

        return audio


class VorbisCommentToolStore(CommentStore):
    """
    CommentStore backed by the vorbiscomment command line tool.

    Both directions use --raw (UTF-8, no locale conversion) and --escapes,
    so values containing line breaks or backslashes survive the
    line-oriented listing format.

    Attributes:
        executable: Name or path of the vorbiscomment executable.
    """

    def __init__(self, executable: str = "vorbiscomment") -> None:
        self.executable = executable

    def read(self, path: Path) -> CommentSet:
        _require_file(path)
        result = self._run(["--list", "--raw", "--escapes", str(path)], path)

        # --escapes leaves "\n" as the only separator
        comments = CommentSet()
        for line in result.stdout.decode("utf-8", errors="replace").split("\n"):
            if not line:
                continue
            try:
                key, value = CommentSet.split_line(line)
            except ValueError as e:
                raise FormatError(
                    f"Unexpected {self.executable} output for {path.name}: {e}",
                    details={"file_path": str(path), "line": line}
                ) from e
            comments.append(key, unescape_value(value))
        return comments

    def write(self, path: Path, comments: CommentSet) -> None:
        _require_file(path)

        try:
            with tempfile.TemporaryDirectory(prefix="oggify_comments_") as temp_dir:
                comment_path = Path(temp_dir) / "comments.txt"
                with open(comment_path, "w", encoding="utf-8", newline="\n") as f:
                    for key, value in comments:
                        f.write(f"{key}={escape_value(value)}\n")

                self._run(
                    ["--write", "--raw", "--escapes", "--commentfile", str(comment_path), str(path)],
                    path
                )
        except OSError as e:
            raise TrackIOError(
                f"Failed to prepare comment listing for {path.name}: {e}",
                details={"file_path": str(path), "original_error": str(e)}
            ) from e

        logger.debug(f"Wrote {len(comments)} comments to {path.name} with {self.executable}")

    def _run(self, args: list[str], path: Path) -> subprocess.CompletedProcess:
        cmd = [self.executable, *args]
        try:
            result = subprocess.run(cmd, capture_output=True)
        except FileNotFoundError as e:
            raise TrackIOError(
                f"{self.executable} not found - install vorbis-tools or use the mutagen backend",
                details={"executable": self.executable, "original_error": str(e)}
            ) from e

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise FormatError(
                f"{self.executable} failed on {path.name}: {stderr or 'exit status ' + str(result.returncode)}",
                details={"file_path": str(path), "returncode": result.returncode, "stderr": stderr}
            )
        return result


_ESCAPES = {"\\": "\\\\", "\n": "\\n", "\r": "\\r", "\0": "\\0"}
_UNESCAPES = {"\\": "\\", "n": "\n", "r": "\r", "0": "\0"}


def escape_value(value: str) -> str:
    """Escape a comment value the way vorbiscomment --escapes expects."""
    return "".join(_ESCAPES.get(char, char) for char in value)


def unescape_value(value: str) -> str:
    """Reverse escape_value(). Unknown escapes are kept as written."""
    result = []
    chars = iter(value)
    for char in chars:
        if char != "\\":
            result.append(char)
            continue
        following = next(chars, "")
        if following in _UNESCAPES:
            result.append(_UNESCAPES[following])
        else:
            result.append(char + following)
    return "".join(result)


def get_comment_store(config: CommentsConfig | None = None) -> CommentStore:
    """
    Create the CommentStore selected in configuration.

    Args:
        config: Comments configuration. None means defaults (mutagen).
    """
    config = config or CommentsConfig()
    if config.backend == "vorbiscomment":
        return VorbisCommentToolStore(config.vorbiscomment_path)
    return MutagenCommentStore()


class CommentMerger:
    """
    Merges new tag lines and a cover picture into a file's comments.

    Attributes:
        store: CommentStore used to read and write the file's comments.

    Example:
        merger = CommentMerger(get_comment_store(config.comments))
        final = merger.merge(path, compose_tag_lines(metadata), picture_comment)
        assert final.count("metadata_block_picture") == 1
    """

    def __init__(self, store: CommentStore) -> None:
        self.store = store

    def merge(
        self,
        path: Path,
        tag_lines: Iterable[str],
        picture_comment: tuple[str, str]
    ) -> CommentSet:
        """
        Replace the file's picture and append new tags.

        Args:
            path: Target audio file.
            tag_lines: KEY=VALUE lines to append, in order.
            picture_comment: (key, value) of the encoded picture comment.

        Returns:
            The CommentSet that was written to the file.

        Raises:
            TrackIOError: If the file is missing or cannot be written.
            FormatError: If the file is not a Vorbis comment container.
        """
        comments = self.store.read(path)

        removed = comments.remove(PICTURE_COMMENT_KEY)
        if removed:
            logger.debug(f"Removed {removed} existing picture comment(s) from {path.name}")

        try:
            comments.extend_lines(tag_lines)
        except ValueError as e:
            raise FormatError(
                f"Invalid tag line for {path.name}: {e}",
                details={"file_path": str(path), "original_error": str(e)}
            ) from e

        key, value = picture_comment
        comments.append(key, value)

        self.store.write(path, comments)
        return comments


def merge_comments(
    path: Path,
    tag_lines: Iterable[str],
    picture_comment: tuple[str, str],
    store: CommentStore | None = None
) -> CommentSet:
    """
    Convenience function to merge without creating a CommentMerger.

    Args:
        path: Target audio file.
        tag_lines: KEY=VALUE lines to append.
        picture_comment: (key, value) of the encoded picture comment.
        store: CommentStore to use. Defaults to MutagenCommentStore.
    """
    return CommentMerger(store or MutagenCommentStore()).merge(path, tag_lines, picture_comment)
