"""
Data models for track tagging.

This module defines the two structures every tagging step passes around:

    TrackMetadata - the descriptive fields a track is tagged with.
                    Frozen: built once from caller input, never modified.
    CommentSet    - a file's Vorbis comment lines. Loaded fresh for each
                    run, edited in memory, written back, then discarded.

Design Decisions:
    - Comment keys are kept with their exact case. Vorbis comment readers
      compare keys case-insensitively, but the merge only ever removes
      the exact key it writes.
    - A key may appear on several lines (one ARTIST line per artist).
      CommentSet is an ordered list of (key, value) pairs, not a dict.

Usage:
    from oggify_tagger.tagging.models import TrackMetadata, CommentSet

    metadata = TrackMetadata(
        source_id="spotify:track:abc",
        title="Song",
        album="Album",
        artists=("Artist1", "Artist2"),
    )

    comments = CommentSet.from_lines(["TITLE=Song", "ARTIST=Artist1"])
    comments.remove("metadata_block_picture")
"""

from dataclasses import dataclass
from typing import Iterable, Iterator


@dataclass(frozen=True)
class TrackMetadata:
    """
    Immutable descriptive fields of a track.

    Attributes:
        source_id: Identifier of the track at its source.
                   Example: "spotify:track:4cOdK2wGLETKBW3PvgPWqT"

        title: Track title.
               Example: "Bohemian Rhapsody"

        album: Album name.
               Example: "A Night at the Opera"

        artists: All artist names, in credit order. May be empty.
                 Example: ("Calvin Harris", "Dua Lipa")
    """

    source_id: str
    title: str
    album: str
    artists: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Accept any sequence from callers but store a tuple
        if not isinstance(self.artists, tuple):
            object.__setattr__(self, "artists", tuple(self.artists))


class CommentSet:
    """
    Ordered Vorbis comment lines of one file.

    Behaves like a multimap from exact-case key to an ordered list of
    values, while remembering the overall line order. Iterating yields
    (key, value) pairs in file order.

    Example:
        comments = CommentSet([("TITLE", "Song"), ("ARTIST", "A"), ("ARTIST", "B")])
        comments.get("ARTIST")   # ["A", "B"]
        comments.lines()         # ["TITLE=Song", "ARTIST=A", "ARTIST=B"]
    """

    def __init__(self, items: Iterable[tuple[str, str]] = ()) -> None:
        self._items: list[tuple[str, str]] = [(key, value) for key, value in items]

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "CommentSet":
        """
        Build a CommentSet from KEY=VALUE lines.

        The value is everything after the first '='.

        Raises:
            ValueError: If a line contains no '=' or has an empty key.
        """
        comment_set = cls()
        for line in lines:
            comment_set.append_line(line)
        return comment_set

    @staticmethod
    def split_line(line: str) -> tuple[str, str]:
        """Split a KEY=VALUE line into its key and value."""
        key, sep, value = line.partition("=")
        if not sep or not key:
            raise ValueError(f"Not a KEY=VALUE comment line: {line!r}")
        return key, value

    def append(self, key: str, value: str) -> None:
        """Append one comment at the end of the set."""
        self._items.append((key, value))

    def append_line(self, line: str) -> None:
        """Append one KEY=VALUE line at the end of the set."""
        self._items.append(self.split_line(line))

    def extend_lines(self, lines: Iterable[str]) -> None:
        """Append several KEY=VALUE lines, keeping their order."""
        for line in lines:
            self.append_line(line)

    def remove(self, key: str) -> int:
        """
        Remove every line whose key equals key exactly.

        Returns:
            Number of lines removed (0 if the key was absent).
        """
        kept = [(k, v) for k, v in self._items if k != key]
        removed = len(self._items) - len(kept)
        self._items = kept
        return removed

    def get(self, key: str) -> list[str]:
        """All values stored under key, in line order."""
        return [v for k, v in self._items if k == key]

    def count(self, key: str) -> int:
        return sum(1 for k, _ in self._items if k == key)

    def keys(self) -> list[str]:
        """Distinct keys in order of first appearance."""
        return list(dict.fromkeys(k for k, _ in self._items))

    def items(self) -> list[tuple[str, str]]:
        return list(self._items)

    def lines(self) -> list[str]:
        return [f"{k}={v}" for k, v in self._items]

    def copy(self) -> "CommentSet":
        return CommentSet(self._items)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return any(k == key for k, _ in self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CommentSet):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f"CommentSet({self._items!r})"
