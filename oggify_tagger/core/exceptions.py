"""
Exception classes for oggify-tagger.

This module defines all custom exceptions used throughout the tagger.
Every pipeline step raises one of these, so the driver can tell which
kind of failure stopped a run and report it without guessing.

Exception Hierarchy:
    TaggerError (base)
        InputError - A required invocation value is missing
        TrackIOError - File creation, write, tool or temp storage issues
        NetworkError - Cover image download issues
        FormatError - Target file is not a usable comment container
        ConfigError - Configuration file issues

None of these errors is retried. The first one raised aborts the run.
"""


class TaggerError(Exception):
    """
    Base exception for all oggify-tagger errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch every tagging failure with a single
    except clause.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., file path, URL).

    Example:
        try:
            merge_comments(path, lines, picture, store)
        except TaggerError as e:
            logger.error(f"Tagging failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'file_path': File involved in the error
                     - 'url': URL that caused the error
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class InputError(TaggerError):
    """
    Raised when a required invocation value is missing.

    The positional values (source id, title, album, destination and
    cover URL) are all required. A blank value counts as missing.

    Example:
        raise InputError(
            "Missing required value: destination",
            details={'field': 'destination'}
        )
    """
    pass


class TrackIOError(TaggerError):
    """
    Raised when a file or temporary resource cannot be created or written.

    Common causes:
        - Permission denied or disk full while writing the track
        - Target file missing when its comments are read
        - The vorbiscomment executable is not installed
        - Temporary storage for the cover image cannot be created

    Example:
        raise TrackIOError(
            "Failed to write track: disk full",
            details={'file_path': '/data/tracks/song.ogg'}
        )
    """
    pass


class NetworkError(TaggerError):
    """
    Raised when the cover image cannot be downloaded.

    Covers both transport failures (DNS, refused connection, reset)
    and responses with a non-success status code.

    Attributes:
        status_code: HTTP status code of the response, if one was received.

    Example:
        raise NetworkError(
            "Cover download failed with HTTP 404",
            details={'url': cover_url},
            status_code=404
        )
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        status_code: int | None = None
    ) -> None:
        """
        Initialize network error with the optional response status.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context.
            status_code: HTTP status of the failed response. None when the
                         request never produced a response.
        """
        super().__init__(message, details)
        self.status_code = status_code


class FormatError(TaggerError):
    """
    Raised when the target file cannot carry Vorbis comments.

    Common causes:
        - File is not an Ogg/FLAC container mutagen recognizes
        - Container headers are corrupted
        - vorbiscomment refused to list or write the file

    Example:
        raise FormatError(
            "Not a recognized comment container",
            details={'file_path': '/data/tracks/song.ogg'}
        )
    """
    pass


class ConfigError(TaggerError):
    """
    Raised when there's an issue with the configuration file.

    This is a CRITICAL error that stops the program before any
    pipeline step runs.

    Common causes:
        - Explicit config path does not exist
        - config.yaml has invalid YAML syntax
        - Invalid field values (e.g., unknown comment backend)

    Example:
        raise ConfigError(
            "'comments.backend' must be one of: mutagen, vorbiscomment",
            details={'field': 'comments.backend', 'value': 'ffmpeg'}
        )
    """
    pass
