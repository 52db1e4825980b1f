"""
Configuration management for oggify-tagger.

This module handles loading, validating, and providing access to the
optional configuration stored in config.yaml.

The configuration file contains:
    - Cover picture settings (MIME type, HTTP user agent, timeout)
    - Comment backend selection (mutagen or the vorbiscomment tool)
    - Logging settings (log file directory, console level)

Configuration File Location:
    By default config.yaml is looked up in the current working directory.
    Unlike an explicit --config path, the default file may be absent,
    in which case every setting takes its default value.

Example config.yaml:
    cover:
      mime_type: "image/jpeg"
      user_agent: "oggify-tagger/0.1.0"
      timeout: null  # No timeout: block until the transport resolves

    comments:
      backend: "mutagen"  # or "vorbiscomment"
      vorbiscomment_path: "vorbiscomment"

    logging:
      directory: null  # Set to a path to also write log files
      level: "INFO"
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from oggify_tagger.core.exceptions import ConfigError


# Default configuration file name (looked up in current working directory)
CONFIG_FILENAME = "config.yaml"

DEFAULT_MIME_TYPE = "image/jpeg"
DEFAULT_USER_AGENT = "oggify-tagger/0.1.0"

COMMENT_BACKENDS = ("mutagen", "vorbiscomment")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class CoverConfig:
    """
    Cover image download and embedding configuration.

    Attributes:
        mime_type: MIME type written into the picture block.
                   The cover is embedded as-is, so this should match
                   what the cover URL serves. Default: "image/jpeg".
        user_agent: User-Agent header sent with the cover request.
        timeout: Request timeout in seconds, or None for no timeout.
    """
    mime_type: str = DEFAULT_MIME_TYPE
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float | None = None


@dataclass(frozen=True)
class CommentsConfig:
    """
    Comment read/write backend configuration.

    Attributes:
        backend: "mutagen" edits the comment block in-process.
                 "vorbiscomment" shells out to the vorbis-tools executable.
        vorbiscomment_path: Executable name or path used by the
                            "vorbiscomment" backend.
    """
    backend: str = "mutagen"
    vorbiscomment_path: str = "vorbiscomment"


@dataclass(frozen=True)
class LoggingConfig:
    """
    Logging configuration.

    Attributes:
        directory: Directory for log files, or None for console-only logging.
        level: Console log level name.
    """
    directory: Path | None = None
    level: str = "INFO"


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    Created by load_config() and treated as immutable (frozen dataclass).
    Config() with no arguments is the all-defaults configuration.

    Attributes:
        cover: Cover image settings.
        comments: Comment backend settings.
        logging: Logging settings.

    Example:
        config = load_config()
        print(f"Embedding covers as {config.cover.mime_type}")
        print(f"Using the {config.comments.backend} backend")
    """
    cover: CoverConfig = field(default_factory=CoverConfig)
    comments: CommentsConfig = field(default_factory=CommentsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from config.yaml.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for config.yaml in current working directory
                     and falls back to defaults when it is not there.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If an explicit config file is not found, the file has
                     invalid YAML syntax, or contains invalid values.

    Behavior:
        1. Locate config file (explicit path or CWD/config.yaml)
        2. Return defaults if the implicit file does not exist
        3. Read and parse YAML content (an empty file means defaults)
        4. Validate and extract each section with defaults applied
        5. Create and return frozen Config object
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    if not config_path.exists():
        if explicit:
            raise ConfigError(
                f"Configuration file not found: {config_path}",
                details={"file_path": str(config_path)}
            )
        return Config()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    if raw_config is None:
        return Config()

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    return Config(
        cover=_parse_cover_config(_get_section(raw_config, "cover")),
        comments=_parse_comments_config(_get_section(raw_config, "comments")),
        logging=_parse_logging_config(_get_section(raw_config, "logging"))
    )


def _get_section(raw_config: dict[str, Any], name: str) -> dict[str, Any]:
    """Return an optional section, checking it is a dictionary when present."""
    section = raw_config.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(
            f"Section '{name}' must be a dictionary",
            details={"section": name}
        )
    return section


def _parse_cover_config(cover_section: dict[str, Any]) -> CoverConfig:
    """
    Parse and validate the cover configuration section.

    Raises:
        ConfigError: If mime_type or user_agent is not a non-empty string,
                     or timeout is not a positive number or null.
    """
    defaults = CoverConfig()

    mime_type = cover_section.get("mime_type", defaults.mime_type)
    if not isinstance(mime_type, str) or not mime_type.strip():
        raise ConfigError(
            "'cover.mime_type' must be a non-empty string",
            details={"field": "cover.mime_type"}
        )

    user_agent = cover_section.get("user_agent", defaults.user_agent)
    if not isinstance(user_agent, str) or not user_agent.strip():
        raise ConfigError(
            "'cover.user_agent' must be a non-empty string",
            details={"field": "cover.user_agent"}
        )

    timeout = cover_section.get("timeout")
    if timeout is not None:
        # bool is an int subclass, reject it explicitly
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigError(
                "'cover.timeout' must be a positive number or null",
                details={"field": "cover.timeout", "value": timeout}
            )
        timeout = float(timeout)

    return CoverConfig(
        mime_type=mime_type.strip(),
        user_agent=user_agent.strip(),
        timeout=timeout
    )


def _parse_comments_config(comments_section: dict[str, Any]) -> CommentsConfig:
    """
    Parse and validate the comments configuration section.

    Raises:
        ConfigError: If backend is unknown or vorbiscomment_path is empty.
    """
    defaults = CommentsConfig()

    backend = comments_section.get("backend", defaults.backend)
    if backend not in COMMENT_BACKENDS:
        raise ConfigError(
            f"'comments.backend' must be one of: {', '.join(COMMENT_BACKENDS)}",
            details={"field": "comments.backend", "value": backend}
        )

    tool_path = comments_section.get("vorbiscomment_path", defaults.vorbiscomment_path)
    if not isinstance(tool_path, str) or not tool_path.strip():
        raise ConfigError(
            "'comments.vorbiscomment_path' must be a non-empty string",
            details={"field": "comments.vorbiscomment_path"}
        )

    return CommentsConfig(backend=backend, vorbiscomment_path=tool_path.strip())


def _parse_logging_config(logging_section: dict[str, Any]) -> LoggingConfig:
    """
    Parse and validate the logging configuration section.

    Expands ~ in the log directory. Does NOT create the directory
    (setup_logging() does that).

    Raises:
        ConfigError: If directory is not a string or level is unknown.
    """
    directory = None
    raw_directory = logging_section.get("directory")
    if raw_directory is not None:
        if not isinstance(raw_directory, str) or not raw_directory.strip():
            raise ConfigError(
                "'logging.directory' must be a non-empty string or null",
                details={"field": "logging.directory"}
            )
        directory = Path(raw_directory.strip()).expanduser().resolve()

    level = logging_section.get("level", "INFO")
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        raise ConfigError(
            f"'logging.level' must be one of: {', '.join(LOG_LEVELS)}",
            details={"field": "logging.level", "value": level}
        )

    return LoggingConfig(directory=directory, level=level.upper())
