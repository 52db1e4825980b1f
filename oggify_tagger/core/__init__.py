"""
Core module for oggify-tagger.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes, one per failure kind
    - config: Optional configuration loading and validation
    - logger: Logging system with console and file outputs

Usage:
    from oggify_tagger.core import (
        Config, load_config,
        setup_logging, get_logger,
        TaggerError, NetworkError, FormatError
    )
"""

from oggify_tagger.core.config import (
    CommentsConfig,
    Config,
    CoverConfig,
    LoggingConfig,
    load_config,
)
from oggify_tagger.core.exceptions import (
    ConfigError,
    FormatError,
    InputError,
    NetworkError,
    TaggerError,
    TrackIOError,
)
from oggify_tagger.core.logger import (
    get_logger,
    log_tagging_failure,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "CoverConfig",
    "CommentsConfig",
    "LoggingConfig",
    "load_config",
    # Exceptions
    "TaggerError",
    "InputError",
    "TrackIOError",
    "NetworkError",
    "FormatError",
    "ConfigError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_tagging_failure",
    "shutdown_logging",
]
