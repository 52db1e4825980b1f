"""
Logging configuration for oggify-tagger.

This module sets up the logging system with multiple outputs:
    - Console: Colored, tqdm-compatible output (always on)
    - log_full_{timestamp}.log: Complete log of all events (DEBUG and above)
    - log_errors_{timestamp}.log: Only ERROR and CRITICAL level messages
    - tag_failures_{timestamp}.log: Destinations that failed, with the failing step

File outputs are only created when a log directory is configured
(logging.directory in config.yaml or --log-dir on the command line).
Each run creates new files with a unique timestamp.

Usage:
    from oggify_tagger.core.logger import setup_logging, get_logger

    setup_logging(log_dir)  # Call once at startup
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Writing track")
    log_tagging_failure(logger, destination, "fetch_cover", "HTTP 404")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

from tqdm import tqdm

from oggify_tagger.core.exceptions import ConfigError


# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    WHITE = "\033[37m"
    BOLD = "\033[1m"


class ColoredConsoleFormatter(logging.Formatter):
    """
    Custom formatter that adds colors to console output.

    Colors:
        - DEBUG: Blue
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Bold Red
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.BLUE,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as '<colored LEVEL>: message'."""
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        colored_levelname = f"{color}{record.levelname}{Colors.RESET}"
        return f"{colored_levelname}: {record.getMessage()}"


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes to console without breaking tqdm progress bars.

    Uses tqdm.write(), which places messages above any active progress
    bar instead of tearing through it.

    Attributes:
        stream: The output stream (defaults to sys.stderr).
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        """
        Initialize the tqdm-compatible handler.

        Args:
            stream: Output stream for log messages. None means whatever
                    sys.stderr is at emit time.
        """
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream or sys.stderr)
        except Exception:
            self.handleError(record)


class TagFailureHandler(logging.Handler):
    """
    Handler that captures tagging failures for the failure report file.

    Writes a simple, human-readable entry per failed destination:

        /data/tracks/Song - Artist.ogg
        step: fetch_cover
        error: Cover download failed with HTTP 404

    Only records carrying the 'failed_destination' extra field are written.
    Use log_tagging_failure() to produce them.

    Attributes:
        report_path: Path of the report file.
        report_file: Open file handle, or None before open()/after close().
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """Open the report file for writing (overwrites existing content)."""
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        destination = getattr(record, "failed_destination", None)
        if destination is None or self.report_file is None:
            return

        step = getattr(record, "failed_step", "unknown")
        error_message = getattr(record, "failed_error", record.getMessage())

        try:
            self.acquire()
            try:
                self.report_file.write(f"{destination}\n")
                self.report_file.write(f"step: {step}\n")
                self.report_file.write(f"error: {error_message}\n\n")
                self.report_file.flush()
            finally:
                self.release()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """Close the report file handle. Safe to call multiple times."""
        if self.report_file is not None:
            self.report_file.close()
            self.report_file = None
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """Filter that only allows ERROR and CRITICAL level records."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(log_dir: Path | None = None, level: str = "INFO") -> None:
    """
    Configure the logging system for the application.

    This function should be called ONCE at application startup, after
    the configuration is loaded but before any pipeline step runs.

    Args:
        log_dir: Directory where log files will be created, created if
                 missing. None means console output only.
        level: Console level name ("DEBUG", "INFO", ...).

    Behavior:
        1. Configure root logger level to DEBUG and drop existing handlers
        2. Add the colored TqdmLoggingHandler at the requested level
        3. If log_dir is given:
           - log_full_{timestamp}.log: DEBUG and above, timestamped format
           - log_errors_{timestamp}.log: ERROR and above (ErrorOnlyFilter)
           - tag_failures_{timestamp}.log: failure report (TagFailureHandler)

    Raises:
        ConfigError: If log_dir or one of the log files cannot be created.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    if log_dir is None:
        return

    try:
        _add_file_handlers(root_logger, log_dir)
    except OSError as e:
        raise ConfigError(
            f"Cannot write log files to {log_dir}: {e}",
            details={"log_dir": str(log_dir), "original_error": str(e)}
        ) from e


def _add_file_handlers(root_logger: logging.Logger, log_dir: Path) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    full_handler = logging.FileHandler(
        log_dir / f"log_full_{timestamp}.log", mode="w", encoding="utf-8"
    )
    full_handler.setLevel(logging.DEBUG)
    full_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    root_logger.addHandler(full_handler)

    error_handler = logging.FileHandler(
        log_dir / f"log_errors_{timestamp}.log", mode="w", encoding="utf-8"
    )
    error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
    error_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    error_handler.addFilter(ErrorOnlyFilter())
    root_logger.addHandler(error_handler)

    failure_handler = TagFailureHandler(log_dir / f"tag_failures_{timestamp}.log")
    failure_handler.open()
    root_logger.addHandler(failure_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.

    Note:
        Loggers obtained before setup_logging() is called propagate to an
        unconfigured root logger. Call setup_logging() first at startup.
    """
    return logging.getLogger(name)


def log_tagging_failure(
    logger: logging.Logger,
    destination: Path | str,
    step: str,
    error_message: str
) -> None:
    """
    Log a failed tagging run with the fields TagFailureHandler picks up.

    Args:
        logger: The logger to use for the message.
        destination: Track file the run was writing.
        step: Name of the pipeline step that failed.
        error_message: Description of why the step failed.

    Example:
        log_tagging_failure(
            logger,
            destination=Path("/data/tracks/song.ogg"),
            step="fetch_cover",
            error_message="Cover download failed with HTTP 404"
        )
    """
    logger.error(
        f"{step} failed for {destination}: {error_message}",
        extra={
            "failed_destination": str(destination),
            "failed_step": step,
            "failed_error": error_message,
        }
    )


def shutdown_logging() -> None:
    """
    Flush, close and remove every handler on the root logger.

    Typically called in a finally block at application exit.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except Exception:
            pass
        root_logger.removeHandler(handler)
