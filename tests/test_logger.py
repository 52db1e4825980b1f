"""Test logging setup and the failure report"""

import io
import logging

import pytest

from oggify_tagger.core.exceptions import ConfigError
from oggify_tagger.core.logger import (
    ColoredConsoleFormatter,
    ErrorOnlyFilter,
    TagFailureHandler,
    TqdmLoggingHandler,
    get_logger,
    log_tagging_failure,
    setup_logging,
    shutdown_logging,
)


def make_record(level=logging.INFO, msg="message", **extra):
    record = logging.LogRecord("oggify_tagger.test", level, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestHandlers:
    """Test individual handlers, formatters and filters"""

    def test_tqdm_handler_writes_to_stream(self):
        stream = io.StringIO()
        handler = TqdmLoggingHandler(stream)
        handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))

        handler.emit(make_record(msg="hello"))

        assert stream.getvalue() == "INFO hello\n"

    def test_colored_formatter(self):
        output = ColoredConsoleFormatter().format(make_record(logging.WARNING, "careful"))
        assert "WARNING" in output
        assert output.endswith(": careful")
        assert "\033[33m" in output

    def test_error_only_filter(self):
        error_filter = ErrorOnlyFilter()
        assert error_filter.filter(make_record(logging.ERROR))
        assert error_filter.filter(make_record(logging.CRITICAL))
        assert not error_filter.filter(make_record(logging.WARNING))

    def test_failure_handler(self, temp_dir):
        handler = TagFailureHandler(temp_dir / "failures.log")
        handler.open()
        handler.emit(make_record(logging.ERROR, msg="ignored"))
        handler.emit(make_record(
            logging.ERROR,
            failed_destination="/music/song.ogg",
            failed_step="fetch_cover",
            failed_error="HTTP 404",
        ))
        handler.close()
        handler.close()

        assert (temp_dir / "failures.log").read_text(encoding="utf-8") == (
            "/music/song.ogg\nstep: fetch_cover\nerror: HTTP 404\n\n"
        )


class TestSetupLogging:
    """Test setup_logging and shutdown_logging"""

    def test_console_only(self, clean_logging, temp_dir):
        setup_logging(None, "WARNING")

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], TqdmLoggingHandler)
        assert handlers[0].level == logging.WARNING
        assert list(temp_dir.iterdir()) == []

    def test_log_files(self, clean_logging, temp_dir):
        log_dir = temp_dir / "logs"
        setup_logging(log_dir)
        logger = get_logger("oggify_tagger.test")

        logger.debug("debug detail")
        logger.error("something broke")
        log_tagging_failure(logger, log_dir / "song.ogg", "merge_comments", "not an Ogg file")
        shutdown_logging()

        full_logs = list(log_dir.glob("log_full_*.log"))
        error_logs = list(log_dir.glob("log_errors_*.log"))
        failure_logs = list(log_dir.glob("tag_failures_*.log"))
        assert len(full_logs) == len(error_logs) == len(failure_logs) == 1

        full_text = full_logs[0].read_text(encoding="utf-8")
        assert "debug detail" in full_text
        assert "something broke" in full_text

        error_text = error_logs[0].read_text(encoding="utf-8")
        assert "debug detail" not in error_text
        assert "something broke" in error_text

        failure_text = failure_logs[0].read_text(encoding="utf-8")
        assert "step: merge_comments" in failure_text
        assert "error: not an Ogg file" in failure_text
        assert "something broke" not in failure_text

    def test_shutdown_removes_handlers(self, clean_logging, temp_dir):
        setup_logging(temp_dir)
        shutdown_logging()
        assert logging.getLogger().handlers == []

    def test_unwritable_log_dir(self, clean_logging, temp_dir):
        blocker = temp_dir / "blocker"
        blocker.write_bytes(b"")

        with pytest.raises(ConfigError):
            setup_logging(blocker / "logs")
