"""Test logging setup and the album failure report"""

import logging

import pytest

from promo_site.core.logger import (
    ColoredConsoleFormatter,
    ErrorOnlyFilter,
    TqdmLoggingHandler,
    get_logger,
    log_album_failure,
    setup_logging,
    shutdown_logging,
)


@pytest.fixture
def log_dir(tmp_path):
    directory = tmp_path / "logs"
    yield directory
    shutdown_logging()


class TestSetupLogging:
    """Test handler installation"""

    def test_console_only(self, log_dir):
        assert setup_logging(None) is None
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], TqdmLoggingHandler)
        assert not log_dir.exists()

    def test_log_files_created(self, log_dir):
        assert setup_logging(log_dir) == log_dir

        names = sorted(p.name.rsplit("_", 2)[0] for p in log_dir.iterdir())
        assert names == ["album_failures", "log_errors", "log_full"]

    def test_errors_log_only_has_errors(self, log_dir):
        setup_logging(log_dir)
        logger = get_logger("promo_site.tests")
        logger.info("just info")
        logger.error("something broke")
        shutdown_logging()

        errors_log = next(log_dir.glob("log_errors_*.log")).read_text(encoding="utf-8")
        full_log = next(log_dir.glob("log_full_*.log")).read_text(encoding="utf-8")
        assert "something broke" in errors_log
        assert "just info" not in errors_log
        assert "just info" in full_log

    def test_album_failure_report(self, log_dir):
        setup_logging(log_dir)
        logger = get_logger("promo_site.tests")
        log_album_failure(logger, "midnight", "albums/midnight/info.md", "HTTP 404")
        logger.warning("ordinary warning")
        shutdown_logging()

        report = next(log_dir.glob("album_failures_*.log")).read_text(encoding="utf-8")
        assert report == "midnight\nalbums/midnight/info.md\nHTTP 404\n\n"

    def test_setup_replaces_handlers(self, log_dir):
        setup_logging(None)
        setup_logging(None)
        assert len(logging.getLogger().handlers) == 1


class TestFormattersAndFilters:
    """Test console formatting and the error filter"""

    def make_record(self, level: int, message: str = "hello") -> logging.LogRecord:
        return logging.LogRecord("test", level, __file__, 1, message, None, None)

    def test_colored_formatter(self):
        output = ColoredConsoleFormatter().format(self.make_record(logging.WARNING))
        assert "WARNING" in output
        assert output.endswith(": hello")
        assert "\033[33m" in output

    def test_error_only_filter(self):
        error_filter = ErrorOnlyFilter()
        assert error_filter.filter(self.make_record(logging.ERROR))
        assert error_filter.filter(self.make_record(logging.CRITICAL))
        assert not error_filter.filter(self.make_record(logging.WARNING))
