"""
Logging configuration for promo-site.

This module sets up the logging system with multiple outputs:
    - Console: Coloured, tqdm/rich-compatible output (INFO and above)
    - log_full.log: Complete log of all events (DEBUG and above)
    - log_errors.log: Only ERROR and CRITICAL level messages
    - album_failures.log: Albums skipped during discovery, with the reason

File outputs are only created when a log directory is configured; the
console handler is always installed.

Logging happens at decision points (failures, state transitions) only.
It is presentation: nothing in the pipeline reads it back.

Usage:
    from promo_site.core.logger import setup_logging, get_logger

    setup_logging(log_dir)  # Call once at startup (log_dir may be None)
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Content store initialized")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

from tqdm import tqdm


# Log file names (created in the log directory)
LOG_FULL_FILENAME = "log_full"
LOG_ERRORS_FILENAME = "log_errors"
ALBUM_FAILURES_FILENAME = "album_failures"

# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Log format for console output (compact, tqdm-friendly)
CONSOLE_LOG_FORMAT = "%(levelname)s: %(message)s"


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
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
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        colored_levelname = f"{color}{record.levelname}{Colors.RESET}"
        return f"{colored_levelname}: {record.getMessage()}"


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes to console without breaking progress bars.

    Uses tqdm.write(), which prints above any active progress bar instead
    of interleaving with its carriage-return updates.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream or sys.stderr)
        except Exception:
            self.handleError(record)


class AlbumFailureHandler(logging.Handler):
    """
    Handler that captures skipped albums for the album failures report.

    Writes entries in a simple, human-readable format:

        midnight-sessions
        albums/midnight-sessions/info.md
        HTTP 404 for albums/midnight-sessions/info.md

    The handler looks for specific extra fields in log records:
        - 'album_failed_id': The album identifier from the index
        - 'album_failed_path': The info document path that was fetched
        - 'album_failed_reason': Why the album was skipped

    Only records containing these fields are written to the report.

    Attributes:
        report_path: Path to the album_failures.log file.
        report_file: Open file handle (set by open()).
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """Open the report file for writing (overwrites existing content)."""
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        if not hasattr(record, "album_failed_id"):
            return

        if self.report_file is None:
            return

        try:
            album_id = getattr(record, "album_failed_id", "unknown")
            path = getattr(record, "album_failed_path", "")
            reason = getattr(record, "album_failed_reason", "")

            self.acquire()
            try:
                self.report_file.write(f"{album_id}\n{path}\n{reason}\n\n")
                self.report_file.flush()
            finally:
                self.release()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """Close the report file handle. Safe to call multiple times."""
        if self.report_file is not None:
            try:
                self.report_file.close()
            except OSError:
                pass
            self.report_file = None
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """Filter that only allows ERROR and CRITICAL level records."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(log_dir: Path | None = None, verbose: bool = False) -> Path | None:
    """
    Configure the logging system for the application.

    This function should be called ONCE at application startup, after
    the configuration is loaded but before any other operations.

    Args:
        log_dir: Directory where log files will be created. None installs
                 the console handler only.
        verbose: Show DEBUG records on the console as well.

    Returns:
        The directory the log files were written to, or None.

    Behavior:
        1. Configure root logger level to DEBUG and drop existing handlers
        2. Add the coloured tqdm console handler (INFO, or DEBUG if verbose)
        3. If log_dir is given:
           a. Create it if it doesn't exist
           b. Add log_full_{timestamp}.log (DEBUG)
           c. Add log_errors_{timestamp}.log (ERROR+ via ErrorOnlyFilter)
           d. Add album_failures_{timestamp}.log (AlbumFailureHandler)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Remove any existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    # Third-party HTTP chatter stays out of the console
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    if log_dir is None:
        return None

    log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    full_handler = logging.FileHandler(
        log_dir / f"{LOG_FULL_FILENAME}_{timestamp}.log", mode="w", encoding="utf-8"
    )
    full_handler.setLevel(logging.DEBUG)
    full_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    root_logger.addHandler(full_handler)

    error_handler = logging.FileHandler(
        log_dir / f"{LOG_ERRORS_FILENAME}_{timestamp}.log", mode="w", encoding="utf-8"
    )
    error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
    error_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    error_handler.addFilter(ErrorOnlyFilter())
    root_logger.addHandler(error_handler)

    album_handler = AlbumFailureHandler(log_dir / f"{ALBUM_FAILURES_FILENAME}_{timestamp}.log")
    album_handler.open()
    root_logger.addHandler(album_handler)

    return log_dir


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.
              This creates a hierarchy like 'promo_site.content.store'.

    Note:
        Loggers obtained before setup_logging() is called will have no
        handlers of their own and propagate to whatever the root logger has.
    """
    return logging.getLogger(name)


def log_album_failure(
    logger: logging.Logger,
    album_id: str,
    path: str,
    reason: str
) -> None:
    """
    Log an album that was skipped during discovery.

    Logs a WARNING with the extra fields AlbumFailureHandler writes to
    album_failures.log. Discovery continues with the remaining albums.

    Example:
        log_album_failure(
            logger,
            album_id="midnight-sessions",
            path="albums/midnight-sessions/info.md",
            reason="HTTP 404 for albums/midnight-sessions/info.md"
        )
    """
    logger.warning(
        f"Skipping album '{album_id}': {reason}",
        extra={
            "album_failed_id": album_id,
            "album_failed_path": path,
            "album_failed_reason": reason,
        }
    )


def shutdown_logging() -> None:
    """
    Flush and close every handler on the root logger, then remove them.

    Typically called in a finally block at application exit.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except OSError:
            pass
        root_logger.removeHandler(handler)
