"""
Logging configuration and utilities for blueme-converter
Provides colored console output and file logging with separation between user and technical messages
"""

import logging
import logging.handlers
import sys
import time
from pathlib import Path
from typing import Optional

import colorama
from colorama import Fore, Back, Style
from tqdm import tqdm

from .helpers import parse_size


# Initialize colorama for cross-platform colored output
colorama.init()


class ConsoleMessageFilter(logging.Filter):
    """Filter to allow only user-facing messages to console"""

    def __init__(self, verbose: bool = False):
        super().__init__()
        self.verbose = verbose

    def filter(self, record):
        # Always show warnings and errors
        if record.levelno >= logging.WARNING:
            return True

        # Show messages explicitly marked for the user
        if getattr(record, 'console_output', False):
            return True

        # Verbose mode shows the technical trail as well
        return self.verbose


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colored output for console"""

    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.RED + Back.WHITE + Style.BRIGHT,
    }

    def __init__(self, fmt: Optional[str] = None, use_colors: bool = True):
        """
        Initialize colored formatter

        Args:
            fmt: Log format string
            use_colors: Whether to use colored output
        """
        super().__init__(fmt or '%(message)s')
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """Format log record, coloring the whole line by level"""
        message = super().format(record)

        # Raw child process output is echoed uncolored
        if getattr(record, 'raw_output', False):
            return message

        if self.use_colors and record.levelname in self.COLORS:
            return f"{self.COLORS[record.levelname]}{message}{Style.RESET_ALL}"
        return message


class ProgressHandler(logging.Handler):
    """Custom handler that doesn't interfere with progress bars"""

    def __init__(self, stream=None):
        """Initialize progress-friendly handler"""
        super().__init__()
        self.stream = stream or sys.stderr

    def emit(self, record: logging.LogRecord) -> None:
        """Emit log record above any active tqdm bar"""
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
            self.stream.flush()
        except Exception:
            self.handleError(record)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    console_output: bool = True,
    colored_output: bool = True,
    max_size: str = "10MB",
    backup_count: int = 3,
    verbose: bool = False
) -> None:
    """
    Setup application logging configuration with separated console/file output

    Args:
        level: Logging level for the file handler (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (None to disable file logging)
        console_output: Enable console logging
        colored_output: Enable colored console output
        max_size: Maximum log file size before rotation
        backup_count: Number of backup log files to keep
        verbose: Show technical (non user-facing) messages on the console too
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture everything, filter at handler level

    # Drop handlers installed by earlier setup calls
    for handler in root_logger.handlers[:]:
        if isinstance(handler, (ProgressHandler, logging.handlers.RotatingFileHandler)):
            handler.close()
            root_logger.removeHandler(handler)

    if console_output:
        console_handler = ProgressHandler(sys.stdout)
        console_handler.setLevel(logging.DEBUG)  # Let filter decide what to show
        console_handler.addFilter(ConsoleMessageFilter(verbose=verbose))
        console_handler.setFormatter(ColoredFormatter(
            fmt='%(message)s',  # Very simple format for users
            use_colors=colored_output
        ))
        root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=parse_size(max_size),
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(
            fmt='%(asctime)s | %(name)-30s | %(levelname)-8s | %(funcName)-20s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        root_logger.addHandler(file_handler)

    # mutagen is chatty at debug level about malformed frames
    logging.getLogger('mutagen').setLevel(logging.WARNING)

    logger = logging.getLogger('blueme')
    logger.debug(f"Logging initialized - Level: {level}, Console: {console_output}, File: {log_file}")


def get_current_log_file() -> Optional[Path]:
    """
    Get the current log file path from active file handlers

    Returns:
        Path to current log file or None if no file logging
    """
    for handler in logging.getLogger().handlers:
        if isinstance(handler, logging.handlers.RotatingFileHandler):
            return Path(handler.baseFilename)
    return None


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance for a module

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance with console_info / console_warning / console_error helpers
    """
    logger = logging.getLogger(name)

    def console_info(message: str, raw: bool = False):
        """Log message that should appear on console for user"""
        record = logger.makeRecord(
            logger.name, logging.INFO, '', 0, message, (), None
        )
        record.console_output = True
        record.raw_output = raw
        logger.handle(record)

    def console_warning(message: str):
        """Log warning that should appear on console"""
        logger.warning(message)  # Warnings already go to console

    def console_error(message: str):
        """Log error that should appear on console"""
        logger.error(message)  # Errors already go to console

    logger.console_info = console_info
    logger.console_warning = console_warning
    logger.console_error = console_error

    return logger


def configure_from_settings(settings, verbose: bool = False) -> None:
    """Configure logging from application settings"""
    setup_logging(
        level="DEBUG" if verbose else settings.logging.level,
        log_file=settings.logging.file or None,
        console_output=settings.logging.console_output,
        colored_output=settings.logging.colored_output,
        max_size=settings.logging.max_size,
        backup_count=settings.logging.backup_count,
        verbose=verbose
    )


class OperationLogger:
    """Logger for tracking a long-running batch with an optional progress bar"""

    def __init__(self, logger: logging.Logger, operation_name: str, show_progress: bool = False):
        """
        Initialize operation logger

        Args:
            logger: Base logger instance (from get_logger)
            operation_name: Name of the operation
            show_progress: Draw a tqdm bar while the batch runs
        """
        self.logger = logger
        self.operation_name = operation_name
        self.show_progress = show_progress
        self.start_time = None
        self.progress_bar = None

    def start(self, message: Optional[str] = None) -> None:
        """Start tracking operation - show to user"""
        self.start_time = time.time()
        self.logger.console_info(message or f"Starting {self.operation_name}")
        self.logger.debug(f"Operation started: {self.operation_name}")

    def progress(self, message: str, current: int, total: int) -> None:
        """Log progress update, advancing the bar when one is shown"""
        self.logger.debug(f"{self.operation_name}: {message} ({current}/{total})")

        if not self.show_progress:
            return

        if self.progress_bar is None:
            self.progress_bar = tqdm(
                total=total,
                desc="Converting",
                bar_format="{desc} {n}/{total} {bar} {percentage:3.0f}%",
                ncols=100,
                colour='cyan',
                ascii=False
            )

        self.progress_bar.n = current
        self.progress_bar.refresh()

    def complete(self, message: Optional[str] = None) -> None:
        """Mark operation as complete - close progress bar"""
        self._close_bar()

        console_msg = message or f"{self.operation_name} completed"
        self.logger.console_info(console_msg)

        if self.start_time:
            duration = time.time() - self.start_time
            self.logger.debug(f"Operation completed: {self.operation_name} in {duration:.2f}s")

    def error(self, message: str, exception: Optional[Exception] = None) -> None:
        """Log operation error - close progress bar first"""
        self._close_bar()
        self.logger.console_error(f"{self.operation_name} failed: {message}")
        if exception:
            self.logger.debug(f"Operation failed: {self.operation_name}", exc_info=exception)

    def _close_bar(self) -> None:
        if self.progress_bar:
            self.progress_bar.close()
            self.progress_bar = None


def create_operation_logger(name: str, operation: str, show_progress: bool = False) -> OperationLogger:
    """
    Create operation logger for tracking long-running tasks

    Args:
        name: Logger name
        operation: Operation description
        show_progress: Draw a tqdm bar

    Returns:
        OperationLogger instance
    """
    return OperationLogger(get_logger(name), operation, show_progress=show_progress)
