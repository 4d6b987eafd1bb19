"""
Centralized logging configuration for the application
"""

import logging
import sys
from typing import Optional
from datetime import datetime


CONSOLE_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
FILE_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """Formatter that colours the level name on terminals"""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record):
        # Work on a copy so file handlers sharing the record stay uncoloured
        record = logging.makeLogRecord(record.__dict__)
        if record.levelname in self.COLORS:
            record.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{self.COLORS['RESET']}"
        return super().format(record)


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ColoredFormatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler(log_file: str) -> logging.Handler:
    handler = logging.FileHandler(log_file)
    handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Get a logger for a module.

    Loggers under the ``athleon`` namespace propagate to the root logger
    configured by ``setup_logging``; anything else gets its own console
    handler so scripts still print something.

    Args:
        name: Logger name (usually __name__)
        level: Optional log level override (DEBUG, INFO, WARNING, ...)

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)

    if level:
        logger.setLevel(getattr(logging, level.upper()))

    if name.startswith('athleon') or logger.handlers:
        return logger

    logger.addHandler(_console_handler())
    logger.propagate = False
    return logger


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """
    Setup global logging configuration

    Args:
        level: Default log level
        log_file: Optional log file path
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    # Clear existing handlers
    root_logger.handlers.clear()
    root_logger.addHandler(_console_handler())

    if log_file:
        try:
            root_logger.addHandler(_file_handler(log_file))
        except OSError as e:
            root_logger.warning(f"Could not create file handler for {log_file}: {e}")


class PerformanceLogger:
    """Times pipeline stages and logs metrics"""

    def __init__(self, name: str):
        self.logger = get_logger(f"athleon.perf.{name}")
        self.operation = None
        self.start_time = None

    def start(self, operation: str):
        """Start timing an operation"""
        self.operation = operation
        self.start_time = datetime.now()
        self.logger.debug(f"Starting {operation}")

    def end(self, additional_info: Optional[str] = None) -> float:
        """End timing, log the result and return the duration in seconds"""
        if self.start_time is None:
            self.logger.warning("end() called without start()")
            return 0.0

        duration = (datetime.now() - self.start_time).total_seconds()
        info_str = f" - {additional_info}" if additional_info else ""
        self.logger.info(f"Completed {self.operation} in {duration:.3f}s{info_str}")
        self.start_time = None
        return duration

    def metric(self, name: str, value: float, unit: str = ""):
        """Log a performance metric"""
        unit_str = f" {unit}" if unit else ""
        self.logger.info(f"METRIC | {name}: {value}{unit_str}")
