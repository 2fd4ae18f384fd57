"""
Logging setup shared by the API, the analyzers and the report worker
"""

import functools
import logging
import sys
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, Optional

from barrels.config.base import settings

CONSOLE_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
FILE_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Swings and sessions print as very long reprs
MAX_ARG_REPR = 80


class ColoredFormatter(logging.Formatter):
    """Console formatter coloring the level name"""

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
        # Color a copy so file handlers sharing the record stay plain
        record = logging.makeLogRecord(record.__dict__)
        if record.levelname in self.COLORS:
            record.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{self.COLORS['RESET']}"
        return super().format(record)


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ColoredFormatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler(path: str) -> Optional[logging.Handler]:
    """Plain-text file handler, or None when the file cannot be opened"""
    try:
        handler = logging.FileHandler(path)
    except OSError:
        return None
    handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Get a configured logger instance

    Loggers from here carry their own console/file handlers and do not
    propagate, so nothing prints twice once setup_logging configures the root.

    Args:
        name: Logger name (usually __name__)
        level: Log level name; defaults to settings.LOG_LEVEL
    """
    logger = logging.getLogger(name)

    # Don't add handlers multiple times
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, (level or settings.LOG_LEVEL).upper()))
    logger.propagate = False
    logger.addHandler(_console_handler())

    if settings.LOG_FILE:
        file_handler = _file_handler(settings.LOG_FILE)
        if file_handler is None:
            logger.warning(f"Could not open log file {settings.LOG_FILE}, logging to console only")
        else:
            logger.addHandler(file_handler)

    return logger


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """
    Configure the root logger, which third-party libraries (uvicorn, celery) log through

    Args:
        level: Default log level
        log_file: Optional log file path
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()
    root_logger.addHandler(_console_handler())

    if log_file:
        file_handler = _file_handler(log_file)
        if file_handler is None:
            root_logger.warning(f"Could not open log file {log_file}, logging to console only")
        else:
            root_logger.addHandler(file_handler)


class LoggerMixin:
    """Mixin class to add logging capabilities to any class"""

    @property
    def logger(self) -> logging.Logger:
        """Get logger for the current class"""
        return get_logger(f"{self.__class__.__module__}.{self.__class__.__name__}")


def _short_repr(value: Any) -> str:
    text = str(value)
    if len(text) <= MAX_ARG_REPR:
        return text
    return f"{text[:MAX_ARG_REPR]}..."


def log_function_call(func):
    """Decorator logging calls and execution time at debug level, failures at error level"""
    logger = get_logger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = datetime.now()

        all_args = [_short_repr(arg) for arg in args] + [f"{k}={_short_repr(v)}" for k, v in kwargs.items()]
        logger.debug(f"Calling {func.__name__}({', '.join(all_args) if all_args else 'no args'})")

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            execution_time = (datetime.now() - start_time).total_seconds()
            logger.error(f"Error in {func.__name__} after {execution_time:.3f}s: {str(e)}")
            raise

        execution_time = (datetime.now() - start_time).total_seconds()
        logger.debug(f"Completed {func.__name__} in {execution_time:.3f}s")
        return result

    return wrapper


class PerformanceLogger:
    """Timing and metric logging for long-running operations"""

    def __init__(self, name: str):
        self.logger = get_logger(f"perf.{name}")

    @contextmanager
    def timed(self, operation: str) -> Iterator[Dict[str, Any]]:
        """
        Log the start and duration of an operation

        Entries added to the yielded dict are appended to the completion line.
        Timing state is local to each call, so one logger can time concurrent work.
        """
        details: Dict[str, Any] = {}
        start_time = datetime.now()
        self.logger.info(f"Starting {operation}")

        try:
            yield details
        except Exception:
            duration = (datetime.now() - start_time).total_seconds()
            self.logger.error(f"Failed {operation} after {duration:.3f}s")
            raise

        duration = (datetime.now() - start_time).total_seconds()
        info = ", ".join(f"{key}={value}" for key, value in details.items())
        self.logger.info(f"Completed {operation} in {duration:.3f}s{f' - {info}' if info else ''}")

    def metric(self, name: str, value: float, unit: str = ""):
        """Log a performance metric"""
        unit_str = f" {unit}" if unit else ""
        self.logger.info(f"METRIC | {name}: {value}{unit_str}")
