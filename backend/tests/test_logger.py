"""
Tests for logging helpers
"""

import logging
from typing import List

import pytest

from barrels.utils.logger import (
    MAX_ARG_REPR,
    ColoredFormatter,
    LoggerMixin,
    PerformanceLogger,
    get_logger,
    log_function_call,
)


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.messages: List[str] = []

    def emit(self, record):
        self.messages.append(record.getMessage())


@pytest.fixture
def capture():
    """Attach a recording handler to a named logger"""
    attached = []

    def attach(name: str, level: int = logging.DEBUG) -> ListHandler:
        logger = get_logger(name)
        handler = ListHandler()
        previous_level = logger.level
        logger.addHandler(handler)
        logger.setLevel(level)
        attached.append((logger, handler, previous_level))
        return handler

    yield attach

    for logger, handler, previous_level in attached:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)


def test_get_logger_configures_once():
    logger = get_logger("barrels.tests.once")
    handlers = list(logger.handlers)
    assert get_logger("barrels.tests.once").handlers == handlers
    assert not logger.propagate


def test_colored_formatter_leaves_record_plain():
    record = logging.LogRecord("x", logging.WARNING, __file__, 1, "careful", None, None)
    output = ColoredFormatter(fmt="%(levelname)s %(message)s").format(record)
    assert "\033[33m" in output
    assert record.levelname == "WARNING"


def test_logger_mixin_names_logger_after_class():
    class Widget(LoggerMixin):
        pass

    assert Widget().logger.name.endswith(".Widget")


def test_log_function_call_preserves_behaviour():
    @log_function_call
    def add(a, b):
        """Add two numbers"""
        return a + b

    assert add(2, b=3) == 5
    assert add.__name__ == "add"
    assert add.__doc__ == "Add two numbers"


def test_log_function_call_shortens_arguments(capture):
    handler = capture(__name__)

    @log_function_call
    def echo(value):
        return value

    echo("x" * 500)
    call_line = handler.messages[0]
    assert call_line.startswith("Calling echo(")
    assert len(call_line) < MAX_ARG_REPR + 40


def test_log_function_call_reraises(capture):
    handler = capture(__name__)

    @log_function_call
    def explode():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        explode()
    assert any("Error in explode" in message for message in handler.messages)


def test_performance_logger_timed(capture):
    handler = capture("perf.tests")
    perf = PerformanceLogger("tests")

    with perf.timed("scoring") as details:
        details["tier"] = "Elite"
    perf.metric("swings", 3)

    assert handler.messages[0] == "Starting scoring"
    assert handler.messages[1].startswith("Completed scoring in ")
    assert handler.messages[1].endswith(" - tier=Elite")
    assert handler.messages[2] == "METRIC | swings: 3"


def test_performance_logger_logs_failures(capture):
    handler = capture("perf.tests")

    with pytest.raises(ValueError):
        with PerformanceLogger("tests").timed("scoring"):
            raise ValueError("bad swing")

    assert handler.messages[-1].startswith("Failed scoring after ")
