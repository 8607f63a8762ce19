"""Test logging helpers."""

import io

from waveloader.core.logging_utils import log_event, setup_logger


def test_setup_logger_configures_once():
    """Test that repeated setup returns the same configured logger."""
    stream = io.StringIO()
    logger = setup_logger("test.logging.once", stream=stream)
    again = setup_logger("test.logging.once")

    assert again is logger
    assert len(logger.handlers) == 1
    assert not logger.propagate


def test_log_event_format():
    """Test the structured event line."""
    stream = io.StringIO()
    logger = setup_logger("test.logging.event", stream=stream, format_string="%(message)s")

    log_event(logger, "progress_set", {"value": 80, "duration_ms": 0})

    assert stream.getvalue().strip() == "[EVENT] progress_set value=80 duration_ms=0"
