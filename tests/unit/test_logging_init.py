from __future__ import annotations

import logging
from io import StringIO

from survey_sync.logging.init import (
    SUCCESS_LEVEL,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_success,
    log_summary,
    setup_logging,
)


def test_setup_logging_creates_logger_with_labeled_formatter():
    logger = setup_logging()
    assert logger.name == "survey_sync"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_setup_logging_is_idempotent():
    first = setup_logging()
    second = setup_logging()
    assert first is second
    assert len(second.handlers) == 1
    assert get_logger() is first


def test_setup_logging_debug_lowers_level():
    logger = setup_logging(debug=True)
    assert logger.level == logging.DEBUG
    assert logger.handlers[0].level == logging.DEBUG


def test_labeled_prefixes():
    captured = StringIO()
    logger = logging.getLogger("test_survey_sync_labels")
    logger.setLevel(logging.INFO)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    handler = logging.StreamHandler(captured)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    logger.info("Test info message")
    logger.log(SUCCESS_LEVEL, "Test success message")
    logger.warning("Test warning message")
    logger.error("Test error message")
    logger.log(SUMMARY_LEVEL, "Test summary message")

    lines = captured.getvalue().strip().split("\n")
    assert lines == [
        "INFO Test info message",
        "OK Test success message",
        "WARN Test warning message",
        "ERROR Test error message",
        "SUMMARY Test summary message",
    ]


def test_log_helpers_write_to_stdout(capsys):
    setup_logging()
    log_success("Updated R1")
    log_summary("records=1 success=1")
    out = capsys.readouterr().out
    assert "OK Updated R1" in out
    assert "SUMMARY records=1 success=1" in out


def test_module_loggers_inherit_handler(capsys):
    setup_logging()
    logging.getLogger("survey_sync.services.lookup").warning("child message")
    assert "WARN child message" in capsys.readouterr().out
