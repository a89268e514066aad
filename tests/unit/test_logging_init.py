from __future__ import annotations

import logging
from io import StringIO

import sheet_orm.logging.init
from sheet_orm.logging.init import (
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    reset_logging,
    setup_logging,
)


def test_setup_logging_creates_logger_with_labeled_formatter():
    """setup_logging configures the package logger with one labeled stdout handler."""
    reset_logging()
    logger = setup_logging()

    assert logger.name == "sheet_orm"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert logger.propagate is False

    handler = logger.handlers[0]
    assert isinstance(handler, logging.StreamHandler)
    assert isinstance(handler.formatter, LabeledFormatter)


def test_logging_labeled_prefixes():
    """Output lines carry INFO|WARN|ERROR|SUMMARY prefixes."""
    sheet_orm.logging.init.reset_logging()

    captured_output = StringIO()
    logger = logging.getLogger("test_sheet_orm")
    logger.setLevel(logging.DEBUG)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(captured_output)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    logger.debug("Test debug message")
    logger.info("Test info message")
    logger.warning("Test warning message")
    logger.error("Test error message")
    logger.log(SUMMARY_LEVEL, "Test summary message")

    lines = captured_output.getvalue().strip().split("\n")
    assert lines == [
        "DEBUG Test debug message",
        "INFO Test info message",
        "WARN Test warning message",
        "ERROR Test error message",
        "SUMMARY Test summary message",
    ]


def test_setup_logging_is_idempotent():
    reset_logging()
    first = setup_logging(logging.DEBUG)
    second = setup_logging(logging.ERROR)
    assert first is second
    assert first.level == logging.DEBUG
    assert len(first.handlers) == 1


def test_get_logger_returns_configured_logger():
    reset_logging()
    configured = setup_logging()
    assert get_logger() is configured


def test_module_loggers_are_children():
    reset_logging()
    setup_logging()
    child = logging.getLogger("sheet_orm.services.table_model")
    assert child.parent is logging.getLogger("sheet_orm")


def test_log_summary_writes_summary_line(capsys):
    reset_logging()
    setup_logging()
    log_summary("tables=1 rows=2")
    assert "SUMMARY tables=1 rows=2" in capsys.readouterr().out
