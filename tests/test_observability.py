from __future__ import annotations

import logging
import sys
from typing import Iterator

import pytest

from jirae.observability import _format_value, configure_logging, log_event


@pytest.fixture(autouse=True)
def restore_jirae_logger_state() -> Iterator[None]:
    logger = logging.getLogger("jirae")
    original_handlers = list(logger.handlers)
    original_level = logger.level
    original_propagate = logger.propagate
    try:
        yield
    finally:
        logger.handlers.clear()
        for handler in original_handlers:
            logger.addHandler(handler)
        logger.setLevel(original_level)
        logger.propagate = original_propagate


def test_configure_logging_quiet_mode_is_idempotent() -> None:
    configure_logging(verbose=False)
    logger = logging.getLogger("jirae")
    assert logger.propagate is False
    assert logger.level > logging.CRITICAL
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.NullHandler)

    configure_logging(verbose=False)
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.NullHandler)


def test_configure_logging_verbose_streams_to_stderr() -> None:
    configure_logging(verbose=True)
    logger = logging.getLogger("jirae")
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    handler = logger.handlers[0]
    assert isinstance(handler, logging.StreamHandler)
    assert handler.stream is sys.stderr

    configure_logging(verbose=True)
    assert len(logger.handlers) == 1


def test_log_event_formats_sorted_fields(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(verbose=True)
    log_event(
        logging.getLogger("jirae.tests"),
        "jira_write",
        status=204,
        method="PUT",
        ok=True,
        comment_id=None,
    )
    stderr = capsys.readouterr().err
    assert "event=jira_write comment_id=null method=PUT ok=true status=204" in stderr


def test_log_event_is_silent_by_default(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(verbose=False)
    log_event(logging.getLogger("jirae.tests"), "jira_read", kind="issue")
    assert capsys.readouterr().err == ""


def test_format_value_quotes_and_truncates() -> None:
    assert _format_value("two words") == '"two words"'
    assert _format_value("a=b") == '"a=b"'
    assert _format_value("") == "<empty>"
    assert _format_value(["x"]) == "<list>"
    assert _format_value("x" * 200) == "x" * 120 + "..."
