from __future__ import annotations

import logging

import pytest

from leadscrub.logging.init import (
    APP_LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    reset_logging,
    setup_logging,
)


@pytest.fixture(autouse=True)
def clean_logging():
    reset_logging()
    yield
    reset_logging()


def test_setup_logging_creates_logger_with_labeled_formatter():
    logger = setup_logging()
    assert logger.name == APP_LOGGER_NAME
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_setup_logging_is_idempotent_and_adjusts_level():
    first = setup_logging()
    second = setup_logging(debug=True)
    assert first is second
    assert len(second.handlers) == 1
    assert second.level == logging.DEBUG
    assert second.handlers[0].level == logging.DEBUG


def test_labeled_prefixes(capsys):
    setup_logging()
    module_logger = logging.getLogger("leadscrub.services.pipeline")
    module_logger.info("imported list")
    module_logger.warning("verify failed")
    module_logger.error("store down")
    module_logger.debug("hidden")
    log_summary("enrichment contacts=1")

    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        "INFO imported list",
        "WARN verify failed",
        "ERROR store down",
        "SUMMARY enrichment contacts=1",
    ]


def test_debug_mode_shows_debug(capsys):
    setup_logging(debug=True)
    logging.getLogger("leadscrub.cli").debug("trace")
    assert "DEBUG trace" in capsys.readouterr().out


def test_error_records_include_traceback():
    formatter = LabeledFormatter()
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        import sys

        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())
    text = formatter.format(record)
    assert text.startswith("ERROR failed\n")
    assert "RuntimeError: boom" in text


def test_summary_level_label():
    record = logging.LogRecord("x", SUMMARY_LEVEL, __file__, 1, "done", None, None)
    assert LabeledFormatter().format(record) == "SUMMARY done"


def test_get_logger_sets_up_on_first_use():
    assert get_logger().name == APP_LOGGER_NAME
