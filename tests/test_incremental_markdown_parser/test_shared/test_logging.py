"""Tests for correlation-aware logging."""

import logging

from incremental_markdown_parser.shared.logging import CorrelationLogger, get_logger

LOGGER_NAME = "incremental_markdown_parser.testing"


class TestCorrelationLogger:
    """Test suite for CorrelationLogger."""

    def test_component_defaults_to_module(self):
        """Test the component derived from the logger name."""
        assert CorrelationLogger("a.b.tokenizer").component == "tokenizer"
        assert get_logger("a.b", "cid", "parse").component == "parse"

    def test_records_carry_correlation_fields(self, caplog):
        """Test that every record is stamped with component and correlation id."""
        logger = get_logger(LOGGER_NAME, "corr-1", "edit")
        with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
            logger.debug("step", extra={"count": 3})
            logger.info("done")

        first, second = caplog.records
        assert (first.levelno, first.component, first.correlation_id) == (logging.DEBUG, "edit", "corr-1")
        assert first.count == 3
        assert second.levelno == logging.INFO
        assert second.correlation_id == "corr-1"

    def test_warning(self, caplog):
        """Test warning records."""
        with caplog.at_level(logging.WARNING, logger=LOGGER_NAME):
            get_logger(LOGGER_NAME).warning("careful", extra={"node_id": "n1"})

        record = caplog.records[0]
        assert record.levelno == logging.WARNING
        assert record.node_id == "n1"
        assert record.correlation_id is None

    def test_exception_attaches_traceback(self, caplog):
        """Test that exception records carry the active exception."""
        with caplog.at_level(logging.ERROR, logger=LOGGER_NAME):
            try:
                raise ValueError("boom")
            except ValueError:
                get_logger(LOGGER_NAME).exception("failed")

        record = caplog.records[0]
        assert record.levelno == logging.ERROR
        assert record.exc_info[0] is ValueError

    def test_disabled_level_is_skipped(self, caplog):
        """Test that records below the logger level are not emitted."""
        with caplog.at_level(logging.WARNING, logger=LOGGER_NAME):
            get_logger(LOGGER_NAME).debug("hidden")
        assert caplog.records == []
