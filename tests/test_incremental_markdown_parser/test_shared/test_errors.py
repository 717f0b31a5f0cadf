"""Tests for the exception hierarchy and metrics result type."""

import pytest

from incremental_markdown_parser.shared import (
    ArgumentError,
    MarkdownTreeError,
    ParseError,
    ParseMetrics,
    StructuralError,
)


class TestErrors:
    """Test suite for error types."""

    def test_hierarchy(self):
        """Test the common base class."""
        assert issubclass(StructuralError, MarkdownTreeError)
        assert issubclass(ParseError, MarkdownTreeError)
        assert issubclass(ArgumentError, MarkdownTreeError)
        assert issubclass(ArgumentError, ValueError)

    def test_parse_error_with_line(self):
        """Test the positioned message."""
        error = ParseError("Invalid hierarchy", 3)
        assert str(error) == "Invalid hierarchy: at line 3"
        assert error.line == 3
        assert error.reason == "Invalid hierarchy"

    def test_parse_error_without_line(self):
        """Test the message for tokens without a position."""
        error = ParseError("Invalid hierarchy")
        assert str(error) == "Invalid hierarchy: in Token"
        assert error.line is None


class TestParseMetrics:
    """Test suite for ParseMetrics."""

    def test_derived_values(self):
        """Test averages and memory delta."""
        metrics = ParseMetrics(
            token_time_ms=1.0,
            token_count=4,
            node_time_ms=8.0,
            node_count=4,
            total_time_ms=9.0,
            memory_start_bytes=100,
            memory_end_bytes=150,
        )
        assert metrics.average_time_per_node_ms == 2.0
        assert metrics.memory_delta_bytes == 50

    def test_zero_nodes(self):
        """Test the average without nodes."""
        assert ParseMetrics().average_time_per_node_ms == 0.0

    def test_validation(self):
        """Test count validation."""
        with pytest.raises(ValueError):
            ParseMetrics(token_count=-1)
        with pytest.raises(ValueError):
            ParseMetrics(node_count=-1)

    def test_to_dict(self):
        """Test the nested view."""
        data = ParseMetrics(token_count=2, node_count=1, node_time_ms=3.0).to_dict()
        assert data["tokens"]["count"] == 2
        assert data["nodes"] == {"time": 3.0, "count": 1, "average_time_per_node": 3.0}
        assert set(data) == {"tokens", "nodes", "total", "memory"}
        assert set(data["memory"]) == {"start_bytes", "end_bytes", "delta_bytes"}
