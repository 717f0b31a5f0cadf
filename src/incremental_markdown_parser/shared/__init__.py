"""Shared utilities for incremental Markdown parsing.

This module provides configuration objects, error types, result types and
logging helpers used across all processing layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    GlobalConfig,
    ParserConfig,
    TokenizationConfig,
    TreeConfig,
)
from .errors import (
    ArgumentError,
    MarkdownTreeError,
    ParseError,
    StructuralError,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import ParseMetrics

__all__ = [
    "ArgumentError",
    "ConfigError",
    "ConfigValidationError",
    "CorrelationLogger",
    "GlobalConfig",
    "MarkdownTreeError",
    "ParseError",
    "ParseMetrics",
    "ParserConfig",
    "StructuralError",
    "TokenizationConfig",
    "TreeConfig",
    "get_logger",
]
