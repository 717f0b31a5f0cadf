"""Exception hierarchy for incremental Markdown parsing."""

from typing import Optional


class MarkdownTreeError(Exception):
    """Base exception for parsing and tree operations."""


class StructuralError(MarkdownTreeError):
    """Raised when a node placement violates the element hierarchy."""


class ArgumentError(MarkdownTreeError, ValueError):
    """Raised when an argument is outside its accepted range."""


class ParseError(MarkdownTreeError):
    """Contextual failure raised while folding tokens into a tree.

    The message carries the source line of the offending token, or
    ``in Token`` when the token has no position (ghost tokens).
    """

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        line_info = f"at line {line}" if line else "in Token"
        super().__init__(f"{message}: {line_info}")
        self.reason = message
        self.line = line
