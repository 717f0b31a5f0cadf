"""Command-line interface module for incremental Markdown parsing.

This module provides the incremental-md tool for inspecting token streams and
document trees.
"""

from .main import main

__all__ = ["main"]
