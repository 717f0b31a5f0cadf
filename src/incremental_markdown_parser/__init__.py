"""Incremental Markdown Parser.

Turns Markdown-like text into a persistent, immutable document tree and
re-parses the text of a single node without rebuilding the rest of the tree.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), tokenize()
- Level 2: Incremental edits - create_node_from_text()
- Level 3: Tree operations - Node.add(), Node.update_and_split(), Node.delete()
"""

__version__ = "0.1.0"
__author__ = "Incremental Markdown Parser Team"

from .api import ParseResult, create_node_from_text, parse, parse_with_metrics
from .hierarchy import Element
from .shared.config import ParserConfig
from .shared.errors import MarkdownTreeError, ParseError, StructuralError
from .tokenization import Token, tokenize
from .tree import Node, deserialize

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "parse",
    "parse_with_metrics",
    "tokenize",

    # Level 2: Incremental edits
    "create_node_from_text",

    # Result objects and data structures
    "Element",
    "Node",
    "ParseResult",
    "Token",
    "deserialize",

    # Configuration and errors
    "MarkdownTreeError",
    "ParseError",
    "ParserConfig",
    "StructuralError",
]
