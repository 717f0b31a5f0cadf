"""Parse orchestration API.

Key Components:
    parse: Whole-document parsing with optional metrics
    create_node_from_text: Incremental edit of a single node's text
    create_node_from_tokens: Fold a token stream into an existing tree
"""

from .parser import (
    ParseResult,
    create_node_from_text,
    create_node_from_tokens,
    node_from_token,
    parse,
    parse_with_metrics,
)

__all__ = [
    "ParseResult",
    "create_node_from_text",
    "create_node_from_tokens",
    "node_from_token",
    "parse",
    "parse_with_metrics",
]
