"""Tokenization engine for incremental Markdown parsing.

Key Components:
    Tokenizer: Single-pass scanner producing classified tokens
    Token: A classified slice of source text, or a zero-width ghost token
    Delimiter: Characters that end a token
    html: Offset helpers that locate opaque HTML spans
"""

from . import html
from .tokenizer import (
    DELIMITERS,
    Delimiter,
    Token,
    TokenBuilder,
    Tokenizer,
    TokenPosition,
    classify,
    grouping_token,
    tokenize,
)

__all__ = [
    "DELIMITERS",
    "Delimiter",
    "Token",
    "TokenBuilder",
    "TokenPosition",
    "Tokenizer",
    "classify",
    "grouping_token",
    "html",
    "tokenize",
]
