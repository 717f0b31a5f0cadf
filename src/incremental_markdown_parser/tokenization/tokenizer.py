"""Single-pass tokenizer for the Markdown-like dialect.

This module segments free-form text into typed tokens. Delimiters close the
current token, newlines become their own paragraph-separator tokens, raw HTML
spans are carried through opaquely, and zero-width "ghost" tokens are
synthesized where a sentence or list item needs a container.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from incremental_markdown_parser.hierarchy import (
    MAX_HEADING_LEVEL,
    Element,
    determine_element,
    get_grouping_element,
)
from incremental_markdown_parser.hierarchy.elements import HEADING_PATTERN
from incremental_markdown_parser.shared import get_logger

from . import html


class Delimiter(str, Enum):
    """Characters that end a token."""

    NEWLINE = "\n"
    SEMICOLON = ";"
    EXCLAMATION_MARK = "!"
    QUESTION_MARK = "?"
    PERIOD = "."


DELIMITERS = frozenset(delimiter.value for delimiter in Delimiter)


@dataclass
class TokenPosition:
    """Scanner position: 1-based line and column, 0-based offset."""

    line: int
    column: int
    offset: int

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")

    def advance(self, char: str) -> None:
        """Move past ``char``."""
        if char == Delimiter.NEWLINE:
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.offset += 1


@dataclass
class Token:
    """A classified slice of the source text.

    Ghost tokens have an empty value and no position; they only mark where a
    grouping container has to be created.
    """

    line: Optional[int]
    column: Optional[int]
    length: int
    value: str
    element: Element

    def __post_init__(self) -> None:
        """Validate token values."""
        if self.length != len(self.value):
            raise ValueError("Token length must match its value")
        if (self.line is None) != (self.column is None):
            raise ValueError("Token line and column must be given together")
        if self.line is not None and (self.line < 1 or self.column < 1):
            raise ValueError("Token line and column must be >= 1")

    @property
    def is_ghost(self) -> bool:
        """Check whether this is a synthesized grouping token."""
        return self.line is None and not self.value

    @classmethod
    def ghost(cls, element: Element) -> "Token":
        """Create a zero-width grouping token."""
        return cls(line=None, column=None, length=0, value="", element=element)

    def to_dict(self) -> Dict[str, Any]:
        """Convert token to dictionary representation."""
        return {
            "line": self.line,
            "column": self.column,
            "length": self.length,
            "value": self.value,
            "element": self.element.value,
        }


def grouping_token(element: Element, previous_element: Optional[Element]) -> Optional[Token]:
    """Return the ghost token that must precede ``element``, if any.

    No ghost is needed after a token of the same element (the tree climb
    places runs) or when the previous token already is the container.
    """
    if previous_element == element:
        return None

    grouping_element = get_grouping_element(element)
    if grouping_element is None or grouping_element == previous_element:
        return None
    return Token.ghost(grouping_element)


def classify(value: str) -> Element:
    """Classify a token value, treating over-long ``#`` runs as plain text."""
    heading = HEADING_PATTERN.match(value)
    if heading and len(heading.group(1)) > MAX_HEADING_LEVEL:
        return Element.SENTENCE
    return determine_element(value)


class TokenBuilder:
    """Accumulates characters of the token being scanned."""

    def __init__(self) -> None:
        self.start: Optional[TokenPosition] = None
        self.value = ""

    @property
    def is_empty(self) -> bool:
        return not self.value

    def append(self, char: str, position: TokenPosition) -> None:
        if self.start is None:
            self.start = TokenPosition(position.line, position.column, position.offset)
        self.value += char

    def create_token(self) -> Token:
        return Token(
            line=self.start.line,
            column=self.start.column,
            length=len(self.value),
            value=self.value,
            element=classify(self.value),
        )


class Tokenizer:
    """Scanner that turns text into an ordered list of tokens.

    Examples:
        >>> [t.value for t in Tokenizer("Hi. There", group=False).tokenize()]
        ['Hi.', ' There']
    """

    def __init__(
        self,
        text: str,
        group: bool = True,
        correlation_id: Optional[str] = None,
        ignore_html_blocks: bool = True
    ) -> None:
        """Initialize the tokenizer.

        Args:
            text: Source text
            group: Synthesize ghost grouping tokens
            correlation_id: Optional correlation ID for log records
            ignore_html_blocks: Treat raw HTML spans as opaque
        """
        self.text = text
        self.group = group
        self.ignore_html_blocks = ignore_html_blocks
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "tokenizer")
        self._reset_state()

    def _reset_state(self) -> None:
        self.position = TokenPosition(1, 1, 0)
        self.current = TokenBuilder()
        self.tokens: List[Token] = []
        self.ghost_count = 0
        self._ignored = False
        self._ignore_end = 0

    @property
    def previous(self) -> Optional[Token]:
        """The most recently pushed token."""
        return self.tokens[-1] if self.tokens else None

    def tokenize(self) -> List[Token]:
        """Scan the whole text and return its tokens."""
        self._reset_state()

        while self.position.offset < len(self.text):
            char = self.text[self.position.offset]
            self._ignored = self._ignore()

            if char == Delimiter.NEWLINE and not self._ignored:
                self._close_current()
                self.current.append(char, self.position)
                self._close_current()
            else:
                self.current.append(char, self.position)
                if not self._ignored and char in DELIMITERS:
                    self._close_current()

            self.position.advance(char)

        self._close_current()

        self.logger.debug(
            "Tokenization completed",
            extra={
                "character_count": len(self.text),
                "token_count": len(self.tokens),
                "ghost_count": self.ghost_count,
            }
        )
        return self.tokens

    def _close_current(self) -> None:
        if self.current.is_empty:
            return
        self._add_token(self.current.create_token())
        self.current = TokenBuilder()

    def _add_token(self, token: Token) -> None:
        if self.group:
            self._add_ghost_token(token.element)
        self.tokens.append(token)

    def _add_ghost_token(self, element: Element) -> None:
        previous = self.previous
        ghost = grouping_token(element, previous.element if previous else None)
        if ghost is not None:
            self.tokens.append(ghost)
            self.ghost_count += 1

    def _ignore(self) -> bool:
        if not self.ignore_html_blocks:
            return False

        offset = self.position.offset
        if self._ignored and offset < self._ignore_end:
            return True

        if html.is_start(self.text, offset):
            self._ignore_end = html.find_end(self.text, offset)
            self.logger.debug(
                "HTML block detected",
                extra={"start_offset": offset, "end_offset": self._ignore_end}
            )
            return True

        return False


def tokenize(
    text: str,
    group: bool = True,
    correlation_id: Optional[str] = None,
    ignore_html_blocks: bool = True
) -> List[Token]:
    """Tokenize ``text``.

    Examples:
        >>> tokenize("Hello world.", group=False)[0].length
        12
    """
    return Tokenizer(
        text,
        group=group,
        correlation_id=correlation_id,
        ignore_html_blocks=ignore_html_blocks,
    ).tokenize()
