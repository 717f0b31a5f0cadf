"""Tests for the single-pass tokenizer."""

import logging

import pytest

from incremental_markdown_parser.hierarchy import Element
from incremental_markdown_parser.tokenization import (
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


def _shape(tokens):
    return [(token.element, token.value) for token in tokens]


class TestTokenPosition:
    """Test suite for scanner positions."""

    def test_validation(self):
        """Test that positions are 1-based for line and column."""
        with pytest.raises(ValueError, match="Line"):
            TokenPosition(0, 1, 0)
        with pytest.raises(ValueError, match="Column"):
            TokenPosition(1, 0, 0)
        with pytest.raises(ValueError, match="Offset"):
            TokenPosition(1, 1, -1)

    def test_advance(self):
        """Test line and column bookkeeping."""
        position = TokenPosition(1, 1, 0)
        position.advance("a")
        assert (position.line, position.column, position.offset) == (1, 2, 1)
        position.advance("\n")
        assert (position.line, position.column, position.offset) == (2, 1, 2)


class TestToken:
    """Test suite for Token."""

    def test_length_must_match_value(self):
        """Test token length validation."""
        with pytest.raises(ValueError, match="length"):
            Token(line=1, column=1, length=3, value="ab", element=Element.SENTENCE)

    def test_line_and_column_together(self):
        """Test that a token is either positioned or not."""
        with pytest.raises(ValueError, match="together"):
            Token(line=1, column=None, length=1, value="a", element=Element.SENTENCE)

    def test_ghost(self):
        """Test zero-width grouping tokens."""
        ghost = Token.ghost(Element.PARAGRAPH)
        assert ghost.is_ghost is True
        assert ghost.length == 0
        assert ghost.value == ""
        assert ghost.line is None and ghost.column is None

    def test_real_token_is_not_ghost(self):
        """Test that positioned tokens are real."""
        token = Token(line=1, column=1, length=2, value="a.", element=Element.SENTENCE)
        assert token.is_ghost is False

    def test_to_dict(self):
        """Test dictionary conversion."""
        token = Token(line=2, column=3, length=3, value="Hi.", element=Element.SENTENCE)
        assert token.to_dict() == {
            "line": 2,
            "column": 3,
            "length": 3,
            "value": "Hi.",
            "element": "s",
        }


class TestClassify:
    """Test suite for guarded classification."""

    def test_overlong_heading_is_sentence(self):
        """Test that seven hashes do not raise."""
        assert classify("####### x") is Element.SENTENCE

    def test_delegates_otherwise(self):
        """Test that regular values classify normally."""
        assert classify("### x") is Element.H3
        assert classify("- x") is Element.ITEM


class TestTokenBuilder:
    """Test suite for the token buffer."""

    def test_records_position_of_first_character(self):
        """Test that the start position is captured on first append."""
        builder = TokenBuilder()
        assert builder.is_empty
        builder.append("a", TokenPosition(3, 5, 20))
        builder.append("b", TokenPosition(3, 6, 21))
        token = builder.create_token()
        assert (token.line, token.column, token.length, token.value) == (3, 5, 2, "ab")


class TestDelimiters:
    """Test suite for the delimiter set."""

    def test_members(self):
        """Test the characters that end a token."""
        assert DELIMITERS == {"\n", ";", "!", "?", "."}
        assert Delimiter.PERIOD == "."


class TestTokenizerWithoutGrouping:
    """Test suite for raw tokenizer output."""

    def test_single_sentence(self):
        """Test a sentence with its trailing delimiter."""
        tokens = tokenize("Hello world.", group=False)
        assert len(tokens) == 1
        token = tokens[0]
        assert token.element is Element.SENTENCE
        assert (token.line, token.column, token.length) == (1, 1, 12)
        assert token.value == "Hello world."

    def test_headings_and_separator(self):
        """Test that a newline becomes its own paragraph token."""
        tokens = tokenize("# Heading 1\n## Heading 2", group=False)
        assert [(t.element, t.value, t.line, t.column, t.length) for t in tokens] == [
            (Element.H1, "# Heading 1", 1, 1, 11),
            (Element.PARAGRAPH, "\n", 1, 12, 1),
            (Element.H2, "## Heading 2", 2, 1, 12),
        ]

    def test_all_delimiters_split(self):
        """Test each delimiter closing a token."""
        tokens = tokenize("One. Two! Three? Four; five", group=False)
        assert [t.value for t in tokens] == ["One.", " Two!", " Three?", " Four;", " five"]
        assert all(t.element is Element.SENTENCE for t in tokens)

    def test_columns_after_split(self):
        """Test that a token starts where its first character is."""
        tokens = tokenize("Hi. There", group=False)
        assert [(t.value, t.column) for t in tokens] == [("Hi.", 1), (" There", 4)]

    def test_consecutive_newlines(self):
        """Test that every newline is a separate token."""
        tokens = tokenize("a\n\nb", group=False)
        assert [(t.value, t.line, t.column) for t in tokens] == [
            ("a", 1, 1),
            ("\n", 1, 2),
            ("\n", 2, 1),
            ("b", 3, 1),
        ]

    def test_list_items(self):
        """Test item classification per line."""
        tokens = tokenize("- first\n- second", group=False)
        assert _shape(tokens) == [
            (Element.ITEM, "- first"),
            (Element.PARAGRAPH, "\n"),
            (Element.ITEM, "- second"),
        ]

    def test_empty_text(self):
        """Test that nothing yields no tokens."""
        assert tokenize("", group=False) == []
        assert tokenize("") == []

    def test_values_cover_the_source(self):
        """Test that real token values concatenate back to the text."""
        text = "# T\nOne. Two!\n- a; b\n<div>x.</div> tail?"
        tokens = tokenize(text)
        assert "".join(t.value for t in tokens) == text

    def test_overlong_heading_run(self):
        """Test that seven hashes produce a sentence, not an error."""
        tokens = tokenize("####### Too deep", group=False)
        assert _shape(tokens) == [(Element.SENTENCE, "####### Too deep")]


class TestTokenizerHtml:
    """Test suite for opaque HTML spans."""

    def test_html_block_is_one_token(self):
        """Test a closed element."""
        tokens = tokenize("<div>Some content</div>")
        assert len(tokens) == 1
        assert tokens[0].element is Element.HTML
        assert tokens[0].length == 23

    def test_delimiters_inside_html_do_not_split(self):
        """Test periods and newlines inside a span."""
        tokens = tokenize("<p>One. Two.\nThree!</p>", group=False)
        assert _shape(tokens) == [(Element.HTML, "<p>One. Two.\nThree!</p>")]

    def test_self_closing_tag(self):
        """Test that ``/>`` ends the span."""
        tokens = tokenize("<img src='a'/>\nNext.", group=False)
        assert _shape(tokens) == [
            (Element.HTML, "<img src='a'/>"),
            (Element.PARAGRAPH, "\n"),
            (Element.SENTENCE, "Next."),
        ]

    def test_inline_html_inside_sentence(self):
        """Test that a span inside a sentence stays part of it."""
        tokens = tokenize("See <b>this. now</b> here.", group=False)
        assert _shape(tokens) == [(Element.SENTENCE, "See <b>this. now</b> here.")]

    def test_unclosed_tag_runs_to_end(self):
        """Test a span without a closing tag."""
        tokens = tokenize("<div>open. still\nopen", group=False)
        assert len(tokens) == 1
        assert tokens[0].element is Element.HTML

    def test_adjacent_blocks(self):
        """Test that a span may start right where another ended."""
        tokens = tokenize("<b>a.</b><i>b.</i>", group=False)
        assert _shape(tokens) == [(Element.HTML, "<b>a.</b><i>b.</i>")]

    def test_ignoring_disabled(self):
        """Test that delimiters split HTML when spans are not opaque."""
        tokens = tokenize("<b>Hi.</b>", group=False, ignore_html_blocks=False)
        assert _shape(tokens) == [
            (Element.HTML, "<b>Hi."),
            (Element.SENTENCE, "</b>"),
        ]

    def test_less_than_without_tag(self):
        """Test that ``<`` not followed by a letter is plain text."""
        tokens = tokenize("a < b. c", group=False)
        assert [t.value for t in tokens] == ["a < b.", " c"]


class TestGroupingToken:
    """Test suite for grouping_token."""

    def test_first_token_is_grouped(self):
        """Test a ghost container for a leading sentence or item."""
        assert grouping_token(Element.SENTENCE, None) == Token.ghost(Element.PARAGRAPH)
        assert grouping_token(Element.ITEM, None) == Token.ghost(Element.LIST)

    def test_runs_are_not_grouped(self):
        """Test that a repeated element needs no container."""
        assert grouping_token(Element.ITEM, Element.ITEM) is None
        assert grouping_token(Element.SENTENCE, Element.SENTENCE) is None

    def test_existing_container(self):
        """Test that the container itself counts as the group."""
        assert grouping_token(Element.SENTENCE, Element.PARAGRAPH) is None
        assert grouping_token(Element.ITEM, Element.LIST) is None

    def test_element_change(self):
        """Test a new container when the element changes."""
        assert grouping_token(Element.ITEM, Element.SENTENCE) == Token.ghost(Element.LIST)
        assert grouping_token(Element.SENTENCE, Element.ITEM) == Token.ghost(Element.PARAGRAPH)
        assert grouping_token(Element.SENTENCE, Element.H1) == Token.ghost(Element.PARAGRAPH)

    def test_ungrouped_elements(self):
        """Test elements that never need a container."""
        assert grouping_token(Element.H2, Element.SENTENCE) is None
        assert grouping_token(Element.HTML, None) is None


class TestTokenizerGrouping:
    """Test suite for ghost grouping tokens."""

    def test_sentence_gets_paragraph(self):
        """Test a ghost paragraph before the first sentence."""
        tokens = tokenize("Hello world.")
        assert len(tokens) == 2
        assert tokens[0].is_ghost and tokens[0].element is Element.PARAGRAPH
        assert tokens[1].element is Element.SENTENCE

    def test_sentence_runs_are_not_regrouped(self):
        """Test that consecutive sentences share one ghost."""
        tokens = tokenize("One. Two. Three.")
        assert [t.element for t in tokens] == [
            Element.PARAGRAPH,
            Element.SENTENCE,
            Element.SENTENCE,
            Element.SENTENCE,
        ]
        assert sum(1 for t in tokens if t.is_ghost) == 1

    def test_sentence_after_separator(self):
        """Test that a newline token already acts as the container marker."""
        tokens = tokenize("# T\nText.")
        assert [(t.element, t.is_ghost) for t in tokens] == [
            (Element.H1, False),
            (Element.PARAGRAPH, False),
            (Element.SENTENCE, False),
        ]

    def test_items_get_list(self):
        """Test ghost lists before items following other kinds."""
        tokens = tokenize("- a\n- b")
        assert [(t.element, t.is_ghost) for t in tokens] == [
            (Element.LIST, True),
            (Element.ITEM, False),
            (Element.PARAGRAPH, False),
            (Element.LIST, True),
            (Element.ITEM, False),
        ]

    def test_sentence_after_item(self):
        """Test that a sentence after an item gets its own paragraph marker."""
        tokens = tokenize("- item. more")
        assert [t.element for t in tokens] == [
            Element.LIST,
            Element.ITEM,
            Element.PARAGRAPH,
            Element.SENTENCE,
        ]

    def test_headings_and_html_never_grouped(self):
        """Test kinds without a grouping element."""
        tokens = tokenize("# A\n<div>x</div>")
        assert not any(t.is_ghost for t in tokens)

    def test_ghost_count(self):
        """Test the tokenizer's ghost counter."""
        tokenizer = Tokenizer("One. - two", group=True)
        tokens = tokenizer.tokenize()
        assert tokenizer.ghost_count == sum(1 for t in tokens if t.is_ghost)

    def test_tokenize_is_repeatable(self):
        """Test that a tokenizer can be run twice."""
        tokenizer = Tokenizer("One. Two.")
        assert _shape(tokenizer.tokenize()) == _shape(tokenizer.tokenize())


class TestTokenizerLogging:
    """Test suite for tokenizer log records."""

    def test_summary_is_logged(self, caplog):
        """Test the debug summary with correlation data."""
        with caplog.at_level(logging.DEBUG, logger="incremental_markdown_parser.tokenization.tokenizer"):
            Tokenizer("Hello. <b>x</b>", correlation_id="abc").tokenize()

        summary = [r for r in caplog.records if r.getMessage() == "Tokenization completed"]
        assert len(summary) == 1
        assert summary[0].correlation_id == "abc"
        assert summary[0].component == "tokenizer"
        assert any(r.getMessage() == "HTML block detected" for r in caplog.records)
