"""Character-offset helpers that locate raw HTML spans in text.

These are not an HTML parser: nested tags with the same name, attribute values
containing ``>`` and malformed markup are not handled.
"""

import re

TAG_NAME_PATTERN = re.compile(r"<([a-zA-Z][a-zA-Z0-9-]*)")
SELF_CLOSING = "/>"


def is_start(text: str, pos: int) -> bool:
    """Check whether an HTML block opens at ``pos`` (``<`` followed by a letter)."""
    if pos < 0 or pos + 1 >= len(text):
        return False
    return text[pos] == "<" and text[pos + 1].isascii() and text[pos + 1].isalpha()


def find_end(text: str, start: int) -> int:
    """Return the offset just past the HTML span opened at ``start``.

    The span ends at the first of the matching closing tag or a ``/>``. Without
    either the span runs to the end of the text. If no tag opens at ``start``,
    ``start`` itself is returned.
    """
    tag_match = TAG_NAME_PATTERN.match(text, start)
    if not tag_match:
        return start

    close_tag = f"</{tag_match.group(1)}>"
    close_index = text.find(close_tag, start)
    self_close_index = text.find(SELF_CLOSING, start)

    if self_close_index != -1 and (close_index == -1 or self_close_index < close_index):
        return self_close_index + len(SELF_CLOSING)
    if close_index != -1:
        return close_index + len(close_tag)
    return len(text)
