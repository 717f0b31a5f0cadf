"""Element kinds and the containment rules between them.

The hierarchy table is the single authority on which element may contain
which. Both the tokenizer (when deciding whether to synthesize a grouping
token) and the tree (when placing a node) consult ``valid_relation``.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional

from incremental_markdown_parser.shared.errors import ArgumentError

MIN_HEADING_LEVEL = 1
MAX_HEADING_LEVEL = 6

HEADING_PATTERN = re.compile(r"^(#+)\s")
ITEM_PATTERN = re.compile(r"^-+\s")
OPENING_TAG_PATTERN = re.compile(r"^<\w+[^>]*>")


class Element(str, Enum):
    """Element kinds of the document tree."""

    ROOT = "root"
    H1 = "h1"
    H2 = "h2"
    H3 = "h3"
    H4 = "h4"
    H5 = "h5"
    H6 = "h6"
    PARAGRAPH = "p"
    SENTENCE = "s"
    LIST = "ul"
    ITEM = "li"
    HTML = "html"

    def __str__(self) -> str:
        return self.value


HEADINGS = (Element.H1, Element.H2, Element.H3, Element.H4, Element.H5, Element.H6)
BLOCKS = (Element.PARAGRAPH, Element.LIST, Element.HTML)


@dataclass(frozen=True)
class HierarchyLevel:
    """Containment rules for a single element kind."""

    level: int
    element: Element
    allowed_parents: FrozenSet[Element] = field(default_factory=frozenset)
    allowed_children: FrozenSet[Element] = field(default_factory=frozenset)
    grouping_element: Optional[Element] = None

    def __post_init__(self) -> None:
        """Validate hierarchy entry."""
        if self.level < 0:
            raise ValueError("Hierarchy level must be >= 0")
        if self.grouping_element is not None and self.grouping_element not in self.allowed_parents:
            raise ValueError("Grouping element must be an allowed parent")


def _heading_entry(level: int) -> HierarchyLevel:
    # A heading may nest the next level down only; h1 accepts every lower heading.
    if level == 1:
        child_headings = HEADINGS[1:]
    else:
        child_headings = HEADINGS[level:level + 1]
    return HierarchyLevel(
        level=level,
        element=HEADINGS[level - 1],
        allowed_parents=frozenset((Element.ROOT,) + HEADINGS[:level - 1]),
        allowed_children=frozenset(child_headings + BLOCKS),
    )


HIERARCHY: Dict[Element, HierarchyLevel] = {
    Element.ROOT: HierarchyLevel(
        level=0,
        element=Element.ROOT,
        allowed_children=frozenset(HEADINGS + BLOCKS),
    ),
    **{heading: _heading_entry(level) for level, heading in enumerate(HEADINGS, start=1)},
    Element.PARAGRAPH: HierarchyLevel(
        level=7,
        element=Element.PARAGRAPH,
        allowed_parents=frozenset((Element.ROOT,) + HEADINGS),
        allowed_children=frozenset({Element.SENTENCE}),
    ),
    Element.LIST: HierarchyLevel(
        level=7,
        element=Element.LIST,
        allowed_parents=frozenset((Element.ROOT,) + HEADINGS + (Element.ITEM,)),
        allowed_children=frozenset({Element.ITEM}),
    ),
    Element.HTML: HierarchyLevel(
        level=7,
        element=Element.HTML,
        allowed_parents=frozenset((Element.ROOT,) + HEADINGS),
    ),
    Element.ITEM: HierarchyLevel(
        level=8,
        element=Element.ITEM,
        allowed_parents=frozenset({Element.LIST}),
        allowed_children=frozenset({Element.SENTENCE}),
        grouping_element=Element.LIST,
    ),
    Element.SENTENCE: HierarchyLevel(
        level=9,
        element=Element.SENTENCE,
        allowed_parents=frozenset({Element.PARAGRAPH, Element.ITEM}),
        grouping_element=Element.PARAGRAPH,
    ),
}


def heading_from_level(level: int) -> Element:
    """Return the heading kind for ``level``.

    Raises:
        ArgumentError: If level is outside 1..6
    """
    if not MIN_HEADING_LEVEL <= level <= MAX_HEADING_LEVEL:
        raise ArgumentError(f"Invalid heading level: {level}")
    return HEADINGS[level - 1]


def is_heading(element: Element) -> bool:
    """Check whether ``element`` is one of h1..h6."""
    return element in HEADINGS


def heading_level(element: Element) -> int:
    """Return 1..6 for a heading kind.

    Raises:
        ArgumentError: If element is not a heading
    """
    if not is_heading(element):
        raise ArgumentError(f"Not a heading: {element}")
    return HEADINGS.index(element) + 1


def get_level(element: Element) -> int:
    """Return the nesting depth of ``element`` (root is 0)."""
    return HIERARCHY[element].level


def valid_parent(element: Element, parent: Element) -> bool:
    """Check that ``parent`` is in the allowed parents of ``element``."""
    return parent in HIERARCHY[element].allowed_parents


def valid_child(element: Element, child: Element) -> bool:
    """Check that ``child`` is in the allowed children of ``element``."""
    return child in HIERARCHY[element].allowed_children


def valid_parent_level(child: Element, parent: Element) -> bool:
    """Check that ``child`` sits strictly deeper than ``parent``."""
    return get_level(child) > get_level(parent)


def valid_relation(parent: Element, child: Element) -> bool:
    """Check whether ``child`` may be placed directly under ``parent``.

    All three rules must hold: the child is allowed by the parent, the parent
    is allowed by the child, and the child's level is deeper.
    """
    if not valid_child(parent, child):
        return False

    if not valid_parent(child, parent):
        return False

    return valid_parent_level(child, parent)


def get_grouping_element(element: Element) -> Optional[Element]:
    """Return the container a bare ``element`` must be wrapped in, if any."""
    return HIERARCHY[element].grouping_element


def determine_element(value: str) -> Element:
    """Classify a raw token value.

    Rules, in priority order: ``#`` run + whitespace is a heading of the run's
    length, ``-`` run + whitespace is a list item, a leading newline is a
    paragraph separator, an opening tag is raw HTML, anything else is a
    sentence.

    Raises:
        ArgumentError: For a ``#`` run longer than six
    """
    heading = HEADING_PATTERN.match(value)
    if heading:
        return heading_from_level(len(heading.group(1)))

    if ITEM_PATTERN.match(value):
        return Element.ITEM

    if value.startswith("\n"):
        return Element.PARAGRAPH

    trimmed = value.strip()
    if trimmed.startswith("<") and OPENING_TAG_PATTERN.match(trimmed):
        return Element.HTML

    return Element.SENTENCE
