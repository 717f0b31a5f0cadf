"""Element hierarchy engine.

Key Components:
    Element: Enumeration of element kinds
    HIERARCHY: Static containment table, one HierarchyLevel per kind
    valid_relation: The legality predicate used by tokenizer and tree
    determine_element: Classification of raw token values
"""

from .elements import (
    HEADINGS,
    HIERARCHY,
    MAX_HEADING_LEVEL,
    Element,
    HierarchyLevel,
    determine_element,
    get_grouping_element,
    get_level,
    heading_from_level,
    heading_level,
    is_heading,
    valid_child,
    valid_parent,
    valid_parent_level,
    valid_relation,
)

__all__ = [
    "HEADINGS",
    "HIERARCHY",
    "MAX_HEADING_LEVEL",
    "Element",
    "HierarchyLevel",
    "determine_element",
    "get_grouping_element",
    "get_level",
    "heading_from_level",
    "heading_level",
    "is_heading",
    "valid_child",
    "valid_parent",
    "valid_parent_level",
    "valid_relation",
]
