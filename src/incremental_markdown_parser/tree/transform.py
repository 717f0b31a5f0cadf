"""Rule registry for re-typing nodes based on their neighbours.

Rules are evaluated in order and the first match wins. The registry is an
extension point for callers post-processing a tree; the parser does not run
it.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from incremental_markdown_parser.hierarchy import Element

from .node import Node


@dataclass
class TransformContext:
    """Neighbourhood of the node being transformed."""

    previous_node: Optional[Node] = None
    next_node: Optional[Node] = None
    parent_element: Optional[Element] = None


@dataclass
class TransformResult:
    """Outcome of a rule: the element to use and how to place the node."""

    element: Element
    should_group: bool
    skip: bool = False


@dataclass
class TransformRule:
    """A named predicate/result pair."""

    match: Callable[[Node, TransformContext], bool]
    transform: Callable[[Node, TransformContext], TransformResult]
    name: str = "unnamed"

    def __post_init__(self) -> None:
        """Validate rule configuration."""
        if not callable(self.match) or not callable(self.transform):
            raise ValueError("Rule match and transform must be callable")
        if not self.name:
            raise ValueError("Rule name cannot be empty")


def _is_empty_paragraph(node: Node) -> bool:
    return node.element == Element.PARAGRAPH and not node.value.strip()


def _next_element(context: TransformContext) -> Optional[Element]:
    return context.next_node.element if context.next_node is not None else None


DEFAULT_RULES: Sequence[TransformRule] = (
    TransformRule(
        name="empty-paragraph-before-item",
        match=lambda node, context: (
            _is_empty_paragraph(node) and _next_element(context) == Element.ITEM
        ),
        transform=lambda node, context: TransformResult(Element.LIST, should_group=False),
    ),
    TransformRule(
        name="empty-paragraph-before-html",
        match=lambda node, context: (
            _is_empty_paragraph(node) and _next_element(context) == Element.HTML
        ),
        transform=lambda node, context: TransformResult(
            Element.PARAGRAPH, should_group=False, skip=True
        ),
    ),
    TransformRule(
        name="item-outside-list",
        match=lambda node, context: (
            node.element == Element.ITEM and context.parent_element != Element.LIST
        ),
        transform=lambda node, context: TransformResult(Element.ITEM, should_group=True),
    ),
    TransformRule(
        name="sentence-outside-container",
        match=lambda node, context: (
            node.element == Element.SENTENCE
            and context.parent_element not in (Element.PARAGRAPH, Element.ITEM)
        ),
        transform=lambda node, context: TransformResult(Element.SENTENCE, should_group=True),
    ),
)


def context_for(node: Node) -> TransformContext:
    """Build the context of ``node`` from its siblings and parent."""
    parent = node.parent
    if parent is None:
        return TransformContext()

    siblings = parent.children
    position = node.position
    return TransformContext(
        previous_node=siblings[position - 1] if position > 0 else None,
        next_node=siblings[position + 1] if position < len(siblings) - 1 else None,
        parent_element=parent.element,
    )


@dataclass
class Transformer:
    """Applies the first matching rule to a node.

    Examples:
        >>> from incremental_markdown_parser.tree import Node
        >>> Transformer().transform(Node("- a", "li"), TransformContext()).should_group
        True
    """

    rules: List[TransformRule] = field(default_factory=lambda: list(DEFAULT_RULES))

    def transform(self, node: Node, context: Optional[TransformContext] = None) -> TransformResult:
        """Return the result of the first matching rule, or the node's own element."""
        if context is None:
            context = context_for(node)

        for rule in self.rules:
            if rule.match(node, context):
                return rule.transform(node, context)

        return TransformResult(node.element, should_group=False)

    def add_rule(self, rule: TransformRule) -> None:
        """Append ``rule`` after the existing rules."""
        self.rules.append(rule)
