"""Parse orchestration: tokenize text and fold the tokens into a tree.

Besides whole-document parsing this module supports incremental edits: the
text of a single node is re-tokenized and spliced back into an existing tree
without rebuilding the rest of it.
"""

import uuid
from contextlib import nullcontext
from dataclasses import dataclass
from itertools import dropwhile
from typing import Any, Callable, ContextManager, Dict, List, Optional, Sequence, Tuple

from incremental_markdown_parser.shared import (
    ParseError,
    ParseMetrics,
    ParserConfig,
    TreeConfig,
    get_logger,
)
from incremental_markdown_parser.tokenization import Token, grouping_token, tokenize
from incremental_markdown_parser.tools import profiling
from incremental_markdown_parser.tools.profiling import PerformanceMonitor
from incremental_markdown_parser.tree import (
    Node,
    SequentialIdGenerator,
    TokenMetadata,
    use_id_generator,
)

NodeCallback = Callable[[Node], None]


@dataclass
class ParseResult:
    """Outcome of a parse call."""

    tree: Node
    tokens: List[Token]
    metrics: Optional[ParseMetrics] = None
    correlation_id: Optional[str] = None

    @property
    def node_count(self) -> int:
        """Number of nodes in the tree, root included."""
        return len(self.tree.to_array())

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary representation."""
        return {
            "tree": self.tree.to_dict(),
            "tokens": [token.to_dict() for token in self.tokens],
            "metrics": self.metrics.to_dict() if self.metrics is not None else None,
            "correlation_id": self.correlation_id,
        }


def _token_metadata(token: Token) -> TokenMetadata:
    return TokenMetadata(
        line=token.line or 0,
        column=token.column or 0,
        length=token.length,
    )


def _node_params(token: Token, index: int) -> Dict[str, Any]:
    return {
        "value": token.value,
        "element": token.element,
        "index": index,
        "metadata": _token_metadata(token),
    }


def node_from_token(token: Token, index: int = 0) -> Node:
    """Create a detached node carrying ``token``'s value, element and position."""
    return Node(**_node_params(token, index))


def _id_scope(tree_config: TreeConfig, root: Optional[Node]) -> ContextManager[Any]:
    if tree_config.id_strategy == "sequential":
        return use_id_generator(SequentialIdGenerator.after(root, tree_config.id_prefix))
    return nullcontext()


def create_node_from_tokens(
    root: Node,
    tokens: Sequence[Token],
    target: Optional[Node] = None,
    on_node: Optional[NodeCallback] = None,
) -> Tuple[Node, Node]:
    """Fold ``tokens`` into ``root`` one node at a time.

    Each token becomes a node inserted at the nearest legal place above the
    previously inserted node (``target`` for the first one, defaulting to
    ``root``), with an index one past its anchor's.

    Args:
        root: Tree to insert into
        tokens: Tokens in source order
        target: Anchor for the first token
        on_node: Called with every inserted node

    Returns:
        Tuple of the new root and the last inserted node (the anchor when
        ``tokens`` is empty)

    Raises:
        ParseError: If a token cannot be placed
    """
    leaf = target if target is not None else root

    for token in tokens:
        try:
            node = node_from_token(token, index=leaf.index + 1)
            root, leaf = root.add(node, leaf)
        except ParseError:
            raise
        except Exception as e:
            raise ParseError(str(e), token.line) from e

        if on_node is not None:
            on_node(leaf)

    return root, leaf


def _edit_node(
    root: Node,
    target: Node,
    tokens: Sequence[Token],
    group: bool,
    on_node: Optional[NodeCallback],
    correlation_id: Optional[str] = None,
) -> Tuple[Node, Node]:
    current = root.find_by_id(target.id)
    if current is None:
        raise ParseError(f"Target node {target.id} not found in tree", target.metadata.line)

    real_tokens = list(dropwhile(lambda token: token.is_ghost, tokens))
    if not real_tokens:
        root, updated = current.replace_with(current.update(value=""))
        return root, updated.leaf()

    first, rest = real_tokens[0], real_tokens[1:]
    if first.element is not current.element:
        get_logger(__name__, correlation_id, "edit").warning(
            "Edited node keeps its element",
            extra={
                "node_id": current.id,
                "element": current.element.value,
                "text_element": first.element.value,
            }
        )

    # The continuation was grouped against the first token; regroup it
    # against the element the edited node actually keeps.
    if group and rest:
        ghost = grouping_token(rest[0].element, current.element)
        if ghost is not None:
            rest.insert(0, ghost)

    update_params = {"value": first.value, "metadata": _token_metadata(first)}
    try:
        if not rest:
            root, updated = current.replace_with(current.update(**update_params))
            return root, updated.leaf()

        root, leaf = current.update_and_split(
            update_params, _node_params(rest[0], current.index + 1)
        )
    except ParseError:
        raise
    except Exception as e:
        raise ParseError(str(e), first.line) from e

    if on_node is not None:
        on_node(leaf)

    return create_node_from_tokens(root, rest[1:], target=leaf, on_node=on_node)


def create_node_from_text(
    text: str,
    root: Optional[Node] = None,
    target: Optional[Node] = None,
    group: Optional[bool] = None,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
    monitor: Optional[PerformanceMonitor] = None,
) -> Tuple[List[Token], Node, Node]:
    """Tokenize ``text`` and merge it into a tree.

    Without ``target`` every token is folded into ``root`` (a fresh root when
    omitted). With ``target`` the text replaces that node's value: the first
    real token rewrites it in place (keeping its element), the next token is
    inserted right after it, and the remaining tokens follow. Leading ghost
    tokens are ignored in that case, the continuation gets the grouping token
    the kept element calls for, and empty text clears the node's value.

    Args:
        text: Source text
        root: Tree to merge into
        target: Node being edited, matched by id in ``root``
        group: Synthesize grouping tokens; defaults to the configuration
        config: Parser configuration
        correlation_id: Optional correlation ID for log records
        monitor: Metrics collector; must already be started

    Returns:
        Tuple of every token produced, the new root and the last node touched

    Raises:
        ParseError: If the target is missing or a token cannot be placed

    Examples:
        >>> tokens, root, leaf = create_node_from_text("# Title")
        >>> root.children[0].value
        '# Title'
    """
    config = config or ParserConfig()
    if group is None:
        group = config.tokenization.group

    tokens = tokenize(
        text,
        group=group,
        correlation_id=correlation_id,
        ignore_html_blocks=config.tokenization.ignore_html_blocks,
    )
    if monitor is not None:
        monitor.finish_tokenizing(len(tokens))
    on_node = monitor.node_processed if monitor is not None else None

    with _id_scope(config.tree, root):
        if root is None:
            root = Node.init_root()

        if target is None:
            root, leaf = create_node_from_tokens(root, tokens, on_node=on_node)
        else:
            root, leaf = _edit_node(root, target, tokens, group, on_node, correlation_id)

    return tokens, root, leaf


def parse(
    text: str,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
    monitor: Optional[PerformanceMonitor] = None,
) -> ParseResult:
    """Parse a whole document.

    Args:
        text: Source text
        config: Parser configuration
        correlation_id: Optional correlation ID; generated when tracking is on
        monitor: Metrics collector; the shared one is used when the
            configuration enables metrics

    Returns:
        ParseResult with the tree, the tokens and optional metrics

    Raises:
        ParseError: If a token cannot be placed (only possible without grouping)

    Examples:
        >>> result = parse("# Title\\nHello world.")
        >>> [child.element.value for child in result.tree.children]
        ['h1']
    """
    config = config or ParserConfig()
    if correlation_id is None and config.global_.enable_correlation_tracking:
        correlation_id = str(uuid.uuid4())
    if monitor is None and config.global_.enable_metrics:
        monitor = profiling.monitor

    logger = get_logger(__name__, correlation_id, "parse")
    logger.info(
        "Starting parse operation",
        extra={
            "text_length": len(text),
            "group": config.tokenization.group,
            "collect_metrics": monitor is not None,
        }
    )

    if monitor is not None:
        monitor.start()

    try:
        tokens, tree, _ = create_node_from_text(
            text,
            config=config,
            correlation_id=correlation_id,
            monitor=monitor,
        )
    except ParseError as e:
        logger.exception(
            "Parse operation failed",
            extra={"line": e.line, "reason": e.reason}
        )
        raise

    result = ParseResult(
        tree=tree,
        tokens=tokens,
        metrics=monitor.get_metrics() if monitor is not None else None,
        correlation_id=correlation_id,
    )

    logger.info(
        "Parse operation completed",
        extra={
            "token_count": len(tokens),
            "node_count": result.node_count,
            "total_time_ms": result.metrics.total_time_ms if result.metrics else None,
        }
    )
    return result


def parse_with_metrics(
    text: str,
    config: Optional[ParserConfig] = None,
    monitor: Optional[PerformanceMonitor] = None,
) -> ParseResult:
    """Parse ``text`` and always attach metrics (shared collector by default)."""
    return parse(text, config=config, monitor=monitor or profiling.monitor)
