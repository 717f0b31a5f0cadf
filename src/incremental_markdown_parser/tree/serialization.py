"""Flat parent-id record format for trees.

A record is ``{"id", "value", "el", "pid", "children"}`` where ``pid`` is the
parent's id and ``children`` lists child ids in order. Records are produced in
pre-order, so the first record is always the exported subtree's root.
"""

from collections import defaultdict
from typing import Any, Dict, List, Mapping, Sequence

from incremental_markdown_parser.shared.errors import StructuralError

from .node import Node


def to_records(node: Node) -> List[Dict[str, Any]]:
    """Flatten ``node`` and its descendants into records, root first."""
    return [
        {
            "id": current.id,
            "value": current.value,
            "el": current.element.value,
            "pid": current.parent.id if current.parent is not None else None,
            "children": [child.id for child in current.children],
        }
        for current in node.to_array()
    ]


def deserialize(records: Sequence[Mapping[str, Any]]) -> Node:
    """Rebuild a tree from records.

    The first record is taken as the root and its own ``pid`` is ignored, so
    an exported subtree comes back as a standalone tree. Records that cannot
    be reached from the first one are dropped. ``index`` and ``metadata`` are
    not part of the format and come back as defaults.

    Raises:
        StructuralError: If ``records`` is empty or a relation is invalid
    """
    if not records:
        raise StructuralError("Cannot deserialize an empty record list")

    by_parent: Dict[Any, List[Mapping[str, Any]]] = defaultdict(list)
    for record in records[1:]:
        by_parent[record.get("pid")].append(record)

    def build(record: Mapping[str, Any]) -> Node:
        return Node(
            value=record.get("value", ""),
            element=record["el"],
            id=record["id"],
            children=[build(child) for child in by_parent.get(record["id"], ())],
        )

    return build(records[0])
