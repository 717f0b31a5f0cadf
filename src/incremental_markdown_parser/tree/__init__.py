"""Persistent document tree.

Key Components:
    Node: Immutable tree vertex with climb-insertion and copy-on-write updates
    TokenMetadata: Source position carried by nodes built from tokens
    to_records / deserialize: Flat parent-id record format
    Transformer: Optional rule registry for re-typing nodes
    use_id_generator: Swap the node id source, e.g. for reproducible ids
"""

from .identifiers import (
    SequentialIdGenerator,
    generate_id,
    random_id,
    use_id_generator,
)
from .node import Node, TokenMetadata
from .serialization import deserialize, to_records
from .transform import (
    DEFAULT_RULES,
    TransformContext,
    Transformer,
    TransformResult,
    TransformRule,
    context_for,
)

__all__ = [
    "DEFAULT_RULES",
    "Node",
    "SequentialIdGenerator",
    "TokenMetadata",
    "TransformContext",
    "TransformResult",
    "TransformRule",
    "Transformer",
    "context_for",
    "deserialize",
    "generate_id",
    "random_id",
    "to_records",
    "use_id_generator",
]
