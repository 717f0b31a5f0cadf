"""Persistent document tree.

Nodes are immutable. Every operation that changes the tree returns a new
version and leaves the old one intact. Children handed to a node are
re-parented as copies whose ``parent`` is the new node; the copies are made
lazily on first access to ``children``, so untouched subtrees are shared
between versions until someone walks into them.
"""

import json
from dataclasses import asdict, dataclass
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from incremental_markdown_parser.hierarchy import Element, valid_relation
from incremental_markdown_parser.shared.errors import StructuralError
from incremental_markdown_parser.shared.logging import get_logger

from .identifiers import generate_id

logger = get_logger(__name__, None, "tree")


@dataclass(frozen=True)
class TokenMetadata:
    """Source position of the token a node was created from."""

    line: int = 0
    column: int = 0
    length: int = 0

    def __post_init__(self) -> None:
        """Validate metadata values."""
        if self.line < 0 or self.column < 0 or self.length < 0:
            raise ValueError("Metadata values must be >= 0")

    def to_dict(self) -> Dict[str, int]:
        """Convert metadata to dictionary representation."""
        return asdict(self)


MetadataLike = Union[TokenMetadata, Mapping[str, int]]
Updater = Callable[["Node"], Union["Node", Mapping[str, Any]]]


class Node:
    """Immutable tree vertex.

    Equality is identity. Two versions of the same logical node share their
    ``id``; use it to match nodes across versions.
    """

    __slots__ = (
        "_id",
        "_value",
        "_element",
        "_index",
        "_metadata",
        "_parent",
        "_sources",
        "_children",
    )

    def __init__(
        self,
        value: str,
        element: Union[Element, str],
        parent: Optional["Node"] = None,
        children: Iterable["Node"] = (),
        id: Optional[str] = None,
        index: int = 0,
        metadata: Optional[MetadataLike] = None,
    ) -> None:
        """Create a node and validate its place in the hierarchy.

        Args:
            value: Source text of the node (empty for containers and the root)
            element: Element kind
            parent: Owning node, None for a root
            children: Child nodes; they are re-parented to this node
            id: Explicit id, generated when omitted
            index: Creation-order marker
            metadata: Source position of the originating token

        Raises:
            StructuralError: If a child or the parent breaks the hierarchy
        """
        if not isinstance(value, str):
            raise TypeError("Node value must be a string")
        if index < 0:
            raise ValueError("Node index must be >= 0")
        if metadata is None:
            metadata = TokenMetadata()
        elif not isinstance(metadata, TokenMetadata):
            metadata = TokenMetadata(**metadata)

        self._id = id if id is not None else generate_id()
        self._value = value
        self._element = Element(element)
        self._index = index
        self._metadata = metadata
        self._parent = parent
        self._sources: Tuple["Node", ...] = tuple(children)
        self._children: Optional[Tuple["Node", ...]] = None

        if parent is not None:
            parent.validate_hierarchy(self)
        for child in self._sources:
            self.validate_hierarchy(child)

    @classmethod
    def init_root(cls, id: Optional[str] = None) -> "Node":
        """Create an empty root node."""
        return cls(value="", element=Element.ROOT, index=0, id=id)

    def __repr__(self) -> str:
        return (
            f"Node(id={self._id!r}, element={self._element.value!r}, "
            f"value={self._value!r}, index={self._index})"
        )

    # Attributes

    @property
    def id(self) -> str:
        return self._id

    @property
    def value(self) -> str:
        return self._value

    @property
    def element(self) -> Element:
        return self._element

    @property
    def index(self) -> int:
        return self._index

    @property
    def metadata(self) -> TokenMetadata:
        return self._metadata

    @property
    def parent(self) -> Optional["Node"]:
        return self._parent

    @property
    def children(self) -> Tuple["Node", ...]:
        """Child nodes, each with ``parent`` pointing at this node."""
        children = self._children
        if children is None:
            # _sources stays intact: a reader racing the first access builds
            # an equal tuple instead of an empty one.
            children = tuple(child._adopted_by(self) for child in self._sources)
            self._children = children
        return children

    def _child_nodes(self) -> Tuple["Node", ...]:
        # Children in whatever form is at hand, without forcing re-parenting.
        return self._children if self._children is not None else self._sources

    def _adopted_by(self, parent: "Node") -> "Node":
        if self._parent is parent:
            return self
        clone = Node.__new__(Node)
        clone._id = self._id
        clone._value = self._value
        clone._element = self._element
        clone._index = self._index
        clone._metadata = self._metadata
        clone._parent = parent
        clone._sources = self._child_nodes()
        clone._children = None
        return clone

    # Navigation

    @property
    def content(self) -> str:
        """This node's value followed by all descendant values in document order."""
        return self._value + "".join(child.content for child in self._child_nodes())

    @property
    def position(self) -> int:
        """Index of this node among its parent's children (0 for a root)."""
        if self._parent is None:
            return 0
        for position, sibling in enumerate(self._parent.children):
            if sibling is self or sibling.id == self._id:
                return position
        raise StructuralError(f"Node {self._id} is not among its parent's children")

    @property
    def first_child(self) -> Optional["Node"]:
        children = self.children
        return children[0] if children else None

    @property
    def last_child(self) -> Optional["Node"]:
        children = self.children
        return children[-1] if children else None

    @property
    def root(self) -> "Node":
        """Topmost ancestor (the node itself for a root)."""
        node = self
        while node._parent is not None:
            node = node._parent
        return node

    @property
    def depth(self) -> int:
        """Number of ancestors (root = 0)."""
        return sum(1 for _ in self.ancestors())

    def ancestors(self) -> Iterator["Node"]:
        """Yield parent, grandparent, ... up to the root."""
        node = self._parent
        while node is not None:
            yield node
            node = node._parent

    def previous(self) -> Optional["Node"]:
        """Preceding sibling, else the parent, else None for a root."""
        if self._parent is None:
            return None
        position = self.position
        return self._parent.children[position - 1] if position > 0 else self._parent

    def next(self) -> Optional["Node"]:
        """Following sibling, else the parent, else None for a root."""
        if self._parent is None:
            return None
        position = self.position
        siblings = self._parent.children
        return siblings[position + 1] if position < len(siblings) - 1 else self._parent

    def leaf(self) -> "Node":
        """Descend through first children to the deepest first-created node."""
        node = self
        while node.children:
            node = node.children[0]
        return node

    def child_by_id(self, node_id: str) -> Optional["Node"]:
        """Find a direct child by id."""
        for child in self.children:
            if child.id == node_id:
                return child
        return None

    def find_by_id(self, node_id: str) -> Optional["Node"]:
        """Depth-first search for a node by id."""
        if self._id == node_id:
            return self

        for child in self.children:
            found = child.find_by_id(node_id)
            if found is not None:
                return found

        return None

    def to_array(self) -> List["Node"]:
        """Flatten the subtree in pre-order."""
        nodes = [self]
        for child in self.children:
            nodes.extend(child.to_array())
        return nodes

    def visit(self, callback: Callable[["Node"], None]) -> None:
        """Call ``callback`` on every node of the subtree in pre-order."""
        callback(self)
        for child in self.children:
            child.visit(callback)

    def map(self, transform: Callable[["Node"], "Node"]) -> "Node":
        """Copy-on-write transform of the subtree.

        ``transform`` is applied top-down. A node is rebuilt only when one of
        its descendants changed; otherwise the original object is returned.
        """
        transformed = transform(self)

        children = transformed.children
        if not children:
            return transformed

        changed = False
        new_children = []
        for child in children:
            new_child = child.map(transform)
            if new_child is not child:
                changed = True
            new_children.append(new_child)

        return transformed.update(children=new_children) if changed else transformed

    # Validators

    def valid_relation(self, child: "Node") -> bool:
        """Check whether ``child`` may sit directly under this node."""
        return valid_relation(self._element, child.element)

    def valid_position(self, index: int) -> bool:
        return 0 <= index <= len(self._child_nodes())

    def validate_hierarchy(self, child: "Node") -> None:
        """Raise StructuralError unless ``child`` may sit directly under this node."""
        if child.id == self._id:
            raise StructuralError("A node cannot be added as its own child")
        if not self.valid_relation(child):
            raise StructuralError(
                f"Invalid hierarchy: {child.element.value} cannot be added to "
                f"{self._element.value}"
            )

    # Updates

    def update(
        self,
        value: Optional[str] = None,
        element: Optional[Union[Element, str]] = None,
        parent: Optional["Node"] = None,
        children: Optional[Sequence["Node"]] = None,
        id: Optional[str] = None,
        index: Optional[int] = None,
        metadata: Optional[MetadataLike] = None,
    ) -> "Node":
        """Return a copy with the given fields replaced; None keeps a field."""
        return Node(
            value=self._value if value is None else value,
            element=self._element if element is None else element,
            parent=self._parent if parent is None else parent,
            children=self._child_nodes() if children is None else children,
            id=self._id if id is None else id,
            index=self._index if index is None else index,
            metadata=self._metadata if metadata is None else metadata,
        )

    def update_by_id(self, node_id: str, updater: Updater) -> "Node":
        """Rewrite the node with ``node_id`` anywhere in the subtree.

        ``updater`` receives the matched node and returns either a mapping of
        fields to replace or a replacement node whose fields (and children)
        are taken over under the original id. Returns this very object when
        no node matches.
        """
        def transform(node: "Node") -> "Node":
            if node.id != node_id:
                return node
            replacement = updater(node)
            if isinstance(replacement, Node):
                return node.update(
                    value=replacement.value,
                    element=replacement.element,
                    children=replacement._child_nodes(),
                    index=replacement.index,
                    metadata=replacement.metadata,
                )
            return node.update(**replacement)

        return self.map(transform)

    def add_child_at(self, child: "Node", index: int) -> "Node":
        """Insert ``child`` at ``index`` and return the new version of this node.

        Raises:
            StructuralError: For an out-of-bounds index or an invalid relation
        """
        if not self.valid_position(index):
            raise StructuralError(f"Index out of bounds: {index}")
        self.validate_hierarchy(child)

        nodes = self._child_nodes()
        return self.update(children=nodes[:index] + (child,) + nodes[index:])

    def add(
        self,
        new_node: "Node",
        target_node: Optional["Node"] = None,
        editing: bool = False,
    ) -> Tuple["Node", "Node"]:
        """Insert ``new_node`` at the nearest legal place above ``target_node``.

        The search starts at ``target_node`` (this node when omitted) and
        climbs while the current node cannot hold ``new_node``. If the climb
        moved, the new node goes right after the branch it climbed out of;
        otherwise it is appended to the target's children.

        Args:
            new_node: Node to insert
            target_node: Insertion anchor, usually the last inserted node
            editing: The anchor may belong to an older version of this tree;
                splice the result back by id over the whole tree

        Returns:
            Tuple of the new version of this node and the inserted node as
            found inside it

        Raises:
            StructuralError: If no ancestor accepts the node, the climb leaves
                this node's subtree, or the anchor's branch cannot be found in
                this tree
        """
        target = self if target_node is None else target_node
        frames = self._climb(target, new_node)

        if not editing and (target is self or self in target.ancestors()):
            if any(frame.id == self._id for frame in frames[:-1]):
                raise StructuralError(
                    f"No node under {self._id} accepts {new_node.element.value}"
                )
            current = frames[-1]
            if len(frames) > 1:
                index = frames[-2].position + 1
            else:
                index = len(current.children)

            updated = current.add_child_at(new_node, index)
            root, resolved = _propagate(current, updated, stop=self)
            return root, resolved.children[index]

        # The anchor may be stale: redo the placement on the live node.
        current = self.find_by_id(frames[-1].id)
        if current is None:
            raise StructuralError(f"Node {frames[-1].id} is not part of this tree")

        if len(frames) > 1:
            child = current.child_by_id(frames[-2].id)
            if child is None:
                raise StructuralError(f"Node {frames[-2].id} is not a child of {current.id}")
            index = child.position + 1
        else:
            index = len(current.children)

        updated = current.add_child_at(new_node, index)
        root = self.update_by_id(current.id, lambda _: updated)
        resolved = root.find_by_id(current.id)
        return root, resolved.children[index]

    @staticmethod
    def _climb(target: "Node", new_node: "Node") -> List["Node"]:
        # Frames run from the target up to the first node that accepts
        # new_node (or the top). A parent that does not hold the visited node
        # itself is rewritten to hold it.
        frames = [target]
        current = target
        while current.parent is not None and not current.valid_relation(new_node):
            parent = current.parent
            if not any(child is current for child in parent.children):
                parent = parent._with_child_replaced(current)
            frames.append(parent)
            current = parent

        if len(frames) > 1:
            logger.debug(
                "Climbed to place node",
                extra={
                    "levels": len(frames) - 1,
                    "element": new_node.element.value,
                    "container": current.element.value,
                }
            )
        return frames

    def _with_child_replaced(self, child: "Node") -> "Node":
        nodes = self._child_nodes()
        for position, existing in enumerate(nodes):
            if existing.id == child.id:
                return self.update(
                    children=nodes[:position] + (child,) + nodes[position + 1:]
                )
        raise StructuralError(f"Node {child.id} is not a child of {self._id}")

    def _descend(self, ids: Iterable[str]) -> "Node":
        node = self
        for node_id in ids:
            child = node.child_by_id(node_id)
            if child is None:
                raise StructuralError(f"Node {node_id} is not a child of {node.id}")
            node = child
        return node

    def replace_with(self, updated: "Node") -> Tuple["Node", "Node"]:
        """Swap this node for ``updated`` (same id) throughout its tree.

        Returns:
            Tuple of the new root and ``updated`` as found inside it
        """
        if updated.id != self._id:
            raise StructuralError("A replacement must keep the id of the node it replaces")
        return _propagate(self, updated)

    def update_and_split(
        self,
        update_params: Mapping[str, Any],
        new_node_params: Mapping[str, Any],
    ) -> Tuple["Node", "Node"]:
        """Rewrite this node, then insert a new node right after the edit point.

        Returns:
            Tuple of the new root and the inserted node
        """
        _, updated = self.replace_with(self.update(**update_params))
        return updated.root.add(Node(**new_node_params), updated)

    def delete(self) -> Optional["Node"]:
        """Remove this node from its tree.

        Returns:
            The node that precedes the deleted one in the new tree: the
            previous sibling if any, else the parent. None for a root.
        """
        parent = self._parent
        if parent is None:
            return None

        position = self.position
        remaining = tuple(child for child in parent.children if child.id != self._id)
        _, new_parent = parent.replace_with(parent.update(children=remaining))
        return new_parent.children[position - 1] if position > 0 else new_parent

    def remove_node(self, node: "Node") -> "Node":
        """Remove ``node`` from this tree and return the new root.

        Returns this very object when the node has no parent here.
        """
        if node.parent is None:
            return self

        parent = self.find_by_id(node.parent.id)
        if parent is None:
            return self

        remaining = tuple(child for child in parent.children if child.id != node.id)
        return self.update_by_id(parent.id, lambda _: {"children": remaining})

    # Serialization

    def to_dict(self) -> Dict[str, Any]:
        """Convert the subtree to a nested dictionary."""
        return {
            "id": self._id,
            "index": self._index,
            "value": self._value,
            "element": self._element.value,
            "metadata": self._metadata.to_dict(),
            "parent": self._parent.id if self._parent is not None else None,
            "content": self.content,
            "children": [child.to_dict() for child in self.children],
        }

    def to_json(self, indent: Optional[int] = None) -> str:
        """Convert the subtree to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    def to_records(self) -> List[Dict[str, Any]]:
        """Flatten the subtree into parent-id records, root first."""
        from .serialization import to_records

        return to_records(self)

    @staticmethod
    def deserialize(records: Sequence[Mapping[str, Any]]) -> "Node":
        """Rebuild a tree from parent-id records; the first record is the root."""
        from .serialization import deserialize

        return deserialize(records)


def _propagate(
    node: Node,
    replacement: Node,
    stop: Optional[Node] = None,
) -> Tuple[Node, Node]:
    """Rebuild the ancestors of ``node`` around ``replacement``.

    Rebuilding climbs until the node with ``stop``'s id (inclusive) or the
    root. Returns the new top node and ``replacement`` as found inside it.
    """
    path = [replacement.id]
    rebuilt = replacement
    current = node
    while (stop is None or current.id != stop.id) and current.parent is not None:
        current = current.parent
        rebuilt = current._with_child_replaced(rebuilt)
        path.append(current.id)

    return rebuilt, rebuilt._descend(reversed(path[:-1]))
