"""Generic tree structure keyed by repository paths."""

from __future__ import annotations

from typing import Callable, Dict, Generic, Iterator, Optional, Tuple, TypeVar

T = TypeVar("T")


class Ref:

    """A sequence of labels identifying a node in a tree.

    The ref does not include the root, so the root itself is Ref(()).
    """

    def __init__(self, parts: Tuple[str, ...]):
        self.parts = parts

    @staticmethod
    def parse(s: str) -> Ref:
        assert s.startswith("/"), f"not an absolute path: {s!r}"
        return Ref(tuple(p for p in s.split("/") if p))

    def __repr__(self) -> str:
        return "/" + "/".join(self.parts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ref):
            return NotImplemented
        return self.parts == other.parts

    def __hash__(self) -> int:
        return hash(self.parts)

    def __lt__(self, other: Ref) -> bool:
        return self.parts < other.parts

    @property
    def parent(self) -> Optional[Ref]:
        if not self.parts:
            return None
        return Ref(self.parts[:-1])


class Node(Generic[T]):

    """A node in a tree.

    Each node can optionally have an item of type T associated with it. Nodes
    can have any number of children.
    """

    def __init__(self, label: str, ref: Ref, parent: Optional[Node[T]]):
        self.label = label
        self.ref = ref
        self.parent: Optional[Node[T]] = parent
        self.item: Optional[T] = None
        self.children: Dict[str, Node[T]] = {}

    def __repr__(self) -> str:
        return f"Node(label={self.label!r}, ref={self.ref!r}, item={self.item!r})"

    @staticmethod
    def root() -> Node:
        """Return the root node. All trees should use this as their root."""
        return Node("", Ref(()), None)

    def add_child(self, label: str) -> Node[T]:
        """Add a child with the given label, or return the existing one."""
        child = self.children.get(label)
        if child is None:
            child = Node(label, Ref(self.ref.parts + (label,)), self)
            self.children[label] = child
        return child


class Tree(Generic[T]):

    """A tree of nodes associated with items of type T."""

    def __init__(self):
        self.root: Node[T] = Node.root()
        self.by_ref: Dict[Ref, T] = {}

    def __repr__(self) -> str:
        refs = ", ".join(str(r) for r in self.by_ref)
        return f"Tree(refs=[{refs}])"

    def create(self, ref: Ref, make_item: Callable[..., T], *args, **kwargs) -> T:
        """Create a new node and item.

        Places the node in the tree using ref, creating intermediate nodes as
        necessary. Creates the node's item by calling make_item with the extra
        arguments. Returns the new item, replacing any previous item at ref.
        """
        node = self.root
        for label in ref.parts:
            node = node.add_child(label)
        item = make_item(*args, **kwargs)
        self.register(node, item)
        return item

    def register(self, node: Node[T], item: T):
        """Set the node's item and register the item in by_ref."""
        node.item = item
        self.by_ref[node.ref] = item

    def get(self, ref: Ref) -> Optional[T]:
        return self.by_ref.get(ref)

    def __contains__(self, ref: object) -> bool:
        return ref in self.by_ref

    def __iter__(self) -> Iterator[T]:
        """Iterate over all items in ref order."""
        for ref in sorted(self.by_ref):
            yield self.by_ref[ref]
