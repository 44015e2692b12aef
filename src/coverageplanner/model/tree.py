"""
Scene Tree
==========
Generic hierarchical container used by every entity in the scene.

Why is this file needed?
------------------------
1. Hierarchy: Floors own Rooms, the Model owns Floors and Routers. Parent and
   children links, traversal and reparenting live here once.
2. Change propagation: every non-silent mutation bubbles a notification up to
   the root. Only the root (the Model) reacts to it.
3. Snapshots: `generate_snapshot()` produces an inert copy of a subtree whose
   nodes point back to the live nodes through `source`. Snapshot nodes refuse
   every mutation.
4. Serialization: `{kind, args, children}` trees, resolved through the kind
   registry.

Classes:
    Node: Base class for Model, Floor, Room and Router.
"""
from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator, Mapping
from typing import Any, Optional

from coverageplanner.model.errors import SceneFormatError, SnapshotMutationError
from coverageplanner.model.registry import create_node, register_node

logger = logging.getLogger(__name__)

JSONTree = dict[str, Any]


@register_node
class Node:
    """
    A node of the scene hierarchy.

    A live node is its own `source`. A snapshot node has `source` set to the
    live node it was copied from and cannot be mutated.
    """
    KIND = "Node"

    def __init__(self, uid: Optional[str] = None) -> None:
        self.uid: str = uid if uid is not None else uuid.uuid4().hex
        self.parent: Optional[Node] = None
        self.selected: bool = False
        self.source: Node = self
        # Insertion-ordered set of children
        self._children: dict[Node, None] = {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(uid={self.uid!r})"

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------
    @property
    def kind(self) -> str:
        return self.KIND

    @property
    def is_snapshot(self) -> bool:
        return self.source is not self

    @property
    def children(self) -> tuple[Node, ...]:
        return tuple(self._children)

    def _assert_live(self, action: str) -> None:
        if self.is_snapshot:
            raise SnapshotMutationError(
                f"Cannot {action} snapshot node {self!r}. Use Node.source to change the live hierarchy."
            )

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def add(self, child: Node, silent: bool = False) -> None:
        """Reparent `child` under this node."""
        self._assert_live("add a child to")
        child._assert_live("attach")

        if child.parent is self:
            return
        if child is self or child in self.get_ancestors():
            raise ValueError(f"Adding {child!r} under {self!r} would create a cycle.")

        previous = child.parent
        if previous is not None:
            if previous.root() is self.root():
                previous._detach(child)
            else:
                previous.remove(child, silent=silent)

        self._children[child] = None
        child.parent = self
        if not silent:
            self.on_hierarchy_change()

    def remove(self, child: Node, silent: bool = False) -> None:
        """Detach `child`. Clears the selection if it lies inside the removed subtree."""
        self._assert_live("remove a child from")
        if child not in self._children:
            return

        self._detach(child)
        self._on_subtree_removed(child)
        if not silent:
            self.on_hierarchy_change()

    def _detach(self, child: Node) -> None:
        del self._children[child]
        child.parent = None

    def delete_self(self, silent: bool = False) -> None:
        if self.parent is not None:
            self.parent.remove(self, silent=silent)

    def add_to(self, parent: Node, silent: bool = False) -> Node:
        parent.add(self, silent=silent)
        return self

    def replace(self, node: Node) -> None:
        """
        Keeps this node, swaps its children for the children of `node`.
        Emits a single notification once the swap is complete.
        Everything is checked first, a failed replace leaves the tree unchanged.
        """
        self._assert_live("replace the children of")
        if node is self or node in self.get_ancestors():
            raise ValueError(f"Cannot replace {self!r} with itself or one of its ancestors.")
        node._assert_live("take the children of")
        for child in node.children:
            child._assert_live("adopt")

        for child in self.children:
            self.remove(child, silent=True)
        for child in node.children:
            self.add(child, silent=True)

        self.on_hierarchy_change()

    # ------------------------------------------------------------------
    # Change propagation
    # ------------------------------------------------------------------
    def on_hierarchy_change(self) -> None:
        if self.parent is not None:
            self.parent.on_hierarchy_change()

    def _on_subtree_removed(self, node: Node) -> None:
        if self.parent is not None:
            self.parent._on_subtree_removed(node)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------
    def walk(self) -> Iterator[Node]:
        """Depth-first pre-order iteration, starting with this node."""
        yield self
        for child in self._children:
            yield from child.walk()

    def get_descendants(self, include_self: bool = False) -> list[Node]:
        nodes = list(self.walk())
        return nodes if include_self else nodes[1:]

    def get_ancestors(self) -> list[Node]:
        """Parents from the closest one up to the root."""
        out = []
        node = self.parent
        while node is not None:
            out.append(node)
            node = node.parent
        return out

    def root(self) -> Node:
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def find_first_descendant(self, kind: str) -> Optional[Node]:
        for node in self.get_descendants():
            if node.kind == kind:
                return node
        return None

    def find_first_ancestor(self, kind: str) -> Optional[Node]:
        for node in self.get_ancestors():
            if node.kind == kind:
                return node
        return None

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------
    def get_args(self) -> dict[str, Any]:
        """Constructor arguments that rebuild this node (without children)."""
        return {"uid": self.uid}

    def clone(self) -> Node:
        out = type(self)(**self.get_args())
        out.selected = self.selected
        return out

    def generate_snapshot(self) -> Node:
        """Inert copy of this subtree. Every copied node has `source` set to its live counterpart."""
        out = self.clone()
        out.source = self
        for child in self._children:
            snapshot = child.generate_snapshot()
            snapshot.parent = out
            out._children[snapshot] = None
        out._freeze()
        return out

    def _freeze(self) -> None:
        """Hook for subclasses to lock attribute containers of a snapshot copy."""

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_json(self) -> JSONTree:
        return {
            "kind": self.kind,
            "args": self.get_args(),
            "children": [c.to_json() for c in self._children],
        }

    @staticmethod
    def from_json(tree: Mapping[str, Any]) -> Node:
        """
        Rebuild a detached tree from `to_json()` output.

        Raises:
            UnknownKindError: If a `kind` has no registered node class.
            SceneFormatError: If the structure or the arguments are malformed,
                or a uid occurs twice.
        """
        return Node._from_json(tree, set())

    @staticmethod
    def _from_json(tree: Mapping[str, Any], seen: set[str]) -> Node:
        if not isinstance(tree, Mapping):
            raise SceneFormatError(f"Expected a mapping, got {type(tree).__name__}.")

        kind = tree.get("kind")
        args = tree.get("args", {})
        children = tree.get("children", [])
        if not isinstance(kind, str):
            raise SceneFormatError(f"Missing or invalid 'kind': {kind!r}")
        if not isinstance(args, Mapping):
            raise SceneFormatError(f"'args' of {kind} must be a mapping.")
        if not isinstance(children, list):
            raise SceneFormatError(f"'children' of {kind} must be a list.")

        try:
            out = create_node(kind, dict(args))
        except (TypeError, ValueError) as e:
            raise SceneFormatError(f"Invalid arguments for {kind}: {e}") from e

        if out.uid in seen:
            raise SceneFormatError(f"Duplicate uid '{out.uid}' in scene.")
        seen.add(out.uid)

        for child in children:
            out.add(Node._from_json(child, seen), silent=True)

        return out

    # ------------------------------------------------------------------
    # Debugging
    # ------------------------------------------------------------------
    def tree(self) -> str:
        """
        Returns the entire tree under this node as a string.

        Model
        └─Floor
          └─Room
          └─Room
        └─Router
        """
        lines = [self.kind]

        def add_children(node: Node, depth: int) -> None:
            for child in node._children:
                lines.append(f"{'  ' * (depth - 1)}└─{child.kind}")
                add_children(child, depth + 1)

        add_children(self, 1)
        return "\n".join(lines)
