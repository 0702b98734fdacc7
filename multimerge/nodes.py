# multimerge/nodes.py
"""
Node model for the winner tree.

Two node kinds, dispatched on type (never on a flag):

  - Leaf:     one live input iterator, its buffered item and that item's key.
              A leaf is its own champion, so ``leaf.leaf is leaf``.
  - Internal: exactly two children plus a cached champion (``leaf``, ``key``)
              copied from whichever child won the last game.

Children are owned (strong references); the parent link is a weakref so
the tree never forms a reference cycle. Dropping the root drops the tree,
and with it every partially consumed iterator.
"""

from __future__ import annotations

import weakref
from typing import Any, Iterator, Optional, Union


class _Linked:
    """Upward, non-owning parent link shared by both node kinds."""

    __slots__ = ("_parent", "__weakref__")

    def __init__(self):
        self._parent = None

    @property
    def parent(self) -> Optional["Internal"]:
        ref = self._parent
        return None if ref is None else ref()

    @parent.setter
    def parent(self, node: Optional["Internal"]) -> None:
        self._parent = None if node is None else weakref.ref(node)


class Leaf(_Linked):
    """
    One still-live input sequence.

    item/key are None only between handing the item to the caller and the
    next refill; the engine never reads them in that window.
    """

    __slots__ = ("it", "item", "key")

    def __init__(self, it: Iterator[Any], item: Any, key: Any):
        super().__init__()
        self.it = it
        self.item = item
        self.key = key

    @property
    def leaf(self) -> "Leaf":
        return self

    def pop_item(self) -> Any:
        """Hand the buffered item over to the caller and forget it."""
        item = self.item
        self.item = None
        self.key = None
        return item

    def __repr__(self):
        return f"Leaf(key={self.key!r})"


class Internal(_Linked):
    """Tournament result of exactly two children."""

    __slots__ = ("leaf", "key", "left", "right")

    def __init__(self, left: "Node", right: "Node", winner: "Node"):
        super().__init__()
        self.left = left
        self.right = right
        self.leaf = winner.leaf
        self.key = winner.key
        left.parent = self
        right.parent = self

    def __repr__(self):
        return f"Internal(key={self.key!r})"


Node = Union[Leaf, Internal]


def play(left: Node, right: Node, reverse: bool) -> Node:
    """
    One game between two siblings. A single strict '<' decides it:
      forward:  right wins only if right.key < left.key
      reverse:  right wins only if left.key < right.key
    Ties go to the left (earlier) input, which is what keeps merges stable.
    """
    if reverse:
        return right if left.key < right.key else left
    return right if right.key < left.key else left


def promote_sibling(leaf: Leaf) -> Optional[Node]:
    """
    Remove an exhausted leaf and collapse its now single-child parent.

    The sibling subtree takes the parent's place: the grandparent (if any)
    points at it, and its back-reference points at the grandparent. The
    sibling keeps its own children and champion, so nothing below it
    changes. Returns the promoted node, or None when ``leaf`` was the
    whole tree.
    """
    parent = leaf.parent
    if parent is None:
        return None
    sibling = parent.right if parent.left is leaf else parent.left
    grand = parent.parent
    if grand is not None:
        if grand.left is parent:
            grand.left = sibling
        else:
            grand.right = sibling
    sibling.parent = grand
    # Detach the dead pair so nothing keeps the iterator alive.
    parent.left = parent.right = None
    parent.leaf = parent.key = None
    leaf.it = None
    leaf.parent = None
    return sibling


def iter_leaves(node: Optional[Node]) -> Iterator[Leaf]:
    """Yield leaves left to right (argument order of their inputs)."""
    stack = [node] if node is not None else []
    while stack:
        n = stack.pop()
        if isinstance(n, Leaf):
            yield n
        else:
            stack.append(n.right)
            stack.append(n.left)


def count_nodes(node: Optional[Node]) -> tuple[int, int]:
    """Return (leaves, internals) reachable from ``node``."""
    leaves = internals = 0
    stack = [node] if node is not None else []
    while stack:
        n = stack.pop()
        if isinstance(n, Leaf):
            leaves += 1
        else:
            internals += 1
            stack.append(n.left)
            stack.append(n.right)
    return leaves, internals
