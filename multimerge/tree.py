# multimerge/tree.py
"""
Tree Builder: turns K input iterables into a balanced winner tree.

Steps
  1) iter() each argument and pull its first item; empty inputs are dropped
     (no leaf), a failing input aborts the build.
  2) Key each first item exactly once (if a key function is configured).
  3) Pair nodes level by level, left to right. On an odd count the leftmost
     node is carried up unpaired; the rest pair as (0,1), (2,3), ...
  4) Each pair plays one game (see nodes.play); the winner's champion is
     cached on the new parent.

The whole build runs lazily, on the engine's first production request.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, List, Optional

from multimerge import profkit
from multimerge.errors import FailureKind
from multimerge.nodes import Internal, Leaf, Node, play


class TreeBuilder:
    """
    One-shot builder. After build():
      - leaf_count: number of inputs that produced a first item
      - stage:      which collaborator was being called last; on an
                    exception this names the failure kind
    """

    __slots__ = ("keyfunc", "reverse", "stage", "leaf_count")

    def __init__(self, keyfunc: Optional[Callable[[Any], Any]] = None, reverse: bool = False):
        self.keyfunc = keyfunc
        self.reverse = reverse
        self.stage: Optional[FailureKind] = None
        self.leaf_count = 0

    def make_leaf(self, iterable: Iterable[Any]) -> Optional[Leaf]:
        """Open one input and buffer its first item. None if it is empty."""
        self.stage = FailureKind.SEQUENCE_PULL
        it = iter(iterable)
        try:
            item = next(it)
        except StopIteration:
            return None
        profkit.tick("pull")
        if self.keyfunc is None:
            key = item
        else:
            self.stage = FailureKind.KEY_COMPUTATION
            key = self.keyfunc(item)
            profkit.tick("key")
        return Leaf(it, item, key)

    def pair_level(self, nodes: List[Node]) -> List[Node]:
        """Unite adjacent nodes under new parents; one level up."""
        self.stage = FailureKind.COMPARISON
        reverse = self.reverse
        n = len(nodes)
        start = n & 1
        out: List[Node] = nodes[:start]
        for i in range(start, n - 1, 2):
            left, right = nodes[i], nodes[i + 1]
            profkit.tick("compare")
            out.append(Internal(left, right, play(left, right, reverse)))
        return out

    def build(self, iterables: Iterable[Iterable[Any]]) -> Optional[Node]:
        """Return the root of the new tree, or None if every input was empty."""
        nodes: List[Node] = []
        for iterable in iterables:
            leaf = self.make_leaf(iterable)
            if leaf is not None:
                nodes.append(leaf)
        self.leaf_count = len(nodes)
        if not nodes:
            return None

        with profkit.timeit("build"):
            while len(nodes) > 1:
                nodes = self.pair_level(nodes)
        self.stage = None
        return nodes[0]
