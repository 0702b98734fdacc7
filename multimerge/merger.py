# multimerge/merger.py
"""
K-way merge engine over already-sorted iterables.

Behaves like heapq.merge(*iterables, key=None, reverse=False), but keeps a
winner tree instead of a heap of (key, index, item) tuples:

  - each next() replays only the games on the path from the leaf that
    produced the previous item up to the root: O(log K) '<' calls
  - ties are settled by tree position (left input wins), so no index is
    stored and '==' is never called
  - at most one buffered item per input, keyed exactly once

Lifecycle
  UNINITIALIZED --first next()--> ACTIVE --exhausted / any error--> TERMINATED

TERMINATED is absorbing: every later next() raises StopIteration. An error
raised by an input, the key function or a comparison reaches the caller
unchanged, exactly once; ``failure`` records which of the three it was.
"""

from __future__ import annotations

import enum
from typing import Any, Callable, Iterable, Iterator, Optional

from multimerge import profkit
from multimerge.errors import FailureKind
from multimerge.nodes import Leaf, Node, promote_sibling
from multimerge.tree import TreeBuilder


class EngineState(enum.Enum):
    UNINITIALIZED = 0
    ACTIVE = 1
    TERMINATED = 2


_UNINITIALIZED = EngineState.UNINITIALIZED
_ACTIVE = EngineState.ACTIVE
_TERMINATED = EngineState.TERMINATED


class MergeEngine:
    """
    merge(*iterables, key=None, reverse=False) --> merge object

    Merge multiple sorted inputs into a single sorted output.

    Similar to sorted(itertools.chain(*iterables)) but returns an iterator,
    does not pull the data into memory all at once, and assumes that each
    of the input streams is already sorted (smallest to largest, or largest
    to smallest when reverse=True).

    >>> list(merge([1,3,5,7], [0,2,4,8], [5,10,15,20], [], [25]))
    [0, 1, 2, 3, 4, 5, 5, 7, 8, 10, 15, 20, 25]

    If *key* is not None, applies a key function to each element to
    determine its sort order.

    >>> list(merge(['dog', 'horse'], ['cat', 'fish', 'kangaroo'], key=len))
    ['dog', 'cat', 'fish', 'horse', 'kangaroo']
    """

    __slots__ = ("_iterables", "_keyfunc", "_reverse", "_root", "_state", "failure")

    def __init__(self, *iterables: Iterable[Any],
                 key: Optional[Callable[[Any], Any]] = None, reverse: bool = False):
        self._reverse = bool(reverse)
        self._root: Optional[Node] = None
        self.failure: Optional[FailureKind] = None
        if iterables:
            self._iterables = iterables
            self._keyfunc = key
            self._state = _UNINITIALIZED
        else:
            # Nothing to merge; the key function is never looked at.
            self._iterables = ()
            self._keyfunc = None
            self._state = _TERMINATED

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def root(self) -> Optional[Node]:
        return self._root

    def __iter__(self) -> Iterator[Any]:
        return self

    def __next__(self) -> Any:
        state = self._state
        if state is _ACTIVE:
            if not self._replay_games():
                raise StopIteration
        elif state is _UNINITIALIZED:
            if not self._start():
                raise StopIteration
        else:
            raise StopIteration
        profkit.tick("emit")
        return self._root.leaf.pop_item()

    def _terminate(self, failure: Optional[FailureKind] = None) -> None:
        self._state = _TERMINATED
        self._root = None
        self._iterables = ()
        self._keyfunc = None
        self.failure = failure

    def _start(self) -> bool:
        """UNINITIALIZED -> ACTIVE: build the tree. False if nothing to merge."""
        iterables, self._iterables = self._iterables, ()
        builder = TreeBuilder(self._keyfunc, self._reverse)
        try:
            root = builder.build(iterables)
        except BaseException:
            self._terminate(builder.stage)
            raise
        if root is None:
            self._terminate()
            return False
        if isinstance(root, Leaf):
            # A lone input needs no games; its items pass through unkeyed.
            self._keyfunc = None
        self._root = root
        self._state = _ACTIVE
        return True

    def _replay_games(self) -> bool:
        """
        Refill the leaf that produced the last item, then replay every game
        on its path to the root. False once the whole tree is consumed.
        """
        root = self._root
        node: Node = root.leaf
        stage = FailureKind.SEQUENCE_PULL
        try:
            try:
                item = next(node.it)
            except StopIteration:
                node = promote_sibling(node)
                if node is None:
                    self._terminate()
                    return False
                profkit.tick("promote")
                if node.parent is None:
                    # The root itself lost a child; the sibling replaces it.
                    self._root = root = node
                    if isinstance(root, Leaf):
                        self._keyfunc = None
            else:
                profkit.tick("pull")
                keyfunc = self._keyfunc
                if keyfunc is None:
                    key = item
                else:
                    stage = FailureKind.KEY_COMPUTATION
                    key = keyfunc(item)
                    profkit.tick("key")
                node.item = item
                node.key = key

            stage = FailureKind.COMPARISON
            if self._reverse:
                # winner = right if left < right else left
                while node is not root:
                    node = node.parent
                    left = node.left
                    right = node.right
                    profkit.tick("compare")
                    winner = right if left.key < right.key else left
                    node.key = winner.key
                    node.leaf = winner.leaf
            else:
                # winner = right if right < left else left
                while node is not root:
                    node = node.parent
                    left = node.left
                    right = node.right
                    profkit.tick("compare")
                    winner = right if right.key < left.key else left
                    node.key = winner.key
                    node.leaf = winner.leaf
        except BaseException:
            self._terminate(stage)
            raise
        return True

    def __repr__(self):
        return f"<MergeEngine state={self._state.name} reverse={self._reverse}>"


def merge(*iterables: Iterable[Any], key: Optional[Callable[[Any], Any]] = None,
          reverse: bool = False) -> MergeEngine:
    """Drop-in replacement for heapq.merge; see MergeEngine."""
    return MergeEngine(*iterables, key=key, reverse=reverse)
