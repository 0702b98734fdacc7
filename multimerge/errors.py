# multimerge/errors.py
"""
Failure taxonomy.

The merge engine does not wrap collaborator exceptions: whatever an input
iterator, the key function or a comparison raises reaches the caller as-is
(so ``merge`` stays interchangeable with ``heapq.merge``). What the engine
adds is a record of *where* it failed, in ``engine.failure``.
"""

import enum


class FailureKind(enum.Enum):
    SEQUENCE_PULL = "sequence pull"
    KEY_COMPUTATION = "key computation"
    COMPARISON = "comparison"


class UnsortedRunError(ValueError):
    """A run handed to the merger is not in the promised order."""

    def __init__(self, name: str, lineno: int, prev, cur):
        self.name = name
        self.lineno = lineno
        self.prev = prev
        self.cur = cur
        super().__init__(f"{name}:{lineno}: out of order: {cur!r} after {prev!r}")
