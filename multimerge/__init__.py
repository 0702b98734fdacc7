"""
multimerge: a lazy, stable k-way merge of sorted iterables.

    >>> from multimerge import merge
    >>> list(merge([1, 4], [2, 3]))
    [1, 2, 3, 4]
"""

from multimerge.errors import FailureKind, UnsortedRunError
from multimerge.merger import EngineState, MergeEngine, merge

__all__ = ["merge", "MergeEngine", "EngineState", "FailureKind", "UnsortedRunError"]
__version__ = "0.2.0"
