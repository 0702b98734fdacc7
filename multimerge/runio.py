# multimerge/runio.py
"""
Sorted *runs* on disk: plain text, one record per line.

These are what the command line merger reads (one RunReader per input)
and writes (a single RunWriter, or stdout). Records are kept as raw
strings; ordering is defined by a key built with field_key().
"""

from __future__ import annotations

import os
from typing import Any, Callable, Iterable, Iterator, List, Optional

from multimerge.errors import UnsortedRunError


class RunReader:
    """
    Sequentially reads a run file.

    Yields each line with its trailing newline stripped. The file is closed
    as soon as it is exhausted, so a merge never holds more files open than
    it has live inputs.
    """

    __slots__ = ("path", "_f", "lineno")

    def __init__(self, path: str, encoding: str = "utf-8"):
        self.path = path
        self._f = open(path, "r", encoding=encoding)
        self.lineno = 0

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        line = self._f.readline()
        if not line:
            self._f.close()
            raise StopIteration
        self.lineno += 1
        return line.rstrip("\n")

    def close(self):
        self._f.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class RunWriter:
    """Writes records, one per line. Parent directories are created."""

    __slots__ = ("path", "_f", "count")

    def __init__(self, path: str, encoding: str = "utf-8"):
        self.path = path
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        self._f = open(path, "w", encoding=encoding)
        self.count = 0

    def write(self, record: str):
        self._f.write(record)
        self._f.write("\n")
        self.count += 1

    def write_all(self, records: Iterable[str]) -> int:
        for r in records:
            self.write(r)
        return self.count

    def close(self):
        self._f.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


def open_runs(paths: Iterable[str]) -> List[RunReader]:
    """Open one reader per path; on failure close what was already opened."""
    readers: List[RunReader] = []
    try:
        for p in paths:
            readers.append(RunReader(p))
    except OSError:
        for r in readers:
            r.close()
        raise
    return readers


def field_key(field: Optional[int] = None, sep: str = "\t",
              numeric: bool = False) -> Optional[Callable[[str], Any]]:
    """
    Build the key for a record.
      field:   1-based field number (like `sort -k`); None = whole line
      sep:     field separator
      numeric: compare as float instead of text
    Returns None when the record itself is the key.
    """
    if field is None:
        return float if numeric else None
    if field < 1:
        raise ValueError(f"field numbers start at 1, got {field}")
    idx = field - 1

    def key(record: str):
        parts = record.split(sep)
        value = parts[idx] if idx < len(parts) else ""
        return float(value) if numeric else value

    return key


def check_sorted(records: Iterable[Any], key: Optional[Callable[[Any], Any]] = None,
                 reverse: bool = False, name: str = "<run>", keyed: bool = False) -> Iterator[Any]:
    """
    Pass records through unchanged, raising UnsortedRunError at the first
    adjacent pair that breaks the order. Only strict '<' is used, so equal
    neighbours are always accepted. The key is computed once per record.

    keyed=True yields (key, record) pairs instead, so a consumer ordering by
    the same key can reuse it rather than computing it again.
    """
    prev = prev_key = None
    lineno = 0
    for rec in records:
        k = rec if key is None else key(rec)
        lineno += 1
        if lineno > 1 and ((prev_key < k) if reverse else (k < prev_key)):
            raise UnsortedRunError(name, lineno, prev, rec)
        prev, prev_key = rec, k
        yield (k, rec) if keyed else rec
