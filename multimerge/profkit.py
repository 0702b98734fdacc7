# multimerge/profkit.py: ultra-light counters for the merge engine
# Toggle via env var: set MULTIMERGE_PROFILE=1 to enable; otherwise every
# call is a no-op with near-zero overhead.

import os
import sys
import time
from collections import defaultdict
from contextlib import contextmanager

ENABLED = os.getenv("MULTIMERGE_PROFILE", "0") == "1"
COUNTERS = defaultdict(float)  # str -> float (counts / milliseconds)


def tick(name: str, n: float = 1.0):
    if ENABLED:
        COUNTERS[name] += n


@contextmanager
def timeit(name: str):
    if not ENABLED:
        yield
        return
    t0 = time.perf_counter()
    try:
        yield
    finally:
        COUNTERS[name + "_ms"] += (time.perf_counter() - t0) * 1000.0


def reset():
    COUNTERS.clear()


def snapshot() -> dict:
    return dict(COUNTERS)


def report(file=None):
    """Print one '[profkit]' line with every counter, sorted by name."""
    if file is None:
        file = sys.stderr
    parts = [f"{k}={v:,.0f}" if not k.endswith("_ms") else f"{k}={v:.2f}"
             for k, v in sorted(COUNTERS.items())]
    print("[profkit] " + ("  ".join(parts) if parts else "(no counters)"), file=file)
