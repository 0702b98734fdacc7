"""
bench_merge.py

Quick-and-dirty benchmark: multimerge.merge vs heapq.merge.
Counts how many '<' and '==' calls each merge makes on the same inputs,
and how long a full drain takes.

Workloads:
  no_overlap   (0..L-1), (L..2L-1), ...          one stream at a time
  interleaved  (0,K,2K,...), (1,K+1,...), ...    round robin
  random       K sorted streams of random ints

Run examples:
  python bench_merge.py
  python bench_merge.py --streams 64 --length 2000 --repeat 5
"""

import argparse
import heapq
import random
import statistics
import time

try:
    import multimerge
except Exception:
    print("Import error. Run from project root so `multimerge` is importable.")
    raise


class Int(int):
    """int that counts the comparisons made on it."""
    lt = eq = 0

    def __lt__(self, other):
        __class__.lt += 1
        return int.__lt__(self, other)

    def __eq__(self, other):
        __class__.eq += 1
        return int.__eq__(self, other)

    __hash__ = int.__hash__


def make_workloads(k, length, seed):
    random.seed(seed)
    total = k * length
    return {
        "no_overlap": [list(map(Int, range(x, x + length))) for x in range(0, total, length)],
        "interleaved": [list(map(Int, range(x, total, k))) for x in range(k)],
        "random": [sorted(Int(random.randrange(total)) for _ in range(length)) for _ in range(k)],
    }


def comparisons(mergefunc, iterables):
    Int.lt = Int.eq = 0
    for _ in mergefunc(*iterables):
        pass
    return Int.lt, Int.eq


def bench(mergefunc, iterables, repeat):
    times = []
    for _ in range(repeat):
        t0 = time.perf_counter()
        for _ in mergefunc(*iterables):
            pass
        times.append((time.perf_counter() - t0) * 1000)  # ms
    lt, eq = comparisons(mergefunc, iterables)
    return {"lt": lt, "eq": eq, "avg_ms": statistics.mean(times), "min_ms": min(times)}


def main(args):
    funcs = [("heapq.merge", heapq.merge), ("multimerge.merge", multimerge.merge)]
    workloads = make_workloads(args.streams, args.length, args.seed)
    for name, iterables in workloads.items():
        print(f"==== {name}  K={args.streams}  N={args.streams * args.length:,} ====")
        for label, fn in funcs:
            s = bench(fn, iterables, args.repeat)
            print(f"  {label:<17} {s['lt']:>10,} lt  {s['eq']:>8,} eq  "
                  f"avg={s['avg_ms']:.2f}ms  min={s['min_ms']:.2f}ms")
        print()


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--streams", type=int, default=16, help="number of input streams (K)")
    ap.add_argument("--length", type=int, default=1000, help="items per stream")
    ap.add_argument("--repeat", type=int, default=3, help="timed drains per merge function")
    ap.add_argument("--seed", type=int, default=1234, help="seed for the random workload")
    args = ap.parse_args()
    main(args)
