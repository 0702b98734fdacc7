# multimerge/cli.py
"""
Command line merger for sorted text runs.

  python -m multimerge data/runs/*.txt                  # whole-line text order
  python -m multimerge -t $'\t' -k 2 -n a.tsv b.tsv     # numeric 2nd column
  python -m multimerge -r -o merged.txt runs/part_*     # descending runs

Every input must already be sorted by the chosen key (descending with -r);
--check verifies that while merging and stops at the first violation.
Progress and summaries go to stderr, tagged '[merge]'.
"""

from __future__ import annotations

import argparse
import glob
import sys
from operator import itemgetter
from typing import Any, Callable, List, Optional, Sequence

from multimerge import profkit
from multimerge.merger import merge
from multimerge.runio import RunWriter, check_sorted, field_key, open_runs


def _expand_globs(paths: Sequence[str]) -> List[str]:
    # Windows shell may not expand globs; do it here.
    out: List[str] = []
    for p in paths:
        if any(ch in p for ch in "*?[]"):
            out.extend(sorted(glob.glob(p)))
        else:
            out.append(p)
    return out


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="multimerge",
        description="K-way merge of already-sorted text runs into one sorted stream.")
    ap.add_argument("runs", nargs="+", help="Input runs (glob or list), each sorted by the key.")
    ap.add_argument("-o", "--output", default="-", help="Output file ('-' = stdout).")
    ap.add_argument("-k", "--field", type=int, default=None,
                    help="1-based field to order by (default: whole line).")
    ap.add_argument("-t", "--sep", default="\t", help="Field separator (default: TAB).")
    ap.add_argument("-n", "--numeric", action="store_true", help="Compare keys as numbers.")
    ap.add_argument("-r", "--reverse", action="store_true", help="Inputs are sorted descending.")
    ap.add_argument("-c", "--check", action="store_true", help="Fail if any run is out of order.")
    ap.add_argument("--progress-every", type=int, default=0,
                    help="Stderr progress interval in #records (0=off).")
    ap.add_argument("-q", "--quiet", action="store_true", help="Less logging.")
    return ap


def run_merge(run_paths: Sequence[str], emit: Callable[[str], Any], *, field: Optional[int] = None,
              sep: str = "\t", numeric: bool = False, reverse: bool = False, check: bool = False,
              progress_every: int = 0, quiet: bool = False) -> int:
    """
    Merge the runs, handing each record to ``emit`` in order.
    Returns the number of records emitted. Input files are closed on return.
    """
    key = field_key(field, sep=sep, numeric=numeric)
    readers = open_runs(run_paths)
    try:
        if check:
            # each record is keyed once, by the checker; the merge orders on that key
            checked = [check_sorted(r, key=key, reverse=reverse, name=r.path, keyed=True)
                       for r in readers]
            stream = map(itemgetter(1), merge(*checked, key=itemgetter(0), reverse=reverse))
        else:
            stream = merge(*readers, key=key, reverse=reverse)
        emitted = 0
        for rec in stream:
            emit(rec)
            emitted += 1
            if progress_every and (emitted % progress_every == 0) and not quiet:
                print(f"[merge] emitted={emitted:,}", file=sys.stderr)
    finally:
        for r in readers:
            r.close()
    return emitted


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    if args.field is not None and args.field < 1:
        ap.error("--field numbers start at 1")

    run_paths = _expand_globs(args.runs)
    if not run_paths:
        print("No input runs after glob expansion.", file=sys.stderr)
        return 2

    opts = dict(field=args.field, sep=args.sep, numeric=args.numeric, reverse=args.reverse,
                check=args.check, progress_every=args.progress_every, quiet=args.quiet)
    try:
        if args.output == "-":
            n = run_merge(run_paths, lambda rec: sys.stdout.write(rec + "\n"), **opts)
        else:
            with RunWriter(args.output) as w:
                n = run_merge(run_paths, w.write, **opts)
    except OSError as e:
        print(f"[merge] I/O error: {e}", file=sys.stderr)
        return 2
    except UnicodeDecodeError as e:
        print(f"[merge] input is not valid UTF-8: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        # UnsortedRunError (--check) or a field that is not a number (-n)
        print(f"[merge] {e}", file=sys.stderr)
        return 1

    if not args.quiet:
        dest = "stdout" if args.output == "-" else args.output
        print(f"[merge] DONE  runs={len(run_paths)}  records={n:,} -> {dest}", file=sys.stderr)
    if profkit.ENABLED:
        profkit.report()
    return 0


if __name__ == "__main__":
    sys.exit(main())
