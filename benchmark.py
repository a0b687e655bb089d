"""
Benchmark: patchview views vs copying the data up front.

The usual way to stage edits without touching the original is to
deepcopy it, edit the copy, and swap it in.  This benchmark measures:
    1. End operations on long lists (push / pop / shift / unshift)
    2. Single deep writes into a large scheduler state
    3. Commit cost relative to the number of edits
    4. Read overhead through a view

The point is NOT "views are always faster" — reads pay for the
indirection.  The point is that staging an edit costs O(edit), not
O(data).
"""

import copy
import sys
import os
import time

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from patchview import wrap, commit, get_patch, to_python


# ═══════════════════════════════════════════════════════════════════
#  TEST DATA
# ═══════════════════════════════════════════════════════════════════

# Scheduler state of the kind a dry-run planner edits speculatively:
# a job queue drained from the front, worker tables, and limits.
QUEUE_STATE = {
    "pending": [{"job": f"build-{i}", "priority": i % 3} for i in range(6)],
    "running": {
        "worker-a": {"job": "deploy-1", "started": 1714000000},
        "worker-b": {"job": None, "started": None},
    },
    "limits": {"max_running": 2, "retry": 3, "backoff": [1, 5, 30]},
}


def big_state(n: int) -> dict:
    """QUEUE_STATE plus ``n`` generated tenants, each with its own quota table."""
    data = copy.deepcopy(QUEUE_STATE)
    data["tenants"] = {
        f"tenant-{i}": {"quota": i % 5, "history": [f"run-{j}" for j in range(5)]}
        for i in range(n)
    }
    return data


def _timed(fn, repeat: int = 5) -> float:
    """Best wall time of ``repeat`` runs, in seconds."""
    best = float("inf")
    for _ in range(repeat):
        t0 = time.perf_counter()
        fn()
        best = min(best, time.perf_counter() - t0)
    return best


# ═══════════════════════════════════════════════════════════════════
#  BENCHMARKS
# ═══════════════════════════════════════════════════════════════════

def benchmark_end_operations():
    """shift + push on a view vs on a fresh copy of the list."""
    print("=" * 70)
    print("  §1  END OPERATIONS ON LONG LISTS")
    print("=" * 70)
    print()

    for n in [1_000, 10_000, 100_000, 1_000_000]:
        data = list(range(n))

        def via_view():
            v = wrap(data)
            v.shift()
            v.push(n)

        def via_copy():
            c = list(data)
            c.pop(0)
            c.append(n)

        t_view = _timed(via_view)
        t_copy = _timed(via_copy)
        print(f"  len {n:>9,}: view={t_view*1e6:>9.1f}µs  "
              f"copy={t_copy*1e6:>10.1f}µs  ({t_copy / t_view:>7.1f}x)")

    print()


def benchmark_deep_write():
    """One deep write into a large state tree vs deepcopy + write."""
    print("=" * 70)
    print("  §2  SINGLE DEEP WRITE")
    print("=" * 70)
    print()

    for n in [10, 100, 1_000, 10_000]:
        data = big_state(n)

        def via_view():
            v = wrap(data)
            v["tenants"]["tenant-0"]["quota"] = 9

        def via_copy():
            c = copy.deepcopy(data)
            c["tenants"]["tenant-0"]["quota"] = 9

        t_view = _timed(via_view)
        t_copy = _timed(via_copy, repeat=3)
        print(f"  tenants  {n:>6}: view={t_view*1e6:>9.1f}µs  "
              f"deepcopy={t_copy*1e6:>12.1f}µs")

    print()


def benchmark_commit():
    """Commit time as the number of pending edits grows."""
    print("=" * 70)
    print("  §3  COMMIT")
    print("=" * 70)
    print()

    for edits in [1, 10, 100, 1_000]:
        data = big_state(1_000)
        v = wrap(data)
        for i in range(edits):
            v["tenants"][f"tenant-{i}"]["quota"] += 1
        t0 = time.perf_counter()
        commit(v)
        dt = time.perf_counter() - t0
        ok = "✓" if data["tenants"]["tenant-0"]["quota"] == 1 else "✗"
        print(f"  {ok} {edits:>5} edits: commit={dt*1000:>8.3f}ms")

    print()


def benchmark_reads():
    """Cost of reading everything through a view."""
    print("=" * 70)
    print("  §4  READ OVERHEAD")
    print("=" * 70)
    print()

    data = big_state(1_000)
    v = wrap(data)
    v["pending"].shift()

    t_view = _timed(lambda: to_python(v), repeat=3)
    t_copy = _timed(lambda: copy.deepcopy(data), repeat=3)
    print(f"  full snapshot through view: {t_view*1000:>8.2f}ms")
    print(f"  deepcopy of raw data:       {t_copy*1000:>8.2f}ms")
    print(f"  pending patch:              {get_patch(v)!r}")
    print()


def main():
    print()
    print("╔══════════════════════════════════════════════════════════════════════╗")
    print("║          COPY-ON-WRITE VIEWS — BENCHMARK SUITE                      ║")
    print("║          patchview v0.1.0                                           ║")
    print("╚══════════════════════════════════════════════════════════════════════╝")
    print()

    benchmark_end_operations()
    benchmark_deep_write()
    benchmark_commit()
    benchmark_reads()

    print("=" * 70)
    print("  SUMMARY")
    print("=" * 70)
    print()
    print("  Staging an edit through a view costs O(path length), independent")
    print("  of the data size.  Copying costs O(data) before the first edit.")
    print("  Reads through a view are slower than raw access; views suit")
    print("  write-then-commit workflows, not hot read loops.")
    print()


if __name__ == "__main__":
    main()
