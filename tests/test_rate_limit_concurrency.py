"""Stress tests: concurrent callers never get admitted past the limit."""

import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor

from fintrax.adapters.rate_limit.in_memory import InMemoryRateLimitGate


def _hammer(gate: InMemoryRateLimitGate, keys: list[str], threads: int, calls_per_thread: int) -> Counter:
    barrier = threading.Barrier(threads)
    admitted: Counter = Counter()
    lock = threading.Lock()

    def worker(index: int) -> None:
        key = keys[index % len(keys)]
        barrier.wait()
        local = sum(gate.admit(key) for _ in range(calls_per_thread))
        with lock:
            admitted[key] += local

    with ThreadPoolExecutor(max_workers=threads) as pool:
        list(pool.map(worker, range(threads)))
    return admitted


def test_same_key_never_exceeds_limit_under_contention() -> None:
    gate = InMemoryRateLimitGate(limit=50, window_seconds=3600)

    admitted = _hammer(gate, ["10.0.0.1"], threads=32, calls_per_thread=25)

    assert admitted["10.0.0.1"] == 50


def test_each_key_gets_exactly_its_own_quota_under_contention() -> None:
    gate = InMemoryRateLimitGate(limit=10, window_seconds=3600, shards=4)
    keys = [f"10.0.0.{i}" for i in range(8)]

    admitted = _hammer(gate, keys, threads=32, calls_per_thread=20)

    assert dict(admitted) == {key: 10 for key in keys}


def test_concurrent_sweeps_do_not_break_admission() -> None:
    gate = InMemoryRateLimitGate(limit=100, window_seconds=3600, shards=2)
    stop = threading.Event()

    def sweeper() -> None:
        while not stop.is_set():
            gate.sweep()

    sweep_thread = threading.Thread(target=sweeper)
    sweep_thread.start()
    try:
        admitted = _hammer(gate, ["k"], threads=16, calls_per_thread=50)
    finally:
        stop.set()
        sweep_thread.join()

    assert admitted["k"] == 100
