"""Tests for the bounded parallel map."""

import threading
import time

import pytest

from skillhub.parallel import TaskResult, bounded_map


def test_results_keep_input_order():
    def slow_square(n):
        time.sleep(0.01 * (5 - n % 5))
        return n * n

    results = bounded_map(slow_square, range(12), batch_size=4)
    assert [r.item for r in results] == list(range(12))
    assert [r.value for r in results] == [n * n for n in range(12)]
    assert all(r.ok for r in results)


def test_failures_are_isolated():
    def explode_on_three(n):
        if n == 3:
            raise RuntimeError("boom")
        return n

    results = bounded_map(explode_on_three, range(6), batch_size=2)
    assert [r.ok for r in results] == [True, True, True, False, True, True]
    assert isinstance(results[3].error, RuntimeError)
    assert results[4].value == 4


def test_concurrency_is_bounded():
    lock = threading.Lock()
    active = [0]
    peak = [0]

    def track(n):
        with lock:
            active[0] += 1
            peak[0] = max(peak[0], active[0])
        time.sleep(0.01)
        with lock:
            active[0] -= 1
        return n

    bounded_map(track, range(20), batch_size=3)
    assert peak[0] <= 3


def test_stop_when_halts_after_current_wave():
    def fail_on_one(n):
        if n == 1:
            raise KeyError(n)
        return n

    batches = []
    results = bounded_map(
        fail_on_one,
        range(10),
        batch_size=3,
        stop_when=lambda r: isinstance(r.error, KeyError),
        on_batch=lambda done, total: batches.append((done, total)),
    )
    assert [r.item for r in results] == [0, 1, 2]
    assert batches == [(3, 10)]


def test_empty_input_and_bad_batch_size():
    assert bounded_map(lambda x: x, [], batch_size=5) == []
    with pytest.raises(ValueError):
        bounded_map(lambda x: x, [1], batch_size=0)


def test_task_result_defaults():
    result = TaskResult("item", True)
    assert result.value is None
    assert result.error is None
