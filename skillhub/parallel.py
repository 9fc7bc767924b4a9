"""
Bounded parallel map

Items run in waves of at most `batch_size` on a thread pool. Each wave is
awaited before the next starts, and every item yields a TaskResult so one
failure never cancels its siblings.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Iterable, List, NamedTuple, Optional

logger = logging.getLogger(__name__)


class TaskResult(NamedTuple):
    item: Any
    ok: bool
    value: Any = None
    error: Optional[BaseException] = None


def bounded_map(func: Callable, items: Iterable, batch_size: int = 10,
                stop_when: Optional[Callable[[TaskResult], bool]] = None,
                on_batch: Optional[Callable[[int, int], None]] = None) -> List[TaskResult]:
    """
    Apply func to every item, at most batch_size at a time.

    Results come back in input order. If stop_when returns True for any result
    the current wave still completes but no further waves start.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")

    items = list(items)
    results: List[TaskResult] = []

    with ThreadPoolExecutor(max_workers=batch_size) as executor:
        for start in range(0, len(items), batch_size):
            batch = items[start:start + batch_size]
            futures = {executor.submit(func, item): i for i, item in enumerate(batch)}
            wave: List[Optional[TaskResult]] = [None] * len(batch)

            for future in as_completed(futures):
                i = futures[future]
                try:
                    wave[i] = TaskResult(batch[i], True, future.result())
                except Exception as e:
                    wave[i] = TaskResult(batch[i], False, error=e)

            results.extend(wave)

            if on_batch:
                on_batch(min(start + batch_size, len(items)), len(items))

            if stop_when and any(stop_when(r) for r in wave):
                logger.warning(f"Stopping after {len(results)}/{len(items)} items")
                break

    return results
