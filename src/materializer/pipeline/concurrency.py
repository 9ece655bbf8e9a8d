"""Bounded fail-fast task execution."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextvars import copy_context
from typing import TypeVar

T = TypeVar("T")


def run_tasks_fail_fast(tasks: Sequence[Callable[[], T]], *, max_workers: int) -> list[T]:
    """Run ``tasks`` on a thread pool and return results in submission order.

    On the first failure, tasks that have not started are cancelled, tasks
    already running finish, and the failure is re-raised.
    """
    if not tasks:
        return []
    if max_workers <= 1 or len(tasks) == 1:
        return [task() for task in tasks]

    results: dict[int, T] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_index = {
            executor.submit(copy_context().run, task): index for index, task in enumerate(tasks)
        }
        try:
            for future in as_completed(future_to_index):
                results[future_to_index[future]] = future.result()
        except Exception:
            for future in future_to_index:
                future.cancel()
            raise
    return [results[index] for index in sorted(results)]
