"""Executor factory used by the artifact fetcher."""

from __future__ import annotations

from concurrent import futures

Executor = futures.Executor


def create_executor(workers: int, *, thread_name_prefix: str = "mvnfetch") -> Executor:
    """
    Return a bounded thread pool for IO-bound transfer work.

    Args:
        workers: Desired concurrency level; values below one are clamped to one.
        thread_name_prefix: Prefix for worker thread names.

    Returns:
        A ``ThreadPoolExecutor``. The caller owns it and must shut it down.
    """
    return futures.ThreadPoolExecutor(
        max_workers=max(1, int(workers)),
        thread_name_prefix=thread_name_prefix,
    )
