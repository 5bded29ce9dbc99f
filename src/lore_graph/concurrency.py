"""Helpers for running independent store reads side by side."""

import threading
from concurrent.futures import Executor
from typing import Any, Callable

from .errors import TraversalCancelled


def gather(executor: Executor | None, *calls: Callable[[], Any]) -> list[Any]:
    """Run zero-argument calls and return their results in call order.

    Without an executor the calls run sequentially. With one, every call is
    submitted first and results are collected in submission order, so the
    first failure (in call order) is the one that propagates.
    """
    if executor is None or len(calls) < 2:
        return [call() for call in calls]

    futures = [executor.submit(call) for call in calls]
    try:
        return [future.result() for future in futures]
    finally:
        for future in futures:
            future.cancel()


def check_cancelled(cancel: threading.Event | None) -> None:
    """Raise TraversalCancelled once the caller has set the cancel event."""
    if cancel is not None and cancel.is_set():
        raise TraversalCancelled()
