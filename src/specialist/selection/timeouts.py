"""Racing a blocking call against a deadline."""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CallTimeoutError(Exception):
    """Raised when a call does not finish before its deadline."""

    def __init__(self, label: str, timeout: float) -> None:
        self.label = label
        self.timeout = timeout
        super().__init__(f"{label} timed out after {timeout:.1f}s")


def _discard_late_result(label: str) -> Callable[[Future[object]], None]:
    def _callback(future: Future[object]) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.debug("Late %s call failed after timeout: %s", label, error)
        else:
            logger.debug("Discarding late %s result", label)

    return _callback


def call_with_timeout(
    executor: ThreadPoolExecutor,
    fn: Callable[[], T],
    timeout: float,
    label: str = "model",
) -> T:
    """Run ``fn`` on ``executor`` and wait at most ``timeout`` seconds.

    When the deadline passes the caller gets CallTimeoutError immediately.
    The worker thread is not interrupted; whatever it eventually returns is
    logged and dropped.
    """
    future = executor.submit(fn)
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError as e:
        if not future.cancel():
            future.add_done_callback(_discard_late_result(label))
        raise CallTimeoutError(label, timeout) from e
