"""Helpers that call an operation with retries or a time limit."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from datetime import timedelta
from typing import TypeVar

from .logger import get_logger

T = TypeVar("T")

_log = get_logger(__name__)


def _seconds(value: float | timedelta) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


def retry(operation: Callable[[], T], max_retries: int, base_delay: float | timedelta) -> T:
    """Call ``operation`` at most ``max_retries + 1`` times.

    Before attempt ``n`` (counting from zero) the call sleeps
    ``base_delay * 2 ** n``; the first attempt runs at once. The result of the
    first successful call is returned; if every call raises, the last
    exception is raised again.
    """
    if max_retries < 0:
        raise ValueError("max_retries must not be negative")
    delay = _seconds(base_delay)
    last_error: Exception | None = None
    for attempt in range(max_retries + 1):
        if attempt:
            time.sleep(delay * 2**attempt)
        _log.info(
            "trying to perform operation",
            extra={"attempt": attempt, "max_retries": max_retries},
        )
        try:
            return operation()
        except Exception as exc:
            last_error = exc
    assert last_error is not None
    raise last_error


def timeout(operation: Callable[[], T], timeout: float | timedelta) -> T:
    """Run ``operation`` in a background thread and wait at most ``timeout``.

    Returns what the operation returned, raises what it raised, or raises
    :class:`TimeoutError` when it does not finish in time.
    """
    limit = _seconds(timeout)
    outcome: dict[str, object] = {}
    finished = threading.Event()

    def run() -> None:
        try:
            outcome["value"] = operation()
        except BaseException as exc:  # handed back to the caller below
            outcome["error"] = exc
        finally:
            finished.set()

    threading.Thread(target=run, daemon=True).start()
    if not finished.wait(limit):
        raise TimeoutError(f"timeout {limit}s")
    if "error" in outcome:
        raise outcome["error"]  # type: ignore[misc]
    return outcome["value"]  # type: ignore[return-value]