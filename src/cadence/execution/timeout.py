"""Timeout race for worker runs.

A worker gives each run a time limit, but reaching it only means the worker
stops *waiting*: the work keeps executing in the background and is never
cancelled or signalled. This module provides that race and the reaping of
abandoned work.

Architecture:
    ::

        ┌────────────────────────────────────────────────────────────────┐
        │ task = dispatch(run_fn, args)                                  │
        │ result = await race_with_timeout(task, 59.0, on_timeout=...)   │
        └────────────────────────────────────────────────────────────────┘
                              │
                              ▼
        ┌────────────────────────────────────────────────────────────────┐
        │               asyncio.wait({task}, timeout=...)                │
        │  - Settled first: return its result / raise its exception      │
        │  - Timer first: reap the task in the background and raise      │
        │    the error built by on_timeout                               │
        └────────────────────────────────────────────────────────────────┘

Compare ``asyncio.wait_for`` and ``asyncio.timeout``: both cancel the
awaited work on expiry, which is exactly what a worker run must not do.

Examples:
    >>> task = asyncio.ensure_future(fetch_data())
    >>> await race_with_timeout(task, 10.0, on_timeout=lambda: RunTimeoutError("sync", 10000, 0))

Guardrails:
    - Abandoned work that routinely hangs leaks whatever it holds; keep
      work functions bounded by their own I/O timeouts
    - Sync callables run in the default thread pool; a hung one pins a thread

Tags:
    timeout, race, execution, cadence
"""

from __future__ import annotations

import asyncio
import functools
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from cadence.core.logging import get_logger

logger = get_logger(__name__)


def dispatch(func: Callable[..., Any], *args: Any) -> asyncio.Future[Any]:
    """Start ``func(*args)`` and return a future for its outcome.

    Coroutine functions run as tasks on the current loop. Plain callables run
    in a worker thread via ``asyncio.to_thread``. A plain callable that returns
    an awaitable has that awaitable scheduled instead.
    """
    # partials of coroutine functions are detected too; objects need their __call__
    if inspect.iscoroutinefunction(func) or inspect.iscoroutinefunction(
        getattr(func, "__call__", None)
    ):
        return asyncio.ensure_future(func(*args))

    async def _in_thread() -> Any:
        result = await asyncio.to_thread(func, *args)
        if inspect.isawaitable(result):
            return await result
        return result

    return asyncio.ensure_future(_in_thread())


def _reap(operation: str, future: asyncio.Future[Any]) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.debug("abandoned_run_failed", operation=operation, error=str(exc))
    else:
        logger.debug("abandoned_run_settled", operation=operation, result=repr(future.result()))


async def race_with_timeout(
    future: Awaitable[Any],
    timeout_seconds: float,
    on_timeout: Callable[[], BaseException],
    operation: str = "run",
) -> Any:
    """Await *future* for at most *timeout_seconds* without cancelling it.

    Args:
        future: Task or future for the work
        timeout_seconds: Time limit; zero or negative expires on the first check
        on_timeout: Builds the exception raised when the limit is reached
        operation: Name used when logging the abandoned work's late outcome

    Returns:
        The work's result, if it settles in time

    Raises:
        Whatever on_timeout builds, if the limit is reached first
        Exception: Any exception raised by the work itself
    """
    task = asyncio.ensure_future(future)
    done, _ = await asyncio.wait({task}, timeout=max(timeout_seconds, 0))
    if task in done:
        return task.result()

    task.add_done_callback(functools.partial(_reap, operation))
    raise on_timeout()


__all__ = ["dispatch", "race_with_timeout"]
