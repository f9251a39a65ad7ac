"""Recurring worker — runs one unit of work on a self-rescheduling timer.

A :class:`Worker` wraps an opaque work function and invokes it over and over
inside a long-running process. Only one run is ever in flight, each run gets a
time limit, and the delay before the next run depends on what the last one
reported.

Architecture:
    ::

        start()
           │  warmup_ms
           ▼
        ┌────────────────────── _perform_run() ───────────────────────┐
        │ 1. overlap guard: wait on the active run's completion event │
        │ 2. ActiveRun(ordinal, started_at)                           │
        │ 3. dispatch run_fn(RunArgs) ──► ordinal += 1                │
        │ 4. race against timeout_ms (work is NOT cancelled)          │
        │ 5. truthy ─► sleep_ms   falsy ─► retry_ms   error ─► sleep_ms│
        │ 6. finally: clear ActiveRun, signal completion              │
        └──────────────────────────────┬──────────────────────────────┘
                                       │ _schedule_run_in_ms(delay)
                                       ▼
                              loop.call_later(...) ──► _perform_run()

        stop() cancels the armed timer only; an in-flight run finishes and
        then finds the worker stopped.
        An attempt parked in the overlap guard when stop() is called never
        invokes the work function.

Usage::

    async def sync_accounts(args: RunArgs) -> bool:
        done = await pull_next_page(args.ordinal)
        return done          # False -> retried after retry_ms

    worker = Worker("accounts", sync_accounts, sleep_ms=60_000)
    worker.start()           # first run after warmup_ms
    ...
    worker.stop()
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from cadence.core.durations import format_ms, utc_now
from cadence.core.errors import RunTimeoutError
from cadence.core.logging import LogContext, error_logger, worker_logger
from cadence.core.settings import (
    DEFAULT_RETRY_MS,
    DEFAULT_SLEEP_MS,
    DEFAULT_WAIT_INTERVAL_MS,
    DEFAULT_WARMUP_MS,
    WorkerSettings,
)
from cadence.execution.timeout import dispatch, race_with_timeout


class WorkerState(str, Enum):
    """Observable phase of a worker."""

    STOPPED = "stopped"
    IDLE = "idle"
    SCHEDULED = "scheduled"
    WAITING = "waiting"
    RUNNING = "running"


@dataclass(frozen=True)
class RunArgs:
    """Arguments passed to the work function on every run."""

    label: str
    sleep_ms: int
    timeout_ms: int
    ordinal: int


@dataclass
class ActiveRun:
    """The run currently holding the worker's single slot."""

    ordinal: int
    started_at: datetime
    started_monotonic: float
    done: asyncio.Event = field(default_factory=asyncio.Event)

    def running_for_ms(self, now: float) -> float:
        return (now - self.started_monotonic) * 1000


RunFn = Callable[[RunArgs], Any]


class Worker:
    """Invokes a work function on a repeating, adaptive interval.

    Args:
        label: Identifier used in logs and timeout errors.
        run_fn: Coroutine function (or plain callable, run in a thread)
            receiving :class:`RunArgs`. A truthy result means "finished".
        sleep_ms: Delay after a finished or failed run. Falsy -> 60000.
        timeout_ms: Per-run timeout. Falsy -> ``sleep_ms - 1000``.
        warmup_ms: Delay before the first run after :meth:`start`.
        retry_ms: Delay after a run reports it is not finished.
        wait_interval_ms: How often a blocked run reports it is still waiting.
        loop: Event loop to schedule on; defaults to the running loop at start.
    """

    def __init__(
        self,
        label: str,
        run_fn: RunFn,
        *,
        sleep_ms: int | None = None,
        timeout_ms: int | None = None,
        warmup_ms: int = DEFAULT_WARMUP_MS,
        retry_ms: int = DEFAULT_RETRY_MS,
        wait_interval_ms: int = DEFAULT_WAIT_INTERVAL_MS,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._log = worker_logger(label)
        self._errors = error_logger()

        self._label = label
        self._run_fn = run_fn
        self._sleep_ms = sleep_ms or DEFAULT_SLEEP_MS
        self._timeout_ms = timeout_ms or (self._sleep_ms - 1000)
        self._warmup_ms = warmup_ms
        self._retry_ms = retry_ms
        self._wait_interval_ms = wait_interval_ms
        self._log.debug(
            "worker_initialised",
            sleep_ms=self._sleep_ms,
            timeout_ms=self._timeout_ms,
            warmup_ms=warmup_ms,
            retry_ms=retry_ms,
        )

        # Flow control
        self._loop_arg = loop
        self._loop: asyncio.AbstractEventLoop | None = None
        self._run_ordinal = 0
        self._active: ActiveRun | None = None
        self._waiting = 0
        self._stopped = True
        self._stop_count = 0
        self._next_run: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    @classmethod
    def from_settings(
        cls,
        label: str,
        run_fn: RunFn,
        settings: WorkerSettings | None = None,
        **kwargs: Any,
    ) -> Worker:
        """Build a worker from :class:`WorkerSettings` (environment by default)."""
        settings = settings or WorkerSettings()
        return cls(
            label,
            run_fn,
            sleep_ms=settings.sleep_ms,
            timeout_ms=settings.effective_timeout_ms,
            warmup_ms=settings.warmup_ms,
            retry_ms=settings.retry_ms,
            wait_interval_ms=settings.wait_interval_ms,
            **kwargs,
        )

    # === Lifecycle ===

    def start(self) -> None:
        """Start scheduling; the first run fires after ``warmup_ms``.

        Must be called from the worker's event loop thread.
        """
        self._log.debug("worker_starting", warmup_ms=self._warmup_ms)
        self._loop = self._loop_arg or asyncio.get_running_loop()
        self._stopped = False
        self._schedule_run_in_ms(self._warmup_ms)

    def stop(self) -> None:
        """Stop scheduling and cancel the armed timer.

        A run already in progress is not interrupted. An attempt still waiting
        for that run is dropped when it wakes.
        """
        self._log.debug("worker_stopping")
        self._stopped = True
        self._stop_count += 1
        self._cancel_next_run()

    def _cancel_next_run(self) -> None:
        if self._next_run is not None:
            self._next_run.cancel()
        self._next_run = None

    def _schedule_run_in_ms(self, delay_ms: int) -> None:
        if self._stopped:
            self._log.debug("run_not_scheduled", reason="worker is stopped")
            return

        self._cancel_next_run()
        self._log.debug("run_scheduled", delay_ms=delay_ms)
        self._next_run = self._loop.call_later(delay_ms / 1000, self._on_timer)

    def _on_timer(self) -> None:
        self._next_run = None
        task = self._loop.create_task(self._perform_run(), name=f"cadence-{self._label}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # === Run execution ===

    async def _wait_for_prior(self) -> None:
        loop = asyncio.get_running_loop()
        while self._active is not None:
            active = self._active
            self._log.debug(
                "run_delayed_by_previous",
                previous_ordinal=active.ordinal,
                running_for=format_ms(active.running_for_ms(loop.time())),
                check_in_ms=self._wait_interval_ms,
            )
            self._waiting += 1
            try:
                with contextlib.suppress(TimeoutError):
                    await asyncio.wait_for(active.done.wait(), self._wait_interval_ms / 1000)
            finally:
                self._waiting -= 1

    async def _perform_run(self) -> None:
        """Execute one run attempt and schedule the next one.

        Never raises for work failures or timeouts; those are logged and the
        worker falls back to the ``sleep_ms`` cadence.
        """
        stops = self._stop_count
        await self._wait_for_prior()
        if self._stop_count != stops:
            self._log.debug("run_not_started", reason="worker is stopped")
            return

        active = ActiveRun(
            ordinal=self._run_ordinal,
            started_at=utc_now(),
            started_monotonic=asyncio.get_running_loop().time(),
        )
        self._active = active
        self._log.debug(
            "run_started", ordinal=active.ordinal, started_at=active.started_at.isoformat()
        )

        run_args = RunArgs(
            label=self._label,
            sleep_ms=self._sleep_ms,
            timeout_ms=self._timeout_ms,
            ordinal=active.ordinal,
        )

        try:
            async with LogContext(worker=self._label, ordinal=active.ordinal):
                try:
                    pending = dispatch(self._run_fn, run_args)
                finally:
                    self._run_ordinal += 1

                finished = bool(
                    await race_with_timeout(
                        pending,
                        self._timeout_ms / 1000,
                        on_timeout=lambda: RunTimeoutError(
                            self._label, self._timeout_ms, active.ordinal
                        ),
                        operation=f"{self._label}#{active.ordinal}",
                    )
                )
        except Exception as exc:
            self._log.debug("run_failed", ordinal=active.ordinal, error=str(exc))
            self._errors.error(
                "worker_run_failed",
                worker=self._label,
                ordinal=active.ordinal,
                error=str(exc),
                exc_info=exc,
            )
            self._schedule_run_in_ms(self._sleep_ms)
        else:
            self._log.debug("run_completed", ordinal=active.ordinal, finished=finished)
            # Not finished: come back soon rather than after a full sleep
            self._schedule_run_in_ms(self._sleep_ms if finished else self._retry_ms)
        finally:
            self._active = None
            active.done.set()

    # === Diagnostics ===

    @property
    def label(self) -> str:
        return self._label

    @property
    def sleep_ms(self) -> int:
        return self._sleep_ms

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    @property
    def next_ordinal(self) -> int:
        """Ordinal the next run attempt will receive."""
        return self._run_ordinal

    @property
    def state(self) -> WorkerState:
        if self._active is not None:
            return WorkerState.RUNNING
        if self._waiting:
            return WorkerState.WAITING
        if self._next_run is not None:
            return WorkerState.SCHEDULED
        if self._stopped:
            return WorkerState.STOPPED
        return WorkerState.IDLE

    def __repr__(self) -> str:
        return f"Worker({self._label!r}, state={self.state.value}, next_ordinal={self._run_ordinal})"


__all__ = ["Worker", "WorkerState", "RunArgs", "ActiveRun"]
