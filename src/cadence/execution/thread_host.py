"""Dedicated-thread host for workers in synchronous applications.

Workers are asyncio objects: every timer, run and state change happens on one
event loop. A synchronous application (a WSGI app, a CLI tool, a classic
daemon) has no loop to give them, so ``ThreadedWorkerHost`` owns one on a
daemon thread and marshals ``start``/``stop`` onto it.

┌──────────────────────────────────────────────────────────────────────────────┐
│  THREAD HOST ARCHITECTURE                                                     │
│                                                                               │
│   caller thread                        "cadence-host" daemon thread           │
│   ─────────────                        ───────────────────────────           │
│   host.add(worker)                                                            │
│   host.start()  ──── thread.start() ──► loop.run_forever()                   │
│                 ◄─── ready.wait() ────  ready.set()                          │
│                 ──── call_soon_threadsafe(worker.start) ──►                  │
│                                                                               │
│   host.stop()   ──── run_coroutine_threadsafe(_shutdown) ──►                 │
│                                        worker.stop() for each                 │
│                                        loop.stop()                            │
│                 ──── thread.join(timeout) ──►                                │
│                                                                               │
│  Every worker field is owned by the host thread, so no locking is needed     │
│  beyond the host's own start/stop bookkeeping.                               │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

import asyncio
import threading

from cadence.core.logging import get_logger
from cadence.execution.worker import Worker

logger = get_logger(__name__)


class ThreadedWorkerHost:
    """Runs a set of workers on a private event loop in a daemon thread.

    Example:
        >>> host = ThreadedWorkerHost()
        >>> host.add(Worker("accounts", sync_accounts, sleep_ms=60_000))
        >>> host.start()
        >>> # ... later ...
        >>> host.stop()
    """

    def __init__(self, thread_name: str = "cadence-host") -> None:
        self._thread_name = thread_name
        self._workers: list[Worker] = []
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._ready = threading.Event()
        self._started = False
        self._lock = threading.Lock()

    def add(self, worker: Worker) -> ThreadedWorkerHost:
        """Register a worker; it is started when the host starts."""
        with self._lock:
            if self._started:
                raise RuntimeError("Workers must be added before the host starts")
            self._workers.append(worker)
        return self

    @property
    def workers(self) -> list[Worker]:
        return list(self._workers)

    def start(self) -> None:
        """Start the host thread and every registered worker on it."""
        with self._lock:
            if self._started:
                logger.warning("host_already_started", thread=self._thread_name)
                return

            self._ready.clear()
            loop = asyncio.new_event_loop()

            def _loop() -> None:
                asyncio.set_event_loop(loop)
                loop.call_soon(self._ready.set)
                logger.info("host_started", workers=len(self._workers))
                try:
                    loop.run_forever()
                finally:
                    # same teardown as asyncio.run(): cancel leftovers, then close
                    pending = asyncio.all_tasks(loop)
                    for task in pending:
                        task.cancel()
                    loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
                    loop.run_until_complete(loop.shutdown_asyncgens())
                    loop.run_until_complete(loop.shutdown_default_executor())
                    loop.close()
                    logger.info("host_stopped")

            self._loop = loop
            self._thread = threading.Thread(target=_loop, daemon=True, name=self._thread_name)
            self._thread.start()
            self._ready.wait()

            for worker in self._workers:
                loop.call_soon_threadsafe(worker.start)
            self._started = True

    async def _shutdown(self) -> None:
        for worker in self._workers:
            worker.stop()
        asyncio.get_running_loop().stop()

    def stop(self, timeout: float = 5.0) -> None:
        """Stop every worker and the host loop.

        Tasks still pending on the loop are cancelled when it closes; waits
        up to *timeout* seconds for the thread to exit.
        """
        with self._lock:
            if not self._started:
                return

            asyncio.run_coroutine_threadsafe(self._shutdown(), self._loop)
            if self._thread:
                self._thread.join(timeout=timeout)
                if self._thread.is_alive():
                    logger.warning("host_thread_did_not_stop", thread=self._thread_name)

            self._started = False
            logger.info("host_shutdown_complete")

    @property
    def is_running(self) -> bool:
        """Check if the host thread is currently running."""
        return self._started and self._thread is not None and self._thread.is_alive()


__all__ = ["ThreadedWorkerHost"]
