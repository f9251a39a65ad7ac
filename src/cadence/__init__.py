"""
Cadence - recurring workers for long-running processes.

A worker invokes one asynchronous unit of work over and over: never two runs
at once, each run bounded by a timeout, and the next run scheduled sooner when
the work reports it is not finished yet.

    >>> from cadence import Worker
    >>> worker = Worker("accounts", sync_accounts, sleep_ms=60_000)
    >>> worker.start()
"""

__version__ = "0.1.0"

from cadence.core.durations import format_ms
from cadence.core.errors import CadenceError, RunTimeoutError
from cadence.core.logging import configure_logging, get_logger
from cadence.core.settings import WorkerSettings
from cadence.execution.thread_host import ThreadedWorkerHost
from cadence.execution.worker import RunArgs, Worker, WorkerState

__all__ = [
    "__version__",
    "Worker",
    "WorkerState",
    "RunArgs",
    "WorkerSettings",
    "ThreadedWorkerHost",
    "CadenceError",
    "RunTimeoutError",
    "configure_logging",
    "get_logger",
    "format_ms",
]
