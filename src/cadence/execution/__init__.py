"""Cadence Execution -- the scheduling engine and its hosts.

::

    Worker (what runs, and when)
      ├── _schedule_run_in_ms  ─ one armed loop.call_later handle
      ├── _perform_run         ─ overlap guard, dispatch, timeout race
      └── race_with_timeout    ─ stops waiting, never cancels the work
      │
      ▼
    ThreadedWorkerHost         ─ private loop on a daemon thread
"""

from cadence.execution.thread_host import ThreadedWorkerHost
from cadence.execution.timeout import dispatch, race_with_timeout
from cadence.execution.worker import ActiveRun, RunArgs, Worker, WorkerState

__all__ = [
    "ActiveRun",
    "RunArgs",
    "ThreadedWorkerHost",
    "Worker",
    "WorkerState",
    "dispatch",
    "race_with_timeout",
]
