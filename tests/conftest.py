"""
Shared pytest fixtures and configuration for cadence tests.

This module provides:
- structlog reset fixtures for test isolation
- Recording work functions that note each run's arguments and timing
- Millisecond-scale worker factories so timing tests finish quickly

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments:

    async def test_something(make_worker, recorder):
        worker = make_worker(recorder.finished)
        ...
"""

import asyncio
import sys
import threading
from collections.abc import Generator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
import structlog

# Ensure cadence package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cadence.execution.worker import RunArgs, Worker


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark all tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Logging Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """
    Restore structlog defaults around every test.

    configure_logging() caches loggers and filters by level; without a reset
    one CLI test would silence debug events for every later test.
    """
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


# =============================================================================
# Work Function Fixtures
# =============================================================================


@dataclass
class Recorder:
    """Records every run a work function receives."""

    calls: list[RunArgs] = field(default_factory=list)
    times: list[float] = field(default_factory=list)
    threads: list[str] = field(default_factory=list)
    in_flight: int = 0
    max_in_flight: int = 0

    def record(self, args: RunArgs) -> None:
        self.calls.append(args)
        self.threads.append(threading.current_thread().name)
        try:
            self.times.append(asyncio.get_running_loop().time())
        except RuntimeError:
            pass

    @property
    def ordinals(self) -> list[int]:
        return [args.ordinal for args in self.calls]

    async def finished(self, args: RunArgs) -> bool:
        self.record(args)
        return True

    async def unfinished(self, args: RunArgs) -> bool:
        self.record(args)
        return False

    async def failing(self, args: RunArgs) -> Any:
        self.record(args)
        raise RuntimeError(f"boom on {args.ordinal}")

    def slow(self, seconds: float, result: Any = True):
        """Work function that holds the slot for *seconds*."""

        async def _slow(args: RunArgs) -> Any:
            self.record(args)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            try:
                await asyncio.sleep(seconds)
            finally:
                self.in_flight -= 1
            return result

        return _slow


@pytest.fixture
def recorder() -> Recorder:
    """Fresh run recorder."""
    return Recorder()


@pytest.fixture
def make_worker():
    """
    Factory for workers with millisecond-scale timing.

    Defaults: sleep 100ms, timeout 80ms, warmup 0ms, retry 10ms,
    wait interval 1000ms. Any keyword overrides them.
    """
    created: list[Worker] = []

    def _make(run_fn, label: str = "test", **kwargs: Any) -> Worker:
        options = {
            "sleep_ms": 100,
            "timeout_ms": 80,
            "warmup_ms": 0,
            "retry_ms": 10,
            "wait_interval_ms": 1000,
        }
        options.update(kwargs)
        worker = Worker(label, run_fn, **options)
        created.append(worker)
        return worker

    yield _make

    for worker in created:
        worker.stop()
