"""Cadence Core -- the primitives every worker leans on.

Architecture::

    durations.py       format_ms() + UTC helpers (stdlib-only)
    errors.py          Structured error hierarchy (CadenceError, RunTimeoutError)
    logging.py         structlog configuration, per-worker loggers
    settings.py        pydantic-settings (CadenceBaseSettings, WorkerSettings)
"""

from cadence.core.durations import format_ms, utc_now
from cadence.core.errors import (
    CadenceError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidTargetError,
    RunTimeoutError,
    TransientError,
    WorkFunctionError,
    categorize_error,
    is_retryable,
)

__all__ = [
    "format_ms",
    "utc_now",
    "CadenceError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "InvalidTargetError",
    "RunTimeoutError",
    "TransientError",
    "WorkFunctionError",
    "categorize_error",
    "is_retryable",
]
