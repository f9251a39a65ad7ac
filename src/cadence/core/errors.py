"""
Structured error types for cadence workers.

A worker never lets a failed run escape the scheduling loop, but the failure
still has to be logged with enough context to find the run that produced it.
CadenceError and its subclasses carry that context:

- **Category:** What kind of failure (timeout, work function, config, ...)
- **Retryable:** Whether the next scheduled run can reasonably succeed
- **Context:** Worker label, run ordinal and custom fields
- **Cause:** Chained underlying exception for root cause analysis

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       CadenceError                               │
        │  (category, retryable, context, cause)                           │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  TransientError          WorkFunctionError      ConfigError      │
        │  (retryable=True)        (WORK)                 (CONFIG)         │
        │       │                                              │           │
        │  RunTimeoutError                              InvalidTargetError │
        │  (TIMEOUT)                                                       │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = RunTimeoutError(label="sync", timeout_ms=59000, ordinal=0)
    >>> str(error)
    "Worker 'sync' exceeded configured timeout of 59000 on run #0"
    >>> error.retryable
    True
    >>> error.context.ordinal
    0

Guardrails:
    ❌ DON'T: Raise a CadenceError out of a worker's run loop
    ✅ DO: Log it with to_dict() and let the worker reschedule

    ❌ DON'T: Swallow the original exception
    ✅ DO: Pass it as cause= for error chaining

Tags:
    error-handling, exception-hierarchy, error-context, cadence
"""

from __future__ import annotations

import builtins
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        TIMEOUT: A run did not settle within its configured timeout
        WORK: The work function itself failed
        CONFIG: Missing or invalid configuration
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    TIMEOUT = "TIMEOUT"
    WORK = "WORK"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Attributes:
        worker: Label of the worker the failing run belongs to
        ordinal: Ordinal of the failing run
        operation: Name of the work function or target
        metadata: Additional key-value pairs
    """

    worker: str | None = None
    ordinal: int | None = None
    operation: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["worker", "ordinal", "operation"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class CadenceError(Exception):
    """
    Base exception for all cadence errors.

    Subclasses set ``default_category`` and ``default_retryable`` to give
    sensible defaults for their domain.

    Examples:
        >>> error = CadenceError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(worker="sync", ordinal=3).context.to_dict()
        {'worker': 'sync', 'ordinal': 3}
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> CadenceError:
        """
        Add context to this error (fluent API).

        Usage:
            raise WorkFunctionError("Failed").with_context(worker="sync", ordinal=4)
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# TRANSIENT ERRORS (Retryable)
# =============================================================================


class TransientError(CadenceError):
    """Temporary error that may succeed on the next scheduled run."""

    default_category = ErrorCategory.UNKNOWN
    default_retryable = True


class RunTimeoutError(TransientError, builtins.TimeoutError):
    """
    A run did not settle within the worker's configured timeout.

    The work function is not cancelled when this is raised; the worker only
    stops waiting for it. Subclasses the builtin ``TimeoutError`` so generic
    timeout handlers still catch it.

    Attributes:
        label: Worker label
        timeout_ms: The timeout that was exceeded
        ordinal: Ordinal of the run that exceeded it
    """

    default_category = ErrorCategory.TIMEOUT

    def __init__(self, label: str, timeout_ms: int, ordinal: int):
        self.label = label
        self.timeout_ms = timeout_ms
        self.ordinal = ordinal
        super().__init__(
            f"Worker '{label}' exceeded configured timeout of {timeout_ms} on run #{ordinal}",
            context=ErrorContext(worker=label, ordinal=ordinal),
        )


# =============================================================================
# WORK / CONFIG ERRORS
# =============================================================================


class WorkFunctionError(CadenceError):
    """The work function failed; wraps the original exception as ``cause``."""

    default_category = ErrorCategory.WORK
    default_retryable = True


class ConfigError(CadenceError):
    """Missing or invalid configuration."""

    default_category = ErrorCategory.CONFIG


class InvalidTargetError(ConfigError):
    """A ``module:function`` target could not be resolved to a callable."""

    def __init__(self, target: str, reason: str, cause: Exception | None = None):
        self.target = target
        super().__init__(
            f"Invalid target '{target}': {reason}",
            context=ErrorContext(operation=target),
            cause=cause,
        )


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: BaseException) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, CadenceError):
        return error.retryable
    return isinstance(error, (ConnectionError, builtins.TimeoutError))


def categorize_error(error: BaseException) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, CadenceError):
        return error.category
    if isinstance(error, builtins.TimeoutError):
        return ErrorCategory.TIMEOUT
    if isinstance(error, Exception):
        return ErrorCategory.WORK
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "CadenceError",
    "TransientError",
    "RunTimeoutError",
    "WorkFunctionError",
    "ConfigError",
    "InvalidTargetError",
    "is_retryable",
    "categorize_error",
]
