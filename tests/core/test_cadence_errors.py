"""Tests for the cadence error hierarchy."""

import pytest

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


class TestErrorContext:
    def test_to_dict_skips_unset(self):
        ctx = ErrorContext(worker="sync")
        assert ctx.to_dict() == {"worker": "sync"}

    def test_metadata_merged(self):
        ctx = ErrorContext(ordinal=2, metadata={"page": 7})
        assert ctx.to_dict() == {"ordinal": 2, "page": 7}


class TestCadenceError:
    def test_defaults(self):
        error = CadenceError("Something went wrong")
        assert error.category == ErrorCategory.INTERNAL
        assert error.retryable is False
        assert str(error) == "Something went wrong"

    def test_with_context_fluent(self):
        error = CadenceError("failed").with_context(worker="sync", ordinal=3, page=9)
        assert error.context.worker == "sync"
        assert error.context.ordinal == 3
        assert error.context.metadata == {"page": 9}

    def test_cause_chained(self):
        cause = ConnectionError("reset")
        error = WorkFunctionError("sync failed", cause=cause)
        assert error.cause is cause
        assert error.__cause__ is cause

    def test_to_dict(self):
        error = WorkFunctionError("sync failed", cause=ValueError("x")).with_context(worker="sync")
        d = error.to_dict()
        assert d["error_type"] == "WorkFunctionError"
        assert d["category"] == "WORK"
        assert d["retryable"] is True
        assert d["context"] == {"worker": "sync"}
        assert d["cause"] == "x"

    def test_repr(self):
        assert repr(ConfigError("bad")) == "ConfigError('bad', category=CONFIG)"


class TestRunTimeoutError:
    def test_message(self):
        error = RunTimeoutError(label="sync", timeout_ms=59000, ordinal=0)
        assert str(error) == "Worker 'sync' exceeded configured timeout of 59000 on run #0"

    def test_attributes_and_context(self):
        error = RunTimeoutError("sync", 59000, 4)
        assert error.label == "sync"
        assert error.timeout_ms == 59000
        assert error.ordinal == 4
        assert error.context.to_dict() == {"worker": "sync", "ordinal": 4}

    def test_is_transient_and_builtin_timeout(self):
        error = RunTimeoutError("sync", 10, 0)
        assert isinstance(error, TransientError)
        assert isinstance(error, TimeoutError)
        assert error.category == ErrorCategory.TIMEOUT
        assert error.retryable is True

    def test_catchable_as_builtin_timeout(self):
        with pytest.raises(TimeoutError):
            raise RunTimeoutError("sync", 10, 0)


class TestInvalidTargetError:
    def test_message_and_category(self):
        error = InvalidTargetError("jobs:missing", "'missing' not found")
        assert str(error) == "Invalid target 'jobs:missing': 'missing' not found"
        assert error.target == "jobs:missing"
        assert isinstance(error, ConfigError)
        assert error.retryable is False


class TestUtilities:
    def test_is_retryable(self):
        assert is_retryable(RunTimeoutError("sync", 10, 0))
        assert not is_retryable(ConfigError("bad"))
        assert is_retryable(ConnectionError())
        assert not is_retryable(ValueError())

    def test_categorize_error(self):
        assert categorize_error(ConfigError("bad")) == ErrorCategory.CONFIG
        assert categorize_error(TimeoutError()) == ErrorCategory.TIMEOUT
        assert categorize_error(ValueError()) == ErrorCategory.WORK
        assert categorize_error(KeyboardInterrupt()) == ErrorCategory.UNKNOWN
