"""Tests for cadence settings."""

import pytest
from pydantic import ValidationError

from cadence.core.settings import CadenceBaseSettings, WorkerSettings


@pytest.fixture(autouse=True)
def _no_env_file(monkeypatch, tmp_path):
    """Run from an empty directory so no stray .env is read."""
    monkeypatch.chdir(tmp_path)
    for var in (
        "CADENCE_WORKER_SLEEP_MS",
        "CADENCE_WORKER_TIMEOUT_MS",
        "CADENCE_DEBUG",
        "CADENCE_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)


class TestWorkerSettings:
    def test_defaults(self):
        settings = WorkerSettings()
        assert settings.sleep_ms == 60_000
        assert settings.timeout_ms is None
        assert settings.effective_timeout_ms == 59_000
        assert settings.warmup_ms == 1000
        assert settings.retry_ms == 1000
        assert settings.wait_interval_ms == 5000

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("CADENCE_WORKER_SLEEP_MS", "30000")
        settings = WorkerSettings()
        assert settings.sleep_ms == 30_000
        assert settings.effective_timeout_ms == 29_000

    def test_explicit_timeout_wins(self, monkeypatch):
        monkeypatch.setenv("CADENCE_WORKER_TIMEOUT_MS", "1234")
        assert WorkerSettings().effective_timeout_ms == 1234

    def test_env_file(self, tmp_path):
        (tmp_path / ".env").write_text("CADENCE_WORKER_RETRY_MS=250\n")
        assert WorkerSettings().retry_ms == 250

    def test_rejects_non_positive_sleep(self):
        with pytest.raises(ValidationError):
            WorkerSettings(sleep_ms=0)

    def test_rejects_negative_warmup(self):
        with pytest.raises(ValidationError):
            WorkerSettings(warmup_ms=-1)


class TestCadenceBaseSettings:
    def test_log_level(self, monkeypatch):
        monkeypatch.setenv("CADENCE_LOG_LEVEL", "warning")
        assert CadenceBaseSettings().effective_log_level == "WARNING"

    def test_debug_forces_debug_level(self, monkeypatch):
        monkeypatch.setenv("CADENCE_DEBUG", "true")
        assert CadenceBaseSettings().effective_log_level == "DEBUG"
