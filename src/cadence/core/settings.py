"""Environment-driven settings for cadence workers.

``CadenceBaseSettings`` carries the settings every process hosting workers
needs (debug mode, log level, log format). ``WorkerSettings`` adds the timing
knobs a :class:`~cadence.execution.worker.Worker` is built from, so a
deployment can retune cadence without code changes.

Features:
    - **Pydantic validation:** Type-checked at startup, not at first run
    - **env_prefix:** ``CADENCE_`` / ``CADENCE_WORKER_`` namespacing
    - **.env file support:** Automatic loading via pydantic-settings
    - **Extra ignore:** Unknown env vars don't cause startup failures

Examples:
    >>> import os
    >>> os.environ["CADENCE_WORKER_SLEEP_MS"] = "30000"
    >>> WorkerSettings().effective_timeout_ms
    29000

Tags:
    settings, configuration, pydantic, environment, cadence
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SLEEP_MS = 60 * 1000
DEFAULT_WARMUP_MS = 1000
DEFAULT_RETRY_MS = 1000
DEFAULT_WAIT_INTERVAL_MS = 5000


class CadenceBaseSettings(BaseSettings):
    """Common settings shared by every process that hosts workers.

    Fields
    ──────
    debug        : Enable debug mode (debug-level logging)
    log_level    : Structlog log level
    log_json     : JSON output; ``None`` auto-detects from the TTY
    """

    model_config = SettingsConfigDict(
        env_prefix="CADENCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool | None = None

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level.upper()


class WorkerSettings(CadenceBaseSettings):
    """Timing configuration for a single worker.

    Fields
    ──────
    sleep_ms          : Delay after a finished (or failed) run
    timeout_ms        : Per-run timeout; defaults to ``sleep_ms - 1000``
    warmup_ms         : Delay before the first run after start
    retry_ms          : Delay after a run reports it is not finished
    wait_interval_ms  : How often a blocked run logs while waiting
    """

    model_config = SettingsConfigDict(
        env_prefix="CADENCE_WORKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    sleep_ms: int = Field(default=DEFAULT_SLEEP_MS, gt=0)
    timeout_ms: int | None = Field(default=None, gt=0)
    warmup_ms: int = Field(default=DEFAULT_WARMUP_MS, ge=0)
    retry_ms: int = Field(default=DEFAULT_RETRY_MS, ge=0)
    wait_interval_ms: int = Field(default=DEFAULT_WAIT_INTERVAL_MS, gt=0)

    @property
    def effective_timeout_ms(self) -> int:
        """Timeout actually applied to each run."""
        return self.timeout_ms or (self.sleep_ms - 1000)
