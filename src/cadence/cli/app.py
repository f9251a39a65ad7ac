"""
Root Typer application for the cadence CLI.
"""

from __future__ import annotations

import asyncio

import typer
from pydantic import ValidationError
from typer import Typer

from cadence.cli.utils import console, err_console, resolve_target
from cadence.core.errors import InvalidTargetError
from cadence.core.logging import configure_logging
from cadence.core.settings import CadenceBaseSettings, WorkerSettings
from cadence.execution.worker import Worker

app = Typer(
    name="cadence",
    help="cadence — recurring workers for long-running processes.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("cadence-worker")
        except PackageNotFoundError:
            from cadence import __version__ as v
        typer.echo(f"cadence {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """cadence CLI — run a recurring worker."""


# ── run ──────────────────────────────────────────────────────────────────


async def _serve(worker: Worker, duration: float | None) -> None:
    worker.start()
    try:
        if duration is None:
            await asyncio.Event().wait()
        else:
            await asyncio.sleep(duration)
    finally:
        worker.stop()


@app.command("run")
def run(
    target: str = typer.Argument(..., help="Work function as package.module:function"),
    label: str | None = typer.Option(None, "--label", "-l", help="Worker label (default: function name)"),  # noqa: UP007
    sleep_ms: int | None = typer.Option(None, "--sleep-ms", help="Delay after a finished run"),  # noqa: UP007
    timeout_ms: int | None = typer.Option(None, "--timeout-ms", help="Per-run timeout"),  # noqa: UP007
    warmup_ms: int | None = typer.Option(None, "--warmup-ms", help="Delay before the first run"),  # noqa: UP007
    retry_ms: int | None = typer.Option(None, "--retry-ms", help="Delay after an unfinished run"),  # noqa: UP007
    log_level: str | None = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ERROR"),  # noqa: UP007
    json_logs: bool | None = typer.Option(None, "--json/--console", help="Log format (default: auto)"),  # noqa: UP007
    duration: float | None = typer.Option(None, "--duration", help="Stop after this many seconds"),  # noqa: UP007
) -> None:
    """Run TARGET on a recurring schedule until interrupted.

    Unset options fall back to CADENCE_WORKER_* environment variables.

    Example::

        cadence run jobs.billing:sync_invoices --sleep-ms 30000
        cadence run jobs.cleanup:purge --label purge --log-level DEBUG
    """
    try:
        run_fn = resolve_target(target)
    except InvalidTargetError as exc:
        err_console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2)

    overrides = {
        "sleep_ms": sleep_ms,
        "timeout_ms": timeout_ms,
        "warmup_ms": warmup_ms,
        "retry_ms": retry_ms,
    }
    try:
        settings = WorkerSettings(**{k: v for k, v in overrides.items() if v is not None})
    except ValidationError as exc:
        err_console.print(f"[red]Invalid worker settings:[/red] {exc}")
        raise typer.Exit(code=2)
    base = CadenceBaseSettings()

    label = label or getattr(run_fn, "__name__", target)
    configure_logging(
        level=log_level or base.effective_log_level,
        json_format=json_logs if json_logs is not None else base.log_json,
        service=f"cadence-{label}",
    )

    worker = Worker.from_settings(label, run_fn, settings)
    console.print(
        f"[bold green]Starting worker '{label}'[/bold green] "
        f"(sleep={worker.sleep_ms}ms, timeout={worker.timeout_ms}ms)"
    )

    try:
        asyncio.run(_serve(worker, duration))
    except KeyboardInterrupt:
        console.print("\n[yellow]Worker stopped by user[/yellow]")
