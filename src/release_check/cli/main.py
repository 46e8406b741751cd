"""CLI de release-check (Typer).

Un único comando: consulta el status de cada instancia en paralelo y sale con
código 0 si todas reportan la versión esperada, 1 en caso contrario.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from release_check.core.config import AppSettings, CheckConfig
from release_check.core.errors import InvalidArgumentsError
from release_check.core.services.release_check import run_check

log = logging.getLogger("release_check")

app = typer.Typer(
    add_completion=False,
    help="Check that service instances report an expected release version.",
)


def configure_logging(*, verbose: bool = False) -> None:
    """Attach a Rich handler (stderr) to the package logger."""

    for handler in list(log.handlers):
        if isinstance(handler, RichHandler):
            log.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    log.addHandler(handler)
    log.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _settings_for_run(
    *,
    fail_on_error: Optional[bool],
    max_concurrency: Optional[int],
    timeout: Optional[float],
) -> AppSettings:
    settings = AppSettings()
    overrides: dict[str, object] = {}
    if fail_on_error is not None:
        overrides["fail_on_error"] = fail_on_error
    if max_concurrency is not None:
        overrides["max_concurrency"] = max_concurrency
    if timeout is not None:
        overrides["http_timeout_seconds"] = timeout
    if overrides:
        settings = settings.model_copy(update=overrides)
    return settings


@app.command()
def check(
    ctx: typer.Context,
    instance: str = typer.Option(
        "",
        "--instance",
        help="Specify the instance name(s), separated by commas.",
    ),
    version: str = typer.Option(
        "",
        "--version",
        help="Specify the expected release version.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log every per-instance result.",
    ),
    fail_on_error: Optional[bool] = typer.Option(
        None,
        "--fail-on-error/--no-fail-on-error",
        help="Treat instances whose status could not be fetched as unhealthy.",
        show_default=False,
    ),
    max_concurrency: Optional[int] = typer.Option(
        None,
        "--max-concurrency",
        min=1,
        help="Maximum number of concurrent requests (default: one per instance).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        min=0.001,
        help="Per-request timeout in seconds (default: wait indefinitely).",
    ),
) -> None:
    """Query every instance and compare its release number with --version."""

    configure_logging(verbose=verbose)

    try:
        config = CheckConfig.from_raw(
            instance,
            version,
            _settings_for_run(
                fail_on_error=fail_on_error,
                max_concurrency=max_concurrency,
                timeout=timeout,
            ),
        )
    except InvalidArgumentsError as exc:
        log.error(str(exc))
        typer.echo(ctx.get_usage(), err=True)
        typer.echo("Try '--help' for help.", err=True)
        raise typer.Exit(code=1) from exc

    summary = asyncio.run(run_check(config))
    log.debug(
        "%d checked: %d matched, %d mismatched, %d failed",
        summary.total,
        summary.matched,
        summary.mismatched,
        summary.failed,
    )

    if not summary.healthy:
        raise typer.Exit(code=1)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
