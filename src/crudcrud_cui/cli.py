from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console

from . import __version__
from .transport.base import RemoteStore
from .transport.dummy import DummyStore
from .transport.http import HttpStore, HttpStoreConfig
from .ui.app import CrudApp
from .ui.terminal import ERROR_STYLE, RichTerminal, can_run_interactive

logger = logging.getLogger(__name__)

app = typer.Typer(
    add_completion=False,
    invoke_without_command=True,
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _configure_logging(log_file: Path | None) -> None:
    # The terminal belongs to the UI; only log when a file is requested.
    if log_file is None:
        return
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(log_file),
        level=logging.DEBUG,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_store(
    *,
    dry_run: bool,
    endpoint: str | None,
    resource: str,
    base_url: str,
    timeout: float,
    trace_file: Path | None,
) -> RemoteStore:
    if dry_run:
        return DummyStore()
    if endpoint is None or not endpoint.strip():
        raise typer.BadParameter("Missing endpoint (use --endpoint or CRUDCRUD_ENDPOINT).")
    try:
        return HttpStore(
            HttpStoreConfig(
                endpoint=endpoint.strip(),
                resource=resource,
                base_url=base_url,
                timeout_s=timeout,
                trace_path=trace_file,
            )
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Print version and exit.",
        is_eager=True,
    ),
) -> None:
    if version:
        typer.echo(f"crudcrud-cui {__version__}")
        raise typer.Exit(0)


@app.command()
def run(
    endpoint: str | None = typer.Option(  # noqa: B008
        None,
        "--endpoint",
        envvar="CRUDCRUD_ENDPOINT",
        help="crudcrud endpoint id (the token in https://crudcrud.com/api/<endpoint>).",
    ),
    resource: str = typer.Option(  # noqa: B008
        "people",
        "--resource",
        envvar="CRUDCRUD_RESOURCE",
        help="Resource (collection) name.",
    ),
    base_url: str = typer.Option(  # noqa: B008
        "https://crudcrud.com/api",
        "--base-url",
        envvar="CRUDCRUD_BASE_URL",
        help="Base URL of the REST API.",
    ),
    timeout: float = typer.Option(  # noqa: B008
        10.0,
        "--timeout",
        help="HTTP request timeout in seconds.",
    ),
    loading_delay: float = typer.Option(  # noqa: B008
        3.0,
        "--loading-delay",
        min=0.0,
        help="Minimum time (seconds) the loading indicator stays visible.",
    ),
    dry_run: bool = typer.Option(  # noqa: B008
        False,
        "--dry-run",
        help="Use an in-memory store with sample records (no network I/O).",
    ),
    trace_file: Path | None = typer.Option(  # noqa: B008
        None,
        "--trace-file",
        envvar="CRUDCRUD_TRACE_PATH",
        help="Write an HTTP request/response trace log to this file.",
    ),
    log_file: Path | None = typer.Option(  # noqa: B008
        None,
        "--log-file",
        envvar="CRUDCRUD_LOG_PATH",
        help="Write debug logs to this file.",
    ),
) -> None:
    """Browse, add, edit and delete records interactively."""

    _configure_logging(log_file)
    store = _build_store(
        dry_run=dry_run,
        endpoint=endpoint,
        resource=resource,
        base_url=base_url,
        timeout=timeout,
        trace_file=trace_file,
    )

    console = Console(highlight=False)
    if not can_run_interactive(console):
        typer.echo("Interactive UI requires a TTY terminal.", err=True)
        raise typer.Exit(2)

    terminal = RichTerminal(console)
    crud_app = CrudApp(terminal, store, loading_delay_s=loading_delay)
    try:
        with store.session():
            exit_code = crud_app.run()
    except KeyboardInterrupt:
        terminal.show_cursor(True)
        raise typer.Exit(130) from None
    except Exception as exc:
        logger.exception("Unhandled error")
        terminal.clear()
        terminal.set_color(ERROR_STYLE)
        terminal.write(f"Unhandled error: {exc}\n")
        terminal.reset_color()
        raise typer.Exit(1) from exc

    raise typer.Exit(exit_code)
