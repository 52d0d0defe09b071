"""Main Typer application.

Entry point: ``plusbridge`` (configured via pyproject.toml scripts).
Commands: capabilities, errors, version.
"""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from plusbridge.config import BridgeConfig
from plusbridge.config import config as default_config
from plusbridge.core.errors import ERROR_CLASSES
from plusbridge.models.errors import ERROR_CODES, ErrorKind
from plusbridge.observability import setup_logging
from plusbridge.runtime import create_runtime

app = typer.Typer(
    name="plusbridge",
    help="plusbridge: callback-or-awaitable adapters over a native device bridge.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

console = Console()


@app.callback()
def main_callback(
    log_level: str = typer.Option(None, help="Override PLUSBRIDGE_LOG_LEVEL."),
    log_json: bool = typer.Option(False, "--log-json", help="Emit JSON log lines."),
) -> None:
    """Configure logging before any command runs."""
    setup_logging(
        level=log_level or default_config.log_level,
        json_format=log_json or default_config.log_json,
    )


@app.command(name="capabilities", help="Show which bridge namespaces the host provides.")
def capabilities_cmd(
    host_module: str = typer.Option(
        None, help="Module to import as the host bridge (default from config)."
    ),
) -> None:
    cfg = default_config
    if host_module is not None:
        cfg = BridgeConfig(host_module=host_module)
    runtime = create_runtime(config=cfg)
    supported = asyncio.run(runtime.supported())

    table = Table(title="Bridge Capabilities")
    table.add_column("Namespace", style="cyan")
    table.add_column("Supported", justify="center")
    for name, ok in supported.items():
        table.add_row(name, "[green]Yes[/green]" if ok else "[red]No[/red]")
    console.print(table)

    if not any(supported.values()):
        console.print(
            f"[dim]No native bridge found (host module: {cfg.host_module or '-'}).[/dim]"
        )


@app.command(name="errors", help="List the error kinds, exception classes and codes.")
def errors_cmd() -> None:
    table = Table(title="Error Taxonomy")
    table.add_column("Kind", style="cyan")
    table.add_column("Exception")
    table.add_column("Code", justify="right", style="green")
    for kind in ErrorKind:
        table.add_row(kind.value, ERROR_CLASSES[kind].__name__, str(ERROR_CODES[kind]))
    console.print(table)


@app.command(name="version", help="Show the installed plusbridge version.")
def version_cmd() -> None:
    from plusbridge import __version__

    console.print(f"plusbridge {__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
