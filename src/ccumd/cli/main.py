"""
Main CLI entry point.
"""

from pathlib import Path

import typer
from rich.console import Console

from ccumd import __version__
from ccumd.cli import device, s3
from ccumd.cli import sync as sync_cli
from ccumd.cli.context import AppContext
from ccumd.config.paths import HOME_ENV_VAR
from ccumd.exceptions import ConfigurationError

console = Console()


def version_callback(value: bool):
    """Callback to display version and exit."""
    if value:
        typer.echo(f"ccumd version {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="ccumd",
    help="ccumd - Claude Code usage across multiple devices",
    add_completion=False,
)

# Register subcommands
app.add_typer(device.app, name="device")
app.add_typer(s3.app, name="s3")
app.command("sync")(sync_cli.sync)
app.command(
    "report",
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)(sync_cli.report)


@app.callback(invoke_without_command=True)
def entrypoint(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    home: Path | None = typer.Option(
        None,
        "--home",
        envvar=HOME_ENV_VAR,
        help="ccumd data directory (default: ~/.ccumd)",
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING or ERROR"),
):
    """
    ccumd - Claude Code usage across multiple devices.

    Without a command, syncs every source and shows the daily usage report.
    """
    try:
        ctx.obj = AppContext.create(home, log_level)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1) from e

    if ctx.invoked_subcommand is None:
        code = sync_cli.report_usage(ctx.obj, None)
        if code:
            raise typer.Exit(code)


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
