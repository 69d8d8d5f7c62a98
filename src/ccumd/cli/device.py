"""
ccumd device - Manage SSH devices.
"""

import typer
from rich.console import Console

from ccumd.cli.context import AppContext
from ccumd.cli.display import print_sync_results
from ccumd.exceptions import CcumdError

app = typer.Typer(name="device", help="Manage devices synced over SSH", invoke_without_command=True)

console = Console()


@app.callback()
def device(ctx: typer.Context):
    """
    List registered devices.
    """
    if ctx.invoked_subcommand is None:
        app_ctx: AppContext = ctx.obj
        devices = app_ctx.registry.list_devices()
        if not devices:
            console.print("[yellow]No devices registered.[/yellow]")
            return
        console.print("[bold]Registered devices:[/bold]")
        for name in devices:
            console.print(f"  - [cyan]{name}[/cyan]")


@app.command("add")
def add(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="SSH host alias of the device (from ~/.ssh/config)"),
    sync: bool = typer.Option(True, "--sync/--no-sync", help="Sync the device right after adding it"),
):
    """
    Register a device and pull its usage logs.
    """
    app_ctx: AppContext = ctx.obj
    try:
        app_ctx.registry.add_device(name)
    except CcumdError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from e
    console.print(f"[green]Device '{name}' added successfully.[/green]")

    if not sync:
        return

    console.print("[dim]Syncing device data...[/dim]")
    orchestrator = app_ctx.orchestrator()
    result = orchestrator.sync_source(orchestrator.device_source(name))
    print_sync_results(console, [result])
    if not result.ok:
        raise typer.Exit(1)


@app.command("delete")
def delete(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Device to remove"),
):
    """
    Unregister a device and delete its local copy of the logs.
    """
    app_ctx: AppContext = ctx.obj
    try:
        app_ctx.registry.delete_device(name)
    except CcumdError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from e
    console.print(f"[green]Device '{name}' deleted successfully.[/green]")
