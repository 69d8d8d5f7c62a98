"""
ccumd s3 - Manage S3-compatible bucket sources.
"""

import typer
from rich.console import Console

from ccumd.cli.context import AppContext
from ccumd.exceptions import CcumdError
from ccumd.settings.models import BucketConfig
from ccumd.sync.bucket import check_connection

app = typer.Typer(name="s3", help="Manage S3 bucket sources", invoke_without_command=True)

console = Console()


def _print_buckets(app_ctx: AppContext) -> None:
    buckets = app_ctx.registry.list_buckets()
    if not buckets:
        console.print("[yellow]No S3 buckets configured.[/yellow]")
        console.print("[dim]Run 'ccumd s3 add' to add an S3 bucket.[/dim]")
        return
    console.print("[bold]Configured S3 buckets:[/bold]")
    for bucket in buckets:
        console.print(f"  - [cyan]{bucket.name}[/cyan]")
        console.print(f"    Endpoint: {bucket.endpoint}")
        console.print(f"    Bucket: {bucket.bucket}")
        if bucket.region:
            console.print(f"    Region: {bucket.region}")


@app.callback()
def s3(ctx: typer.Context):
    """
    List configured S3 buckets.
    """
    if ctx.invoked_subcommand is None:
        _print_buckets(ctx.obj)


@app.command("list")
def list_buckets(ctx: typer.Context):
    """
    List configured S3 buckets.
    """
    _print_buckets(ctx.obj)


@app.command("add")
def add(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Local name for this bucket"),
    endpoint: str = typer.Argument(..., help="Endpoint URL, e.g. https://<account>.r2.cloudflarestorage.com"),
    bucket: str = typer.Argument(..., help="Bucket name on the storage service"),
    access_key_id: str = typer.Argument(..., help="Access key id"),
    secret_access_key: str = typer.Argument(..., help="Secret access key"),
    region: str | None = typer.Option(None, "--region", help="Region (default: auto)"),
):
    """
    Add (or replace) an S3 bucket after checking that it is reachable.
    """
    app_ctx: AppContext = ctx.obj
    config = BucketConfig(
        name=name,
        endpoint=endpoint,
        bucket=bucket,
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        region=region,
    )
    options = app_ctx.sync_options

    try:
        config.validate()
    except CcumdError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from e

    console.print("[dim]Testing S3 connection...[/dim]")
    try:
        app_ctx.registry.add_bucket(config, check_connection=lambda c: check_connection(c, options))
    except CcumdError as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("[dim]Please check your credentials and bucket configuration.[/dim]")
        raise typer.Exit(1) from e

    console.print(f"[green]S3 bucket '{name}' added successfully.[/green]")
    console.print(f"Endpoint: {endpoint}")
    console.print(f"Bucket: {bucket}")
    if region:
        console.print(f"Region: {region}")


@app.command("delete")
def delete(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Bucket to remove"),
):
    """
    Remove an S3 bucket config and its local copy of the logs.
    """
    app_ctx: AppContext = ctx.obj
    if app_ctx.registry.delete_bucket(name):
        console.print(f"[green]S3 bucket '{name}' deleted successfully.[/green]")
    else:
        console.print(f"[yellow]S3 bucket '{name}' is not configured.[/yellow]")
