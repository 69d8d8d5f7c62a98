"""
ccumd sync / ccumd report - Sync every source, then optionally hand off to the
reporting tool.
"""

import typer
from rich.console import Console

from ccumd.cli.context import AppContext
from ccumd.cli.display import print_sync_results
from ccumd.exceptions import ReportError
from ccumd.report import run_report
from ccumd.utils.logging import get_logger

logger = get_logger("ccumd.cli.sync")

console = Console()


def sync_sources(app_ctx: AppContext) -> str:
    """Sync all sources, print the results and return the combined path."""
    orchestrator = app_ctx.orchestrator()
    results = orchestrator.sync_all()
    combined_path = orchestrator.combined_path(results)
    print_sync_results(console, results, combined_path)
    return combined_path


def report_usage(app_ctx: AppContext, args: list[str] | None, skip_sync: bool = False) -> int:
    """Sync (unless skipped) and run the reporting tool; returns its exit code."""
    if skip_sync:
        combined_path = app_ctx.orchestrator().cached_path()
    else:
        combined_path = sync_sources(app_ctx)

    try:
        return run_report(args, combined_path, command=app_ctx.config.get("report.command"))
    except ReportError as e:
        logger.error(str(e))
        console.print(f"[red]Error: {e}[/red]")
        return 1


def sync(ctx: typer.Context):
    """
    Sync usage logs from every registered device and bucket.
    """
    sync_sources(ctx.obj)


def report(
    ctx: typer.Context,
    args: list[str] | None = typer.Argument(None, help="Arguments for the reporting tool (default: daily)"),
    skip_sync: bool = typer.Option(False, "--skip-sync", help="Report on cached logs without syncing"),
):
    """
    Sync, then run the usage report (e.g. 'ccumd report monthly --json').
    """
    code = report_usage(ctx.obj, args, skip_sync=skip_sync)
    if code:
        raise typer.Exit(code)
