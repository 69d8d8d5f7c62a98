"""
Rich rendering of sync results.
"""

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ccumd.sync.types import SyncResult


def print_sync_results(console: Console, results: list[SyncResult], combined_path: str | None = None) -> None:
    if not results:
        console.print("[dim]No devices or S3 buckets registered; using local logs only.[/dim]")
    else:
        table = Table(title="Sync results", show_header=True, header_style="bold")
        table.add_column("Source", style="cyan")
        table.add_column("Kind")
        table.add_column("Status")
        table.add_column("Files", justify="right")
        table.add_column("Details", overflow="fold")

        for result in results:
            if result.ok:
                status = Text("✓ ok", style="green")
                details = ""
                if result.failed_objects:
                    details = f"skipped: {', '.join(result.failed_objects)}"
            else:
                status = Text("✗ failed", style="red")
                details = result.error or ""
            if result.attempts > 1:
                details = f"{details} (attempts: {result.attempts})".strip()
            table.add_row(result.source_id, result.kind.value, status, str(result.file_count), Text(details))

        console.print(table)

    if combined_path is not None:
        console.print(f"[dim]CLAUDE_CONFIG_DIR={combined_path}[/dim]")
