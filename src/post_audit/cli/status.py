"""Quota and checkpoint inspection commands for Post Audit."""

import json
from pathlib import Path

import typer
from rich.table import Table

from post_audit.config import get_settings
from post_audit.exceptions import CheckpointStoreError
from post_audit.pipeline import CheckpointStore, OutputFormat
from post_audit.quota import QuotaLedger, QuotaStatus

from .common import OutputFormatOption, YesOption, console

checkpoint_app = typer.Typer(help="Inspect or discard the resume checkpoint")

_STATUS_STYLES = {
    QuotaStatus.AVAILABLE: "green",
    QuotaStatus.WARNING: "yellow",
    QuotaStatus.EXHAUSTED: "red",
}


def _checkpoint_store() -> CheckpointStore:
    return CheckpointStore(Path(get_settings().paths.checkpoint_path))


def show_quota(output_format: OutputFormatOption = OutputFormat.TEXT) -> None:
    """Show today's provider quota usage.

    Examples:
        postaudit quota
        postaudit quota --format json
    """
    settings = get_settings()
    ledger = QuotaLedger(Path(settings.paths.quota_path), settings.quota)
    stats = ledger.get_stats()

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(stats))
        return

    status = QuotaStatus(stats["status"])
    style = _STATUS_STYLES[status]

    table = Table(title=f"Daily quota ({stats['date']}, {stats['timezone']})", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Status", f"[{style}]{status.value}[/{style}]")
    table.add_row("Used", f"{stats['used']} / {stats['daily_limit']} ({stats['percent_of_limit']}%)")
    table.add_row("Safety threshold", f"{stats['safety_threshold']} ({stats['percent_of_threshold']}% used)")
    table.add_row("Remaining", str(stats["remaining"]))
    table.add_row("Resets", stats["resets"])
    console.print(table)


@checkpoint_app.command("show")
def show_checkpoint(output_format: OutputFormatOption = OutputFormat.TEXT) -> None:
    """Show the saved resume checkpoint, if any.

    Examples:
        postaudit checkpoint show
        postaudit checkpoint show --format json
    """
    store = _checkpoint_store()
    checkpoint = store.load()

    if output_format == OutputFormat.JSON:
        payload = checkpoint.model_dump(mode="json") if checkpoint else None
        console.print_json(json.dumps(payload))
        return

    if checkpoint is None:
        console.print(f"[dim]No checkpoint at {store.path}[/dim]")
        return

    console.print(f"[bold]Checkpoint[/bold] {store.path}")
    console.print(f"  Saved:     {checkpoint.timestamp.isoformat() if checkpoint.timestamp else 'unknown'}")
    console.print(f"  Processed: {checkpoint.total_processed} / {checkpoint.total_items}")
    console.print(f"  [red]Flagged:[/red]   {checkpoint.flagged_count}")
    console.print(f"  [yellow]Errors:[/yellow]    {checkpoint.error_count}")
    console.print(f"  Clean:     {checkpoint.clean_count}")
    if checkpoint.last_processed_id:
        console.print(f"  Last post: {checkpoint.last_processed_id}")


@checkpoint_app.command("clear")
def clear_checkpoint(yes: YesOption = False) -> None:
    """Discard the saved checkpoint so the next run starts over.

    Examples:
        postaudit checkpoint clear
        postaudit checkpoint clear --yes
    """
    store = _checkpoint_store()
    if not store.exists():
        console.print("[dim]No checkpoint to clear[/dim]")
        return

    if not yes and not typer.confirm("Discard saved progress? The next run starts from the beginning"):
        console.print("[dim]Aborted[/dim]")
        raise typer.Exit(1)

    try:
        store.delete()
    except CheckpointStoreError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None
    console.print("[green]Checkpoint cleared[/green]")
