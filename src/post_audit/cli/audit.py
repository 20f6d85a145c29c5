"""Audit run command for Post Audit."""

import asyncio
import json
import signal
from functools import partial
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.markup import escape

from post_audit.archive import load_items
from post_audit.config import AuditCriteria, Settings, get_settings
from post_audit.exceptions import CheckpointStoreError, ConfigurationError
from post_audit.logging import LogContext
from post_audit.output import ResultWriter
from post_audit.pacing import PacingGovernor, format_duration
from post_audit.pipeline import (
    AuditRunResult,
    AuditScheduler,
    CheckpointStore,
    OutputFormat,
    RetryPolicy,
    RunStatus,
)
from post_audit.provider import GeminiClient
from post_audit.quota import QuotaLedger
from post_audit.validation import validate_run_settings

from .common import (
    ArchiveOption,
    CriteriaOption,
    OutputFormatOption,
    OutputPathOption,
    console,
    exit_code_for,
    run_async_command,
)


def apply_overrides(
    settings: Settings,
    *,
    archive: Path | None = None,
    output: Path | None = None,
    criteria: AuditCriteria | None = None,
    batch_size: int | None = None,
    pause: float | None = None,
) -> Settings:
    """Return settings with command-line overrides applied."""
    paths_update: dict[str, str] = {}
    if archive is not None:
        paths_update["archive_path"] = str(archive)
    if output is not None:
        paths_update["output_path"] = str(output)

    batch_update: dict[str, float | int] = {}
    if batch_size is not None:
        batch_update["batch_size"] = batch_size
    if pause is not None:
        batch_update["inter_batch_pause_seconds"] = pause

    update: dict[str, object] = {}
    if paths_update:
        update["paths"] = settings.paths.model_copy(update=paths_update)
    if batch_update:
        update["batch"] = settings.batch.model_copy(update=batch_update)
    if criteria is not None:
        update["criteria"] = criteria
    return settings.model_copy(update=update)


def _install_stop_handlers(loop: asyncio.AbstractEventLoop, scheduler: AuditScheduler) -> list[signal.Signals]:
    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, scheduler.request_stop)
        except (NotImplementedError, RuntimeError):
            continue
        installed.append(sig)
    return installed


async def execute_audit(settings: Settings, store: CheckpointStore) -> AuditRunResult:
    """Wire the pipeline from settings and run it to its end state."""
    loop = asyncio.get_running_loop()

    async with GeminiClient(settings.gemini_api_key, settings.provider) as client:
        scheduler = AuditScheduler(
            loader=partial(load_items, settings.paths.archive_path),
            evaluator=client.evaluate,
            emitter=ResultWriter(Path(settings.paths.output_path)).emit,
            criteria=settings.criteria,
            ledger=QuotaLedger(Path(settings.paths.quota_path), settings.quota),
            governor=PacingGovernor(settings.pacing),
            checkpoint_store=store,
            retry_policy=RetryPolicy(settings.retry),
            batch_config=settings.batch,
        )

        installed = _install_stop_handlers(loop, scheduler)
        try:
            with LogContext(archive=settings.paths.archive_path):
                return await scheduler.run()
        finally:
            for sig in installed:
                loop.remove_signal_handler(sig)


def _print_summary(result: AuditRunResult, settings: Settings) -> None:
    if result.status is RunStatus.COMPLETED:
        console.print("[green]Audit complete[/green]")
    elif result.status is RunStatus.PAUSED_QUOTA:
        console.print(f"[yellow]Paused:[/yellow] daily quota reached, resets {result.quota_reset}")
        console.print("[dim]Run the same command again after the reset to continue.[/dim]")
    else:
        console.print("[yellow]Cancelled:[/yellow] progress up to the last checkpoint is kept")

    console.print(f"  Posts:     {result.total_items}")
    if result.already_processed:
        console.print(f"  Resumed:   {result.already_processed} already processed")
    console.print(f"  Processed: {result.processed}")
    console.print(f"  [red]Flagged:[/red]   {result.flagged}")
    console.print(f"  [yellow]Errors:[/yellow]    {result.errors}")
    console.print(f"  [green]Clean:[/green]     {result.clean}")
    console.print(f"  Duration:  {format_duration(result.duration_seconds)}")
    if result.status is RunStatus.COMPLETED:
        console.print(f"  Results:   {settings.paths.output_path}")


def run_audit(
    archive: ArchiveOption = None,
    output: OutputPathOption = None,
    criteria_file: CriteriaOption = None,
    batch_size: Annotated[
        int | None,
        typer.Option("--batch-size", "-b", min=1, help="Items per checkpointed batch"),
    ] = None,
    pause: Annotated[
        float | None,
        typer.Option("--pause", min=0.0, help="Seconds to pause between batches"),
    ] = None,
    fresh: Annotated[
        bool,
        typer.Option("--fresh", help="Discard any existing checkpoint and start over"),
    ] = False,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Audit every post in the archive.

    Resumes automatically from the last checkpoint. When the daily quota is
    reached the run pauses (exit 0) and continues on the next invocation.

    Examples:
        postaudit run
        postaudit run --archive data/tweets.js --criteria criteria.json
        postaudit run --batch-size 20 --pause 30
        postaudit run --fresh --format json
    """
    criteria: AuditCriteria | None = None
    if criteria_file is not None:
        try:
            criteria = AuditCriteria.from_file(criteria_file)
        except (OSError, ValidationError) as e:
            console.print(f"[red]Error:[/red] Cannot load criteria from {criteria_file}: {escape(str(e))}")
            raise typer.Exit(1) from None

    settings = apply_overrides(
        get_settings(),
        archive=archive,
        output=output,
        criteria=criteria,
        batch_size=batch_size,
        pause=pause,
    )

    try:
        validate_run_settings(settings)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1) from None

    store = CheckpointStore(Path(settings.paths.checkpoint_path))
    if fresh and store.exists():
        try:
            store.delete()
        except CheckpointStoreError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1) from None
        if output_format == OutputFormat.TEXT:
            console.print("[dim]Existing checkpoint discarded[/dim]")

    if output_format == OutputFormat.TEXT:
        console.print(f"[dim]Auditing posts from {settings.paths.archive_path}...[/dim]")

    result = run_async_command(execute_audit(settings, store), error_prefix="Audit failed")

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(result.to_dict()))
    else:
        _print_summary(result, settings)

    code = exit_code_for(result.status)
    if code:
        raise typer.Exit(code)
