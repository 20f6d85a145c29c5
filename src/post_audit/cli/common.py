"""Common CLI option types and helpers.

Holds the shared console, the option aliases reused across commands, and:
- `run_async_command`: runs a pipeline coroutine and maps failures to exit 1
- `exit_code_for`: process exit code for each run outcome
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from pathlib import Path
from typing import Annotated, TypeVar

import typer
from rich.console import Console
from rich.markup import escape

from post_audit.exceptions import PipelineError
from post_audit.logging import get_logger
from post_audit.pipeline import OutputFormat, RunStatus

logger = get_logger(__name__)

# Shared console instance for CLI output
console = Console()

T = TypeVar("T")

EXIT_CANCELLED = 130

_EXIT_CODES = {
    RunStatus.COMPLETED: 0,
    RunStatus.PAUSED_QUOTA: 0,
    RunStatus.CANCELLED: EXIT_CANCELLED,
}


def exit_code_for(status: RunStatus) -> int:
    """Process exit code for a run outcome.

    A quota pause is not a failure: the next invocation resumes from the
    checkpoint.
    """
    return _EXIT_CODES[status]


def run_async_command(
    coro: Coroutine[object, object, T],
    *,
    error_prefix: str = "Error",
) -> T:
    """Run a pipeline coroutine from a synchronous command.

    Pipeline errors (missing archive, checkpoint or output I/O failures) are
    expected operator-facing conditions and print just their message.
    Anything else is unexpected and is logged with its traceback. Both exit
    with code 1.

    Raises:
        typer.Exit: Re-raised from deliberate exits, or raised with code 1 on error
    """
    try:
        return asyncio.run(coro)
    except typer.Exit:
        raise
    except PipelineError as e:
        console.print(f"[red]{error_prefix}:[/red] {escape(str(e))}")
    except Exception as e:
        logger.exception("Unexpected error")
        console.print(f"[red]{error_prefix}:[/red] {type(e).__name__}: {escape(str(e))}")
    raise typer.Exit(1)


# Typer requires function calls as default arguments, which triggers B008.
# Using Annotated with a centralized type alias keeps the noqa in one place.

OutputFormatOption = Annotated[
    OutputFormat,
    typer.Option(
        "--format",
        "-f",
        help="Output format",
    ),
]
"""Output format option type for CLI commands.

Usage:
    def command(output_format: OutputFormatOption = OutputFormat.TEXT):
"""

ArchiveOption = Annotated[
    Path | None,
    typer.Option(
        "--archive",
        "-a",
        help="Archive export to audit (overrides PATHS__ARCHIVE_PATH)",
    ),
]

OutputPathOption = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="CSV file for flagged posts (overrides PATHS__OUTPUT_PATH)",
    ),
]

CriteriaOption = Annotated[
    Path | None,
    typer.Option(
        "--criteria",
        "-c",
        help="JSON file with alignment criteria (overrides CRITERIA__*)",
    ),
]

YesOption = Annotated[
    bool,
    typer.Option(
        "--yes",
        "-y",
        help="Don't ask for confirmation",
    ),
]
