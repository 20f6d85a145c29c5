"""Entry point of the ``postaudit`` command."""

from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.markup import escape

from post_audit import __version__
from post_audit.cli import audit as audit_cmd
from post_audit.cli import status as status_cmd
from post_audit.config import Settings, get_settings
from post_audit.logging import setup_logging

from .common import console

app = typer.Typer(
    name="postaudit",
    help="Audit an archive of social media posts against alignment criteria.",
    add_completion=False,
)

app.command("run")(audit_cmd.run_audit)
app.command("quota")(status_cmd.show_quota)
app.add_typer(status_cmd.checkpoint_app, name="checkpoint")


def _print_version(value: bool) -> None:
    if value:
        console.print(f"postaudit version {__version__}")
        raise typer.Exit()


def _configure_logging(settings: Settings, *, verbose: bool, quiet: bool) -> None:
    log_config = settings.logging
    setup_logging(
        level=settings.log_level,
        verbose=verbose,
        quiet=quiet,
        log_file=Path(log_config.log_file) if log_config.log_file else None,
        rotation=log_config.rotation,
        retention=log_config.retention,
        serialize=log_config.serialize,
    )


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=_print_version, is_eager=True),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Only log warnings and errors (command output is unaffected)."),
    ] = False,
) -> None:
    """Post Audit - flag archived posts that no longer fit your public profile.

    Posts are evaluated one at a time under a daily quota. Interrupted or
    quota-paused runs resume from their checkpoint on the next `run`.
    """
    try:
        settings = get_settings()
    except ValidationError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None
    _configure_logging(settings, verbose=verbose, quiet=quiet)


if __name__ == "__main__":
    app()
