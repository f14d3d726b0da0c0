"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
page outcomes, and normalization summaries.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import PipelineStageError
from .service import PageOutcome


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def format_changed_passes(changed_passes: tuple[str, ...]) -> str:
    """Return a stable comma-separated pass list, or `none`."""

    return ", ".join(changed_passes) if changed_passes else "none"


def echo_page_outcome(outcome: PageOutcome) -> None:
    """Print the status of one processed page."""

    typer.echo(f"Page: {outcome.title}")
    typer.echo(f"Status: {outcome.status}")
    if outcome.reason:
        typer.echo(f"Reason: {outcome.reason}")
    if outcome.status != "skipped":
        typer.echo(f"Changed passes: {format_changed_passes(outcome.changed_passes)}")
    if outcome.revision_id is not None:
        typer.echo(f"Revision: {outcome.revision_id}")
