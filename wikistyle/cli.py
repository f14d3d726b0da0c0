"""Command-line interface for wikistyle.

Responsibilities:
- Normalize wikitext files or stdin.
- Normalize live pages through the MediaWiki page store.
- Manage the securely stored bot password.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
import sys
from typing import Annotated

import typer

from .cli_rendering import echo_page_outcome, exit_with_command_error, format_changed_passes
from .config import ConfigLoader, WikistyleConfig
from .credentials import create_credential_store
from .errors import PipelineStageError
from .parsing import normalize_optional_string, parse_csv_tokens
from .pipeline import WikitextNormalizer
from .service import NormalizationService
from .site.mediawiki_client import MediaWikiApiError, MediaWikiClient
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="wikistyle",
    no_args_is_help=True,
    help="Wikitext normalization CLI.",
)

_STDIN_SOURCE = "-"


def _load_config(
    config_path: Path | None,
    *,
    modules: str | None = None,
    api_url: str | None = None,
) -> WikistyleConfig:
    """Load config from YAML or the environment and apply CLI overrides."""

    try:
        if config_path is not None:
            config = ConfigLoader.from_yaml(config_path)
        else:
            config = ConfigLoader.from_env()
        if modules is not None:
            config = replace(config, enabled_modules=parse_csv_tokens(modules))
        if api_url is not None:
            config = replace(config, api_url=normalize_optional_string(api_url))
        config.validate()
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid configuration: {exc}",
            hint="Fix config values and rerun.",
        ) from exc
    return config


def _read_source(source: str) -> str:
    """Read wikitext from a file path or stdin."""

    if source == _STDIN_SOURCE:
        return sys.stdin.read()
    try:
        return Path(source).read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="input",
            detail=f"Input file not found: `{source}`.",
            hint="Pass an existing wikitext file or `-` to read stdin.",
        ) from exc
    except UnicodeDecodeError as exc:
        raise PipelineStageError(
            stage="input",
            detail=f"Input file `{source}` is not valid UTF-8.",
        ) from exc


def _with_final_newline(text: str) -> str:
    if not text or text.endswith("\n"):
        return text
    return f"{text}\n"


@app.command("fix")
def fix_command(
    source: Annotated[
        str,
        typer.Argument(help="Path to a wikitext file, or `-` to read stdin."),
    ],
    in_place: Annotated[
        bool,
        typer.Option("--in-place", help="Rewrite the file instead of printing to stdout."),
    ] = False,
    check: Annotated[
        bool,
        typer.Option("--check", help="Exit with code 1 when normalization would change the text."),
    ] = False,
    modules: Annotated[
        str | None,
        typer.Option("--modules", help="Comma-separated passes to run (overrides config)."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log stage events to stderr."),
    ] = False,
) -> None:
    """Normalize a wikitext document."""

    try:
        if in_place and check:
            raise PipelineStageError(
                stage="input",
                detail="`--in-place` and `--check` cannot be used together.",
                hint="Run `--check` first, then `--in-place`.",
            )
        if in_place and source == _STDIN_SOURCE:
            raise PipelineStageError(
                stage="input",
                detail="`--in-place` requires a file path, not stdin.",
            )
        config = _load_config(config_file, modules=modules)
        text = _read_source(source)
        normalizer = WikitextNormalizer(
            config=config,
            run_logger=RunLogger() if verbose else None,
        )
        report = normalizer.normalize_with_report(text)
    except Exception as exc:
        exit_with_command_error("fix", exc)

    output = _with_final_newline(report.text)
    if check:
        if output != text:
            raise typer.Exit(code=1)
        return

    if in_place:
        if output == text:
            typer.echo(f"Unchanged: {source}")
            return
        try:
            Path(source).write_text(output, encoding="utf-8")
        except OSError as exc:
            exit_with_command_error(
                "fix",
                PipelineStageError(
                    stage="output",
                    detail=f"Failed to write `{source}`: {exc}",
                ),
            )
        typer.echo(f"Normalized: {source}")
        typer.echo(f"Changed passes: {format_changed_passes(report.changed_passes)}")
        return

    typer.echo(output, nl=False)


def _login(client: MediaWikiClient, config: WikistyleConfig) -> None:
    """Log the page store in as the service account using the stored bot password."""

    password = create_credential_store(config.service_account).get_password()
    if password is None:
        raise PipelineStageError(
            stage="credentials",
            detail=f"No bot password is stored for `{config.service_account}`.",
            hint="Run `wikistyle credentials --set-password` first.",
        )
    try:
        client.login(config.service_account, password)
    except MediaWikiApiError as exc:
        raise PipelineStageError(
            stage="credentials",
            detail=str(exc),
            hint="Check the stored bot password and its grants.",
        ) from exc


@app.command("page")
def page_command(
    title: Annotated[str, typer.Argument(help="Title of the page to normalize.")],
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Report what would change without saving."),
    ] = False,
    author: Annotated[
        str | None,
        typer.Option("--author", help="Author of the triggering edit (defaults to last author)."),
    ] = None,
    api_url: Annotated[
        str | None,
        typer.Option("--api-url", help="MediaWiki `api.php` endpoint (overrides config)."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log stage events to stderr."),
    ] = False,
) -> None:
    """Normalize one live page and save it under the service account."""

    try:
        config = _load_config(config_file, api_url=api_url)
        if config.api_url is None:
            raise PipelineStageError(
                stage="config",
                detail="No MediaWiki API endpoint is configured.",
                hint="Pass `--api-url`, set `api_url` in the config file, or `WIKISTYLE_API_URL`.",
            )
        run_logger = RunLogger() if verbose else None
        client = MediaWikiClient(
            config.api_url,
            user_agent=config.user_agent,
            opt_out_property=config.opt_out_property,
        )
        if not dry_run:
            _login(client, config)
        service = NormalizationService(
            config,
            normalizer=WikitextNormalizer(
                config=config,
                title_resolver=client,
                run_logger=run_logger,
            ),
            store=client,
            run_logger=run_logger,
        )
        outcome = service.normalize_page(title, author=author, dry_run=dry_run)
    except Exception as exc:
        exit_with_command_error("page", exc)

    echo_page_outcome(outcome)


@app.command("credentials")
def credentials_command(
    set_password: Annotated[
        bool,
        typer.Option(
            "--set-password",
            help="Prompt for the bot password with hidden input and store it securely.",
        ),
    ] = False,
    clear_password: Annotated[
        bool,
        typer.Option(
            "--clear-password",
            help="Clear the stored bot password from secure credential storage.",
        ),
    ] = False,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file naming the service account."),
    ] = None,
) -> None:
    """Manage the securely stored bot password of the service account."""

    if set_password and clear_password:
        exit_with_command_error(
            "credentials",
            PipelineStageError(
                stage="credentials",
                detail="`--set-password` and `--clear-password` cannot be used together.",
                hint="Run one credentials action per command invocation.",
            ),
        )

    try:
        config = _load_config(config_file)
    except PipelineStageError as exc:
        exit_with_command_error("credentials", exc)

    credential_store = create_credential_store(config.service_account)
    if set_password:
        prompted_password = normalize_optional_string(
            typer.prompt(
                f"Bot password for {config.service_account} (hidden input)",
                default="",
                hide_input=True,
                show_default=False,
            )
        )
        if prompted_password is None:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail="No bot password entered.",
                    hint="Provide a non-empty password when using `--set-password`.",
                ),
            )
        try:
            credential_store.set_password(prompted_password)
        except Exception as exc:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail=f"Failed to store bot password securely: {exc}",
                    hint="Install and configure a keyring backend and retry.",
                ),
            )
        typer.echo("Bot password stored in secure credential storage.")
        return

    if clear_password:
        removed = credential_store.clear_password()
        if removed:
            typer.echo("Stored bot password cleared from secure credential storage.")
        else:
            typer.echo("No stored bot password found in secure credential storage.")
        return

    availability = "available" if credential_store.is_available() else "unavailable"
    status = "present" if credential_store.get_password() is not None else "not set"
    typer.echo(f"Secure credential storage: {availability}")
    typer.echo(f"Service account: {config.service_account}")
    typer.echo(f"Stored bot password: {status}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
