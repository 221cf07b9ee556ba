"""Command line interface for the Tractor storage toolkit."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
from click.core import ParameterSource
from rich.console import Console
from rich.markup import escape

from tractor.config import ConfigError, ConfigManager
from tractor.ingestion import (
    ContainsFileError,
    CopyFileError,
    ImportOutcome,
    ImportPathNotFound,
    ImportPipeline,
    PipelineError,
    ReadImportsError,
)
from tractor.logging_config import configure_logging
from tractor.storage import ResourceError, StorageResource

console = Console(soft_wrap=True)

_PIPELINE_ERROR_CODES: dict[type[PipelineError], str] = {
    ImportPathNotFound: "path_not_found",
    ContainsFileError: "contains_error",
    ReadImportsError: "read_imports_error",
    CopyFileError: "copy_error",
}


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """

    if quiet and mode != "error":
        return

    important_modes = {"summary", "warning", "error"}
    if summary_only and mode not in important_modes:
        return

    console.print(message)


def _format_summary_line(command: str, resource: str, metrics: dict[str, Any]) -> str:
    """Return a consistent summary line for CLI commands.

    Args:
        command: Command name to include in the summary.
        resource: Resource the command operated on.
        metrics: Ordered mapping of metric names to values.

    Returns:
        str: Rich-formatted summary string.
    """

    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {escape(resource)}: {parts}.[/green]"


def _describe_outcome(outcome: ImportOutcome) -> str:
    source = escape(str(outcome.source))
    if outcome.status == "imported":
        return f"[green]Copied:[/green] {source} to {escape(str(outcome.target))}"
    if outcome.status == "already_imported":
        return f"[yellow]Skipping (already imported):[/yellow] {source}"
    return f"[yellow]Skipping (invalid format):[/yellow] {source}"


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="tractor")
def cli() -> None:
    """Command-line interface for the Tractor storage toolkit."""


@cli.command("import")
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option(
    "-u",
    "--resource",
    type=str,
    help="Target resource name (defaults to storage.default_resource, 'import').",
)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the import.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def import_command(
    ctx: click.Context,
    paths: tuple[Path, ...],
    resource: str | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Import image resources from PATHS into Tractor storage.

    Imports are deduplicated, so the command can be run multiple times over
    the same files. Directories are scanned one level deep, oldest file first.

    Args:
        ctx: Click context used for parameter source inspection.
        paths: Files or directories to scan for input.
        resource: Name of the target storage resource.
        json_output: If True, emit a JSON document instead of per-file lines.
        summary_mode: When True, limit output to the summary line.
        quiet: When True, suppress non-error CLI output entirely.
    """

    outcomes: list[ImportOutcome] = []
    json_enabled = json_output

    def _details() -> dict[str, Any]:
        return {"outcomes": [outcome.model_dump(mode="json") for outcome in outcomes]}

    try:
        cli_overrides = {"storage.default_resource": resource} if resource is not None else None
        config = ConfigManager().load(cli_overrides=cli_overrides)

        explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
        explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

        quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
        summary_only = summary_mode if explicit_summary else config.cli.summary_default

        if json_output:
            if explicit_quiet and quiet_enabled:
                raise click.ClickException("--json cannot be combined with --quiet.")
            if explicit_summary and summary_only:
                raise click.ClickException("--json cannot be combined with --summary.")
            quiet_enabled = False
            summary_only = False

        if quiet_enabled and summary_only:
            raise click.ClickException(
                "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
            )

        resource_name = config.storage.default_resource
        storage_root = Path(config.storage.root).expanduser()
        try:
            configure_logging(config.logging, storage_root)
        except OSError as exc:
            raise ResourceError(f"Unable to prepare storage root {storage_root}: {exc}") from exc

        storage = StorageResource.from_config(resource_name, config)
        pipeline = ImportPipeline(storage)

        def _on_found(path: Path) -> None:
            if not json_output:
                _emit_message(
                    f"Found: {escape(str(path))}",
                    mode="detail",
                    quiet=quiet_enabled,
                    summary_only=summary_only,
                )

        def _on_outcome(outcome: ImportOutcome) -> None:
            outcomes.append(outcome)
            if not json_output:
                _emit_message(
                    _describe_outcome(outcome),
                    mode="detail",
                    quiet=quiet_enabled,
                    summary_only=summary_only,
                )

        report = pipeline.run(paths, on_outcome=_on_outcome, on_found=_on_found)
        counts = report.counts()

        if json_output:
            console.print_json(
                data={
                    "context": {
                        "resource": storage.name,
                        "location": storage.location.as_posix(),
                        "paths": [str(path) for path in paths],
                    },
                    "outcomes": [outcome.model_dump(mode="json") for outcome in report.outcomes],
                    "counts": counts,
                }
            )
        else:
            _emit_message(
                _format_summary_line("Import", storage.name, counts),
                mode="summary",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_enabled, original=exc)
    except ResourceError as exc:
        _handle_cli_error(str(exc), code="resource_error", json_output=json_enabled, original=exc)
    except PipelineError as exc:
        _handle_cli_error(
            str(exc),
            code=_PIPELINE_ERROR_CODES.get(type(exc), "import_error"),
            json_output=json_enabled,
            details=_details(),
            original=exc,
        )
    except click.ClickException as exc:
        _handle_cli_error(str(exc), code="cli_error", json_output=json_enabled, original=exc)
    except Exception as exc:
        _handle_cli_error(
            f"Unexpected error while importing files: {exc}",
            code="internal_error",
            json_output=json_enabled,
            details={"exception": type(exc).__name__},
            original=exc,
        )


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
