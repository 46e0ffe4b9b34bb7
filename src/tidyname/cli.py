"""Command line interface for tidyname."""

from __future__ import annotations

import difflib
import logging
import os
from pathlib import Path
from typing import Any, Callable, Optional

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from tidyname.classification import AnalysisLoadError, load_analysis_results
from tidyname.config import ConfigError, ConfigManager, TidyConfig, resolve_with_precedence
from tidyname.history import (
    HistoryError,
    HistoryRepository,
    OperationHistoryEntry,
    get_history,
    get_history_entry,
    restore_file,
    undo_operation,
)
from tidyname.ingestion import DirectoryScanner, FileInfo, MetadataExtractor, UnifiedMetadata
from tidyname.rename import (
    BatchValidationError,
    PreviewError,
    PreviewOptions,
    RenamePreview,
    RenameStatus,
    SelectionManager,
    execute_batch_rename,
    generate_preview,
)
from tidyname.templates import format_bytes

console = Console()
LOGGER = logging.getLogger(__name__)

_STATUS_STYLES = {
    RenameStatus.READY: "green",
    RenameStatus.CONFLICT: "red",
    RenameStatus.MISSING_DATA: "yellow",
    RenameStatus.NO_CHANGE: "dim",
    RenameStatus.INVALID_NAME: "red",
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


def _format_summary_line(command: str, root: Path | str, metrics: dict[str, Any]) -> str:
    """Return a consistent summary line for CLI commands.

    Args:
        command: Command name to include in the summary.
        root: Target root path relevant to the command.
        metrics: Ordered mapping of metric names to values.

    Returns:
        str: Rich-formatted summary string.
    """

    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {root}: {parts}.[/green]"


def _configure_logging(config: TidyConfig, verbosity: int) -> None:
    """Apply the configured log level, raised by each ``-v`` flag."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.getLevelName(config.logging.level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(level)


def _load_config(ctx: click.Context) -> TidyConfig:
    manager = ConfigManager()
    manager.ensure_exists()
    config = manager.load()
    verbosity = (ctx.obj or {}).get("verbose", 0)
    _configure_logging(config, verbosity)
    return config


def _output_modes(
    ctx: click.Context, config: TidyConfig, *, quiet: bool, summary_mode: bool, json_output: bool
) -> tuple[bool, bool]:
    """Resolve quiet/summary flags against the configured CLI defaults.

    Raises:
        click.ClickException: If the requested modes are incompatible.
    """
    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        return False, False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return quiet_enabled, summary_only


def _history_repository(config: TidyConfig) -> HistoryRepository:
    return HistoryRepository(config.history.resolved_path())


def _split_extensions(raw: Optional[str]) -> Optional[list[str]]:
    if not raw:
        return None
    return [part.strip() for part in raw.split(",") if part.strip()]


def _scanner(config: TidyConfig, *, recursive: bool, extensions: Optional[str]) -> DirectoryScanner:
    return DirectoryScanner(
        recursive=recursive or config.preferences.recursive_scan,
        include_hidden=config.preferences.include_hidden,
        extensions=_split_extensions(extensions),
    )


def _build_preview(
    config: TidyConfig,
    folder: str,
    *,
    recursive: bool,
    extensions: Optional[str],
    template_id: Optional[str],
    no_rules: bool,
) -> tuple[Path, RenamePreview]:
    """Scan ``folder``, extract metadata and generate rename proposals.

    Returns:
        tuple[Path, RenamePreview]: The resolved root and the generated preview.

    Raises:
        click.ClickException: If analysis results cannot be loaded.
        PreviewError: If preview generation fails.
    """
    preferences = config.preferences
    root = Path(folder).expanduser().resolve()
    files = list(_scanner(config, recursive=recursive, extensions=extensions).scan(root))
    LOGGER.info("Scanned %d file(s) under %s", len(files), root)
    metadata = MetadataExtractor().extract_many(files)

    llm_results = None
    if config.llm.enabled and config.llm.results_path:
        try:
            llm_results = load_analysis_results(Path(config.llm.results_path).expanduser())
        except AnalysisLoadError as exc:
            raise click.ClickException(str(exc)) from exc

    options = PreviewOptions(
        templates=config.templates,
        default_template_id=template_id or config.default_template_id,
        metadata_rules=[] if no_rules else config.rules,
        filename_rules=[] if no_rules else config.filename_rules,
        rule_priority_mode=preferences.rule_priority_mode,
        fallbacks=preferences.fallbacks,
        sanitize_filenames=preferences.sanitize_filenames,
        os_sanitize=preferences.os_sanitize,
        check_filesystem=preferences.check_filesystem,
        case_sensitive=preferences.case_sensitive_filesystem,
        folder_structures=config.folder_structures,
        base_directory=os.fspath(root),
        date_from_filesystem=preferences.date_from_filesystem,
        enable_llm_analysis=config.llm.enabled,
        llm_results=llm_results,
        llm_confidence_threshold=config.llm.confidence_threshold,
    )
    return root, generate_preview(files, metadata, options)


def _relative(path: str, root: Path) -> str:
    try:
        return os.path.relpath(path, root)
    except ValueError:
        return path


def _preview_table(preview: RenamePreview, root: Path) -> Table:
    table = Table(title=f"Rename preview for {root}")
    table.add_column("Status")
    table.add_column("Original")
    table.add_column("Proposed")
    table.add_column("Issues", overflow="fold")
    for proposal in preview.proposals:
        style = _STATUS_STYLES.get(proposal.status, "white")
        table.add_row(
            f"[{style}]{proposal.status.value}[/{style}]",
            _relative(proposal.original_path, root),
            _relative(proposal.proposed_path, root),
            "; ".join(issue.message for issue in proposal.issues),
        )
    return table


def _scan_table(files: list[FileInfo], root: Path) -> Table:
    table = Table(title=f"Files in {root}")
    table.add_column("Name")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    table.add_column("Category")
    table.add_column("Metadata")
    for file in files:
        table.add_row(
            file.relative_path or file.full_name,
            format_bytes(file.size),
            file.modified_at.isoformat(timespec="seconds"),
            file.category,
            "yes" if file.metadata_supported else "",
        )
    return table


def _metadata_table(metadata: UnifiedMetadata) -> Table:
    """Render the file descriptor and every populated metadata field."""
    file = metadata.file
    table = Table(title=f"Metadata for {file.path}", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value", overflow="fold")
    table.add_row("size", format_bytes(file.size))
    table.add_row("modified", file.modified_at.isoformat(timespec="seconds"))
    table.add_row("category", file.category)
    table.add_row("mime_type", file.mime_type or "")
    table.add_row("extraction", metadata.extraction_status)
    for section_name in ("image", "pdf", "office"):
        section = getattr(metadata, section_name)
        if section is None:
            continue
        for key, value in section.model_dump(mode="json", exclude_none=True).items():
            table.add_row(f"{section_name}.{key}", str(value))
    return table


def _preview_metrics(preview: RenamePreview) -> dict[str, Any]:
    summary = preview.summary
    return {
        "total": summary.total,
        "ready": summary.ready,
        "conflicts": summary.conflicts,
        "missing_data": summary.missing_data,
        "no_change": summary.no_change,
        "invalid_name": summary.invalid_name,
        "moves": summary.move_operations,
    }


def _history_table(entries: list[OperationHistoryEntry]) -> Table:
    table = Table(title="Operation history")
    table.add_column("ID")
    table.add_column("Timestamp")
    table.add_column("Type")
    table.add_column("Files", justify="right")
    table.add_column("Succeeded", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Undone")
    for entry in entries:
        table.add_row(
            entry.id,
            entry.timestamp.isoformat(timespec="seconds"),
            entry.operation_type,
            str(entry.file_count),
            str(entry.summary.succeeded),
            str(entry.summary.failed),
            entry.undone_at.isoformat(timespec="seconds") if entry.undone_at else "",
        )
    return table


def _assign_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign a nested value within a dictionary for a dotted path.

    Args:
        target: Mapping to mutate in-place.
        path: Sequence of keys representing the nested location.
        value: Value to assign at the nested location.

    Raises:
        ConfigError: If a non-mapping value is encountered along the path.
    """

    node = target
    for segment in path[:-1]:
        existing = node.get(segment)
        if existing is None:
            existing = {}
            node[segment] = existing
        elif not isinstance(existing, dict):
            raise ConfigError(
                f"Cannot assign into '{segment}' because it is not a mapping in the config file."
            )
        node = existing
    node[path[-1]] = value


def _scan_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the folder argument and scan options shared by preview and apply."""
    decorators = [
        click.argument("folder", type=click.Path(exists=True, file_okay=False, path_type=str)),
        click.option("-r", "--recursive", is_flag=True, help="Include all subdirectories."),
        click.option("-e", "--extensions", type=str, help="Comma-separated extensions to include."),
        click.option("--template", "template_id", type=str, help="Template id used when no rule matches."),
        click.option("--no-rules", is_flag=True, help="Ignore configured rules."),
        click.option("--json", "json_output", is_flag=True, help="Emit JSON output."),
        click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines."),
        click.option("--quiet", is_flag=True, help="Suppress non-error output."),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="tidyname")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (repeatable).")
@click.pass_context
def cli(ctx: click.Context, verbose: int) -> None:
    """tidyname renames batches of files from templates, with a reversible history."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command()
@_scan_options
@click.pass_context
def preview(
    ctx: click.Context,
    folder: str,
    recursive: bool,
    extensions: Optional[str],
    template_id: Optional[str],
    no_rules: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Show the rename proposals for files in FOLDER without touching them."""
    json_enabled = json_output
    try:
        config = _load_config(ctx)
        quiet_enabled, summary_only = _output_modes(
            ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=json_output
        )
        root, result = _build_preview(
            config,
            folder,
            recursive=recursive,
            extensions=extensions,
            template_id=template_id,
            no_rules=no_rules,
        )

        if json_output:
            payload = result.model_dump(mode="json")
            payload["context"] = {"root": str(root)}
            console.print_json(data=payload)
            return

        _emit_message(
            _preview_table(result, root), mode="detail", quiet=quiet_enabled, summary_only=summary_only
        )
        _emit_message(
            _format_summary_line("Preview", root, _preview_metrics(result)),
            mode="summary",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_enabled, original=exc)
    except PreviewError as exc:
        _handle_cli_error(str(exc), code=exc.code, json_output=json_enabled, original=exc)
    except click.ClickException as exc:
        _handle_cli_error(str(exc), code="cli_error", json_output=json_enabled, original=exc)


@cli.command()
@_scan_options
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Do not ask for confirmation.")
@click.option("--no-history", is_flag=True, help="Do not record the operation in history.")
@click.pass_context
def apply(
    ctx: click.Context,
    folder: str,
    recursive: bool,
    extensions: Optional[str],
    template_id: Optional[str],
    no_rules: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
    assume_yes: bool,
    no_history: bool,
) -> None:
    """Rename every ready file in FOLDER and record the operation."""
    json_enabled = json_output
    try:
        config = _load_config(ctx)
        quiet_enabled, summary_only = _output_modes(
            ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=json_output
        )
        root, result = _build_preview(
            config,
            folder,
            recursive=recursive,
            extensions=extensions,
            template_id=template_id,
            no_rules=no_rules,
        )

        selection = SelectionManager(result.proposals)
        selection.select_by_status(RenameStatus.READY)
        proposals = selection.get_executable_proposals()

        if not proposals:
            if json_output:
                console.print_json(data={"context": {"root": str(root)}, "result": None})
                return
            _emit_message(
                "[yellow]Nothing to rename.[/yellow]",
                mode="warning",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
            return

        if not json_output:
            _emit_message(
                _preview_table(result, root),
                mode="detail",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )

        if config.preferences.confirm_before_apply and not assume_yes:
            if json_output:
                raise click.ClickException("--json requires --yes when confirmation is enabled.")
            click.confirm(f"Rename {len(proposals)} file(s)?", abort=True)

        repository = None if no_history else _history_repository(config)
        batch = execute_batch_rename(
            proposals,
            create_directories=config.preferences.create_directories,
            history=repository,
            prune=config.history.prune_config(),
        )

        if json_output:
            payload = batch.model_dump(mode="json")
            payload["context"] = {"root": str(root)}
            console.print_json(data=payload)
        else:
            for item in batch.results:
                if item.outcome.value == "failed":
                    _emit_message(
                        f"[red]Failed: {item.original_path}: {item.error}[/red]",
                        mode="error",
                        quiet=quiet_enabled,
                        summary_only=summary_only,
                    )
            metrics: dict[str, Any] = {
                "renamed": batch.summary.succeeded,
                "skipped": batch.summary.skipped,
                "failed": batch.summary.failed,
                "directories_created": batch.summary.directories_created,
            }
            if batch.history_entry_id:
                metrics["history_id"] = batch.history_entry_id
            _emit_message(
                _format_summary_line("Apply", root, metrics),
                mode="summary",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )

        if not batch.success:
            raise SystemExit(1)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_enabled, original=exc)
    except PreviewError as exc:
        _handle_cli_error(str(exc), code=exc.code, json_output=json_enabled, original=exc)
    except BatchValidationError as exc:
        _handle_cli_error(
            str(exc),
            code="validation_error",
            json_output=json_enabled,
            details=[
                {"path": issue.file_path, "code": issue.code, "message": issue.message}
                for issue in exc.errors
            ],
            original=exc,
        )
    except click.ClickException as exc:
        _handle_cli_error(str(exc), code="cli_error", json_output=json_enabled, original=exc)


@cli.command()
@click.argument(
    "folder", type=click.Path(exists=True, file_okay=False, path_type=str), default="."
)
@click.option("-r", "--recursive", is_flag=True, help="Include all subdirectories.")
@click.option("-e", "--extensions", type=str, help="Comma-separated extensions to include.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")
@click.pass_context
def scan(
    ctx: click.Context,
    folder: str,
    recursive: bool,
    extensions: Optional[str],
    json_output: bool,
) -> None:
    """List the files in FOLDER that preview and apply would process."""
    try:
        config = _load_config(ctx)
        root = Path(folder).expanduser().resolve()
        files = list(_scanner(config, recursive=recursive, extensions=extensions).scan(root))

        if json_output:
            console.print_json(
                data={
                    "context": {"root": str(root)},
                    "files": [file.model_dump(mode="json") for file in files],
                }
            )
            return

        if files:
            console.print(_scan_table(files, root))
        console.print(
            _format_summary_line(
                "Scan",
                root,
                {"files": len(files), "total_size": format_bytes(sum(file.size for file in files))},
            )
        )
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=str))
@click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")
@click.pass_context
def info(ctx: click.Context, path: str, json_output: bool) -> None:
    """Show the metadata extracted from the file at PATH."""
    try:
        _load_config(ctx)
        metadata = MetadataExtractor().extract(FileInfo.from_path(path))

        if json_output:
            console.print_json(data=metadata.model_dump(mode="json"))
            return

        console.print(_metadata_table(metadata))
        if metadata.extraction_status == "failed":
            console.print(f"[yellow]Metadata extraction failed: {metadata.extraction_error}[/yellow]")
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    except OSError as exc:
        _handle_cli_error(str(exc), code="io_error", json_output=json_output, original=exc)


@cli.command()
@click.argument("operation_id", required=False)
@click.option("--limit", type=int, help="Maximum number of entries to show.")
@click.option(
    "--type",
    "operation_type",
    type=click.Choice(["rename", "move", "organize"]),
    help="Only show operations of this type.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")
@click.pass_context
def history(
    ctx: click.Context,
    operation_id: Optional[str],
    limit: Optional[int],
    operation_type: Optional[str],
    json_output: bool,
) -> None:
    """List recorded operations, or show OPERATION_ID in detail."""
    try:
        config = _load_config(ctx)
        repository = _history_repository(config)

        if operation_id:
            entry = get_history_entry(repository, operation_id)
            if entry is None:
                raise click.ClickException(f"Operation not found: {operation_id}")
            if json_output:
                console.print_json(data=entry.model_dump(mode="json", by_alias=True))
                return
            console.print(_history_table([entry]))
            for record in entry.files:
                marker = "[green]ok[/green]" if record.success else "[red]failed[/red]"
                target = record.new_path or record.error or ""
                console.print(f"  {marker} {record.original_path} -> {target}")
            return

        entries = get_history(
            repository,
            limit=limit if limit is not None else config.cli.history_limit,
            operation_type=operation_type,  # type: ignore[arg-type]
        )
        if json_output:
            console.print_json(
                data={"entries": [entry.model_dump(mode="json", by_alias=True) for entry in entries]}
            )
            return
        if not entries:
            console.print("[yellow]No operations recorded.[/yellow]")
            return
        console.print(_history_table(entries))
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    except HistoryError as exc:
        _handle_cli_error(str(exc), code="history_error", json_output=json_output, original=exc)
    except click.ClickException as exc:
        _handle_cli_error(str(exc), code="cli_error", json_output=json_output, original=exc)


@cli.command()
@click.argument("operation_id", required=False)
@click.option("--dry-run", is_flag=True, help="Validate without moving files.")
@click.option("--force", is_flag=True, help="Undo the files that can be undone even if others cannot.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")
@click.pass_context
def undo(
    ctx: click.Context,
    operation_id: Optional[str],
    dry_run: bool,
    force: bool,
    json_output: bool,
) -> None:
    """Undo OPERATION_ID, or the most recent operation."""
    try:
        config = _load_config(ctx)
        result = undo_operation(
            _history_repository(config), operation_id, dry_run=dry_run, force=force
        )

        if json_output:
            console.print_json(data=result.model_dump(mode="json", by_alias=True))
        else:
            for item in result.files:
                if item.error:
                    console.print(f"[red]{item.current_path or item.original_path}: {item.error}[/red]")
                elif item.skip_reason:
                    console.print(f"[yellow]Skipped {item.original_path}: {item.skip_reason}[/yellow]")
            if result.dry_run and not dry_run:
                console.print(
                    "[yellow]Undo aborted: some files cannot be restored. "
                    "Re-run with --force to restore the rest.[/yellow]"
                )
            metrics: dict[str, Any] = {
                "restored": result.files_restored,
                "skipped": result.files_skipped,
                "failed": result.files_failed,
                "directories_removed": len(result.directories_removed),
            }
            if result.dry_run:
                metrics["dry_run"] = True
            console.print(_format_summary_line("Undo", result.operation_id, metrics))

        if not result.success and not dry_run:
            raise SystemExit(1)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    except HistoryError as exc:
        _handle_cli_error(str(exc), code="history_error", json_output=json_output, original=exc)


@cli.command()
@click.argument("path", required=False)
@click.option("--operation", "operation_id", type=str, help="Undo this operation instead.")
@click.option("--lookup", is_flag=True, help="Only show where the file came from.")
@click.option("--dry-run", is_flag=True, help="Validate without moving the file.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")
@click.pass_context
def restore(
    ctx: click.Context,
    path: Optional[str],
    operation_id: Optional[str],
    lookup: bool,
    dry_run: bool,
    json_output: bool,
) -> None:
    """Move the file at PATH back to its original location."""
    try:
        config = _load_config(ctx)
        result = restore_file(
            _history_repository(config),
            path,
            dry_run=dry_run,
            operation_id=operation_id,
            lookup=lookup,
        )
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(data=result.model_dump(mode="json", by_alias=True))
        if not result.success:
            raise SystemExit(1)
        return

    if not result.success:
        raise click.ClickException(result.error or "Restore failed")

    if result.original_path:
        console.print(f"Original path: {result.original_path}")
    if result.previous_path and result.previous_path != result.original_path:
        console.print(f"Current path: {result.previous_path}")
    if result.operation_id:
        console.print(f"Last operation: {result.operation_id}")
    if result.message:
        console.print(f"[green]{result.message}[/green]")
    elif result.dry_run:
        console.print("[yellow]Dry run: file can be restored.[/yellow]")


@cli.group()
def config() -> None:
    """Manage tidyname configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Args:
        no_env: If True, ignore environment-derived overrides.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        config = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(config.model_dump(mode="json"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path describing the configuration field to update.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException(
            "KEY must specify a dotted path such as 'preferences.check_filesystem'."
        )

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        file_data = manager.load_file_overrides()
        _assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=TidyConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = manager.read_text().splitlines()

    diff = list(
        difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )
    # the timestamp line always changes
    changed = [
        line
        for line in diff
        if line[:1] in "+-" and not line.startswith(("+++", "---")) and "# Last updated:" not in line
    ]

    if not changed:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an interactive editor session.

    Raises:
        click.ClickException: If edited content is invalid or cannot be saved.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return

    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=TidyConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
