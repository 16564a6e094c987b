"""CLI adapter for ``lib_context_log`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators produce and inspect context-enriched log lines without writing
Python: emit a line under an explicit context, or validate a log file against
the wire format a downstream aggregator expects.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command that wires global traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`cli_emit` – establishes a context and emits one line.
* :func:`cli_check` – validates an NDJSON log file with :func:`parse_event`.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. It calls the composition root and the
lifecycle API and never reaches into sink implementations directly.
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from pathlib import Path
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .application.lifecycle import with_context
from .core import install, log, uninstall
from .domain.config import OUTPUT_MODES
from .domain.errors import InvalidEvent
from .domain.levels import EVENT_LEVELS, LEVEL_RANKS
from .domain.wire import parse_event

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000
_CHECK_ERROR_LIMIT: Final[int] = 20


def _resolve_version() -> str:
    """Return the installed package version with sensible fallbacks."""

    try:
        return metadata.version("lib_context_log")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Context-enriched structured logging",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_context_log",
    message="lib_context_log version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command configuring traceback handling for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_context_log")
    except metadata.PackageNotFoundError:
        click.echo("lib_context_log (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_context_log')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")
    for entry in meta.get_all("Project-URL") or []:
        click.echo(f"  {entry}")


@cli.command("emit", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("message")
@click.option(
    "--level",
    type=click.Choice(EVENT_LEVELS, case_sensitive=False),
    default="info",
    show_default=True,
    help="Level of the emitted line",
)
@click.option(
    "--min-level",
    type=click.Choice(tuple(LEVEL_RANKS), case_sensitive=False),
    default="debug",
    show_default=True,
    help="Minimum level configured for the pipeline",
)
@click.option("--user-id", default=None, help="Identity bound to the context")
@click.option("--tx-id", default=None, help="Correlation id (generated when omitted)")
@click.option(
    "--field",
    "fields",
    multiple=True,
    help="Custom context field as key=value (repeatable; value parsed as JSON when possible)",
)
@click.option(
    "--output",
    type=click.Choice(OUTPUT_MODES, case_sensitive=False),
    default="console",
    show_default=True,
)
@click.option(
    "--file-path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Log file, required for file/both output",
)
def cli_emit(
    message: str,
    level: str,
    min_level: str,
    user_id: Optional[str],
    tx_id: Optional[str],
    fields: Sequence[str],
    output: str,
    file_path: Optional[Path],
) -> None:
    """Emit MESSAGE once under a context built from the options."""

    custom = _parse_fields(fields)
    install(level=min_level, output=output, file_path=file_path)
    try:
        with_context({"user_id": user_id, "tx_id": tx_id, "custom": custom}, _emit_once, level.lower(), message)
    finally:
        uninstall()


def _emit_once(level: str, message: str) -> None:
    getattr(log, level)(message)


@cli.command("check", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("log_file", type=click.Path(path_type=Path, exists=True, dir_okay=False, readable=True))
@click.option(
    "--indent",
    type=int,
    default=None,
    help="Pretty-print JSON output with the provided indent size",
)
def cli_check(log_file: Path, indent: Optional[int]) -> None:
    """Validate every line of LOG_FILE against the wire format.

    Prints a JSON summary; exits with status 1 when any line is invalid.
    """

    total = 0
    levels: dict[str, int] = {}
    errors: list[dict[str, object]] = []
    with log_file.open(encoding="utf-8") as handle:
        for number, raw in enumerate(handle, start=1):
            line = raw.rstrip("\n")
            if not line.strip():
                continue
            total += 1
            try:
                event = parse_event(line)
            except InvalidEvent as exc:
                errors.append({"line": number, "error": str(exc)})
                continue
            levels[event["level"]] = levels.get(event["level"], 0) + 1
    summary = {
        "file": str(log_file),
        "lines": total,
        "valid": total - len(errors),
        "levels": levels,
        "invalid": errors[:_CHECK_ERROR_LIMIT],
    }
    click.echo(json.dumps(summary, indent=indent))
    if errors:
        raise SystemExit(1)


def _parse_fields(values: Sequence[str]) -> dict[str, object]:
    """Parse ``key=value`` pairs, decoding JSON values where possible."""

    parsed: dict[str, object] = {}
    for item in values:
        key, sep, raw = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {item!r}", param_hint="--field")
        try:
            parsed[key] = json.loads(raw)
        except ValueError:
            parsed[key] = raw
    return parsed


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_context_log",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
