"""validate-gentx CLI - gentx pull request gate."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import typer
from rich.markup import escape

from gentx_gate import __version__
from gentx_gate.config import load_config
from gentx_gate.errors import GateEnvironmentError
from gentx_gate.gate import GateRequest, run_gate
from gentx_gate.log import configure_logging, err_console, resolve_level
from gentx_gate.report import write_report
from gentx_gate.types import EXIT_ENVIRONMENT

app = typer.Typer(
    name="validate-gentx",
    help="Check that a pull request adds exactly one valid gentx file and leaves genesis alone.",
    add_completion=False,
)


class TimestampMode(str, Enum):
    """Report timestamp handling."""

    DETERMINISTIC = "deterministic"
    WALLCLOCK = "wallclock"


def _version_option_callback(value: bool) -> None:
    """Handle eager --version option."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def _refuse(message: str) -> typer.Exit:
    err_console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    return typer.Exit(EXIT_ENVIRONMENT)


@app.command()
def main(
    base: str | None = typer.Option(None, "--base", help="Base revision (e.g. origin/main)."),
    head: str | None = typer.Option(None, "--head", help="Head revision (e.g. HEAD)."),
    repo_root: Path = typer.Option(
        Path("."),
        "--repo-root",
        help="Repository checkout with full history.",
    ),
    pr: int | None = typer.Option(
        None,
        "--pr",
        help="Collect changed files from this pull request via gh instead of --base/--head.",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Gate config YAML (defaults to <repo-root>/.gentx-gate.yaml when present).",
    ),
    skip_content: bool = typer.Option(
        False,
        "--skip-content",
        help="Run structural checks only; do not invoke the content validator.",
    ),
    skip_if_empty: bool = typer.Option(
        False,
        "--skip-if-empty",
        help="Exit 0 with a skipped report when the gentx directory holds no JSON files.",
    ),
    out: Path | None = typer.Option(
        None,
        "--out",
        help="Also write GENTX_REPORT.md and GENTX_REPORT.json to this directory.",
    ),
    timestamp_mode: TimestampMode = typer.Option(
        TimestampMode.DETERMINISTIC,
        "--timestamp-mode",
        help="deterministic omits the run timestamp from the report.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors on stderr."),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        is_eager=True,
        callback=_version_option_callback,
    ),
) -> None:
    """Validate a gentx contribution between two revisions.

    Exit codes: 0 passed or skipped, 1 validation failed, 2 environment error.
    """
    _ = version
    root = repo_root.resolve()

    try:
        gate_config = load_config(root, config)
    except GateEnvironmentError as exc:
        configure_logging(resolve_level(verbose=verbose, quiet=quiet))
        raise _refuse(str(exc)) from exc

    configure_logging(resolve_level(verbose=verbose, quiet=quiet, default=gate_config.log_level))

    if pr is None and not (base and head):
        raise _refuse("either --pr or both --base and --head are required")
    if pr is not None and (base or head):
        raise _refuse("--pr cannot be combined with --base/--head")

    request = GateRequest(
        repo_root=root,
        base_ref=base,
        head_ref=head,
        pr_number=pr,
        run_content=not skip_content,
        skip_if_empty=skip_if_empty,
        timestamp_mode=timestamp_mode.value,
    )

    try:
        report = run_gate(request, gate_config)
    except GateEnvironmentError as exc:
        raise _refuse(str(exc)) from exc

    typer.echo(report.body)

    if out is not None:
        json_path, md_path = write_report(report, out)
        err_console.print(f"[dim]Report written: {escape(str(md_path))}, {escape(str(json_path))}[/dim]")

    raise typer.Exit(report.exit_code)


if __name__ == "__main__":
    app()
