"""Click CLI with auto-add, find-cycles, visualize, and serve subcommands."""

from __future__ import annotations

import logging
import os
import shlex
from pathlib import Path

import click

from strict_migrate import __version__
from strict_migrate.analysis.clusters import find_cycles
from strict_migrate.analysis.snapshot import write_snapshot
from strict_migrate.driver import AttemptReport
from strict_migrate.exceptions import StrictMigrateError
from strict_migrate.models import IncludeMode, MigrationConfig
from strict_migrate.pipeline import load_project, run_auto_add, run_snapshot

_MODE_CHOICES = [mode.value for mode in IncludeMode]
_TSCONFIG = click.Path(exists=True, dir_okay=False, path_type=Path)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Log graph and oracle details")
def cli(verbose: bool):
    """strict-migrate: grow strictNullChecks coverage without regressions."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _relative(path: str, root: Path) -> str:
    return os.path.relpath(path, root)


@cli.command("auto-add")
@click.argument("tsconfig", type=_TSCONFIG)
@click.option("--tsc", "tsc_command", help="Command that runs tsc (default: node_modules/typescript/bin/tsc)")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True),
              help="Seconds to wait for each verdict (default: $STRICT_MIGRATE_TIMEOUT or 600)")
@click.option("--mode", type=click.Choice(_MODE_CHOICES), default=IncludeMode.ADD_TO_FILES.value,
              show_default=True, help="How candidates are switched on in the tsconfig copy")
def auto_add(tsconfig: Path, tsc_command: str | None, timeout: float | None, mode: str):
    """Add every file that compiles cleanly under strict null checks to TSCONFIG."""
    root = tsconfig.resolve().parent

    def progress(attempt: AttemptReport):
        files = ", ".join(_relative(f, root) for f in attempt.cluster.files)
        click.echo(f"Trying to auto add '{files}' (file {attempt.index}/{attempt.total})")
        verdict = attempt.verdict
        if verdict.accepted:
            click.echo(click.style("  accepted", fg="green"))
        elif verdict.oracle_failed:
            click.echo(click.style(f"  {verdict.describe()}", fg="yellow"))
        else:
            click.echo(click.style(f"  rejected - {verdict.error_count}", fg="red"))

    try:
        config = MigrationConfig(
            tsc_command=shlex.split(tsc_command) if tsc_command else [],
            verdict_timeout=timeout,
            mode=IncludeMode(mode),
        )
        project, result = run_auto_add(tsconfig, config, progress=progress)
    except StrictMigrateError as e:
        raise click.ClickException(str(e))

    click.echo(
        f"\nDone after {len(result.passes)} pass(es): "
        f"{result.accepted_in_scope(project.condensed)}/{result.total_units} files "
        f"strict-checked, {len(result.newly_accepted)} added."
    )


@cli.command("find-cycles")
@click.argument("tsconfig", type=_TSCONFIG)
def find_cycles_cmd(tsconfig: Path):
    """List import cycles, then files that are not part of any cycle."""
    try:
        project = load_project(tsconfig)
    except StrictMigrateError as e:
        raise click.ClickException(str(e))

    report = find_cycles(project.condensed)
    root = project.src_root
    for cycle in report.cycles:
        click.echo(f"Found strongly connected component of size {len(cycle)}")
        for file in cycle:
            click.echo(f"    {_relative(file, root)}")

    click.echo(f"Found {len(report.cycles)} strongly connected components")
    click.echo(f"Files not part of a strongly connected components ({len(report.singles)})")
    for file in report.singles:
        click.echo(f"    {_relative(file, root)}")


@cli.command()
@click.argument("tsconfig", type=_TSCONFIG)
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), default="data.js",
              show_default=True, help="Output file (.json for plain JSON)")
@click.option("--count-errors", is_flag=True, help="Run tsc to count errors for eligible files")
@click.option("--tsc", "tsc_command", help="Command that runs tsc")
def visualize(tsconfig: Path, output: Path, count_errors: bool, tsc_command: str | None):
    """Write the cluster graph with progress and depth data for visualization."""
    root = tsconfig.resolve().parent

    def progress(cluster, verdict):
        click.echo(f"Counting errors for eligible file: '{_relative(cluster.files[0], root)}' "
                   f"-> {verdict.describe()}")

    try:
        config = MigrationConfig(tsc_command=shlex.split(tsc_command) if tsc_command else [])
        nodes, summary = run_snapshot(tsconfig, config, count_errors=count_errors, progress=progress)
    except StrictMigrateError as e:
        raise click.ClickException(str(e))

    click.echo(f"Current strict null checking progress {summary['checked']}/{summary['total']}")
    click.echo(f"Current eligible file count: {summary['eligible_files']}")
    path = write_snapshot(nodes, output)
    click.echo(f"Wrote {len(nodes)} node(s) to {path}")


@cli.command()
@click.option("--port", "-p", default=8430, help="Port number")
@click.option("--host", default="127.0.0.1", help="Host address")
@click.option("--open/--no-open", default=False, help="Open the API docs in a browser")
def serve(port: int, host: str, open: bool):
    """Serve the diagnostic snapshot API."""
    try:
        import uvicorn
    except ImportError:
        raise click.ClickException(
            "uvicorn is required for the API server. "
            "Install with: pip install 'strict-migrate[web]'"
        )

    from strict_migrate.web import create_app

    click.echo(f"Starting strict-migrate API at http://{host}:{port}")

    if open:
        import threading
        import webbrowser
        threading.Timer(1.0, lambda: webbrowser.open(f"http://{host}:{port}/docs")).start()

    uvicorn.run(create_app(), host=host, port=port, log_level="info")


if __name__ == "__main__":
    cli()
