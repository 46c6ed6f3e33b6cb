"""CLI entry point for bump."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from bump.logging_setup import log_file, setup_logging
from bump.models import BumpOptions, BumpType
from bump.pipeline import run_bump
from bump.shell import fatal
from bump.tools import tools_help


class BumpCommand(click.Command):
    """Command whose epilog reports required tools at --help time."""

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        formatter.write_paragraph()
        with formatter.indentation():
            formatter.write_text("\b\n" + tools_help(str(log_file())))


@click.command(cls=BumpCommand)
@click.version_option(package_name="bump")
@click.option("-M", "--major", is_flag=True, help="Bump major version (X.0.0).")
@click.option("-m", "--minor", is_flag=True, help="Bump minor version (x.Y.0).")
@click.option("-n", "--dry-run", is_flag=True, help="Preview changes without applying.")
@click.option("--message", default=None, help="Commit message to use.")
@click.option(
    "-a", "--automatic", is_flag=True, help="Generate automatic commit message."
)
@click.argument(
    "directories", nargs=-1, type=click.Path(file_okay=False, path_type=Path)
)
def cli(
    major: bool,
    minor: bool,
    dry_run: bool,
    message: str | None,
    automatic: bool,
    directories: tuple[Path, ...],
) -> None:
    """Bump semantic versions in Cargo.toml, commit, and tag.

    DIRECTORIES are paths to git repository roots (default: current directory).
    """
    if major and minor:
        raise click.UsageError("--major and --minor are mutually exclusive.")
    if message is not None and automatic:
        raise click.UsageError("--message and --automatic are mutually exclusive.")

    try:
        setup_logging()
    except OSError as exc:
        fatal(f"Failed to setup logging: {exc}")

    options = BumpOptions(
        bump_type=BumpType.from_flags(major, minor),
        dry_run=dry_run,
        message=message,
        automatic=automatic,
    )
    report = run_bump(directories, options)
    if report.exit_code:
        sys.exit(report.exit_code)
