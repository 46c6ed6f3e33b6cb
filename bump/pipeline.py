"""Bump pipeline: validate → inspect → plan → decide → report.

This module runs the release workflow for each requested directory:
1. Validate the directory is a git repository with a Cargo.toml
2. Snapshot the repository state (dirty, staged files, tags, upstream)
3. Work out the version transition from Cargo.toml and existing tags
4. Hand off to the decision engine to commit/amend and tag (or preview)

Directories are processed one at a time, in the order given. A failure in
one is reported and recorded, and the run moves on to the next.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from .errors import BumpError
from .git import GitRepo
from .manifest import manifest_exists, manifest_path, manifest_paths, read_version
from .models import BumpOptions, BumpPlan, DirectoryOutcome, RunReport
from .shell import error, step
from .versions import format_tag, parse_version, plan_bump
from .workflow import run_workflow

logger = logging.getLogger(__name__)


def plan_directory(repo: GitRepo, options: BumpOptions) -> BumpPlan:
    """Read Cargo.toml and tags, and decide the version transition."""
    manifest_version = read_version(manifest_path(repo.path))
    manifest_tag_exists = False
    if manifest_version is not None:
        manifest_tag_exists = repo.tag_exists(format_tag(parse_version(manifest_version)))
    return plan_bump(
        manifest_version, repo.latest_tag(), manifest_tag_exists, options.bump_type
    )


def process_directory(directory: Path, options: BumpOptions) -> str:
    """Run the full workflow for one directory.

    Returns:
        Summary line for the end-of-run report.

    Raises:
        BumpError: Any failure; the directory is left for the user to fix.
    """
    repo = GitRepo(directory)
    state = repo.inspect(
        has_manifest=manifest_exists(directory),
        manifest_names=manifest_paths(directory),
    )
    plan = plan_directory(repo, options)
    return run_workflow(repo, plan, state, options)


def display_name(directory: Path) -> str:
    return directory.name or str(directory)


def run_bump(directories: Iterable[Path], options: BumpOptions) -> RunReport:
    """Execute the workflow for every directory and collect the outcomes.

    Args:
        directories: Target directories. Empty means the current directory.
        options: Flags shared by every directory.

    Returns:
        A report with one outcome per directory, in input order.
    """
    cwd = Path.cwd()
    targets = [d if d.is_absolute() else cwd / d for d in directories] or [cwd]
    multiple = len(targets) > 1
    logger.info("Starting bump with %s for %d directories", options, len(targets))

    report = RunReport()
    for directory in targets:
        name = display_name(directory)
        if multiple:
            step(f"[{name}]")
        try:
            summary = process_directory(directory, options)
        except BumpError as exc:
            error(f"[{name}] {exc}")
            logger.error("%s failed (%s): %s", directory, exc.kind.value, exc)
            report.outcomes.append(
                DirectoryOutcome(
                    path=directory, success=False, summary=str(exc), error=exc.kind
                )
            )
            continue
        report.outcomes.append(
            DirectoryOutcome(path=directory, success=True, summary=summary)
        )

    if multiple:
        print_summary(report)
    return report


def print_summary(report: RunReport) -> None:
    """Print the end-of-run summary, listing failures apart from successes."""
    print(f"\n{'=' * 60}")
    if not report.failed:
        print("All done! Don't forget to push your changes.")
    else:
        print(f"Completed: {len(report.succeeded)} succeeded, {len(report.failed)} failed")
    for outcome in report.succeeded:
        print(f"  ✓ {display_name(outcome.path)}: {outcome.summary}")
    for outcome in report.failed:
        first_line = outcome.summary.splitlines()[0] if outcome.summary else ""
        print(f"  ✗ {display_name(outcome.path)}: {first_line}")
    print("=" * 60)
