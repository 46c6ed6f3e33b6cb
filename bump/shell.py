"""Shell and git utilities.

Provides thin wrappers around subprocess calls for running git and other
external tools inside a target directory, plus output formatting helpers.
Failures are raised as ``BumpError`` so the caller can decide whether to
abort a single directory or the whole run.
"""

from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path

from .errors import BumpError, ErrorKind

logger = logging.getLogger(__name__)


def git(*args: str, cwd: Path | None = None, check: bool = True) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "status", "--porcelain").
        cwd: Directory to run git in. Defaults to the process cwd.
        check: If True (default), raise on non-zero exit. Set to False
               for commands that may legitimately fail (e.g., tag lookup).

    Returns:
        Stripped stdout from the git command.

    Raises:
        BumpError: VERSION_CONTROL_FAILED with git's stderr verbatim.
    """
    result = git_result(*args, cwd=cwd)
    if check and result.returncode != 0:
        raise BumpError(
            ErrorKind.VERSION_CONTROL_FAILED,
            f"git {args[0]} failed: {result.stderr.strip() or result.stdout.strip()}",
        )
    return result.stdout.strip()


def git_result(*args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    """Run a git command and return the completed process unchecked.

    Used for queries whose exit code is the answer (``merge-base
    --is-ancestor``, ``describe --exact-match``).
    """
    logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
    try:
        return subprocess.run(
            ["git", *args], cwd=cwd, capture_output=True, text=True, check=False
        )
    except OSError as exc:
        raise BumpError(
            ErrorKind.VERSION_CONTROL_FAILED, f"Failed to run git: {exc}"
        ) from exc


def run(*args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    """Run an arbitrary command, capturing its output.

    Args:
        *args: Command and arguments (e.g., "cargo", "update", "-p", "foo").
        cwd: Directory to run the command in.

    Returns:
        CompletedProcess with returncode and captured output for checking success.

    Raises:
        OSError: If the executable cannot be started.
    """
    logger.debug("%s (cwd=%s)", " ".join(args), cwd)
    return subprocess.run(args, cwd=cwd, capture_output=True, text=True, check=False)


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate directories in multi-directory runs.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def error(msg: str) -> None:
    """Print an error message to stderr without exiting."""
    print(f"Error: {msg}", file=sys.stderr)


def fatal(msg: str) -> None:
    """Print an error message and exit with code 1.

    Use for unrecoverable errors that should halt the whole run.
    """
    error(msg)
    sys.exit(1)
