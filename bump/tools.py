"""Required external tool checks, shown at the end of ``bump --help``."""

from __future__ import annotations

from packaging.version import InvalidVersion, Version
from pydantic import BaseModel

from .shell import run

MIN_GIT_VERSION = "2.20.0"


class ToolStatus(BaseModel):
    name: str
    version: str
    icon: str


def extract_git_version(output: str) -> str:
    """Pull the version out of ``git --version`` output.

    Examples:
        "git version 2.43.0" → "2.43.0"
        "git version 2.39.3 (Apple Git-146)" → "2.39.3"
    """
    parts = output.strip().splitlines()[0].split() if output.strip() else []
    return parts[2] if len(parts) > 2 else "unknown"


def meets_minimum(version: str, minimum: str) -> bool:
    """Compare dotted versions; unparsable versions never meet the minimum."""
    try:
        return Version(version.removeprefix("v")) >= Version(minimum)
    except InvalidVersion:
        return False


def check_tool(name: str, minimum: str) -> ToolStatus:
    try:
        result = run(name, "--version")
    except OSError:
        return ToolStatus(name=name, version="not found", icon="❌")
    if result.returncode != 0:
        return ToolStatus(name=name, version="not found", icon="❌")

    version = extract_git_version(result.stdout)
    icon = "✅" if meets_minimum(version, minimum) else "⚠️"
    return ToolStatus(name=name, version=version, icon=icon)


def tools_help(log_path: str) -> str:
    """Epilog text listing required tools and where logs are written."""
    git = check_tool("git", MIN_GIT_VERSION)
    return (
        "REQUIRED TOOLS:\n"
        f"  {git.icon} {git.name:<10} {git.version}\n\n"
        f"Logs are written to: {log_path}"
    )
