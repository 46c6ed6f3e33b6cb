"""Cargo.toml reading and writing utilities.

Uses tomlkit to preserve formatting and comments when modifying Cargo.toml.
Only the version field is ever touched, so the resulting diff is one line.

Version field precedence:
- ``[package].version = "x.y.z"`` is authoritative when present.
- ``[package].version = { workspace = true }`` defers to
  ``[workspace.package].version``.
- A manifest with no ``[package]`` table uses ``[workspace.package].version``
  and is never given a ``[package]`` table.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

from .errors import BumpError, ErrorKind
from .shell import run

logger = logging.getLogger(__name__)

MANIFEST_NAME = "Cargo.toml"
LOCKFILE_NAME = "Cargo.lock"


def manifest_path(directory: Path) -> Path:
    """Get the path to Cargo.toml in the given directory."""
    return directory / MANIFEST_NAME


def manifest_exists(directory: Path) -> bool:
    return manifest_path(directory).is_file()


def manifest_paths(directory: Path) -> tuple[str, ...]:
    """Repo-relative paths a version-only change touches.

    Cargo.toml always; Cargo.lock too when the directory has one.
    """
    if (directory / LOCKFILE_NAME).exists():
        return (MANIFEST_NAME, LOCKFILE_NAME)
    return (MANIFEST_NAME,)


def load_manifest(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a Cargo.toml file.

    Returns a TOMLDocument that preserves formatting when modified and saved.

    Raises:
        BumpError: MANIFEST_INVALID if the file can't be read or parsed.
    """
    try:
        return tomlkit.parse(path.read_text())
    except (OSError, TOMLKitError) as exc:
        raise BumpError(
            ErrorKind.MANIFEST_INVALID, f"Failed to read {path}: {exc}"
        ) from exc


def save_manifest(path: Path, doc: tomlkit.TOMLDocument) -> None:
    """Save a TOMLDocument back to disk, preserving original formatting."""
    try:
        path.write_text(tomlkit.dumps(doc))
    except OSError as exc:
        raise BumpError(
            ErrorKind.MANIFEST_INVALID, f"Failed to write {path}: {exc}"
        ) from exc


def is_workspace_only(doc: tomlkit.TOMLDocument) -> bool:
    """True for a virtual manifest: [workspace] but no [package]."""
    return "workspace" in doc and "package" not in doc


def _inherits_workspace_version(doc: tomlkit.TOMLDocument) -> bool:
    version = doc.get("package", {}).get("version")
    return isinstance(version, dict) and version.get("workspace") is True


def get_workspace_version(doc: tomlkit.TOMLDocument) -> str | None:
    """Extract version from [workspace.package].version."""
    version = doc.get("workspace", {}).get("package", {}).get("version")
    return str(version) if isinstance(version, str) else None


def get_manifest_version(doc: tomlkit.TOMLDocument) -> str | None:
    """Extract the authoritative version string, or None if there isn't one."""
    version = doc.get("package", {}).get("version")
    if isinstance(version, str):
        return str(version)
    return get_workspace_version(doc)


def read_version(path: Path) -> str | None:
    """Read the version from a Cargo.toml file.

    Returns None if no version field exists in any of the recognised places.
    """
    return get_manifest_version(load_manifest(path))


def write_version(path: Path, new_version: str) -> None:
    """Update the version in Cargo.toml, creating the field if needed.

    Writes to the same field ``read_version`` resolves to. See the module
    docstring for precedence.

    Raises:
        BumpError: MANIFEST_INVALID if the manifest has an unexpected shape.
    """
    doc = load_manifest(path)

    if is_workspace_only(doc) or _inherits_workspace_version(doc):
        workspace = doc.get("workspace")
        if workspace is None:
            raise BumpError(
                ErrorKind.MANIFEST_INVALID,
                f"{path}: version.workspace = true but no [workspace] section found",
            )
        _table(workspace, "package", path)["version"] = new_version
    else:
        _table(doc, "package", path)["version"] = new_version

    save_manifest(path, doc)
    logger.info("Updated %s to version %s", path, new_version)


def _table(container: Any, key: str, path: Path) -> Any:
    """Get or create the sub-table ``key`` of ``container``."""
    if key not in container:
        container[key] = tomlkit.table()
    table = container[key]
    if not isinstance(table, dict):
        raise BumpError(
            ErrorKind.MANIFEST_INVALID, f"{path}: [{key}] is not a table"
        )
    return table


def sync_lockfile(directory: Path) -> None:
    """Bring Cargo.lock in line with a freshly edited Cargo.toml.

    Only runs if Cargo.lock exists, so library crates that don't commit a
    lockfile never gain one. Packages update just themselves; virtual
    workspaces update every member.

    Raises:
        BumpError: LOCK_SYNC_FAILED if cargo can't be run or exits non-zero.
    """
    if not (directory / LOCKFILE_NAME).exists():
        return

    doc = load_manifest(manifest_path(directory))
    if is_workspace_only(doc):
        args = ("cargo", "update", "--workspace")
    else:
        name = doc.get("package", {}).get("name")
        if not isinstance(name, str):
            raise BumpError(
                ErrorKind.LOCK_SYNC_FAILED,
                f"Failed to get package name from {manifest_path(directory)}",
            )
        args = ("cargo", "update", "-p", str(name))

    try:
        result = run(*args, cwd=directory)
    except OSError as exc:
        raise BumpError(
            ErrorKind.LOCK_SYNC_FAILED, f"Failed to run cargo: {exc}"
        ) from exc
    if result.returncode != 0:
        raise BumpError(
            ErrorKind.LOCK_SYNC_FAILED,
            f"{' '.join(args)} failed: {result.stderr.strip()}",
        )
    logger.info("Synced %s", directory / LOCKFILE_NAME)
