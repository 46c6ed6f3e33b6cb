"""Shared test fixtures."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest
import semver

from bump.models import BumpPlan, RepositoryState

CARGO_TOML = """\
# Crate manifest
[package]
name = "demo"
version = "{version}"
edition = "2021"

[dependencies]
serde = "1.0"  # keep in sync with the workspace
"""

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def run_git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=True
    )
    return result.stdout.strip()


@pytest.fixture
def git_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Isolate git from the user's config and give it an identity."""
    gitconfig = tmp_path / "gitconfig"
    gitconfig.write_text("")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(gitconfig))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test Author")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "author@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test Committer")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "committer@example.com")


@pytest.fixture
def make_crate(tmp_path: Path, git_env: None):
    """Factory creating a git repo holding a committed Cargo.toml."""

    def _make(name: str = "crate", version: str = "1.2.3") -> Path:
        root = tmp_path / name
        root.mkdir()
        run_git(root, "init", "-q")
        (root / "Cargo.toml").write_text(CARGO_TOML.format(version=version))
        run_git(root, "add", "-A")
        run_git(root, "commit", "-q", "-m", "Initial commit")
        return root

    return _make


@pytest.fixture
def cargo_toml(tmp_path: Path) -> Path:
    """A standalone Cargo.toml at version 1.0.0."""
    path = tmp_path / "Cargo.toml"
    path.write_text(CARGO_TOML.format(version="1.0.0"))
    return path


@pytest.fixture
def plan() -> BumpPlan:
    return BumpPlan(current=semver.Version(1, 2, 3), target=semver.Version(1, 2, 4))


@pytest.fixture
def clean_state(tmp_path: Path) -> RepositoryState:
    """Clean tree, HEAD neither tagged nor pushed."""
    return RepositoryState(path=tmp_path)
