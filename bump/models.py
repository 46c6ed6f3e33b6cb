"""Data models for bump.

These Pydantic models represent the values passed between the inspector,
the version model, the message resolver and the decision engine. They are
frozen: each is created once per directory and only read afterwards.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import semver
from pydantic import BaseModel, ConfigDict, Field, computed_field

from .errors import ErrorKind


class BumpType(str, Enum):
    """Which version component to increment."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"

    @classmethod
    def from_flags(cls, major: bool, minor: bool) -> BumpType:
        if major:
            return cls.MAJOR
        if minor:
            return cls.MINOR
        return cls.PATCH


class MessageSource(str, Enum):
    """Where the release commit message comes from."""

    EXPLICIT = "explicit"
    AUTOMATIC = "automatic"
    VERSION_ONLY = "version-only"
    EDITOR = "editor"


class WorkflowState(str, Enum):
    """Repository state as seen by the decision engine."""

    DIRTY = "dirty"
    CLEAN_UNPUSHED_UNTAGGED = "clean-unpushed-untagged"
    CLEAN_PUSHED_UNTAGGED = "clean-pushed-untagged"
    CLEAN_TAGGED = "clean-tagged"


class Sequence(str, Enum):
    """The git operation sequence chosen for a directory."""

    STANDARD = "standard"
    AMEND = "amend"
    NEW_COMMIT = "new-commit"


class BumpPlan(BaseModel):
    """The version transition for one directory.

    Attributes:
        current: Version before bumping, or None for an initial release
                 where no version exists anywhere yet.
        target: Version to write and tag.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    current: semver.Version | None
    target: semver.Version

    @computed_field  # type: ignore[prop-decorator]
    @property
    def tag(self) -> str:
        return f"v{self.target}"

    @property
    def is_initial(self) -> bool:
        return self.current is None

    def describe(self) -> str:
        if self.current is None:
            return f"tag: {self.tag}"
        return f"bump: {self.current} → {self.target}"


class RepositoryState(BaseModel):
    """Snapshot of a directory taken before any decision is made.

    Attributes:
        path: The directory being processed.
        is_git_repo: Whether the directory is inside a git work tree.
        has_manifest: Whether Cargo.toml exists in the directory.
        manifest_paths: Cargo.toml (and Cargo.lock, if present) relative to
                        the repo root, as git reports staged paths.
        working_tree_dirty: Any staged, unstaged or untracked change.
        staged_paths: Paths currently in the index, in git's order.
        changed_paths: Every path ``git add -A`` would stage.
        head_has_tag: HEAD is exactly on a tag.
        head_is_pushed: HEAD is an ancestor of its upstream. False when
                        there is no upstream.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    is_git_repo: bool = True
    has_manifest: bool = True
    manifest_paths: tuple[str, ...] = ("Cargo.toml",)
    working_tree_dirty: bool = False
    staged_paths: tuple[str, ...] = ()
    changed_paths: tuple[str, ...] = ()
    head_has_tag: bool = False
    head_is_pushed: bool = False

    def with_staged(self, staged_paths: list[str]) -> RepositoryState:
        """Return a copy with ``staged_paths`` refreshed after staging."""
        return self.model_copy(update={"staged_paths": tuple(staged_paths)})


class ResolvedMessage(BaseModel):
    """A commit message and where it came from."""

    model_config = ConfigDict(frozen=True)

    source: MessageSource
    text: str


class BumpOptions(BaseModel):
    """Per-run options shared by every directory."""

    model_config = ConfigDict(frozen=True)

    bump_type: BumpType = BumpType.PATCH
    dry_run: bool = False
    message: str | None = None
    automatic: bool = False


class DirectoryOutcome(BaseModel):
    """Result of processing one directory."""

    model_config = ConfigDict(frozen=True)

    path: Path
    success: bool
    summary: str
    error: ErrorKind | None = None


class RunReport(BaseModel):
    """Aggregate of every directory processed in one invocation."""

    outcomes: list[DirectoryOutcome] = Field(default_factory=list)

    @property
    def succeeded(self) -> list[DirectoryOutcome]:
        return [o for o in self.outcomes if o.success]

    @property
    def failed(self) -> list[DirectoryOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0
