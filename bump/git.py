"""Git queries and mutations for a single repository.

``GitRepo`` is the only place that knows git's command-line syntax. The
decision engine asks it questions (is the tree dirty? is HEAD pushed?) and
tells it what to do (stage, commit, amend, tag); every call runs with the
repository directory as cwd, so processing one directory never depends on
the process working directory.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from .errors import BumpError, ErrorKind
from .models import RepositoryState
from .shell import git, git_result

logger = logging.getLogger(__name__)

RELEASE_TAG_RE = re.compile(r"^v(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")


@dataclass
class GitRepo:
    path: Path

    def _git(self, *args: str, check: bool = True) -> str:
        return git(*args, cwd=self.path, check=check)

    @staticmethod
    def _lines(output: str) -> list[str]:
        return [line for line in output.splitlines() if line]

    # Queries

    def is_git_repo(self) -> bool:
        """Check if the directory is inside a git repository."""
        try:
            return git_result("rev-parse", "--git-dir", cwd=self.path).returncode == 0
        except BumpError:
            return False

    def prefix(self) -> str:
        """Path of the directory relative to the repo root ("" at the root)."""
        return self._git("rev-parse", "--show-prefix")

    def is_dirty(self) -> bool:
        """True if anything is staged, modified, deleted or untracked."""
        return bool(self._git("status", "--porcelain"))

    def staged_files(self) -> list[str]:
        """Paths currently in the index, relative to the repo root."""
        return self._lines(self._git("diff", "--cached", "--name-only"))

    def changed_files(self) -> list[str]:
        """Every path ``git add -A`` would stage, sorted and de-duplicated."""
        paths = set(self.staged_files())
        paths.update(
            self._lines(
                self._git(
                    "ls-files",
                    "--full-name",
                    "--modified",
                    "--deleted",
                    "--others",
                    "--exclude-standard",
                    "--",
                    ":/",
                )
            )
        )
        return sorted(paths)

    def latest_tag(self) -> str | None:
        """Find the most recent release tag (vMAJOR.MINOR.PATCH).

        Tags are sorted by version, so v1.10.0 comes before v1.9.0.
        Pre-release tags and other v* names (v2.0.0-rc.1, vendor-import)
        are skipped. Returns None if no release tags exist yet.
        """
        tags = self._git("tag", "--list", "v*", "--sort=-v:refname")
        for tag in self._lines(tags):
            if RELEASE_TAG_RE.match(tag):
                return tag
        return None

    def tag_exists(self, tag: str) -> bool:
        return bool(self._git("tag", "--list", tag))

    def head_has_tag(self) -> bool:
        """True if HEAD is exactly on a tag. False for an unborn HEAD."""
        result = git_result("describe", "--exact-match", "--tags", "HEAD", cwd=self.path)
        return result.returncode == 0

    def upstream(self) -> str | None:
        """The upstream ref of the current branch, or None if there isn't one."""
        result = git_result(
            "rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}", cwd=self.path
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def head_is_pushed(self) -> bool:
        """True if HEAD is already contained in its upstream branch.

        No upstream means nothing has been pushed, so this is False and
        amending stays allowed.
        """
        upstream = self.upstream()
        if upstream is None:
            return False
        result = git_result("merge-base", "--is-ancestor", "HEAD", upstream, cwd=self.path)
        if result.returncode == 0:
            return True
        if result.returncode == 1:
            return False
        raise BumpError(
            ErrorKind.VERSION_CONTROL_FAILED,
            f"git merge-base failed: {result.stderr.strip()}",
        )

    def inspect(
        self, has_manifest: bool, manifest_names: tuple[str, ...]
    ) -> RepositoryState:
        """Take a snapshot of the repository for the decision engine.

        Args:
            has_manifest: Whether Cargo.toml exists in the directory.
            manifest_names: Manifest and lockfile names relative to the
                            directory; stored relative to the repo root.

        Raises:
            BumpError: NOT_A_REPOSITORY, or MANIFEST_MISSING when
                       ``has_manifest`` is False.
        """
        if not self.is_git_repo():
            raise BumpError(
                ErrorKind.NOT_A_REPOSITORY, f"Not a git repository: {self.path}"
            )
        if not has_manifest:
            raise BumpError(
                ErrorKind.MANIFEST_MISSING, f"No Cargo.toml found in: {self.path}"
            )

        prefix = self.prefix()
        dirty = self.is_dirty()
        state = RepositoryState(
            path=self.path,
            manifest_paths=tuple(prefix + name for name in manifest_names),
            working_tree_dirty=dirty,
            staged_paths=tuple(self.staged_files()),
            changed_paths=tuple(self.changed_files()) if dirty else (),
            head_has_tag=self.head_has_tag(),
            head_is_pushed=self.head_is_pushed(),
        )
        logger.info("Inspected %s: %s", self.path, state)
        return state

    # Mutations

    def stage_all(self) -> None:
        self._git("add", "-A")

    def commit(self, message: str) -> None:
        self._git("commit", "-m", message)
        logger.info("Committed with message: %s", message)

    def amend(self, message: str) -> None:
        """Amend HEAD with the staged changes, replacing its message."""
        self._git("commit", "--amend", "-m", message)
        logger.info("Amended HEAD with message: %s", message)

    def create_tag(self, tag: str, message: str) -> None:
        """Create an annotated tag on HEAD."""
        self._git("tag", "-a", tag, "-m", message)
        logger.info("Created tag: %s", tag)
