"""Error kinds raised while bumping a single directory.

Every failure is a ``BumpError`` tagged with an ``ErrorKind``. The
coordinator catches it per directory so one bad repository never stops
the rest of the batch.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NOT_A_REPOSITORY = "not-a-repository"
    MANIFEST_MISSING = "manifest-missing"
    MANIFEST_VERSION_MISSING = "manifest-version-missing"
    MANIFEST_INVALID = "manifest-invalid"
    LOCK_SYNC_FAILED = "lock-sync-failed"
    PRE_RELEASE = "pre-release"
    BUILD_METADATA = "build-metadata"
    MALFORMED = "malformed"
    TAG_EXISTS = "tag-exists"
    ALREADY_TAGGED = "already-tagged"
    EMPTY_MESSAGE = "empty-message"
    VERSION_CONTROL_FAILED = "version-control-failed"
    EDITOR_FAILED = "editor-failed"


class BumpError(Exception):
    """A failure that aborts processing of the current directory.

    Attributes:
        kind: Which of the known failure modes this is.
        message: Human-readable description, printed as-is.
    """

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return self.message
