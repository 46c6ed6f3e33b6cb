"""Release workflow decision engine: classify → choose → (preview | execute).

Given a repository snapshot and a bump plan, this module decides which git
sequence is safe and then runs it:

- dirty tree            → standard: write, stage, commit, tag
- clean, HEAD unpushed  → amend: write, stage, amend HEAD, tag
- clean, HEAD pushed    → new commit: write, stage, commit on top, tag
- clean, HEAD tagged    → refuse (ALREADY_TAGGED), nothing written

Pushed history is never rewritten. Dry-run walks the same decision and
reports what would happen without touching the manifest, the index, or
any ref.

There is no rollback. If the commit lands but tagging fails, the commit is
kept and the error says how to finish by hand.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from .errors import BumpError, ErrorKind
from .git import GitRepo
from .manifest import manifest_path, sync_lockfile, write_version
from .message import automatic_message, edit_message, resolve_message, resolve_source
from .models import (
    BumpOptions,
    BumpPlan,
    MessageSource,
    RepositoryState,
    Sequence,
    WorkflowState,
)

logger = logging.getLogger(__name__)

PUSH_REMINDER = "Run: git push && git push --tags"

_SEQUENCE_VERBS = {
    Sequence.STANDARD: "commit",
    Sequence.AMEND: "amend HEAD",
    Sequence.NEW_COMMIT: "create a new commit on top of pushed HEAD",
}


def classify(state: RepositoryState) -> WorkflowState:
    """Map a repository snapshot onto one of the four workflow states."""
    if state.working_tree_dirty:
        return WorkflowState.DIRTY
    if state.head_has_tag:
        return WorkflowState.CLEAN_TAGGED
    if state.head_is_pushed:
        return WorkflowState.CLEAN_PUSHED_UNTAGGED
    return WorkflowState.CLEAN_UNPUSHED_UNTAGGED


def choose_sequence(workflow_state: WorkflowState) -> Sequence:
    """Pick the git sequence for a workflow state.

    Raises:
        BumpError: ALREADY_TAGGED for a clean tree whose HEAD carries a tag.
    """
    if workflow_state is WorkflowState.DIRTY:
        return Sequence.STANDARD
    if workflow_state is WorkflowState.CLEAN_UNPUSHED_UNTAGGED:
        return Sequence.AMEND
    if workflow_state is WorkflowState.CLEAN_PUSHED_UNTAGGED:
        return Sequence.NEW_COMMIT
    raise BumpError(
        ErrorKind.ALREADY_TAGGED,
        "HEAD is already tagged and there is nothing to commit",
    )


def predict_staged_paths(state: RepositoryState) -> list[str]:
    """What the index will hold after the manifest write and ``git add -A``."""
    return sorted(set(state.changed_paths) | set(state.manifest_paths))


def run_workflow(
    repo: GitRepo,
    plan: BumpPlan,
    state: RepositoryState,
    options: BumpOptions,
    *,
    editor: Callable[[str], str] = edit_message,
) -> str:
    """Decide on and run (or preview) the release sequence for one directory.

    Args:
        repo: Git collaborator for the directory.
        plan: Version transition to apply.
        state: Snapshot taken before any decision.
        options: Run-wide flags (dry-run, message, automatic).
        editor: Opens the commit message editor; replaced in tests.

    Returns:
        One-line summary for the end-of-run report.

    Raises:
        BumpError: ALREADY_TAGGED, TAG_EXISTS, EMPTY_MESSAGE, EDITOR_FAILED,
                   VERSION_CONTROL_FAILED, LOCK_SYNC_FAILED or
                   MANIFEST_INVALID.
    """
    workflow_state = classify(state)
    sequence = choose_sequence(workflow_state)
    logger.info("%s: state=%s sequence=%s", state.path, workflow_state.value, sequence.value)

    print(plan.describe())
    _check_tag_free(repo, plan)

    if options.dry_run:
        return preview(plan, state, options, sequence)
    return execute(repo, plan, state, options, sequence, editor=editor)


def preview(
    plan: BumpPlan,
    state: RepositoryState,
    options: BumpOptions,
    sequence: Sequence,
) -> str:
    """Print what ``execute`` would do. Makes no git or filesystem changes."""
    staged = predict_staged_paths(state)
    source = resolve_source(options.message, options.automatic, staged, state.manifest_paths)
    if source is MessageSource.EXPLICIT:
        message = repr(options.message)
    elif source is MessageSource.EDITOR:
        message = "<from editor>"
    else:
        message = repr(automatic_message(plan))

    print(f"[dry-run] Would update: {', '.join(state.manifest_paths)}")
    print(f"[dry-run] Would {_SEQUENCE_VERBS[sequence]} with message: {message}")
    print(f"[dry-run] Would tag: {plan.tag}")
    return f"{plan.tag} (dry-run, would {_SEQUENCE_VERBS[sequence]})"


def execute(
    repo: GitRepo,
    plan: BumpPlan,
    state: RepositoryState,
    options: BumpOptions,
    sequence: Sequence,
    *,
    editor: Callable[[str], str] = edit_message,
) -> str:
    """Write the manifest, stage, commit per ``sequence`` and tag."""
    write_version(manifest_path(state.path), str(plan.target))
    sync_lockfile(state.path)

    repo.stage_all()
    state = state.with_staged(repo.staged_files())

    message = resolve_message(
        plan,
        options.message,
        options.automatic,
        state.staged_paths,
        state.manifest_paths,
        editor=editor,
    )

    if sequence is Sequence.AMEND:
        repo.amend(message.text)
    else:
        repo.commit(message.text)

    try:
        _check_tag_free(repo, plan)
        repo.create_tag(plan.tag, message.text)
    except BumpError as exc:
        raise BumpError(
            exc.kind,
            f"{exc.message}\nThe release commit was kept. Create the tag with: "
            f"git tag -a {plan.tag}",
        ) from exc

    print(f"Committed and tagged {plan.tag}")
    print(PUSH_REMINDER)
    return f"{plan.tag} ({_SEQUENCE_VERBS[sequence]})"


def _check_tag_free(repo: GitRepo, plan: BumpPlan) -> None:
    if repo.tag_exists(plan.tag):
        raise BumpError(ErrorKind.TAG_EXISTS, f"Tag {plan.tag} already exists")
