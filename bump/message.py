"""Commit message resolution.

The message for a release commit comes from, in order:
1. An explicit ``--message``, used verbatim.
2. ``--automatic``, which synthesises "Bump version to vX.Y.Z".
3. The staged set being only Cargo.toml (plus Cargo.lock): the same
   synthesised message, since there is nothing else to describe.
4. The user's editor, seeded with a template listing the staged files.

Only staged path names are looked at, never file contents.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable

import click

from .errors import BumpError, ErrorKind
from .models import BumpPlan, MessageSource, ResolvedMessage

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "vi"

TEMPLATE_HEADER = """\

# Please enter the commit message for {tag}. Lines starting
# with '#' will be ignored, and an empty message aborts the release.
#
# {transition}
#
# Changes to be committed:
"""


def automatic_message(plan: BumpPlan) -> str:
    return f"Bump version to {plan.tag}"


def is_version_only(staged_paths: Iterable[str], manifest_paths: Iterable[str]) -> bool:
    """True if the staged set is the manifest alone, or manifest plus lockfile.

    Args:
        staged_paths: Paths in the index after staging.
        manifest_paths: Cargo.toml first, then Cargo.lock if the crate has one.
    """
    staged = set(staged_paths)
    manifest, *lockfile = list(manifest_paths)
    return staged == {manifest} or staged == {manifest, *lockfile}


def resolve_source(
    explicit: str | None,
    automatic: bool,
    staged_paths: Iterable[str],
    manifest_paths: Iterable[str],
) -> MessageSource:
    """Pick where the message comes from. First match wins."""
    if explicit is not None:
        return MessageSource.EXPLICIT
    if automatic:
        return MessageSource.AUTOMATIC
    if is_version_only(staged_paths, manifest_paths):
        return MessageSource.VERSION_ONLY
    return MessageSource.EDITOR


def build_template(plan: BumpPlan, staged_paths: Iterable[str]) -> str:
    """Editor template: instructions plus the staged files, all commented."""
    header = TEMPLATE_HEADER.format(tag=plan.tag, transition=plan.describe())
    listing = "".join(f"#\t{path}\n" for path in staged_paths)
    return header + listing


def strip_comments(text: str) -> str:
    """Drop '#' lines and surrounding whitespace from an edited message."""
    kept = [line for line in text.splitlines() if not line.startswith("#")]
    return "\n".join(kept).strip()


def resolve_editor() -> str:
    """$VISUAL, then $EDITOR, then vi."""
    return os.environ.get("VISUAL") or os.environ.get("EDITOR") or DEFAULT_EDITOR


def edit_message(template: str) -> str:
    """Open the user's editor on ``template`` and return the saved text.

    click writes the template to a temporary file, waits for the editor to
    exit and removes the file whether or not the editor succeeded.

    Raises:
        BumpError: EDITOR_FAILED if the editor can't start or exits non-zero.
    """
    editor = resolve_editor()
    logger.info("Opening editor %s for commit message", editor)
    try:
        edited = click.edit(template, editor=editor, require_save=False)
    except click.ClickException as exc:
        raise BumpError(ErrorKind.EDITOR_FAILED, exc.format_message()) from exc
    return edited or ""


def resolve_message(
    plan: BumpPlan,
    explicit: str | None,
    automatic: bool,
    staged_paths: Iterable[str],
    manifest_paths: Iterable[str],
    *,
    editor: Callable[[str], str] = edit_message,
) -> ResolvedMessage:
    """Resolve the commit message, opening the editor only if needed.

    Raises:
        BumpError: EMPTY_MESSAGE if the edited message is blank once comment
                   lines are removed, or EDITOR_FAILED.
    """
    staged = list(staged_paths)
    source = resolve_source(explicit, automatic, staged, manifest_paths)

    if source is MessageSource.EXPLICIT:
        if not explicit or not explicit.strip():
            raise BumpError(ErrorKind.EMPTY_MESSAGE, "Commit message cannot be empty")
        return ResolvedMessage(source=source, text=explicit)
    if source is not MessageSource.EDITOR:
        return ResolvedMessage(source=source, text=automatic_message(plan))

    text = strip_comments(editor(build_template(plan, staged)))
    if not text:
        raise BumpError(
            ErrorKind.EMPTY_MESSAGE, "Aborting release due to empty commit message"
        )
    return ResolvedMessage(source=source, text=text)
