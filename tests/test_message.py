"""Tests for bump.message."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import click
import pytest

from bump.errors import BumpError, ErrorKind
from bump.message import (
    DEFAULT_EDITOR,
    build_template,
    edit_message,
    is_version_only,
    resolve_editor,
    resolve_message,
    resolve_source,
    strip_comments,
)
from bump.models import BumpPlan, MessageSource

MANIFEST = ("Cargo.toml",)
MANIFEST_AND_LOCK = ("Cargo.toml", "Cargo.lock")


class TestIsVersionOnly:
    @pytest.mark.parametrize(
        "staged,expected",
        [
            (["Cargo.toml"], True),
            (["Cargo.toml", "Cargo.lock"], True),
            (["Cargo.lock"], False),
            (["Cargo.toml", "src/main.rs"], False),
            ([], False),
        ],
    )
    def test_with_lockfile(self, staged: list[str], expected: bool) -> None:
        assert is_version_only(staged, MANIFEST_AND_LOCK) is expected

    def test_lockfile_not_tracked(self) -> None:
        """A staged Cargo.lock is real content when the crate doesn't own one."""
        assert not is_version_only(["Cargo.toml", "Cargo.lock"], MANIFEST)

    def test_subdirectory_paths(self) -> None:
        assert is_version_only(["crates/core/Cargo.toml"], ("crates/core/Cargo.toml",))
        assert not is_version_only(["Cargo.toml"], ("crates/core/Cargo.toml",))


class TestResolveSource:
    """First match wins: explicit, automatic, version-only, editor."""

    def test_explicit_beats_everything(self) -> None:
        assert resolve_source("Release", True, ["Cargo.toml"], MANIFEST) is MessageSource.EXPLICIT

    def test_automatic_beats_version_only(self) -> None:
        assert resolve_source(None, True, ["Cargo.toml"], MANIFEST) is MessageSource.AUTOMATIC

    def test_version_only(self) -> None:
        assert resolve_source(None, False, ["Cargo.toml"], MANIFEST) is MessageSource.VERSION_ONLY

    def test_editor_for_other_changes(self) -> None:
        assert (
            resolve_source(None, False, ["Cargo.toml", "src/main.rs"], MANIFEST)
            is MessageSource.EDITOR
        )


class TestTemplate:
    def test_lists_staged_files_as_comments(self, plan: BumpPlan) -> None:
        template = build_template(plan, ["Cargo.toml", "src/main.rs"])

        assert template.startswith("\n")
        assert "v1.2.4" in template
        assert "# bump: 1.2.3 → 1.2.4" in template
        assert "#\tCargo.toml\n" in template
        assert "#\tsrc/main.rs\n" in template
        assert strip_comments(template) == ""

    def test_strip_comments_keeps_body(self) -> None:
        edited = "Release 1.2.4\n\nFixes the parser.\n# Please enter...\n#\tCargo.toml\n"
        assert strip_comments(edited) == "Release 1.2.4\n\nFixes the parser."


class TestResolveEditor:
    def test_visual_first(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VISUAL", "code --wait")
        monkeypatch.setenv("EDITOR", "nano")
        assert resolve_editor() == "code --wait"

    def test_editor_second(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("VISUAL", raising=False)
        monkeypatch.setenv("EDITOR", "nano")
        assert resolve_editor() == "nano"

    def test_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("VISUAL", raising=False)
        monkeypatch.delenv("EDITOR", raising=False)
        assert resolve_editor() == DEFAULT_EDITOR


class TestEditMessage:
    @patch("bump.message.click.edit")
    def test_returns_edited_text(
        self, mock_edit: MagicMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("VISUAL", "myeditor")
        mock_edit.return_value = "Release notes\n"

        assert edit_message("# template\n") == "Release notes\n"
        mock_edit.assert_called_once_with("# template\n", editor="myeditor", require_save=False)

    @patch("bump.message.click.edit", return_value=None)
    def test_none_becomes_empty(self, mock_edit: MagicMock) -> None:
        assert edit_message("# template\n") == ""

    @patch("bump.message.click.edit")
    def test_editor_failure(self, mock_edit: MagicMock) -> None:
        """A failing editor is reported as EDITOR_FAILED."""
        mock_edit.side_effect = click.ClickException("myeditor: Editing failed")

        with pytest.raises(BumpError) as excinfo:
            edit_message("# template\n")

        assert excinfo.value.kind is ErrorKind.EDITOR_FAILED
        assert "Editing failed" in str(excinfo.value)


class TestResolveMessage:
    def test_explicit_verbatim(self, plan: BumpPlan) -> None:
        editor = MagicMock()
        message = resolve_message(
            plan, "Release 1.2.4", False, ["Cargo.toml", "src/main.rs"], MANIFEST, editor=editor
        )

        assert message.source is MessageSource.EXPLICIT
        assert message.text == "Release 1.2.4"
        editor.assert_not_called()

    def test_explicit_empty_rejected(self, plan: BumpPlan) -> None:
        with pytest.raises(BumpError) as excinfo:
            resolve_message(plan, "  ", False, ["Cargo.toml"], MANIFEST)
        assert excinfo.value.kind is ErrorKind.EMPTY_MESSAGE

    def test_automatic(self, plan: BumpPlan) -> None:
        editor = MagicMock()
        message = resolve_message(
            plan, None, True, ["Cargo.toml", "src/main.rs"], MANIFEST, editor=editor
        )

        assert message.text == "Bump version to v1.2.4"
        editor.assert_not_called()

    def test_version_only_skips_editor(self, plan: BumpPlan) -> None:
        """Only the manifest staged: no editor, synthesised message."""
        editor = MagicMock()
        message = resolve_message(
            plan, None, False, ["Cargo.toml", "Cargo.lock"], MANIFEST_AND_LOCK, editor=editor
        )

        assert message.source is MessageSource.VERSION_ONLY
        assert message.text == "Bump version to v1.2.4"
        editor.assert_not_called()

    def test_editor_used_for_other_changes(self, plan: BumpPlan) -> None:
        editor = MagicMock(return_value="Add CLI flag\n\n# comment line\n#\tsrc/main.rs\n")

        message = resolve_message(
            plan, None, False, ["Cargo.toml", "src/main.rs"], MANIFEST, editor=editor
        )

        assert message.source is MessageSource.EDITOR
        assert message.text == "Add CLI flag"
        template = editor.call_args.args[0]
        assert "#\tsrc/main.rs" in template

    @pytest.mark.parametrize("edited", ["", "\n\n", "# only comments\n#\tCargo.toml\n"])
    def test_empty_edit_aborts(self, plan: BumpPlan, edited: str) -> None:
        with pytest.raises(BumpError) as excinfo:
            resolve_message(
                plan,
                None,
                False,
                ["Cargo.toml", "src/main.rs"],
                MANIFEST,
                editor=MagicMock(return_value=edited),
            )

        assert excinfo.value.kind is ErrorKind.EMPTY_MESSAGE
        assert "empty commit message" in str(excinfo.value)
