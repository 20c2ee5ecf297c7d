"""Tests for diffcommit project commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from diffcommit.cli.main import app
from diffcommit.hierarchy.types import PROJECT_CONTENT_FILE

runner = CliRunner()


def _run(root: Path, *args: str, **kwargs):
    return runner.invoke(app, [*args, "--root", str(root)], **kwargs)


@pytest.fixture
def repo(root: Path) -> Path:
    result = _run(root, "repo", "create", "R", "--no-default-project")
    assert result.exit_code == 0, result.output
    return root / "R"


# ---------------------------------------------------------------------------
# create / list
# ---------------------------------------------------------------------------


def test_create_empty_project(root: Path, repo: Path) -> None:
    result = _run(root, "project", "create", "R", "Draft")
    assert result.exit_code == 0, result.output
    assert "Created project" in result.output
    assert "R/Draft" in result.output
    assert (repo / "Draft" / PROJECT_CONTENT_FILE).read_text(encoding="utf-8") == ""


def test_create_with_text(root: Path, repo: Path) -> None:
    _run(root, "project", "create", "R", "Draft", "--text", "Once upon a time")
    assert (repo / "Draft" / PROJECT_CONTENT_FILE).read_text(encoding="utf-8") == "Once upon a time"


def test_create_inside_project_exits_1(root: Path, repo: Path) -> None:
    _run(root, "project", "create", "R", "Draft")
    result = _run(root, "project", "create", "R/Draft", "Nested")
    assert result.exit_code == 1
    assert not (repo / "Draft" / "Nested").exists()


def test_create_at_root_exits_1(root: Path) -> None:
    result = _run(root, "project", "create", ".", "Loose")
    assert result.exit_code == 1
    assert not (root / "Loose").exists()


def test_list_empty(root: Path, repo: Path) -> None:
    result = _run(root, "project", "list", "R")
    assert result.exit_code == 0
    assert "No projects in this repository" in result.output


def test_list_projects(root: Path, repo: Path) -> None:
    _run(root, "project", "create", "R", "One")
    _run(root, "project", "create", "R", "Two")
    result = _run(root, "project", "list", "R")
    assert result.exit_code == 0
    assert "One" in result.output
    assert "Two" in result.output


# ---------------------------------------------------------------------------
# show / save
# ---------------------------------------------------------------------------


def test_save_then_show(root: Path, repo: Path) -> None:
    _run(root, "project", "create", "R", "Draft")
    saved = _run(root, "project", "save", "R/Draft", "--text", "Hello")
    assert saved.exit_code == 0, saved.output
    assert "Saved 5 characters" in saved.output

    shown = _run(root, "project", "show", "R/Draft")
    assert shown.exit_code == 0
    assert shown.stdout == "Hello\n"


def test_save_from_file(root: Path, repo: Path, tmp_path: Path) -> None:
    _run(root, "project", "create", "R", "Draft")
    source = tmp_path / "draft.md"
    source.write_text("line one\nline two\n", encoding="utf-8")
    result = _run(root, "project", "save", "R/Draft", "--file", str(source))
    assert result.exit_code == 0, result.output
    assert (repo / "Draft" / PROJECT_CONTENT_FILE).read_text(encoding="utf-8") == "line one\nline two\n"


def test_save_from_stdin(root: Path, repo: Path) -> None:
    _run(root, "project", "create", "R", "Draft")
    result = _run(root, "project", "save", "R/Draft", "--file", "-", input="piped text")
    assert result.exit_code == 0, result.output
    assert (repo / "Draft" / PROJECT_CONTENT_FILE).read_text(encoding="utf-8") == "piped text"


def test_save_without_content_exits_1(root: Path, repo: Path) -> None:
    _run(root, "project", "create", "R", "Draft")
    result = _run(root, "project", "save", "R/Draft")
    assert result.exit_code == 1
    assert "No content given" in result.output


def test_save_missing_file_exits_1(root: Path, repo: Path, tmp_path: Path) -> None:
    _run(root, "project", "create", "R", "Draft")
    result = _run(root, "project", "save", "R/Draft", "--file", str(tmp_path / "absent.md"))
    assert result.exit_code == 1
    assert "File system error" in result.output


def test_show_unknown_project_exits_1(root: Path, repo: Path) -> None:
    result = _run(root, "project", "show", "R/Ghost")
    assert result.exit_code == 1
    assert "Invalid project folder" in result.output


# ---------------------------------------------------------------------------
# rename / move / delete / export
# ---------------------------------------------------------------------------


def test_rename(root: Path, repo: Path) -> None:
    _run(root, "project", "create", "R", "Draft")
    result = _run(root, "project", "rename", "R/Draft", "Final")
    assert result.exit_code == 0, result.output
    assert "R/Final" in result.output
    assert (repo / "Final").is_dir()


def test_rename_invalid_name_exits_1(root: Path, repo: Path) -> None:
    _run(root, "project", "create", "R", "Draft")
    result = _run(root, "project", "rename", "R/Draft", "bad|name")
    assert result.exit_code == 1
    assert (repo / "Draft").is_dir()


def test_move(root: Path, repo: Path) -> None:
    _run(root, "repo", "create", "Other", "--no-default-project")
    _run(root, "project", "create", "R", "Draft", "--text", "moving")
    result = _run(root, "project", "move", "R/Draft", "Other")
    assert result.exit_code == 0, result.output
    assert "Other/Draft" in result.output
    assert (root / "Other" / "Draft" / PROJECT_CONTENT_FILE).read_text(encoding="utf-8") == "moving"
    assert not (repo / "Draft").exists()


def test_delete_with_yes(root: Path, repo: Path) -> None:
    _run(root, "project", "create", "R", "Draft")
    result = _run(root, "project", "delete", "R/Draft", "--yes")
    assert result.exit_code == 0, result.output
    assert not (repo / "Draft").exists()


def test_delete_cancelled(root: Path, repo: Path) -> None:
    _run(root, "project", "create", "R", "Draft")
    result = _run(root, "project", "delete", "R/Draft", input="n\n")
    assert result.exit_code == 0
    assert "Cancelled" in result.output
    assert (repo / "Draft").is_dir()


def test_export(root: Path, repo: Path, tmp_path: Path) -> None:
    _run(root, "project", "create", "R", "Draft", "--text", "exported text")
    _run(root, "commit", "add", "R/Draft")
    dest = tmp_path / "bundle"
    result = _run(root, "project", "export", "R/Draft", str(dest))
    assert result.exit_code == 0, result.output
    assert (dest / "Draft.md").read_text(encoding="utf-8") == "exported text"
    commits = json.loads((dest / "Draft.commits.json").read_text(encoding="utf-8"))
    assert commits[0]["commitNumber"] == 1
