"""Tests for the top-level diffcommit commands: version, init, validate."""

from __future__ import annotations

import stat
from pathlib import Path

from typer.testing import CliRunner

from diffcommit.cli.main import app
from diffcommit.hierarchy import NodeType, get_node_type
from diffcommit.hierarchy.types import HIERARCHY_META_FILE

runner = CliRunner()


def _run(root: Path, *args: str, **kwargs):
    return runner.invoke(app, [*args, "--root", str(root)], **kwargs)


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "diffcommit" in result.output


def test_version_command() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.output.startswith("diffcommit ")


def test_help_lists_command_groups() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for name in ("repo", "project", "commit", "index", "diff", "merge", "validate", "init"):
        assert name in result.output


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------


def test_init_creates_root_and_global_config(tmp_path: Path) -> None:
    root = tmp_path / "collection"
    cfg = tmp_path / "cfg" / "config.yaml"
    result = runner.invoke(app, ["init", "--root", str(root), "--global-config", str(cfg)])
    assert result.exit_code == 0, result.output
    assert root.is_dir()
    assert cfg.is_file()
    assert stat.S_IMODE(cfg.stat().st_mode) == 0o600
    assert "Next steps" in result.output


def test_init_is_idempotent(tmp_path: Path) -> None:
    root = tmp_path / "collection"
    cfg = tmp_path / "cfg" / "config.yaml"
    runner.invoke(app, ["init", "--root", str(root), "--global-config", str(cfg)])
    cfg.write_text("index:\n  top_k: 4\n", encoding="utf-8")
    result = runner.invoke(app, ["init", "--root", str(root), "--global-config", str(cfg)])
    assert result.exit_code == 0
    assert "top_k: 4" in cfg.read_text(encoding="utf-8")


def test_init_creates_default_repository_once(tmp_path: Path) -> None:
    root = tmp_path / "collection"
    cfg = tmp_path / "cfg" / "config.yaml"
    result = runner.invoke(app, ["init", "--root", str(root), "--global-config", str(cfg)])
    assert result.exit_code == 0, result.output
    assert get_node_type(root / "Default") is NodeType.REPOSITORY
    assert list((root / "Default").iterdir()) == [root / "Default" / HIERARCHY_META_FILE]

    runner.invoke(app, ["init", "--root", str(root), "--global-config", str(cfg)])
    assert sorted(p.name for p in root.iterdir()) == ["Default"]


def test_init_skips_default_repository_when_one_exists(tmp_path: Path) -> None:
    root = tmp_path / "collection"
    cfg = tmp_path / "cfg" / "config.yaml"
    runner.invoke(app, ["repo", "create", "Mine", "--no-default-project", "--root", str(root)])
    result = runner.invoke(app, ["init", "--root", str(root), "--global-config", str(cfg)])
    assert result.exit_code == 0, result.output
    assert not (root / "Default").exists()


def test_init_no_default_repo(tmp_path: Path) -> None:
    root = tmp_path / "collection"
    cfg = tmp_path / "cfg" / "config.yaml"
    result = runner.invoke(
        app, ["init", "--root", str(root), "--global-config", str(cfg), "--no-default-repo"]
    )
    assert result.exit_code == 0, result.output
    assert list(root.iterdir()) == []


# ---------------------------------------------------------------------------
# config errors surface as exit 1
# ---------------------------------------------------------------------------


def test_invalid_local_config_exits_1(root: Path, tmp_path: Path) -> None:
    (tmp_path / "diffcommit.yaml").write_text("redundancy:\n  threshold: 7\n", encoding="utf-8")
    result = _run(root, "repo", "list")
    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_root_from_environment(tmp_path: Path, monkeypatch) -> None:
    env_root = tmp_path / "env-root"
    monkeypatch.setenv("DIFFCOMMIT_ROOT", str(env_root))
    result = runner.invoke(app, ["repo", "create", "R", "--no-default-project"])
    assert result.exit_code == 0, result.output
    assert (env_root / "R").is_dir()


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


def test_validate_repository_at_root(root: Path) -> None:
    result = _run(root, "validate", ".", "Novel", "--type", "repository")
    assert result.exit_code == 0, result.output
    assert "Valid: repository 'Novel'" in result.output
    assert not (root / "Novel").exists()


def test_validate_project_at_root_is_invalid(root: Path) -> None:
    result = _run(root, "validate", ".", "Loose")
    assert result.exit_code == 1
    assert "Invalid" in result.output


def test_validate_project_in_repository(root: Path) -> None:
    _run(root, "repo", "create", "R", "--no-default-project")
    assert _run(root, "validate", "R", "Chapter").exit_code == 0
    nested = _run(root, "validate", "R", "Inner", "--type", "repository")
    assert nested.exit_code == 1


def test_validate_bad_name(root: Path) -> None:
    _run(root, "repo", "create", "R", "--no-default-project")
    result = _run(root, "validate", "R", "what?")
    assert result.exit_code == 1
    assert "invalid characters" in result.output


def test_validate_root_type_rejected(root: Path) -> None:
    result = _run(root, "validate", ".", "X", "--type", "root")
    assert result.exit_code == 1


def test_validate_outside_root(root: Path) -> None:
    result = _run(root, "validate", "..", "X", "--type", "repository")
    assert result.exit_code == 1
