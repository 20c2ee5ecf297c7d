"""Tests for the diffcommit config loader."""

from __future__ import annotations

import logging
import stat
import warnings
from pathlib import Path

import pytest
import yaml

from diffcommit import config as config_module
from diffcommit.config import (
    ConfigError,
    DiffCommitConfig,
    StorageCfg,
    ensure_global_config,
    load_config,
    log_level,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_yaml(path: Path, data: dict) -> None:
    path.write_text(yaml.dump(data), encoding="utf-8")


@pytest.fixture
def missing_global(tmp_path: Path) -> Path:
    return tmp_path / "nonexistent" / "config.yaml"


# ---------------------------------------------------------------------------
# Defaults — no config files present
# ---------------------------------------------------------------------------


def test_load_config_defaults_no_files(tmp_path: Path, missing_global: Path) -> None:
    """No config files → all hardcoded defaults."""
    cfg = load_config(config_dir=tmp_path, global_config_path=missing_global)

    assert cfg.storage.root is None
    assert cfg.root == config_module._DEFAULT_ROOT
    assert cfg.index.max_chunk_chars == 1200
    assert cfg.index.min_break_chars == 200
    assert cfg.index.max_keywords == 24
    assert cfg.index.phrase_bonus == 3
    assert cfg.index.top_k == 12
    assert cfg.redundancy.threshold == 0.65
    assert cfg.redundancy.top_k == 50
    assert cfg.logging.level == "WARNING"


def test_root_expands_user(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    cfg = DiffCommitConfig(storage=StorageCfg(root="~/writing"))
    assert cfg.root == tmp_path / "writing"


# ---------------------------------------------------------------------------
# Layering
# ---------------------------------------------------------------------------


def test_global_overrides_defaults(tmp_path: Path) -> None:
    global_cfg = tmp_path / "config.yaml"
    _write_yaml(global_cfg, {"index": {"top_k": 5}})

    cfg = load_config(config_dir=tmp_path / "cwd", global_config_path=global_cfg)
    assert cfg.index.top_k == 5
    # Other defaults unchanged
    assert cfg.index.max_chunk_chars == 1200


@pytest.mark.parametrize("content", ["", "~\n", "# only a comment\n"])
def test_empty_global_file_gives_defaults(tmp_path: Path, content: str) -> None:
    global_cfg = tmp_path / "config.yaml"
    global_cfg.write_text(content, encoding="utf-8")

    cfg = load_config(config_dir=tmp_path, global_config_path=global_cfg)
    assert cfg.index.top_k == 12


def test_local_overrides_global(tmp_path: Path) -> None:
    global_cfg = tmp_path / "global.yaml"
    _write_yaml(global_cfg, {"redundancy": {"threshold": 0.8, "top_k": 10}})
    _write_yaml(tmp_path / "diffcommit.yaml", {"redundancy": {"threshold": 0.5}})

    cfg = load_config(config_dir=tmp_path, global_config_path=global_cfg)
    assert cfg.redundancy.threshold == 0.5
    # Deep merge keeps the global value the local file does not mention
    assert cfg.redundancy.top_k == 10


def test_storage_root_from_local_file(tmp_path: Path, missing_global: Path) -> None:
    _write_yaml(tmp_path / "diffcommit.yaml", {"storage": {"root": str(tmp_path / "books")}})
    cfg = load_config(config_dir=tmp_path, global_config_path=missing_global)
    assert cfg.root == tmp_path / "books"


def test_env_vars_override_files(
    tmp_path: Path, missing_global: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _write_yaml(
        tmp_path / "diffcommit.yaml",
        {"storage": {"root": "/from/file"}, "logging": {"level": "ERROR"}},
    )
    monkeypatch.setenv("DIFFCOMMIT_ROOT", str(tmp_path / "from-env"))
    monkeypatch.setenv("DIFFCOMMIT_LOG_LEVEL", "debug")

    cfg = load_config(config_dir=tmp_path, global_config_path=missing_global)
    assert cfg.root == tmp_path / "from-env"
    assert cfg.logging.level == "DEBUG"


def test_log_level_lowercase_in_file(tmp_path: Path, missing_global: Path) -> None:
    _write_yaml(tmp_path / "diffcommit.yaml", {"logging": {"level": "info"}})
    cfg = load_config(config_dir=tmp_path, global_config_path=missing_global)
    assert cfg.logging.level == "INFO"
    assert log_level(cfg) == logging.INFO


def test_default_config_dir_is_cwd(tmp_path: Path, missing_global: Path) -> None:
    # conftest chdirs into tmp_path
    _write_yaml(tmp_path / "diffcommit.yaml", {"index": {"phrase_bonus": 7}})
    cfg = load_config(global_config_path=missing_global)
    assert cfg.index.phrase_bonus == 7


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "data",
    [
        {"redundancy": {"threshold": 1.5}},
        {"redundancy": {"threshold": -0.1}},
        {"index": {"max_chunk_chars": 0}},
        {"index": {"min_break_chars": -1}},
        {"index": {"top_k": 0}},
        {"redundancy": {"top_k": 0}},
        {"logging": {"level": "LOUD"}},
        {"index": {"top_k": "many"}},
        {"index": ["not", "a", "mapping"]},
    ],
)
def test_invalid_values_raise_config_error(tmp_path: Path, missing_global: Path, data: dict) -> None:
    _write_yaml(tmp_path / "diffcommit.yaml", data)
    with pytest.raises(ConfigError):
        load_config(config_dir=tmp_path, global_config_path=missing_global)


def test_invalid_env_log_level(
    tmp_path: Path, missing_global: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("DIFFCOMMIT_LOG_LEVEL", "chatty")
    with pytest.raises(ConfigError, match="logging.level"):
        load_config(config_dir=tmp_path, global_config_path=missing_global)


def test_non_mapping_file_raises(tmp_path: Path, missing_global: Path) -> None:
    (tmp_path / "diffcommit.yaml").write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(config_dir=tmp_path, global_config_path=missing_global)


def test_malformed_yaml_raises(tmp_path: Path, missing_global: Path) -> None:
    (tmp_path / "diffcommit.yaml").write_text("index: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="not valid YAML"):
        load_config(config_dir=tmp_path, global_config_path=missing_global)


def test_config_error_is_value_error() -> None:
    assert issubclass(ConfigError, ValueError)


# ---------------------------------------------------------------------------
# Unknown key warnings
# ---------------------------------------------------------------------------


def test_unknown_top_level_key_warns(tmp_path: Path) -> None:
    """Unknown top-level key in config emits UserWarning (not error)."""
    global_cfg = tmp_path / "config.yaml"
    _write_yaml(global_cfg, {"unknown_section": {"foo": "bar"}})

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        cfg = load_config(config_dir=tmp_path, global_config_path=global_cfg)

    assert any("unknown_section" in str(w.message) for w in caught)
    assert cfg.index.top_k == 12


# ---------------------------------------------------------------------------
# ensure_global_config
# ---------------------------------------------------------------------------


def test_ensure_global_config_creates_loadable_file(tmp_path: Path) -> None:
    target = tmp_path / ".diffcommit" / "config.yaml"
    result = ensure_global_config(global_config_path=target)

    assert result == target
    parsed = yaml.safe_load(target.read_text(encoding="utf-8"))
    assert set(parsed) <= {"storage", "index", "redundancy", "logging"}

    cfg = load_config(config_dir=tmp_path, global_config_path=target)
    assert cfg.redundancy.threshold == 0.65
    assert cfg.logging.level == "WARNING"


def test_ensure_global_config_file_mode(tmp_path: Path) -> None:
    """ensure_global_config creates file with mode 0o600 (owner-only)."""
    target = tmp_path / ".diffcommit" / "config.yaml"
    ensure_global_config(global_config_path=target)

    assert stat.S_IMODE(target.stat().st_mode) == 0o600
    assert stat.S_IMODE(target.parent.stat().st_mode) == 0o700


def test_ensure_global_config_idempotent(tmp_path: Path) -> None:
    """Calling ensure_global_config twice does not overwrite existing file."""
    target = tmp_path / ".diffcommit" / "config.yaml"
    ensure_global_config(global_config_path=target)
    target.write_text("# custom\nindex:\n  top_k: 3\n", encoding="utf-8")

    ensure_global_config(global_config_path=target)
    assert "top_k: 3" in target.read_text(encoding="utf-8")


def test_ensure_global_config_default_path(tmp_path: Path) -> None:
    # conftest redirects the module-level default into tmp_path
    path = ensure_global_config()
    assert path == tmp_path / "home" / "config.yaml"
    assert path.exists()


# ---------------------------------------------------------------------------
# yaml.safe_load enforcement (regression guard)
# ---------------------------------------------------------------------------


def test_config_does_not_execute_yaml_load(tmp_path: Path) -> None:
    """Python object tags are rejected by safe_load instead of executed."""
    global_cfg = tmp_path / "config.yaml"
    global_cfg.write_text("!!python/object/apply:os.system ['echo pwned']\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(config_dir=tmp_path, global_config_path=global_cfg)
