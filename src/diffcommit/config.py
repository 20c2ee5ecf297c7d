"""diffcommit configuration loader.

Priority (high → low):
  1. --root and other CLI options (applied by the commands themselves)
  2. Environment variables  (DIFFCOMMIT_ROOT, DIFFCOMMIT_LOG_LEVEL)
  3. diffcommit.yaml in the working directory
  4. Global ~/.diffcommit/config.yaml
  5. Hardcoded defaults

Files are parsed with yaml.safe_load only; object tags are rejected.
"""

from __future__ import annotations

import logging
import os
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".diffcommit"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_LOCAL_CONFIG_NAME: str = "diffcommit.yaml"
_DEFAULT_ROOT: Path = Path.home() / "DiffCommit"

_KNOWN_SECTIONS: frozenset[str] = frozenset(["storage", "index", "redundancy", "logging"])
_LOG_LEVELS: frozenset[str] = frozenset(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class StorageCfg:
    """Where the managed collection lives (diffcommit.yaml: storage:)."""

    root: str | None = None


@dataclass
class IndexCfg:
    """Lexical index tuning (diffcommit.yaml: index:).

    Attributes:
        max_chunk_chars: Hard cap on chunk length in characters.
        min_break_chars: A newline only ends a chunk early when it lies
            further than this past the chunk start.
        max_keywords: Distinct keywords kept per chunk.
        phrase_bonus: Score added when the raw query occurs in the chunk text.
        top_k: Default number of query results.
    """

    max_chunk_chars: int = 1200
    min_break_chars: int = 200
    max_keywords: int = 24
    phrase_bonus: int = 3
    top_k: int = 12


@dataclass
class RedundancyCfg:
    """Redundancy detection defaults (diffcommit.yaml: redundancy:)."""

    threshold: float = 0.65
    top_k: int = 50


@dataclass
class LoggingCfg:
    level: str = "WARNING"


@dataclass
class DiffCommitConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    storage: StorageCfg = field(default_factory=StorageCfg)
    index: IndexCfg = field(default_factory=IndexCfg)
    redundancy: RedundancyCfg = field(default_factory=RedundancyCfg)
    logging: LoggingCfg = field(default_factory=LoggingCfg)

    @property
    def root(self) -> Path:
        """Resolved collection root (``storage.root`` or ``~/DiffCommit``)."""
        if self.storage.root:
            return Path(self.storage.root).expanduser().absolute()
        return _DEFAULT_ROOT


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


def _validate(cfg: DiffCommitConfig) -> None:
    if not 0.0 <= cfg.redundancy.threshold <= 1.0:
        raise ConfigError(
            f"redundancy.threshold must be between 0 and 1, got {cfg.redundancy.threshold}"
        )
    if cfg.index.max_chunk_chars < 1:
        raise ConfigError("index.max_chunk_chars must be >= 1")
    if cfg.index.min_break_chars < 0:
        raise ConfigError("index.min_break_chars must be >= 0")
    if cfg.index.top_k < 1 or cfg.redundancy.top_k < 1:
        raise ConfigError("top_k values must be >= 1")
    if cfg.logging.level not in _LOG_LEVELS:
        raise ConfigError(
            f"logging.level must be one of {', '.join(sorted(_LOG_LEVELS))}, "
            f"got '{cfg.logging.level}'"
        )


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    raw = data.get(name) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config section '{name}' must be a mapping")
    return raw


def _cfg_from_dict(data: dict[str, Any]) -> DiffCommitConfig:
    """Build a *DiffCommitConfig* from a merged raw YAML dict."""
    cfg = DiffCommitConfig()

    try:
        if "storage" in data:
            s = _section(data, "storage")
            root = s.get("root", cfg.storage.root)
            cfg.storage = StorageCfg(root=str(root) if root else None)

        if "index" in data:
            i = _section(data, "index")
            cfg.index = IndexCfg(
                max_chunk_chars=int(i.get("max_chunk_chars", cfg.index.max_chunk_chars)),
                min_break_chars=int(i.get("min_break_chars", cfg.index.min_break_chars)),
                max_keywords=int(i.get("max_keywords", cfg.index.max_keywords)),
                phrase_bonus=int(i.get("phrase_bonus", cfg.index.phrase_bonus)),
                top_k=int(i.get("top_k", cfg.index.top_k)),
            )

        if "redundancy" in data:
            r = _section(data, "redundancy")
            cfg.redundancy = RedundancyCfg(
                threshold=float(r.get("threshold", cfg.redundancy.threshold)),
                top_k=int(r.get("top_k", cfg.redundancy.top_k)),
            )

        if "logging" in data:
            lg = _section(data, "logging")
            cfg.logging = LoggingCfg(level=str(lg.get("level", cfg.logging.level)).upper())
    except ConfigError:
        raise
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid config value: {exc}") from exc

    return cfg


def _apply_env_overrides(cfg: DiffCommitConfig) -> DiffCommitConfig:
    """Apply DIFFCOMMIT_* environment variable overrides (layer 2)."""
    if root := os.environ.get("DIFFCOMMIT_ROOT"):
        cfg.storage.root = root
    if level := os.environ.get("DIFFCOMMIT_LOG_LEVEL"):
        cfg.logging.level = level.upper()
    return cfg


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file '{path}' is not valid YAML: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file '{path}' must contain a mapping at the top level")
    return raw


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    config_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> DiffCommitConfig:
    """Load and return a merged *DiffCommitConfig*.

    Applies layers in order: global → local → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        config_dir: Directory to search for *diffcommit.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Raises:
        ConfigError: If a config file is malformed or holds an out-of-range value.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = config_dir if config_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    # Layer 1: global config
    if global_path.exists():
        raw_global = _read_yaml(global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    # Layer 2: working-directory config
    local_path = search_dir / _LOCAL_CONFIG_NAME
    if local_path.exists():
        raw_local = _read_yaml(local_path)
        _warn_unknown_keys(raw_local, local_path)
        merged = _deep_merge(merged, raw_local)

    cfg = _cfg_from_dict(merged)

    # Layer 3: env var overrides
    cfg = _apply_env_overrides(cfg)

    _validate(cfg)
    return cfg


def log_level(cfg: DiffCommitConfig) -> int:
    return logging.getLevelName(cfg.logging.level)


def ensure_global_config(
    global_config_path: Path | None = None,
) -> Path:
    """Create ``~/.diffcommit/config.yaml`` with defaults if it does not exist.

    Creates parent directory with mode 0o700 and the config file with
    mode 0o600 (owner-readable only).

    Args:
        global_config_path: Override path (for testing).

    Returns:
        Path to the global config file.
    """
    target = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    target.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

    if not target.exists():
        content = (
            "# diffcommit global configuration.\n"
            "# A diffcommit.yaml in the working directory overrides these values.\n"
            "\n"
            "storage:\n"
            f"  root: {_DEFAULT_ROOT}\n"
            "\n"
            "index:\n"
            "  top_k: 12\n"
            "\n"
            "redundancy:\n"
            "  threshold: 0.65\n"
            "  top_k: 50\n"
            "\n"
            "logging:\n"
            "  level: WARNING\n"
        )
        target.write_text(content, encoding="utf-8")
        target.chmod(0o600)

    return target
