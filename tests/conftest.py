"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from diffcommit.store.project_store import ProjectStore
from diffcommit.store.repositories import RepositoryManager


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the user's real config files and DIFFCOMMIT_* env vars out of every test."""
    monkeypatch.setattr("diffcommit.config._GLOBAL_CONFIG_PATH", tmp_path / "home" / "config.yaml")
    monkeypatch.delenv("DIFFCOMMIT_ROOT", raising=False)
    monkeypatch.delenv("DIFFCOMMIT_LOG_LEVEL", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """Empty collection root."""
    path = tmp_path / "collection"
    path.mkdir()
    return path


@pytest.fixture
def store(root: Path) -> ProjectStore:
    return ProjectStore(root)


@pytest.fixture
def repos(store: ProjectStore) -> RepositoryManager:
    return RepositoryManager(store)


@pytest.fixture
def repository(repos: RepositoryManager, root: Path) -> Path:
    """Repository ``R`` without the auto-created default project."""
    info, _ = repos.create_repository("R", default_project=False)
    return info.path


@pytest.fixture
def project(store: ProjectStore, repository: Path) -> Path:
    """Empty project ``R/Draft``."""
    return store.create_project(repository, "Draft").path
