"""Repository-level operations: list, open, create, rename, delete.

Creating a repository also creates one timestamped default project so the
repository is usable straight away. The two steps run in order; if the
project step fails the repository directory is rolled back.
"""

from __future__ import annotations

import logging
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any

from diffcommit.errors import HierarchyValidationError, NameConflictError
from diffcommit.hierarchy.guard import (
    create_node,
    first_missing_dir,
    is_inside_hierarchy_node,
    read_marker,
    rollback_directory,
    validate_name,
    write_marker,
)
from diffcommit.hierarchy.paths import assert_inside
from diffcommit.hierarchy.types import PROJECT_GRAPH_FILE, HierarchyMeta, NodeType
from diffcommit.store.graph import ProjectGraph, load_project_graph, save_project_graph
from diffcommit.store.models import ProjectSummary, RepositoryInfo
from diffcommit.store.project_store import ProjectStore, find_name_clash

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_PREFIX = "Draft"


def default_project_name(moment: datetime | None = None) -> str:
    """Timestamped name for the auto-created project, e.g. ``Draft 2026-10-19 143005``."""
    moment = moment or datetime.now()
    return f"{DEFAULT_PROJECT_PREFIX} {moment:%Y-%m-%d %H%M%S}"


class RepositoryManager:
    """Repository operations on top of a :class:`ProjectStore`."""

    def __init__(self, store: ProjectStore) -> None:
        self.store = store
        self.root = store.root

    def _info(self, path: Path) -> RepositoryInfo:
        marker = read_marker(path)
        project_count = len(self.store.scan_projects(path))
        return RepositoryInfo(
            name=marker.name if marker is not None and marker.name else path.name,
            path=path,
            created_at=marker.created_at if marker is not None else None,
            project_count=project_count,
        )

    def list_repositories(self) -> list[RepositoryInfo]:
        """All repositories under the root, descending through unmarked folders."""
        found: list[RepositoryInfo] = []
        pending = [self.root]
        while pending:
            folder = pending.pop()
            if not folder.is_dir():
                continue
            for entry in folder.iterdir():
                if entry.name.startswith(".") or not entry.is_dir():
                    continue
                marker = read_marker(entry)
                if marker is None:
                    pending.append(entry)
                elif marker.type is NodeType.REPOSITORY:
                    found.append(self._info(entry))
        return sorted(found, key=lambda r: (r.name.casefold(), str(r.path)))

    def open_repository(self, path: str | os.PathLike[str]) -> tuple[RepositoryInfo, list[ProjectSummary]]:
        repository = self.store.repository_path(path)
        return self._info(repository), self.store.scan_projects(repository)

    def create_repository(
        self,
        name: str,
        *,
        parent: str | os.PathLike[str] | None = None,
        default_project: bool = True,
    ) -> tuple[RepositoryInfo, list[ProjectSummary]]:
        """Create repository *name* under *parent* (default: the collection root)."""
        check = validate_name(name)
        if not check.valid:
            raise HierarchyValidationError(check.error)
        parent_path = assert_inside(parent if parent is not None else self.root, self.root)
        return self.create_repository_at(parent_path / name.strip(), default_project=default_project)

    def create_repository_at(
        self,
        path: str | os.PathLike[str],
        *,
        default_project: bool = True,
    ) -> tuple[RepositoryInfo, list[ProjectSummary]]:
        """Create a repository at an arbitrary path under the root.

        Intermediate folders may not exist yet; the path is still rejected if
        any existing ancestor is a repository or project.

        Raises:
            OutsideRootError: If *path* escapes the root.
            HierarchyValidationError: If *path* is inside an existing node or the name is invalid.
            PartialCreationError: If the default project failed and rollback failed too.
        """
        target = assert_inside(path, self.root)
        if target == self.root:
            raise HierarchyValidationError("Cannot turn the collection root into a repository")
        inside = is_inside_hierarchy_node(target.parent)
        if inside.is_inside:
            raise HierarchyValidationError(
                f"Cannot create a repository inside the {inside.ancestor_type.value} "
                f"at '{inside.ancestor_path}'"
            )

        created_top = first_missing_dir(target)
        node = create_node(target.parent, target.name, NodeType.REPOSITORY)
        projects: list[ProjectSummary] = []
        if default_project:
            try:
                projects.append(self.store.create_project(node.path, default_project_name()))
            except Exception as exc:
                logger.error("Default project for '%s' failed: %s", node.path, exc)
                rollback_directory(created_top, exc)
                raise
        return self._info(node.path), projects

    def rename_repository(self, path: str | os.PathLike[str], new_name: str) -> RepositoryInfo:
        repository = self.store.repository_path(path)
        check = validate_name(new_name)
        if not check.valid:
            raise HierarchyValidationError(check.error)
        target_name = new_name.strip()
        if target_name == repository.name:
            return self._info(repository)
        destination = repository.parent / target_name

        with self.store.locks.hold(repository, destination):
            if find_name_clash(repository.parent, target_name, exclude=repository) is not None:
                raise NameConflictError(f'"{target_name}" already exists')
            marker = read_marker(repository)
            os.rename(repository, destination)
            write_marker(
                destination,
                HierarchyMeta(
                    type=NodeType.REPOSITORY,
                    created_at=marker.created_at if marker is not None else 0,
                    name=target_name,
                ),
            )
        logger.info("Renamed repository '%s' → '%s'", repository.name, target_name)
        return self._info(destination)

    def delete_repository(self, path: str | os.PathLike[str]) -> bool:
        repository = self.store.repository_path(path)
        with self.store.locks.hold(repository):
            shutil.rmtree(repository)
        logger.info("Deleted repository %s", repository)
        return True

    def load_graph(self, path: str | os.PathLike[str]) -> ProjectGraph:
        return load_project_graph(self.store.repository_path(path))

    def save_graph(self, path: str | os.PathLike[str], data: Any) -> ProjectGraph:
        repository = self.store.repository_path(path)
        with self.store.locks.hold(repository / PROJECT_GRAPH_FILE):
            return save_project_graph(repository, data)
