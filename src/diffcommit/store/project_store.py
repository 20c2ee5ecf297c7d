"""Project store: working draft + linear commit log per project folder.

Layout of a project folder::

    <project>/
      .hierarchy-meta.json        marker {type, createdAt, name}
      content.md                  working draft (raw UTF-8)
      .diff-commit/
        commits.json              [{id, commitNumber, content, timestamp}], oldest first
        metadata.json             {createdAt, id?}

Every path argument is re-validated against the collection root before use,
even when the caller has already checked it. Mutating operations hold the
project's entry in the shared :class:`PathLocks` table.
"""

from __future__ import annotations

import logging
import os
import shutil
import uuid
from collections.abc import Iterable
from pathlib import Path

from diffcommit.errors import (
    CommitLogError,
    CorruptDataError,
    HierarchyValidationError,
    NameConflictError,
    NodeNotFoundError,
    WrongTypeError,
)
from diffcommit.hierarchy.guard import (
    create_node,
    is_project_folder,
    is_repository_folder,
    looks_like_project,
    now_ms,
    read_marker,
    validate_name,
    write_marker,
)
from diffcommit.hierarchy.locks import PathLocks
from diffcommit.hierarchy.paths import assert_inside, assert_typed
from diffcommit.hierarchy.types import (
    COMMITS_FILE,
    DIFF_COMMIT_DIR,
    PROJECT_CONTENT_FILE,
    PROJECT_METADATA_FILE,
    HierarchyMeta,
    NodeType,
)
from diffcommit.store.fileio import atomic_write_text, read_json, read_text_exact, write_json
from diffcommit.store.models import Commit, ProjectMetadata, ProjectSummary

logger = logging.getLogger(__name__)

CORRUPT_SUFFIX = ".corrupt"


def find_name_clash(parent: Path, name: str, exclude: Path | None = None) -> Path | None:
    """Return an entry of *parent* whose name equals *name* ignoring case."""
    if not parent.is_dir():
        return None
    folded = name.casefold()
    for entry in parent.iterdir():
        if entry.name.casefold() == folded and entry != exclude:
            return entry
    return None


class ProjectStore:
    """File-system store for project drafts and commit logs under one root.

    Args:
        root: The managed collection root. No path outside it is ever touched.
        locks: Lock table shared with other stores working on the same root.
    """

    def __init__(self, root: str | os.PathLike[str], locks: PathLocks | None = None) -> None:
        self.root = Path(os.path.abspath(os.fspath(root)))
        self.locks = locks if locks is not None else PathLocks()

    # ------------------------------------------------------------------
    # Path checks
    # ------------------------------------------------------------------

    def project_path(self, path: str | os.PathLike[str]) -> Path:
        return assert_typed(path, self.root, is_project_folder, "project")

    def repository_path(self, path: str | os.PathLike[str]) -> Path:
        return assert_typed(path, self.root, is_repository_folder, "repository")

    # ------------------------------------------------------------------
    # Working draft
    # ------------------------------------------------------------------

    def load_content(self, project_path: str | os.PathLike[str]) -> str:
        """Return the working draft, or "" if none has been written yet."""
        path = self.project_path(project_path) / PROJECT_CONTENT_FILE
        if not path.is_file():
            return ""
        return read_text_exact(path)

    def save_content(self, project_path: str | os.PathLike[str], text: str) -> None:
        """Overwrite the working draft in full."""
        project = self.project_path(project_path)
        with self.locks.hold(project):
            atomic_write_text(project / PROJECT_CONTENT_FILE, text)

    # ------------------------------------------------------------------
    # Commit log
    # ------------------------------------------------------------------

    def _log_path(self, project: Path) -> Path:
        return project / DIFF_COMMIT_DIR / COMMITS_FILE

    def _read_log(self, project: Path) -> tuple[list[Commit], bool]:
        """Return (commits, was_corrupt). Corruption is logged and reads as empty."""
        log_path = self._log_path(project)
        if not log_path.is_file():
            return [], False
        try:
            data = read_json(log_path)
            if not isinstance(data, list):
                raise CorruptDataError(log_path, "expected a JSON array")
            try:
                return [Commit.from_dict(entry) for entry in data], False
            except ValueError as exc:
                raise CorruptDataError(log_path, str(exc)) from exc
        except CorruptDataError as exc:
            logger.warning("Treating commit log as empty: %s", exc)
            return [], True

    def _write_log(self, project: Path, commits: list[Commit], *, preserve_corrupt: bool = False) -> None:
        log_path = self._log_path(project)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        if preserve_corrupt and log_path.is_file():
            backup = log_path.with_name(log_path.name + CORRUPT_SUFFIX)
            os.replace(log_path, backup)
            logger.warning("Preserved unreadable commit log as '%s'", backup)
        write_json(log_path, [c.to_dict() for c in commits])

    def list_commits(self, project_path: str | os.PathLike[str]) -> list[Commit]:
        """Return the commit log oldest-first; missing or corrupt logs read as empty."""
        commits, _ = self._read_log(self.project_path(project_path))
        return commits

    def append_commit(self, project_path: str | os.PathLike[str], content: str) -> Commit:
        """Append a snapshot of *content*; the only way history grows."""
        project = self.project_path(project_path)
        with self.locks.hold(project):
            commits, corrupt = self._read_log(project)
            number = max((c.commit_number for c in commits), default=0) + 1
            commit = Commit(
                id=str(uuid.uuid4()),
                commit_number=number,
                content=content,
                timestamp=now_ms(),
            )
            self._write_log(project, [*commits, commit], preserve_corrupt=corrupt)
        logger.info("Committed #%d to %s", number, project.name)
        return commit

    def delete_commit(self, project_path: str | os.PathLike[str], commit_id: str) -> bool:
        """Remove one commit by id. Remaining commits keep their numbers."""
        project = self.project_path(project_path)
        with self.locks.hold(project):
            commits, corrupt = self._read_log(project)
            kept = [c for c in commits if c.id != commit_id]
            if len(kept) == len(commits):
                return False
            self._write_log(project, kept, preserve_corrupt=corrupt)
        return True

    def clear_commits(self, project_path: str | os.PathLike[str]) -> None:
        project = self.project_path(project_path)
        with self.locks.hold(project):
            self._write_log(project, [])

    def save_commits(self, project_path: str | os.PathLike[str], commits: Iterable[Commit]) -> None:
        """Replace the whole log with *commits*.

        Raises:
            CommitLogError: If ids repeat or commit numbers do not strictly increase.
        """
        project = self.project_path(project_path)
        items = list(commits)
        seen: set[str] = set()
        last = 0
        for commit in items:
            if commit.id in seen:
                raise CommitLogError(f"Duplicate commit id '{commit.id}'")
            if commit.commit_number <= last:
                raise CommitLogError(
                    f"Commit numbers must strictly increase (#{commit.commit_number} after #{last})"
                )
            seen.add(commit.id)
            last = commit.commit_number
        with self.locks.hold(project):
            self._write_log(project, items)

    # ------------------------------------------------------------------
    # Project metadata + summaries
    # ------------------------------------------------------------------

    def read_metadata(self, project: Path) -> ProjectMetadata | None:
        meta_path = project / DIFF_COMMIT_DIR / PROJECT_METADATA_FILE
        if not meta_path.is_file():
            return None
        try:
            data = read_json(meta_path)
        except CorruptDataError as exc:
            logger.warning("Ignoring project metadata: %s", exc)
            return None
        if not isinstance(data, dict):
            logger.warning("Ignoring project metadata in '%s': not an object", meta_path)
            return None
        created_at = data.get("createdAt")
        project_id = data.get("id")
        return ProjectMetadata(
            created_at=int(created_at) if isinstance(created_at, (int, float)) and not isinstance(created_at, bool) else 0,
            id=project_id if isinstance(project_id, str) and project_id else None,
        )

    def _write_metadata(self, project: Path, meta: ProjectMetadata) -> None:
        meta_dir = project / DIFF_COMMIT_DIR
        meta_dir.mkdir(parents=True, exist_ok=True)
        write_json(meta_dir / PROJECT_METADATA_FILE, meta.to_dict())

    def summarize(self, project: Path) -> ProjectSummary:
        """Build a ProjectSummary from the files of *project*.

        ``id`` prefers the stable identifier in metadata.json and falls back
        to the folder name for projects created before identifiers existed.
        """
        meta = self.read_metadata(project)
        marker = read_marker(project)
        draft = project / PROJECT_CONTENT_FILE
        content = read_text_exact(draft) if draft.is_file() else ""
        stat_source = draft if draft.is_file() else project
        updated_at = int(stat_source.stat().st_mtime * 1000)

        if meta is not None and meta.created_at:
            created_at = meta.created_at
        elif marker is not None and marker.created_at:
            created_at = marker.created_at
        else:
            created_at = int(project.stat().st_ctime * 1000)

        return ProjectSummary(
            id=meta.id if meta is not None and meta.id else project.name,
            name=project.name,
            content=content,
            created_at=created_at,
            updated_at=updated_at,
            path=project,
            repository_path=project.parent,
        )

    def scan_projects(self, repository_path: str | os.PathLike[str]) -> list[ProjectSummary]:
        """Summaries of every project folder directly inside a repository, by name."""
        repository = self.repository_path(repository_path)
        summaries: list[ProjectSummary] = []
        for entry in sorted(repository.iterdir(), key=lambda p: p.name.casefold()):
            if entry.name.startswith(".") or not entry.is_dir():
                continue
            if not is_project_folder(entry):
                continue
            summaries.append(self.summarize(entry))
        return summaries

    # ------------------------------------------------------------------
    # Project lifecycle
    # ------------------------------------------------------------------

    def create_project(
        self,
        repository_path: str | os.PathLike[str],
        name: str,
        initial_content: str = "",
    ) -> ProjectSummary:
        repository = self.repository_path(repository_path)
        with self.locks.hold(repository / name.strip()):
            node = create_node(repository, name, NodeType.PROJECT)
            if initial_content:
                atomic_write_text(node.path / PROJECT_CONTENT_FILE, initial_content)
        return self.summarize(node.path)

    def delete_project(self, project_path: str | os.PathLike[str]) -> bool:
        project = self.project_path(project_path)
        with self.locks.hold(project):
            shutil.rmtree(project)
        logger.info("Deleted project %s", project)
        return True

    def _rewrite_marker(self, project: Path, name: str) -> None:
        marker = read_marker(project)
        if marker is not None:
            created_at = marker.created_at
        else:
            meta = self.read_metadata(project)
            created_at = meta.created_at if meta is not None and meta.created_at else now_ms()
        write_marker(project, HierarchyMeta(type=NodeType.PROJECT, created_at=created_at, name=name))

    def rename_project(self, project_path: str | os.PathLike[str], new_name: str) -> ProjectSummary:
        """Rename a project folder in place.

        Raises:
            NodeNotFoundError: If the project directory does not exist.
            WrongTypeError: If the directory shows no sign of being a project.
            HierarchyValidationError: If *new_name* is not a valid folder name.
            NameConflictError: If another entry already uses *new_name* (any case).
        """
        source = assert_inside(project_path, self.root)
        if not source.is_dir():
            raise NodeNotFoundError(f"Project folder not found: '{source}'")
        if not looks_like_project(source):
            raise WrongTypeError(f"Not a project folder: '{source}'")
        check = validate_name(new_name)
        if not check.valid:
            raise HierarchyValidationError(check.error)

        target_name = new_name.strip()
        if target_name == source.name:
            return self.summarize(source)
        destination = source.parent / target_name

        with self.locks.hold(source, destination):
            clash = find_name_clash(source.parent, target_name, exclude=source)
            if clash is not None:
                raise NameConflictError(f'"{target_name}" already exists')

            meta = self.read_metadata(source)
            if meta is None or not meta.id:
                # Freeze the legacy folder-name id so it survives the rename.
                created_at = meta.created_at if meta is not None else 0
                self._write_metadata(source, ProjectMetadata(created_at=created_at, id=source.name))

            if source.name.casefold() == target_name.casefold():
                interim = source.with_name(f".{source.name}.rename-{uuid.uuid4().hex[:8]}")
                os.rename(source, interim)
                os.rename(interim, destination)
            else:
                os.rename(source, destination)
            self._rewrite_marker(destination, target_name)

        logger.info("Renamed project '%s' → '%s'", source.name, target_name)
        return self.summarize(destination)

    def move_project(
        self,
        project_path: str | os.PathLike[str],
        target_repository_path: str | os.PathLike[str],
    ) -> ProjectSummary:
        """Move a project into another repository; same-repository moves are no-ops.

        Raises:
            NameConflictError: If the target repository already has that project name.
        """
        source = self.project_path(project_path)
        target = self.repository_path(target_repository_path)
        if os.path.normcase(source.parent) == os.path.normcase(target):
            return self.summarize(source)

        destination = target / source.name
        with self.locks.hold(source, destination):
            if find_name_clash(target, source.name, exclude=None) is not None:
                raise NameConflictError(
                    f'A project named "{source.name}" already exists in {target.name}'
                )
            shutil.move(str(source), str(destination))
            self._rewrite_marker(destination, destination.name)

        logger.info("Moved project '%s' to %s", source.name, target)
        return self.summarize(destination)
