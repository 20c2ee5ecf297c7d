"""Hierarchy guard: classify, validate and create repository/project nodes.

A directory's node type lives only in its ``.hierarchy-meta.json`` marker.
:func:`read_marker` is the single read-classify step; every other function
goes through it, and "no marker" always maps to :attr:`NodeType.ROOT`.

Validation returns :class:`ValidationResult` values. Only :func:`create_node`
raises, because by then the caller has asked for a side effect.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import time
import uuid
from pathlib import Path

from diffcommit.errors import CorruptDataError, HierarchyValidationError, PartialCreationError
from diffcommit.hierarchy.types import (
    ALLOWED_CHILDREN,
    COMMITS_FILE,
    DIFF_COMMIT_DIR,
    HIERARCHY_META_FILE,
    INVALID_CHARS,
    MAX_NAME_LENGTH,
    PROJECT_CONTENT_FILE,
    PROJECT_METADATA_FILE,
    RESERVED_NAMES,
    AncestorMatch,
    HierarchyInfo,
    HierarchyMeta,
    InsideCheck,
    Node,
    NodeType,
    ValidationResult,
)

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


# ---------------------------------------------------------------------------
# Marker I/O
# ---------------------------------------------------------------------------


def _load_marker(dir_path: Path) -> HierarchyMeta | None:
    """Strict marker read. Returns None if absent, raises CorruptDataError if unparsable."""
    meta_path = dir_path / HIERARCHY_META_FILE
    if not meta_path.is_file():
        return None
    try:
        data = json.loads(meta_path.read_text(encoding="utf-8"))
        return HierarchyMeta.from_dict(data)
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        raise CorruptDataError(meta_path, str(exc)) from exc


def read_marker(dir_path: str | os.PathLike[str]) -> HierarchyMeta | None:
    """Return the marker of *dir_path*, or None if it is missing or unreadable."""
    try:
        return _load_marker(Path(dir_path))
    except CorruptDataError as exc:
        logger.warning("Ignoring hierarchy marker: %s", exc)
        return None


def write_marker(dir_path: str | os.PathLike[str], meta: HierarchyMeta) -> None:
    meta_path = Path(dir_path) / HIERARCHY_META_FILE
    meta_path.write_text(json.dumps(meta.to_dict(), indent=2), encoding="utf-8")


def get_node_type(dir_path: str | os.PathLike[str]) -> NodeType:
    """Classify *dir_path*. Never fails."""
    meta = read_marker(dir_path)
    if meta is None:
        return NodeType.ROOT
    return meta.type


def is_repository_folder(path: str | os.PathLike[str]) -> bool:
    return Path(path).is_dir() and get_node_type(path) is NodeType.REPOSITORY


def is_project_folder(path: str | os.PathLike[str]) -> bool:
    """A project folder is any directory holding the commit-log sub-directory."""
    return (Path(path) / DIFF_COMMIT_DIR).is_dir()


def looks_like_project(path: str | os.PathLike[str]) -> bool:
    """Permissive project detection used before renames.

    Any one of marker, commit-log directory or draft file is enough. Projects
    interrupted halfway through creation, or created by versions that wrote
    only some of these files, must still be renameable.
    """
    p = Path(path)
    has_marker = get_node_type(p) is NodeType.PROJECT
    has_commit_dir = (p / DIFF_COMMIT_DIR).is_dir()
    has_draft = (p / PROJECT_CONTENT_FILE).is_file()
    return has_marker or has_commit_dir or has_draft


# ---------------------------------------------------------------------------
# Ancestry
# ---------------------------------------------------------------------------


def find_nearest_marked_ancestor(path: str | os.PathLike[str]) -> AncestorMatch | None:
    """Walk upward from *path* (inclusive) to the nearest existing marked directory.

    The directories below the first existing one need not exist, so paths typed
    in before any intermediate folder is created are still checked.
    """
    current = Path(os.path.abspath(os.fspath(path)))
    while True:
        if current.is_dir():
            meta = read_marker(current)
            if meta is not None:
                return AncestorMatch(type=meta.type, path=current)
        parent = current.parent
        if parent == current:
            return None
        current = parent


def is_inside_hierarchy_node(path: str | os.PathLike[str]) -> InsideCheck:
    """Pre-flight check: is *path* at or below an existing repository or project?"""
    ancestor = find_nearest_marked_ancestor(path)
    if ancestor is None:
        return InsideCheck(is_inside=False)
    return InsideCheck(is_inside=True, ancestor_type=ancestor.type, ancestor_path=ancestor.path)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def allowed_child_types(node_type: NodeType) -> tuple[NodeType, ...]:
    return ALLOWED_CHILDREN.get(node_type, ())


def can_create_child(parent_type: NodeType, child_type: NodeType) -> bool:
    return child_type in allowed_child_types(parent_type)


def validate_name(name: str | None) -> ValidationResult:
    """Check a folder name against the portable naming rules."""
    if not name or not name.strip():
        return ValidationResult.fail("Name cannot be empty")

    trimmed = name.strip()

    if len(trimmed) > MAX_NAME_LENGTH:
        return ValidationResult.fail(f"Name is too long (max {MAX_NAME_LENGTH} characters)")

    if INVALID_CHARS.search(trimmed):
        return ValidationResult.fail('Name contains invalid characters (< > : " / \\ | ? *)')

    upper = trimmed.upper()
    if upper in RESERVED_NAMES or upper.split(".", 1)[0] in RESERVED_NAMES:
        return ValidationResult.fail(f'"{trimmed}" is a reserved system name')

    if trimmed in (".", ".."):
        return ValidationResult.fail('Name cannot be "." or ".."')

    if trimmed.startswith("."):
        return ValidationResult.fail("Name cannot start with a dot")

    if trimmed.endswith("."):
        return ValidationResult.fail("Name cannot end with a dot")

    return ValidationResult.ok()


def name_exists(parent_path: str | os.PathLike[str], name: str) -> bool:
    return (Path(parent_path) / name.strip()).exists()


def _effective_parent_type(parent: Path) -> tuple[NodeType, Path | None]:
    """Type that governs what may be created in *parent*.

    A marked parent speaks for itself. An unmarked or not-yet-existing parent
    is a plain folder (root-level) unless some ancestor is marked, in which
    case it sits illegally inside that repository/project.
    """
    meta = read_marker(parent) if parent.is_dir() else None
    if meta is not None:
        return meta.type, None
    ancestor = find_nearest_marked_ancestor(parent)
    if ancestor is not None:
        return ancestor.type, ancestor.path
    return NodeType.ROOT, None


def validate_create(
    parent_path: str | os.PathLike[str],
    name: str,
    child_type: NodeType,
) -> ValidationResult:
    """Decide whether *child_type* named *name* may be created in *parent_path*."""
    name_check = validate_name(name)
    if not name_check.valid:
        return name_check

    parent = Path(os.path.abspath(os.fspath(parent_path)))
    parent_type, via_ancestor = _effective_parent_type(parent)

    if via_ancestor is not None:
        return ValidationResult.fail(
            f"Cannot create a {child_type.value} at '{parent}': "
            f"it is inside the {parent_type.value} at '{via_ancestor}'"
        )

    if not can_create_child(parent_type, child_type):
        parent_label = "this location" if parent_type is NodeType.ROOT else f"a {parent_type.value}"
        allowed = ", ".join(t.value for t in allowed_child_types(parent_type)) or "none"
        return ValidationResult.fail(
            f"Cannot create a {child_type.value} inside {parent_label}. Allowed: {allowed}"
        )

    if name_exists(parent, name):
        return ValidationResult.fail(f'"{name.strip()}" already exists')

    return ValidationResult.ok()


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


def init_project_skeleton(project_path: Path, created_at: int) -> str:
    """Write the empty draft, empty commit log and metadata for a project.

    Returns:
        The freshly generated stable project identifier.
    """
    project_id = str(uuid.uuid4())
    commit_dir = project_path / DIFF_COMMIT_DIR
    commit_dir.mkdir(parents=True, exist_ok=True)
    (commit_dir / COMMITS_FILE).write_text("[]", encoding="utf-8")
    (project_path / PROJECT_CONTENT_FILE).write_text("", encoding="utf-8")
    (commit_dir / PROJECT_METADATA_FILE).write_text(
        json.dumps({"createdAt": created_at, "id": project_id}, indent=2),
        encoding="utf-8",
    )
    return project_id


def first_missing_dir(path: Path) -> Path:
    """Topmost directory that ``path.mkdir(parents=True)`` would create."""
    top = path
    while not top.parent.exists() and top.parent != top:
        top = top.parent
    return top


def rollback_directory(path: Path, cause: BaseException) -> None:
    """Remove a partially created directory, or raise PartialCreationError."""
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.error("Rollback of '%s' failed: %s", path, exc)
        raise PartialCreationError(f"Creation failed: {cause}", orphaned=path) from cause
    logger.info("Rolled back partially created '%s'", path)


def create_node(
    parent_path: str | os.PathLike[str],
    name: str,
    node_type: NodeType,
    *,
    created_at: int | None = None,
) -> Node:
    """Create a repository or project under *parent_path*.

    The directory is created first, along with any missing parents; marker
    and (for projects) skeleton files follow. If any step after that fails,
    everything the call created is removed again and the original error
    re-raised.

    Raises:
        HierarchyValidationError: If :func:`validate_create` rejects the request.
        PartialCreationError: If a failed creation could not be rolled back.
        OSError: If the directory itself cannot be created.
    """
    validation = validate_create(parent_path, name, node_type)
    if not validation.valid:
        raise HierarchyValidationError(validation.error)

    trimmed = name.strip()
    node_path = Path(os.path.abspath(os.fspath(parent_path))) / trimmed
    stamp = created_at if created_at is not None else now_ms()

    created_top = first_missing_dir(node_path)
    node_path.mkdir(parents=True)
    try:
        write_marker(node_path, HierarchyMeta(type=node_type, created_at=stamp, name=trimmed))
        if node_type is NodeType.PROJECT:
            init_project_skeleton(node_path, stamp)
    except Exception as exc:
        logger.error("Failed to create %s '%s': %s", node_type.value, node_path, exc)
        rollback_directory(created_top, exc)
        raise

    logger.info("Created %s: %s", node_type.value, node_path)
    return Node(path=node_path, node_type=node_type, name=trimmed, created_at=stamp)


# ---------------------------------------------------------------------------
# Inspection
# ---------------------------------------------------------------------------


def get_hierarchy_info(dir_path: str | os.PathLike[str]) -> HierarchyInfo:
    path = Path(os.path.abspath(os.fspath(dir_path)))
    meta = read_marker(path)
    node_type = meta.type if meta is not None else NodeType.ROOT
    name = meta.name if meta is not None and meta.name else path.name
    return HierarchyInfo(
        path=path,
        type=node_type,
        name=name,
        allowed_child_types=list(allowed_child_types(node_type)),
        parent_path=path.parent,
    )


def list_children(dir_path: str | os.PathLike[str]) -> list[Node]:
    """Non-hidden child directories of *dir_path* with their node types, by name."""
    path = Path(dir_path)
    if not path.is_dir():
        return []
    children: list[Node] = []
    for entry in sorted(path.iterdir(), key=lambda p: p.name.casefold()):
        if not entry.is_dir() or entry.name.startswith("."):
            continue
        meta = read_marker(entry)
        if meta is None:
            children.append(Node(path=entry, node_type=NodeType.ROOT, name=entry.name))
        else:
            children.append(
                Node(path=entry, node_type=meta.type, name=meta.name or entry.name, created_at=meta.created_at)
            )
    return children
