"""Hierarchy types and on-disk constants.

The folder hierarchy is strict and exactly three levels deep::

    root → repository → project → .diff-commit/commits.json
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class NodeType(str, Enum):
    ROOT = "root"
    REPOSITORY = "repository"
    PROJECT = "project"


# ---------------------------------------------------------------------------
# On-disk layout
# ---------------------------------------------------------------------------

HIERARCHY_META_FILE = ".hierarchy-meta.json"
PROJECT_CONTENT_FILE = "content.md"
DIFF_COMMIT_DIR = ".diff-commit"
COMMITS_FILE = "commits.json"
PROJECT_METADATA_FILE = "metadata.json"
PROJECT_GRAPH_FILE = "project-graph.json"

MAX_NAME_LENGTH = 255

# Windows device names, rejected case-insensitively with or without an extension.
RESERVED_NAMES: frozenset[str] = frozenset(
    ["CON", "PRN", "AUX", "NUL"]
    + [f"COM{i}" for i in range(1, 10)]
    + [f"LPT{i}" for i in range(1, 10)]
)

INVALID_CHARS: re.Pattern[str] = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

ALLOWED_CHILDREN: dict[NodeType, tuple[NodeType, ...]] = {
    NodeType.ROOT: (NodeType.REPOSITORY,),
    NodeType.REPOSITORY: (NodeType.PROJECT,),
    NodeType.PROJECT: (),
}


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass
class HierarchyMeta:
    """Contents of ``.hierarchy-meta.json``."""

    type: NodeType
    created_at: int
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "createdAt": self.created_at, "name": self.name}

    @classmethod
    def from_dict(cls, data: Any) -> HierarchyMeta:
        """Parse a marker payload.

        Raises:
            ValueError: If *data* is not a marker object or names an unknown type.
        """
        if not isinstance(data, dict):
            raise ValueError("marker is not a JSON object")
        node_type = NodeType(data.get("type"))
        created_at = data.get("createdAt", 0)
        if not isinstance(created_at, (int, float)) or isinstance(created_at, bool):
            raise ValueError("createdAt is not a number")
        return cls(type=node_type, created_at=int(created_at), name=str(data.get("name", "")))


@dataclass
class ValidationResult:
    valid: bool
    error: str | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(valid=True)

    @classmethod
    def fail(cls, error: str) -> ValidationResult:
        return cls(valid=False, error=error)

    def __bool__(self) -> bool:
        return self.valid


@dataclass
class Node:
    path: Path
    node_type: NodeType
    name: str
    created_at: int | None = None


@dataclass
class AncestorMatch:
    type: NodeType
    path: Path


@dataclass
class InsideCheck:
    is_inside: bool
    ancestor_type: NodeType | None = None
    ancestor_path: Path | None = None


@dataclass
class HierarchyInfo:
    path: Path
    type: NodeType
    name: str
    allowed_child_types: list[NodeType] = field(default_factory=list)
    parent_path: Path | None = None
