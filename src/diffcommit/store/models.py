"""Domain models for the project store."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class Commit:
    id: str
    commit_number: int
    content: str
    timestamp: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "commitNumber": self.commit_number,
            "content": self.content,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Commit:
        """Parse one ``commits.json`` entry.

        Raises:
            ValueError: If a field is missing or has the wrong type.
        """
        if not isinstance(data, dict):
            raise ValueError("commit entry is not an object")
        commit_id = data.get("id")
        number = data.get("commitNumber")
        content = data.get("content")
        timestamp = data.get("timestamp", 0)
        if not isinstance(commit_id, str) or not commit_id:
            raise ValueError("commit id must be a non-empty string")
        if not isinstance(number, int) or isinstance(number, bool) or number < 1:
            raise ValueError(f"commit {commit_id!r} has an invalid commitNumber")
        if not isinstance(content, str):
            raise ValueError(f"commit {commit_id!r} has non-text content")
        if not isinstance(timestamp, (int, float)) or isinstance(timestamp, bool):
            raise ValueError(f"commit {commit_id!r} has an invalid timestamp")
        return cls(id=commit_id, commit_number=number, content=content, timestamp=int(timestamp))


@dataclass
class ProjectMetadata:
    """Contents of ``.diff-commit/metadata.json``. ``id`` is absent on legacy projects."""

    created_at: int
    id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"createdAt": self.created_at}
        if self.id:
            data["id"] = self.id
        return data


@dataclass
class ProjectSummary:
    id: str
    name: str
    content: str
    created_at: int
    updated_at: int
    path: Path
    repository_path: Path


@dataclass
class RepositoryInfo:
    name: str
    path: Path
    created_at: int | None
    project_count: int = 0
