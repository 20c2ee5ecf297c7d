"""Export a project as a portable bundle folder (draft + raw commit log)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from diffcommit.hierarchy.types import COMMITS_FILE, DIFF_COMMIT_DIR, PROJECT_CONTENT_FILE
from diffcommit.store.fileio import read_text_exact


@dataclass
class BundleSource:
    project_name: str
    project_content: str
    commits_content: str


def read_bundle_source(project: Path) -> BundleSource:
    """Read the draft and commit log verbatim; missing files read as "" and "[]"."""
    content_path = project / PROJECT_CONTENT_FILE
    commits_path = project / DIFF_COMMIT_DIR / COMMITS_FILE
    return BundleSource(
        project_name=project.name,
        project_content=read_text_exact(content_path) if content_path.is_file() else "",
        commits_content=read_text_exact(commits_path) if commits_path.is_file() else "[]",
    )


def export_project_bundle(project: Path, dest_dir: Path) -> list[Path]:
    """Write ``<name>.md`` and ``<name>.commits.json`` into *dest_dir*.

    Returns:
        The two written file paths.
    """
    source = read_bundle_source(project)
    dest_dir.mkdir(parents=True, exist_ok=True)
    draft = dest_dir / f"{source.project_name}.md"
    log = dest_dir / f"{source.project_name}.commits.json"
    draft.write_text(source.project_content, encoding="utf-8", newline="")
    log.write_text(source.commits_content, encoding="utf-8", newline="")
    return [draft, log]
