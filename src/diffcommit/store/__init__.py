"""Project store: drafts, commit logs, repositories and layout graphs."""

from diffcommit.store.models import Commit, ProjectSummary, RepositoryInfo
from diffcommit.store.project_store import ProjectStore
from diffcommit.store.repositories import RepositoryManager

__all__ = [
    "Commit",
    "ProjectStore",
    "ProjectSummary",
    "RepositoryInfo",
    "RepositoryManager",
]
