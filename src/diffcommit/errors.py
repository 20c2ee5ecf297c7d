"""Exception hierarchy for the diffcommit core.

Validation failures that callers are expected to recover from derive from
``HierarchyValidationError`` (itself a ``ValueError``). I/O failures are not
wrapped: ``OSError`` propagates unchanged and nothing in the core retries.
"""

from __future__ import annotations

from pathlib import Path


class DiffCommitError(Exception):
    """Base class for all diffcommit errors."""


class HierarchyValidationError(DiffCommitError, ValueError):
    """Bad name, illegal nesting, duplicate name, wrong node type, or escaped root."""


class OutsideRootError(HierarchyValidationError):
    """A path resolves outside the managed collection root."""


class WrongTypeError(HierarchyValidationError):
    """A path is inside the root but is not the expected kind of node."""


class NodeNotFoundError(HierarchyValidationError):
    """A path that must be an existing directory does not exist."""


class NameConflictError(HierarchyValidationError):
    """The destination name is already taken (case-insensitively)."""


class CommitLogError(DiffCommitError, ValueError):
    """A commit list handed to ``save_commits`` breaks the log invariants."""


class CorruptDataError(DiffCommitError):
    """A JSON side-car file exists but cannot be parsed into the expected shape."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Corrupt data in '{path}': {reason}")
        self.path = path
        self.reason = reason


class PartialCreationError(DiffCommitError):
    """A multi-step creation failed and its rollback could not clean up.

    Attributes:
        orphaned: Directory left on disk that the caller must inspect or remove.
    """

    def __init__(self, message: str, orphaned: Path) -> None:
        super().__init__(f"{message} (partially created: '{orphaned}')")
        self.orphaned = orphaned
