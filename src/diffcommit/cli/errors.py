"""diffcommit rich error messages — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from diffcommit.cli.errors import err_file_not_found
    console.print(err_file_not_found("notes.md"))
    raise typer.Exit(1)
"""

from __future__ import annotations

from diffcommit.config import ConfigError
from diffcommit.errors import (
    CommitLogError,
    CorruptDataError,
    DiffCommitError,
    NameConflictError,
    OutsideRootError,
    PartialCreationError,
)


def err_outside_root(message: str, root: str) -> str:
    """Path escapes the managed collection root."""
    return (
        f"[red]Error:[/] {message}\n"
        f"  Collection root: {root}\n"
        "  Pass a path relative to the root, or change it with:  --root <dir>"
    )


def err_name_conflict(message: str) -> str:
    return (
        f"[red]Error:[/] {message}.\n"
        "  Choose a different name; names are compared case-insensitively."
    )


def err_invalid(message: str) -> str:
    """Name or nesting rule violated."""
    return f"[red]Error:[/] {message}"


def err_corrupt(path: str, reason: str) -> str:
    return (
        f"[red]Error:[/] Corrupt data in '{path}': {reason}\n"
        "  Restore the file from a backup or delete it to start fresh."
    )


def err_partial_creation(orphaned: str) -> str:
    return (
        f"[red]Error:[/] Creation failed and could not be rolled back.\n"
        f"  Inspect or remove the leftover folder manually:  {orphaned}"
    )


def err_commit_log(message: str) -> str:
    return f"[red]Error:[/] Commit log rejected: {message}"


def err_commit_not_found(ref: str, project: str) -> str:
    return (
        f"[red]Error:[/] No commit '{ref}' in '{project}'.\n"
        f"  Run:  diffcommit commit list {project}"
    )


def err_file_not_found(path: str) -> str:
    return f"[red]Error:[/] File not found: '{path}'"


def err_io(exc: OSError) -> str:
    """Permission denied, disk full, missing file; nothing is retried."""
    target = f" '{exc.filename}'" if exc.filename else ""
    return (
        f"[red]Error:[/] File system error{target}: {exc.strerror or exc}\n"
        "  Check permissions and free space, then run the command again."
    )


def err_config(exc: ConfigError) -> str:
    return (
        f"[red]Error:[/] Invalid configuration: {exc}\n"
        "  Fix diffcommit.yaml or ~/.diffcommit/config.yaml."
    )


def err_diff_source_required() -> str:
    return (
        "[red]Error:[/] Nothing to compare against.\n"
        "  Pass one of:  --commit <number>  or  --file <path>"
    )


def describe(exc: Exception, root: str = "") -> str:
    """Map a core exception onto its actionable message."""
    if isinstance(exc, OutsideRootError):
        return err_outside_root(str(exc), root)
    if isinstance(exc, NameConflictError):
        return err_name_conflict(str(exc))
    if isinstance(exc, PartialCreationError):
        return err_partial_creation(str(exc.orphaned))
    if isinstance(exc, CorruptDataError):
        return err_corrupt(str(exc.path), exc.reason)
    if isinstance(exc, CommitLogError):
        return err_commit_log(str(exc))
    if isinstance(exc, ConfigError):
        return err_config(exc)
    if isinstance(exc, DiffCommitError):
        return err_invalid(str(exc))
    if isinstance(exc, OSError):
        return err_io(exc)
    return f"[red]Error:[/] {exc}"
