"""Path containment checks.

Containment is decided lexically on absolute, normalised paths; symlinks are
not resolved. Every operation that must stay under the managed collection root
goes through :func:`assert_inside` or :func:`assert_typed`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

from diffcommit.errors import HierarchyValidationError, OutsideRootError, WrongTypeError


def _absolute(path: str | os.PathLike[str]) -> Path:
    return Path(os.path.abspath(os.fspath(path)))


def is_inside(target: str | os.PathLike[str], root: str | os.PathLike[str]) -> bool:
    """Return True if *target* is *root* itself or a descendant of it."""
    try:
        _absolute(target).relative_to(_absolute(root))
    except ValueError:
        return False
    return True


def assert_inside(target: str | os.PathLike[str] | None, root: str | os.PathLike[str]) -> Path:
    """Resolve *target* and ensure it does not escape *root*.

    Returns:
        The absolute, normalised target path.

    Raises:
        HierarchyValidationError: If *target* is empty.
        OutsideRootError: If *target* lies outside *root*.
    """
    if target is None or not os.fspath(target):
        raise HierarchyValidationError("Invalid path")
    if not is_inside(target, root):
        raise OutsideRootError(f"Path is outside the repositories root: '{target}'")
    return _absolute(target)


def assert_typed(
    path: str | os.PathLike[str] | None,
    root: str | os.PathLike[str],
    predicate: Callable[[Path], bool],
    kind: str = "node",
) -> Path:
    """Combine :func:`assert_inside` with a node-kind predicate.

    Raises:
        OutsideRootError: If *path* lies outside *root*.
        WrongTypeError: If *predicate* rejects the resolved path.
    """
    resolved = assert_inside(path, root)
    if not predicate(resolved):
        raise WrongTypeError(f"Invalid {kind} folder: '{resolved}'")
    return resolved
