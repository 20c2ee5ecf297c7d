"""Per-path lock table serialising mutations of the same node."""

from __future__ import annotations

import os
import threading
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from pathlib import Path


class PathLocks:
    """Map of absolute path → re-entrant lock.

    One instance is shared by every store that mutates the same collection
    root. Locks are created lazily and never evicted; the table only grows
    with the number of distinct nodes touched during a process lifetime.
    """

    def __init__(self) -> None:
        self._table_lock = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def lock_for(self, path: str | os.PathLike[str]) -> threading.RLock:
        key = os.path.normcase(os.path.abspath(os.fspath(path)))
        with self._table_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, *paths: str | os.PathLike[str]) -> Iterator[None]:
        """Acquire the locks for all *paths*, in sorted order to avoid deadlock."""
        keys = sorted({os.path.normcase(os.path.abspath(os.fspath(p))) for p in paths})
        with ExitStack() as stack:
            for key in keys:
                stack.enter_context(self.lock_for(Path(key)))
            yield
