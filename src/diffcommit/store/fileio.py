"""Small file helpers shared by the store modules."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from diffcommit.errors import CorruptDataError


def atomic_write_text(path: Path, text: str) -> None:
    """Write *text* to *path* via a sibling temp file and ``os.replace``.

    Readers see either the old or the new content, never a truncated file.
    """
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            fh.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def read_text_exact(path: Path) -> str:
    """Read UTF-8 text from *path* without translating line endings."""
    with open(path, encoding="utf-8", newline="") as fh:
        return fh.read()


def write_json(path: Path, data: Any) -> None:
    atomic_write_text(path, json.dumps(data, indent=2, ensure_ascii=False))


def read_json(path: Path) -> Any:
    """Parse JSON from *path*.

    Raises:
        FileNotFoundError: If *path* does not exist.
        CorruptDataError: If the file cannot be decoded or parsed.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise CorruptDataError(path, "not valid UTF-8") from exc
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CorruptDataError(path, f"invalid JSON ({exc.msg} at line {exc.lineno})") from exc
