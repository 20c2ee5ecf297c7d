"""Per-invocation plumbing shared by every command: config, logging, services.

Node arguments on the command line are paths relative to the collection
root (``R`` for a repository, ``R/Draft`` for a project); absolute paths are
accepted too and are still checked against the root by the core.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from diffcommit.cli.errors import describe, err_config
from diffcommit.config import ConfigError, DiffCommitConfig, load_config
from diffcommit.errors import DiffCommitError
from diffcommit.index.service import LexicalIndex
from diffcommit.store.fileio import read_text_exact
from diffcommit.store.project_store import ProjectStore
from diffcommit.store.repositories import RepositoryManager

console = Console()

RootOption = Annotated[
    Path | None,
    typer.Option("--root", help="Collection root. Overrides DIFFCOMMIT_ROOT and config files."),
]


@dataclass
class Workspace:
    config: DiffCommitConfig
    root: Path
    store: ProjectStore
    repos: RepositoryManager
    index: LexicalIndex

    def node(self, ref: str | Path) -> Path:
        """Resolve a root-relative node reference to an absolute path."""
        candidate = Path(ref).expanduser()
        return candidate if candidate.is_absolute() else self.root / candidate

    def label(self, path: Path) -> str:
        """Root-relative display form of *path*."""
        try:
            return path.relative_to(self.root).as_posix() or "."
        except ValueError:
            return str(path)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(name)s: %(message)s",
        datefmt="%H:%M:%S",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def open_workspace(root: Path | None) -> Workspace:
    """Load config, apply ``--root``, start logging and build the core services."""
    try:
        cfg = load_config()
    except ConfigError as exc:
        console.print(err_config(exc))
        raise typer.Exit(1) from exc

    if root is not None:
        cfg.storage.root = str(root)
    setup_logging(cfg.logging.level)

    resolved = cfg.root
    with reporting(resolved):
        resolved.mkdir(parents=True, exist_ok=True)
    store = ProjectStore(resolved)
    return Workspace(
        config=cfg,
        root=store.root,
        store=store,
        repos=RepositoryManager(store),
        index=LexicalIndex(store, cfg),
    )


@contextmanager
def reporting(root: Path | str = "") -> Iterator[None]:
    """Turn core and file-system errors into a rich message and exit code 1."""
    try:
        yield
    except (DiffCommitError, ConfigError, OSError) as exc:
        console.print(describe(exc, str(root)))
        raise typer.Exit(1) from exc


def read_text_arg(text: str | None, file: Path | None) -> str | None:
    """Content given inline or via ``--file`` (``-`` reads stdin)."""
    if text is not None:
        return text
    if file is None:
        return None
    if str(file) == "-":
        return typer.get_text_stream("stdin").read()
    return read_text_exact(file)


def short_id(value: str) -> str:
    return value[:8]


def format_ms(stamp: int | None) -> str:
    if not stamp:
        return ""
    return datetime.fromtimestamp(stamp / 1000).strftime("%Y-%m-%d %H:%M")
