"""diffcommit init — create the collection root, the global config file and a
first "Default" repository."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from diffcommit.cli.workspace import RootOption, open_workspace, reporting
from diffcommit.config import ensure_global_config

DEFAULT_REPOSITORY = "Default"

console = Console()


def init_cmd(
    root: RootOption = None,
    global_config: Annotated[
        Path | None,
        typer.Option("--global-config", hidden=True, help="Override ~/.diffcommit/config.yaml (for testing)."),
    ] = None,
    default_repo: Annotated[
        bool,
        typer.Option(
            "--default-repo/--no-default-repo",
            help="Create an empty Default repository if the root has none.",
        ),
    ] = True,
) -> None:
    """Set up the collection root, a default global config and a first repository."""
    with reporting():
        cfg_path = ensure_global_config(global_config)
    console.print(f"  [green]✓[/] {cfg_path} (global config)")

    ws = open_workspace(root)
    console.print(f"  [green]✓[/] {ws.root} (collection root)")
    if default_repo:
        with reporting(ws.root):
            if not ws.repos.list_repositories():
                info, _ = ws.repos.create_repository(DEFAULT_REPOSITORY, default_project=False)
                console.print(f"  [green]✓[/] {ws.label(info.path)} (repository)")
    console.print("\nNext steps:")
    console.print("  1. diffcommit repo create <name>            (repository + first project)")
    console.print("  2. diffcommit project save <repo>/<project> --file draft.md")
    console.print("  3. diffcommit commit add <repo>/<project>")
