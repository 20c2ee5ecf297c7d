"""diffcommit validate — dry-run a create request against the hierarchy rules."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from diffcommit.cli.workspace import RootOption, open_workspace, reporting
from diffcommit.hierarchy.guard import validate_create
from diffcommit.hierarchy.paths import assert_inside
from diffcommit.hierarchy.types import NodeType

console = Console()


def validate_cmd(
    parent: Annotated[str, typer.Argument(help="Parent folder relative to the root ('.' for the root).")],
    name: Annotated[str, typer.Argument(help="Name of the folder to create.")],
    node_type: Annotated[
        NodeType,
        typer.Option("--type", help="Kind of node to create: repository or project."),
    ] = NodeType.PROJECT,
    root: RootOption = None,
) -> None:
    """Check whether NAME could be created inside PARENT, without creating it."""
    ws = open_workspace(root)
    if node_type is NodeType.ROOT:
        console.print("[red]Error:[/] --type must be repository or project.")
        raise typer.Exit(1)
    with reporting(ws.root):
        parent_path = assert_inside(ws.node(parent), ws.root)
    result = validate_create(parent_path, name, node_type)
    if result.valid:
        console.print(f"[green]✓[/] Valid: {node_type.value} '{name}' in {ws.label(parent_path)}")
        return
    console.print(f"[red]✗[/] Invalid: {result.error}")
    raise typer.Exit(1)
