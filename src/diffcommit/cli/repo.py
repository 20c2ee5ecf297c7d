"""diffcommit repo commands.

Commands:
  diffcommit repo create <name>         — new repository (+ timestamped default project)
  diffcommit repo list                  — all repositories under the root
  diffcommit repo open <repo>           — repository overview with its projects
  diffcommit repo info <path>           — node type and what may be created inside
  diffcommit repo rename <repo> <name>  — rename a repository folder
  diffcommit repo delete <repo>         — delete a repository and everything in it
  diffcommit repo graph <repo>          — show or replace the project graph layout
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from diffcommit.cli.workspace import RootOption, Workspace, format_ms, open_workspace, reporting
from diffcommit.hierarchy.guard import get_hierarchy_info
from diffcommit.hierarchy.paths import assert_inside
from diffcommit.store.models import ProjectSummary

console = Console()

repo_app = typer.Typer(
    name="repo",
    help="Manage repositories (create, list, open, info, rename, delete).",
    add_completion=False,
)


def projects_table(ws: Workspace, projects: list[ProjectSummary], title: str = "Projects") -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Name", style="bold")
    table.add_column("Id", style="dim")
    table.add_column("Updated")
    table.add_column("Chars", justify="right")
    for project in projects:
        table.add_row(
            project.name,
            project.id,
            format_ms(project.updated_at),
            f"{len(project.content):,}",
        )
    return table


@repo_app.command("create")
def repo_create_cmd(
    name: Annotated[str, typer.Argument(help="Repository folder name.")],
    parent: Annotated[
        Path | None,
        typer.Option("--parent", help="Plain folder under the root to create it in (created if missing)."),
    ] = None,
    no_default_project: Annotated[
        bool,
        typer.Option("--no-default-project", help="Do not auto-create a timestamped project."),
    ] = False,
    root: RootOption = None,
) -> None:
    """Create a repository, with one timestamped project inside."""
    ws = open_workspace(root)
    with reporting(ws.root):
        info, projects = ws.repos.create_repository(
            name,
            parent=ws.node(parent) if parent is not None else None,
            default_project=not no_default_project,
        )
    console.print(f"[green]✓[/] Created repository [bold]{ws.label(info.path)}[/]")
    for project in projects:
        console.print(f"  + project {project.name}")


@repo_app.command("list")
def repo_list_cmd(root: RootOption = None) -> None:
    """List all repositories under the collection root."""
    ws = open_workspace(root)
    with reporting(ws.root):
        repositories = ws.repos.list_repositories()

    if not repositories:
        console.print(
            "[yellow]No repositories yet.[/]\n"
            "  Run:  diffcommit repo create <name>"
        )
        raise typer.Exit(0)

    table = Table(title="Repositories", show_header=True, header_style="bold")
    table.add_column("Name", style="bold")
    table.add_column("Path")
    table.add_column("Projects", justify="right")
    table.add_column("Created")
    for repo in repositories:
        table.add_row(repo.name, ws.label(repo.path), str(repo.project_count), format_ms(repo.created_at))
    console.print(table)


@repo_app.command("open")
def repo_open_cmd(
    repository: Annotated[str, typer.Argument(help="Repository path relative to the root.")],
    root: RootOption = None,
) -> None:
    """Show a repository and its projects."""
    ws = open_workspace(root)
    with reporting(ws.root):
        info, projects = ws.repos.open_repository(ws.node(repository))

    console.print(
        Panel(
            f"  Path:      {ws.label(info.path)}\n"
            f"  Created:   {format_ms(info.created_at) or '[dim]unknown[/]'}\n"
            f"  Projects:  {info.project_count}",
            title=f"[bold]{info.name}[/]",
            expand=False,
        )
    )
    if projects:
        console.print(projects_table(ws, projects))


@repo_app.command("info")
def repo_info_cmd(
    path: Annotated[str, typer.Argument(help="Any folder under the root ('.' for the root).")] = ".",
    root: RootOption = None,
) -> None:
    """Show the node type of a folder and what may be created inside it."""
    ws = open_workspace(root)
    with reporting(ws.root):
        target = assert_inside(ws.node(path), ws.root)
        info = get_hierarchy_info(target)

    allowed = ", ".join(t.value for t in info.allowed_child_types) or "[dim]nothing[/]"
    console.print(
        Panel(
            f"  Type:      {info.type.value}\n"
            f"  Name:      {info.name}\n"
            f"  Path:      {ws.label(info.path)}\n"
            f"  May hold:  {allowed}",
            title="[bold]Hierarchy[/]",
            expand=False,
        )
    )


@repo_app.command("rename")
def repo_rename_cmd(
    repository: Annotated[str, typer.Argument(help="Repository path relative to the root.")],
    new_name: Annotated[str, typer.Argument(help="New folder name.")],
    root: RootOption = None,
) -> None:
    """Rename a repository folder."""
    ws = open_workspace(root)
    with reporting(ws.root):
        info = ws.repos.rename_repository(ws.node(repository), new_name)
    console.print(f"[green]✓[/] Renamed to [bold]{ws.label(info.path)}[/]")


@repo_app.command("delete")
def repo_delete_cmd(
    repository: Annotated[str, typer.Argument(help="Repository path relative to the root.")],
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
    root: RootOption = None,
) -> None:
    """Delete a repository with all of its projects and commit history."""
    ws = open_workspace(root)
    with reporting(ws.root):
        info, projects = ws.repos.open_repository(ws.node(repository))

    console.print(f"\nDelete repository: [bold]{ws.label(info.path)}[/]")
    console.print(f"  Projects: {len(projects)}")
    if not yes:
        if not typer.confirm("Confirm deletion?", default=False):
            console.print("[dim]Cancelled.[/]")
            raise typer.Exit(0)

    with reporting(ws.root):
        ws.repos.delete_repository(info.path)
    console.print(f"[green]✓[/] Deleted: {ws.label(info.path)}")


@repo_app.command("graph")
def repo_graph_cmd(
    repository: Annotated[str, typer.Argument(help="Repository path relative to the root.")],
    load: Annotated[
        Path | None,
        typer.Option("--set", help="Replace the layout with this JSON file ({nodes, edges})."),
    ] = None,
    root: RootOption = None,
) -> None:
    """Print (or replace) the repository's project graph layout as JSON."""
    ws = open_workspace(root)
    with reporting(ws.root):
        if load is not None:
            try:
                data = json.loads(load.read_text(encoding="utf-8"))
            except json.JSONDecodeError as exc:
                console.print(f"[red]Error:[/] '{load}' is not valid JSON: {exc.msg}")
                raise typer.Exit(1) from exc
            graph = ws.repos.save_graph(ws.node(repository), data)
        else:
            graph = ws.repos.load_graph(ws.node(repository))
    typer.echo(json.dumps(graph.to_dict(), indent=2))
