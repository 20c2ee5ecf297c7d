"""diffcommit project commands.

Commands:
  diffcommit project create <repo> <name>     — new project with an empty draft
  diffcommit project list <repo>              — projects of a repository
  diffcommit project show <project>           — print the working draft
  diffcommit project save <project>           — overwrite the working draft
  diffcommit project rename <project> <name>  — rename a project folder
  diffcommit project move <project> <repo>    — move a project to another repository
  diffcommit project delete <project>         — delete a project and its history
  diffcommit project export <project> <dir>   — write <name>.md + <name>.commits.json
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from diffcommit.cli.repo import projects_table
from diffcommit.cli.workspace import RootOption, open_workspace, read_text_arg, reporting
from diffcommit.store.bundle import export_project_bundle

console = Console()

project_app = typer.Typer(
    name="project",
    help="Manage projects and their working drafts.",
    add_completion=False,
)

ProjectArg = Annotated[str, typer.Argument(help="Project path relative to the root, e.g. R/Draft.")]
TextOption = Annotated[str | None, typer.Option("--text", "-t", help="Content given inline.")]
FileOption = Annotated[
    Path | None,
    typer.Option("--file", "-f", help="Read content from a file ('-' for stdin)."),
]


@project_app.command("create")
def project_create_cmd(
    repository: Annotated[str, typer.Argument(help="Repository path relative to the root.")],
    name: Annotated[str, typer.Argument(help="Project folder name.")],
    text: TextOption = None,
    file: FileOption = None,
    root: RootOption = None,
) -> None:
    """Create a project inside a repository."""
    ws = open_workspace(root)
    with reporting(ws.root):
        content = read_text_arg(text, file) or ""
        project = ws.store.create_project(ws.node(repository), name, content)
    console.print(f"[green]✓[/] Created project [bold]{ws.label(project.path)}[/]")
    console.print(f"  Id: [dim]{project.id}[/]")


@project_app.command("list")
def project_list_cmd(
    repository: Annotated[str, typer.Argument(help="Repository path relative to the root.")],
    root: RootOption = None,
) -> None:
    """List the projects of a repository."""
    ws = open_workspace(root)
    with reporting(ws.root):
        projects = ws.store.scan_projects(ws.node(repository))
    if not projects:
        console.print(
            "[yellow]No projects in this repository.[/]\n"
            f"  Run:  diffcommit project create {repository} <name>"
        )
        raise typer.Exit(0)
    console.print(projects_table(ws, projects, title=repository))


@project_app.command("show")
def project_show_cmd(project: ProjectArg, root: RootOption = None) -> None:
    """Print the working draft."""
    ws = open_workspace(root)
    with reporting(ws.root):
        content = ws.store.load_content(ws.node(project))
    typer.echo(content, nl=not content.endswith("\n"))


@project_app.command("save")
def project_save_cmd(
    project: ProjectArg,
    text: TextOption = None,
    file: FileOption = None,
    root: RootOption = None,
) -> None:
    """Overwrite the working draft with new content."""
    ws = open_workspace(root)
    with reporting(ws.root):
        content = read_text_arg(text, file)
        if content is None:
            console.print("[red]Error:[/] No content given.\n  Pass --text <text> or --file <path>")
            raise typer.Exit(1)
        ws.store.save_content(ws.node(project), content)
    console.print(f"[green]✓[/] Saved {len(content):,} characters to {project}")


@project_app.command("rename")
def project_rename_cmd(
    project: ProjectArg,
    new_name: Annotated[str, typer.Argument(help="New folder name.")],
    root: RootOption = None,
) -> None:
    """Rename a project; its id and creation time are kept."""
    ws = open_workspace(root)
    with reporting(ws.root):
        summary = ws.store.rename_project(ws.node(project), new_name)
    console.print(f"[green]✓[/] Renamed to [bold]{ws.label(summary.path)}[/]")


@project_app.command("move")
def project_move_cmd(
    project: ProjectArg,
    repository: Annotated[str, typer.Argument(help="Destination repository path relative to the root.")],
    root: RootOption = None,
) -> None:
    """Move a project into another repository."""
    ws = open_workspace(root)
    with reporting(ws.root):
        summary = ws.store.move_project(ws.node(project), ws.node(repository))
    console.print(f"[green]✓[/] Project is now at [bold]{ws.label(summary.path)}[/]")


@project_app.command("delete")
def project_delete_cmd(
    project: ProjectArg,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
    root: RootOption = None,
) -> None:
    """Delete a project with its draft and commit history."""
    ws = open_workspace(root)
    with reporting(ws.root):
        path = ws.store.project_path(ws.node(project))
        commit_count = len(ws.store.list_commits(path))

    console.print(f"\nDelete project: [bold]{ws.label(path)}[/]")
    console.print(f"  Commits: {commit_count}")
    if not yes:
        if not typer.confirm("Confirm deletion?", default=False):
            console.print("[dim]Cancelled.[/]")
            raise typer.Exit(0)

    with reporting(ws.root):
        ws.store.delete_project(path)
    console.print(f"[green]✓[/] Deleted: {ws.label(path)}")


@project_app.command("export")
def project_export_cmd(
    project: ProjectArg,
    dest: Annotated[Path, typer.Argument(help="Destination folder (created if missing).")],
    root: RootOption = None,
) -> None:
    """Export the draft and raw commit log next to each other in a folder."""
    ws = open_workspace(root)
    with reporting(ws.root):
        written = export_project_bundle(ws.store.project_path(ws.node(project)), dest)
    console.print(f"[green]✓[/] Exported {project}")
    for path in written:
        console.print(f"  {path}")
