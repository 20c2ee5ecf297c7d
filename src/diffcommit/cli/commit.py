"""diffcommit commit commands.

Commands:
  diffcommit commit add <project>           — snapshot the working draft as the next commit
  diffcommit commit list <project>          — commit log, oldest first
  diffcommit commit delete <project> <ref>  — drop one commit (by number or id)
  diffcommit commit clear <project>         — empty the commit log
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from diffcommit.cli.errors import err_commit_not_found
from diffcommit.cli.workspace import RootOption, format_ms, open_workspace, read_text_arg, reporting, short_id
from diffcommit.store.models import Commit

console = Console()

commit_app = typer.Typer(
    name="commit",
    help="Manage a project's commit log (add, list, delete, clear).",
    add_completion=False,
)

ProjectArg = Annotated[str, typer.Argument(help="Project path relative to the root, e.g. R/Draft.")]

_PREVIEW_CHARS = 48


def find_commit(commits: list[Commit], ref: str) -> Commit | None:
    """Look a commit up by its number (``3`` or ``#3``) or by id / id prefix.

    Numeric refs only ever match commit numbers.
    """
    number = ref.lstrip("#")
    if number.isdigit():
        return next((c for c in commits if c.commit_number == int(number)), None)
    matches = [c for c in commits if c.id == ref or c.id.startswith(ref)]
    return matches[0] if len(matches) == 1 else None


def _preview(content: str) -> str:
    flat = " ".join(content.split())
    return flat if len(flat) <= _PREVIEW_CHARS else flat[: _PREVIEW_CHARS - 1] + "…"


@commit_app.command("add")
def commit_add_cmd(
    project: ProjectArg,
    text: Annotated[
        str | None,
        typer.Option("--text", "-t", help="Commit this text instead of the working draft."),
    ] = None,
    file: Annotated[
        Path | None,
        typer.Option("--file", "-f", help="Commit a file's content instead of the working draft."),
    ] = None,
    root: RootOption = None,
) -> None:
    """Append the working draft (or given content) as the next commit."""
    ws = open_workspace(root)
    with reporting(ws.root):
        path = ws.node(project)
        content = read_text_arg(text, file)
        if content is None:
            content = ws.store.load_content(path)
        commit = ws.store.append_commit(path, content)
    console.print(f"[green]✓[/] Commit #{commit.commit_number} [dim]{short_id(commit.id)}[/]")


@commit_app.command("list")
def commit_list_cmd(project: ProjectArg, root: RootOption = None) -> None:
    """Show the commit log of a project, oldest first."""
    ws = open_workspace(root)
    with reporting(ws.root):
        commits = ws.store.list_commits(ws.node(project))

    if not commits:
        console.print(f"[yellow]No commits yet.[/]\n  Run:  diffcommit commit add {project}")
        raise typer.Exit(0)

    table = Table(title=f"Commits — {project}", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="bold")
    table.add_column("Id", style="dim")
    table.add_column("When")
    table.add_column("Content")
    for commit in commits:
        table.add_row(
            str(commit.commit_number),
            short_id(commit.id),
            format_ms(commit.timestamp),
            _preview(commit.content),
        )
    console.print(table)


@commit_app.command("delete")
def commit_delete_cmd(
    project: ProjectArg,
    ref: Annotated[str, typer.Argument(help="Commit number (e.g. 2 or #2) or id prefix.")],
    root: RootOption = None,
) -> None:
    """Delete one commit. Remaining commits keep their numbers."""
    ws = open_workspace(root)
    with reporting(ws.root):
        path = ws.node(project)
        commit = find_commit(ws.store.list_commits(path), ref)
        if commit is None:
            console.print(err_commit_not_found(ref, project))
            raise typer.Exit(1)
        ws.store.delete_commit(path, commit.id)
    console.print(f"[green]✓[/] Deleted commit #{commit.commit_number}")


@commit_app.command("clear")
def commit_clear_cmd(
    project: ProjectArg,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
    root: RootOption = None,
) -> None:
    """Remove every commit of a project. The working draft is untouched."""
    ws = open_workspace(root)
    with reporting(ws.root):
        count = len(ws.store.list_commits(ws.node(project)))
    if not yes:
        if not typer.confirm(f"Remove all {count} commits?", default=False):
            console.print("[dim]Cancelled.[/]")
            raise typer.Exit(0)
    with reporting(ws.root):
        ws.store.clear_commits(ws.node(project))
    console.print(f"[green]✓[/] Cleared {count} commits")
