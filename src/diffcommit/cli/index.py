"""diffcommit index commands — keyword search and redundancy over a repository.

The index lives in memory only, so ``status`` reports on this process;
``query`` and ``redundancy`` build the index on first use.
"""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from diffcommit.cli.workspace import RootOption, Workspace, format_ms, open_workspace, reporting
from diffcommit.index.models import IndexStats

console = Console()

index_app = typer.Typer(
    name="index",
    help="Lexical index: build, status, clear, query, redundancy.",
    add_completion=False,
)

RepoArg = Annotated[str, typer.Argument(help="Repository path relative to the root.")]

_SNIPPET_CHARS = 80


def _stats_panel(ws: Workspace, stats: IndexStats) -> Panel:
    status = "[green]ready[/]" if stats.status.value == "ready" else "[yellow]idle[/]"
    return Panel(
        f"  Repository:  {ws.label(stats.repository_path)}\n"
        f"  Status:      {status}\n"
        f"  Sources:     {stats.source_count}\n"
        f"  Chunks:      {stats.chunk_count}\n"
        f"  Built:       {format_ms(stats.built_at) or '[dim]never[/]'}\n"
        f"  Schema:      v{stats.schema_version}",
        title="[bold]Index[/]",
        expand=False,
    )


@index_app.command("build")
def index_build_cmd(repository: RepoArg, root: RootOption = None) -> None:
    """Scan every project of a repository into the index."""
    ws = open_workspace(root)
    with reporting(ws.root):
        stats = ws.index.build_index(ws.node(repository))
    console.print(_stats_panel(ws, stats))


@index_app.command("status")
def index_status_cmd(repository: RepoArg, root: RootOption = None) -> None:
    """Show index statistics for a repository."""
    ws = open_workspace(root)
    with reporting(ws.root):
        stats = ws.index.get_index_status(ws.node(repository))
    console.print(_stats_panel(ws, stats))


@index_app.command("clear")
def index_clear_cmd(repository: RepoArg, root: RootOption = None) -> None:
    """Drop the cached index of a repository."""
    ws = open_workspace(root)
    with reporting(ws.root):
        ws.index.clear_index(ws.node(repository))
    console.print(f"[green]✓[/] Index cleared for {repository}")


@index_app.command("query")
def index_query_cmd(
    repository: RepoArg,
    query: Annotated[str, typer.Argument(help="Search text.")],
    top_k: Annotated[
        int | None,
        typer.Option("--top-k", "-k", min=1, help="Number of results (default from config)."),
    ] = None,
    root: RootOption = None,
) -> None:
    """Rank chunks of a repository's drafts by keyword overlap with QUERY."""
    ws = open_workspace(root)
    with reporting(ws.root):
        result = ws.index.query_index(ws.node(repository), query, top_k)

    if not result.chunks:
        console.print("[yellow]No projects to search.[/]")
        raise typer.Exit(0)

    table = Table(title=f"Results for '{query}'", show_header=True, header_style="bold")
    table.add_column("Score", justify="right", style="bold")
    table.add_column("Project")
    table.add_column("Chunk", justify="right")
    table.add_column("Text")
    for row in result.chunks:
        snippet = " ".join(row.chunk.text.split())
        if len(snippet) > _SNIPPET_CHARS:
            snippet = snippet[: _SNIPPET_CHARS - 1] + "…"
        table.add_row(str(row.score), row.source.title, str(row.chunk.position), Text(snippet))
    console.print(table)


@index_app.command("redundancy")
def index_redundancy_cmd(
    repository: RepoArg,
    threshold: Annotated[
        float | None,
        typer.Option("--threshold", min=0.0, max=1.0, help="Minimum similarity (default from config)."),
    ] = None,
    top_k: Annotated[
        int | None,
        typer.Option("--top-k", "-k", min=1, help="Maximum pairs reported (default from config)."),
    ] = None,
    root: RootOption = None,
) -> None:
    """Find projects whose drafts duplicate or nearly duplicate each other."""
    ws = open_workspace(root)
    with reporting(ws.root):
        report = ws.index.find_redundancy(ws.node(repository), threshold, top_k)
        titles = {s.source_id: s.title for s in ws.index.list_sources(ws.node(repository))}

    if not report.pairs:
        console.print("[green]✓[/] No redundant projects found.")
        raise typer.Exit(0)

    table = Table(title="Redundancy", show_header=True, header_style="bold")
    table.add_column("Group", style="dim")
    table.add_column("Project A", style="bold")
    table.add_column("Project B", style="bold")
    table.add_column("Similarity", justify="right")
    table.add_column("Type")
    for group, pair in zip(report.groups, report.pairs):
        table.add_row(
            group.group_id,
            titles.get(pair.a_source_id, pair.a_source_id),
            titles.get(pair.b_source_id, pair.b_source_id),
            f"{pair.similarity:.0%}",
            pair.overlap_type.value,
        )
    console.print(table)
