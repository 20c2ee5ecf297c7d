"""diffcommit diff / merge — word-level comparison against the working draft.

The working draft is always the *source* side; the other snapshot (a commit
or a file) is the *target*. Merging starts from "accept the new version" and
applies ``--reject-all`` and then each ``--toggle`` in order.

Usage:
  diffcommit diff R/Draft --commit 2
  diffcommit merge R/Draft --file polished.md --toggle seg-3 --commit
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from diffcommit.cli.commit import find_commit
from diffcommit.cli.errors import err_commit_not_found, err_diff_source_required, err_file_not_found
from diffcommit.cli.workspace import RootOption, Workspace, open_workspace, reporting
from diffcommit.diff.history import SegmentHistory
from diffcommit.diff.merger import change_counts, diff, materialize, reject_all, toggle
from diffcommit.diff.segments import DiffSegment, SegmentKind
from diffcommit.store.fileio import read_text_exact

console = Console()

_STYLES = {
    SegmentKind.ADDED: "green underline",
    SegmentKind.REMOVED: "red strike",
    SegmentKind.UNCHANGED: "",
}
_PREVIEW_CHARS = 40


def render_segments(segments: Sequence[DiffSegment]) -> Text:
    """Inline rendering; excluded segments are dimmed."""
    text = Text()
    for segment in segments:
        style = _STYLES[segment.kind]
        if not segment.is_included:
            style = f"{style} dim".strip()
        text.append(segment.value, style=style)
    return text


def changes_table(segments: Sequence[DiffSegment]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Segment", style="bold")
    table.add_column("Kind")
    table.add_column("Group", style="dim")
    table.add_column("Included")
    table.add_column("Text")
    for segment in segments:
        if segment.kind is SegmentKind.UNCHANGED:
            continue
        flat = " ".join(segment.value.split()) or repr(segment.value)
        if len(flat) > _PREVIEW_CHARS:
            flat = flat[: _PREVIEW_CHARS - 1] + "…"
        table.add_row(
            segment.id,
            segment.kind.value,
            segment.group_id or "",
            "[green]yes[/]" if segment.is_included else "[dim]no[/]",
            Text(flat),
        )
    return table


def _target_text(ws: Workspace, project: Path, commit_ref: str | None, file: Path | None) -> str:
    if commit_ref is not None:
        commit = find_commit(ws.store.list_commits(project), commit_ref)
        if commit is None:
            console.print(err_commit_not_found(commit_ref, ws.label(project)))
            raise typer.Exit(1)
        return commit.content
    if file is not None:
        if not file.is_file():
            console.print(err_file_not_found(str(file)))
            raise typer.Exit(1)
        return read_text_exact(file)
    console.print(err_diff_source_required())
    raise typer.Exit(1)


def _summary_line(segments: Sequence[DiffSegment]) -> str:
    counts = change_counts(segments)
    return (
        f"  [green]+{counts[SegmentKind.ADDED]}[/] added  "
        f"[red]-{counts[SegmentKind.REMOVED]}[/] removed  "
        f"{counts[SegmentKind.UNCHANGED]} unchanged"
    )


def diff_cmd(
    project: Annotated[str, typer.Argument(help="Project path relative to the root, e.g. R/Draft.")],
    commit: Annotated[
        str | None,
        typer.Option("--commit", "-c", help="Compare the draft with this commit (number or id)."),
    ] = None,
    file: Annotated[
        Path | None,
        typer.Option("--file", "-f", help="Compare the draft with this file."),
    ] = None,
    root: RootOption = None,
) -> None:
    """Show a word-level diff between the working draft and a commit or file."""
    ws = open_workspace(root)
    with reporting(ws.root):
        path = ws.store.project_path(ws.node(project))
        source = ws.store.load_content(path)
        target = _target_text(ws, path, commit, file)

    segments = diff(source, target)
    if all(s.kind is SegmentKind.UNCHANGED for s in segments):
        console.print("[green]✓[/] No differences.")
        raise typer.Exit(0)

    console.print(render_segments(segments))
    console.print()
    console.print(changes_table(segments))
    console.print(_summary_line(segments))


def merge_cmd(
    project: Annotated[str, typer.Argument(help="Project path relative to the root, e.g. R/Draft.")],
    file: Annotated[
        Path,
        typer.Option("--file", "-f", help="New version to merge into the working draft."),
    ],
    toggles: Annotated[
        list[str] | None,
        typer.Option("--toggle", help="Segment id to flip (repeatable, applied in order)."),
    ] = None,
    reject: Annotated[
        bool,
        typer.Option("--reject-all", help="Start from the current draft instead of the new version."),
    ] = False,
    undo: Annotated[
        int,
        typer.Option("--undo", min=0, help="Undo this many of the last toggles."),
    ] = 0,
    commit: Annotated[
        bool,
        typer.Option("--commit", help="Also append the merged text as a new commit."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show the merge result without saving."),
    ] = False,
    root: RootOption = None,
) -> None:
    """Merge a new version into the working draft, segment by segment."""
    ws = open_workspace(root)
    with reporting(ws.root):
        path = ws.store.project_path(ws.node(project))
        source = ws.store.load_content(path)
        target = _target_text(ws, path, None, file)

    history = SegmentHistory()
    segments = diff(source, target)
    history.initialize(segments)
    if reject:
        history.push(reject_all(history.current))

    known = {s.id for s in segments}
    for segment_id in toggles or []:
        if segment_id not in known:
            console.print(f"[yellow]⚠[/] Unknown segment '{segment_id}' — ignored.")
            continue
        history.push(toggle(history.current, segment_id))
    for _ in range(undo):
        if not history.can_undo:
            break
        history.undo()

    merged = materialize(history.current)
    console.print(changes_table(history.current))

    if dry_run:
        console.print("\n[dim]Dry run — nothing saved. Merged text:[/]")
        typer.echo(merged)
        raise typer.Exit(0)

    with reporting(ws.root):
        ws.store.save_content(path, merged)
        console.print(f"\n[green]✓[/] Draft updated ({len(merged):,} characters)")
        if commit:
            created = ws.store.append_commit(path, merged)
            console.print(f"[green]✓[/] Commit #{created.commit_number}")
