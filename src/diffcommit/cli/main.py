"""diffcommit CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from diffcommit.cli.commit import commit_app
from diffcommit.cli.diff import diff_cmd, merge_cmd
from diffcommit.cli.index import index_app
from diffcommit.cli.init import init_cmd
from diffcommit.cli.project import project_app
from diffcommit.cli.repo import repo_app
from diffcommit.cli.validate import validate_cmd


def _installed_version() -> str:
    try:
        return importlib.metadata.version("diffcommit")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"diffcommit {_installed_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="diffcommit",
    help=(
        "diffcommit — versioned writing projects.\n\n"
        "  Repositories hold projects; each project has one working draft and a\n"
        "  numbered commit log. diff/merge compare the draft word by word."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """diffcommit — versioned writing projects."""


app.command("init")(init_cmd)
app.add_typer(repo_app, name="repo")
app.add_typer(project_app, name="project")
app.add_typer(commit_app, name="commit")
app.add_typer(index_app, name="index")
app.command("diff")(diff_cmd)
app.command("merge")(merge_cmd)
app.command("validate")(validate_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed diffcommit version."""
    typer.echo(f"diffcommit {_installed_version()}")


if __name__ == "__main__":
    app()
