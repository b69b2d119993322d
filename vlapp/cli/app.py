from __future__ import annotations

from pathlib import Path

import typer

from vlapp import __version__
from vlapp.cli.commands.release import changelog, tag
from vlapp.cli.commands.tasks_cmd import graph, run, tasks
from vlapp.cli.commands.verify import verify
from vlapp.cli.commands.version import version_app
from vlapp.cli.context import CLIOptions


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(tasks)
app.command()(graph)
app.command()(run)
app.command()(verify)
app.command()(changelog)
app.command()(tag)

# Sub-apps
app.add_typer(version_app, name="version")


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    project: Path = typer.Option(
        Path("."),
        "--project",
        help="Android project root (holds version.properties)",
    ),
    properties: list[str] | None = typer.Option(
        None,
        "--property",
        "-P",
        help="Build flag override, e.g. -P ignoreChecks or -P changelogSince=v1.0.0",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)

    ctx.obj = CLIOptions(project=project, properties=tuple(properties or ()))


def main() -> None:
    app()
