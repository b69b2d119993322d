from __future__ import annotations

import typer

from vlapp.cli.commands._helpers import run_task
from vlapp.cli.context import build_context, options_from
from vlapp.tasks import names


def changelog(
    ctx: typer.Context,
    generic: bool = typer.Option(False, "--generic", help="Generic changelog (since -P changelogSince)"),
) -> None:
    """Write the changelog from the git history."""
    cli = build_context(options_from(ctx))
    run_task(cli, names.GENERATE_GENERIC_CHANGELOG if generic else names.GENERATE_PROJECT_CHANGELOG)


def tag(ctx: typer.Context) -> None:
    """Tag HEAD with the version from version.properties."""
    run_task(build_context(options_from(ctx)), names.TAG_PROJECT)
