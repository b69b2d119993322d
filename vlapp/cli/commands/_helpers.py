"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from vlapp.core.errors import ErrorCode
from vlapp.core.result import Err, Ok
from vlapp.output.console import Style

if TYPE_CHECKING:
    from vlapp.cli.context import CLIContext


def run_task(ctx: CLIContext, name: str) -> str:
    """Run one registered task alone; exit with its failure code if it fails.

    Dependencies are not run: ordering is the host scheduler's job.
    """
    task = ctx.build.registry.get(name)
    if task is None:
        ctx.console.error(f"unknown task: {name}")
        ctx.console.print("hint: run `vlapp tasks` to list the available tasks", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    match task.run():
        case Err(failure):
            ctx.console.error(f"{failure.task}: {failure.message}")
            if failure.hint:
                ctx.console.print(f"hint: {failure.hint}", Style.DIM)
            raise typer.Exit(code=int(failure.code))
        case Ok(value):
            return value
