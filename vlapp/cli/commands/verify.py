from __future__ import annotations

import typer

from vlapp.cli.context import build_context, options_from
from vlapp.core.errors import ErrorCode
from vlapp.core.result import Err
from vlapp.output.console import Style
from vlapp.tasks.verify import verifications


def verify(ctx: typer.Context) -> None:
    """Run all release verifications and report every failure."""
    cli = build_context(options_from(ctx))

    failed = False
    for check in verifications(cli.build):
        result = check.check()
        if isinstance(result, Err):
            failed = True
            cli.console.error(f"{check.name}: {result.error.message}")
            if result.error.hint:
                cli.console.print(f"hint: {result.error.hint}", Style.DIM)
        else:
            cli.console.success(check.name)

    if failed:
        raise typer.Exit(code=int(ErrorCode.VERIFY_ERROR))
