from __future__ import annotations

import typer

from vlapp.cli.commands._helpers import run_task
from vlapp.cli.context import build_context, options_from
from vlapp.core.errors import ConfigurationFault, ErrorCode
from vlapp.output.console import Style
from vlapp.tasks import names
from vlapp.variants import BuildVariant, apply_output_names

version_app = typer.Typer(no_args_is_help=True, help="Read and bump the app version.")

_BUMP_TASKS = {
    "major": names.INCREASE_MAJOR_VERSION,
    "minor": names.INCREASE_MINOR_VERSION,
    "build": names.INCREASE_BUILD_VERSION,
}


@version_app.command("show")
def show(ctx: typer.Context) -> None:
    """Print the version name from version.properties."""
    cli = build_context(options_from(ctx))
    try:
        cli.console.print(cli.plugin.extension.get_version_name_from_file())
    except ConfigurationFault as e:
        cli.console.error(e.message)
        if e.hint:
            cli.console.print(f"hint: {e.hint}", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR)) from e


@version_app.command("bump")
def bump(
    ctx: typer.Context,
    field: str = typer.Argument(..., help="major, minor or build"),
) -> None:
    """Increment one version field."""
    task_name = _BUMP_TASKS.get(field)
    if task_name is None:
        typer.echo(f"error: unknown version field: {field} (expected major, minor or build)", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    run_task(build_context(options_from(ctx)), task_name)


@version_app.command("timestamp")
def timestamp(ctx: typer.Context) -> None:
    """Print the version code timestamp (1 for -P devBuild)."""
    cli = build_context(options_from(ctx))
    cli.console.print(str(cli.plugin.extension.get_version_code_timestamp()))


@version_app.command("output-name")
def output_name(
    ctx: typer.Context,
    flavor: str = typer.Option(..., "--flavor", help="Product flavor name"),
    version_name: str = typer.Option(..., "--version-name", help="Dotted version name"),
    version_code: int = typer.Option(..., "--version-code", help="Version code"),
    build_type: str = typer.Option("release", "--build-type", help="Build type name"),
) -> None:
    """Print the artifact name a variant gets (release builds only)."""
    cli = build_context(options_from(ctx))
    variant = BuildVariant(
        flavor_name=flavor,
        version_name=version_name,
        version_code=version_code,
        build_type=build_type,
    )
    if not apply_output_names([variant]):
        cli.console.print(f"{build_type}: output name unchanged", Style.DIM)
        return
    cli.console.print(variant.outputs[0].output_file_name or "")
