from __future__ import annotations

import typer

from vlapp.cli.commands._helpers import run_task
from vlapp.cli.context import CLIContext, build_context, options_from
from vlapp.core.errors import ConfigurationFault, ErrorCode
from vlapp.graph.task import Task
from vlapp.output.console import Style


def tasks(ctx: typer.Context) -> None:
    """List the tasks the plugin registers."""
    cli = build_context(options_from(ctx))

    groups: dict[str, list[Task]] = {}
    for task in cli.build.registry:
        groups.setdefault(task.group or "other", []).append(task)

    for group, members in groups.items():
        cli.console.header(group.capitalize())
        for task in members:
            line = f"{task.name} - {task.description}" if task.description else task.name
            cli.console.print(line)


def graph(
    ctx: typer.Context,
    host_tasks: list[str] = typer.Argument(..., help="Host task names to register, in order"),
) -> None:
    """Register host tasks and show the edges the rules add to them."""
    cli = build_context(options_from(ctx))
    registry = cli.build.registry

    try:
        for name in host_tasks:
            registry.register(name)
    except ConfigurationFault as e:
        cli.console.error(e.message)
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR)) from e

    for name in host_tasks:
        _print_edges(cli, registry.require(name))


def _print_edges(cli: CLIContext, task: Task) -> None:
    fired = cli.plugin.engine.matches.get(task.name, [])
    cli.console.header(task.name)
    if not fired:
        cli.console.print("no rule matched", Style.DIM)
    for rule in fired:
        cli.console.print(f"rule: {rule}", Style.INFO)
    for dep in sorted(task.dependencies):
        cli.console.print(f"depends on {dep}")
    for pred in sorted(task.predecessors):
        cli.console.print(f"runs after {pred}")


def run(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Task name, e.g. verifyVersionControl"),
) -> None:
    """Run a single task (without its dependencies)."""
    cli = build_context(options_from(ctx))
    run_task(cli, name)
