from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import typer

from vlapp.context import BuildContext
from vlapp.core.config import CONFIG_FILE_NAME, load_config_or_default, load_flags, parse_flag_overrides
from vlapp.core.errors import ConfigurationFault, ErrorCode
from vlapp.core.result import Err
from vlapp.output.console import ConsoleProtocol, RichConsole, Style
from vlapp.plugin import AppliedPlugin, apply


@dataclass(frozen=True, slots=True)
class CLIOptions:
    """Global options collected by the app callback."""

    project: Path = field(default_factory=Path.cwd)
    properties: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CLIContext:
    build: BuildContext
    plugin: AppliedPlugin
    console: ConsoleProtocol


def options_from(ctx: typer.Context) -> CLIOptions:
    obj = ctx.find_root().obj
    return obj if isinstance(obj, CLIOptions) else CLIOptions()


def _fail(console: ConsoleProtocol, message: str, hint: str | None, code: ErrorCode) -> typer.Exit:
    console.error(message)
    if hint:
        console.print(f"hint: {hint}", Style.DIM)
    return typer.Exit(code=int(code))


def build_context(options: CLIOptions, console: ConsoleProtocol | None = None) -> CLIContext:
    """Load config and flags for the project, then apply the plugin."""
    console = console or RichConsole()

    root = options.project.expanduser().resolve()
    if not root.is_dir():
        raise _fail(console, f"project directory not found: {root}", None, ErrorCode.USER_ERROR)

    overrides = parse_flag_overrides(list(options.properties))
    if isinstance(overrides, Err):
        raise _fail(console, overrides.error.message, overrides.error.hint, ErrorCode.USER_ERROR)

    config = load_config_or_default(root / CONFIG_FILE_NAME)
    if isinstance(config, Err):
        raise _fail(console, config.error.message, config.error.hint, ErrorCode.CONFIG_ERROR)

    flags = load_flags(root, overrides.value)
    if isinstance(flags, Err):
        raise _fail(console, flags.error.message, flags.error.hint, ErrorCode.CONFIG_ERROR)

    build = BuildContext(project_root=root, config=config.value, flags=flags.value, console=console)
    try:
        plugin = apply(build)
    except ConfigurationFault as e:
        raise _fail(console, e.message, e.hint, ErrorCode.CONFIG_ERROR) from e

    return CLIContext(build=build, plugin=plugin, console=console)
