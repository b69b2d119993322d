"""Explicit build context handed to every component.

Nothing in vlapp reads global state: the project root, configuration, build
flags, task registry, host variants, output console, environment and clock
all travel in a ``BuildContext``.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from vlapp.core.config import BuildFlags, Config
from vlapp.git.repository import Repository
from vlapp.graph.registry import TaskRegistry
from vlapp.output.console import ConsoleProtocol
from vlapp.variants import VariantCollection


def _process_environ() -> Mapping[str, str]:
    return os.environ


def _empty_registry() -> TaskRegistry:
    return TaskRegistry()


@dataclass(frozen=True, slots=True)
class BuildContext:
    """Everything a task needs, passed in at construction.

    Attributes:
        project_root: Root of the Android project (holds version.properties)
        config: Plugin settings from vlapp.toml
        flags: Build flags (ignoreChecks, devBuild, ...)
        console: Where tasks report progress
        registry: The host's task registry
        variants: The host's build variants, named by the plugin
        environ: Environment variables, for the build server check
        clock: Current local time, for version code timestamps
    """

    project_root: Path
    config: Config
    flags: BuildFlags
    console: ConsoleProtocol
    registry: TaskRegistry = field(default_factory=_empty_registry)
    variants: VariantCollection = field(default_factory=VariantCollection)
    environ: Mapping[str, str] = field(default_factory=_process_environ)
    clock: Callable[[], datetime] = datetime.now

    @property
    def version_file(self) -> Path:
        return self.project_root / self.config.paths.version_file

    @property
    def build_file(self) -> Path:
        return self.project_root / self.config.paths.build_file

    @property
    def changelog_dir(self) -> Path:
        return self.project_root / self.config.paths.changelog_dir

    def repository(self) -> Repository:
        return Repository(self.project_root)
