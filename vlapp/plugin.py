"""Install the release-management tasks into a host build graph.

``apply`` is the single entry point. It

1. registers every fixed task, so each can be invoked by name,
2. orders the changelog and tagging tasks after the verifiers,
3. installs the rule engine, which from then on adds depends-on edges to
   host tasks matching its naming rules,
4. names the outputs of every release variant, including variants the host
   adds later,
5. returns the extension the build description uses to read version data.

All rule targets exist before the engine subscribes, so a host task can
never reference a task that is not registered yet.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from vlapp.context import BuildContext
from vlapp.core.errors import ConfigurationFault
from vlapp.core.result import Err
from vlapp.graph.rules import RuleEngine, default_rules
from vlapp.tasks import names
from vlapp.tasks.changelog import generic_changelog_task, project_changelog_task
from vlapp.tasks.modules import MODULES, add_module_task, flavors_task
from vlapp.tasks.tag import tag_task
from vlapp.tasks.verify import verification_action, verifications
from vlapp.tasks.version import VersionField, bump_task, read_version_record
from vlapp.variants import name_outputs

__all__ = [
    "AppliedPlugin",
    "Extension",
    "GET_VERSION_CODE_TIMESTAMP",
    "GET_VERSION_NAME_FROM_FILE",
    "apply",
]

GET_VERSION_CODE_TIMESTAMP = "getVersionCodeTimestamp"
GET_VERSION_NAME_FROM_FILE = "getVersionNameFromFile"

_TIMESTAMP_FORMAT = "%y%m%d%H%M"


@dataclass(frozen=True, slots=True)
class Extension:
    """Version helpers exposed to the build description.

    The set of entries is fixed; see ``entries``.
    """

    ctx: BuildContext

    @staticmethod
    def entries() -> tuple[str, ...]:
        return (GET_VERSION_CODE_TIMESTAMP, GET_VERSION_NAME_FROM_FILE)

    def get(self, entry: str) -> Callable[[], int | str]:
        match entry:
            case "getVersionCodeTimestamp":
                return self.get_version_code_timestamp
            case "getVersionNameFromFile":
                return self.get_version_name_from_file
            case _:
                raise KeyError(entry)

    def get_version_code_timestamp(self) -> int:
        """``1`` for dev builds, else the current time as ``yyMMddHHmm``.

        Computed on every call.
        """
        if self.ctx.flags.dev_build:
            return 1
        return int(self.ctx.clock().strftime(_TIMESTAMP_FORMAT))

    def get_version_name_from_file(self) -> str:
        """``major.minor.build`` from the version record.

        Raises:
            ConfigurationFault: If the record is missing or malformed.
        """
        record = read_version_record(self.ctx.version_file)
        if isinstance(record, Err):
            raise ConfigurationFault(record.error.message, hint=record.error.hint)
        return record.value.version_name


def _summary(doc: str | None) -> str | None:
    lines = (doc or "").strip().splitlines()
    return lines[0] if lines else None


@dataclass(frozen=True, slots=True)
class AppliedPlugin:
    extension: Extension
    engine: RuleEngine


def apply(ctx: BuildContext) -> AppliedPlugin:
    """Register the plugin tasks in ``ctx.registry`` and install the rules.

    Raises:
        ConfigurationFault: If a plugin task name is already taken.
    """
    tasks = ctx.registry

    for verification in verifications(ctx):
        tasks.register(
            verification.name,
            verification_action(ctx, verification),
            group="verification",
            description=_summary(verification.__doc__),
        )

    project_changelog = tasks.register(
        names.GENERATE_PROJECT_CHANGELOG,
        project_changelog_task(ctx, names.GENERATE_PROJECT_CHANGELOG),
        group="changelog",
        description="Write the commits since the last release tag",
    ).must_run_after(names.VERIFIERS)
    tasks.register(
        names.GENERATE_GENERIC_CHANGELOG,
        generic_changelog_task(ctx, names.GENERATE_GENERIC_CHANGELOG),
        group="changelog",
        description="Write the commits since -P changelogSince (default: last tag)",
    ).must_run_after(names.VERIFIERS)

    bumps: tuple[tuple[str, VersionField], ...] = (
        (names.INCREASE_MAJOR_VERSION, "major"),
        (names.INCREASE_MINOR_VERSION, "minor"),
        (names.INCREASE_BUILD_VERSION, "build"),
    )
    for task_name, kind in bumps:
        tasks.register(
            task_name,
            bump_task(ctx, task_name, kind),
            group="version",
            description=f"Increment the {kind} version number",
        )

    tasks.register(
        names.GET_FLAVORS,
        flavors_task(ctx, names.GET_FLAVORS),
        group="modules",
        description="List the product flavors of the app",
    )
    for spec in MODULES:
        tasks.register(
            spec.task_name,
            add_module_task(ctx, spec),
            group="modules",
            description=f"Add the {spec.title} module dependency",
        )

    tasks.register(
        names.TAG_PROJECT,
        tag_task(ctx, names.TAG_PROJECT),
        group="release",
        description="Tag HEAD with the current version",
    ).must_run_after(*names.VERIFIERS, project_changelog.name)

    engine = RuleEngine(tasks, default_rules(ctx.flags))
    engine.install()
    ctx.variants.all(name_outputs)
    return AppliedPlugin(extension=Extension(ctx), engine=engine)
