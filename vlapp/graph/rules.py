"""Naming rules that add depends-on edges to host tasks as they appear.

The host registers tasks the plugin knows nothing about except their names.
``RuleEngine`` watches the registry and, for each task, evaluates every rule:

- pre-release config: ``generate*ReleaseBuildConfig`` depends on tagging,
  the project changelog and the three verifiers. Left out entirely when the
  ``ignoreChecks`` flag is set.
- dev pre-build: ``preDevReleaseBuild`` depends on the generic changelog.

Rules are idempotent: re-evaluating a task adds no edge twice because the
registry keeps edges as sets.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from vlapp.core.config import BuildFlags
from vlapp.core.errors import ConfigurationFault
from vlapp.tasks import names

from .registry import TaskRegistry
from .task import Task

__all__ = [
    "NamingRule",
    "RuleEngine",
    "default_rules",
    "dev_pre_build_rule",
    "pre_release_config_rule",
]


@dataclass(frozen=True, slots=True)
class NamingRule:
    """Tasks whose name matches get depends-on edges to ``targets``.

    A rule matches either one exact name or, when ``exact`` is None, every
    name starting with ``prefix`` and ending with ``suffix``. Matching is
    case-sensitive.
    """

    name: str
    targets: frozenset[str]
    prefix: str = ""
    suffix: str = ""
    exact: str | None = None

    def matches(self, task_name: str) -> bool:
        if self.exact is not None:
            return task_name == self.exact
        return task_name.startswith(self.prefix) and task_name.endswith(self.suffix)


def pre_release_config_rule() -> NamingRule:
    return NamingRule(
        name="pre-release-config",
        prefix=names.RELEASE_BUILD_CONFIG_PREFIX,
        suffix=names.RELEASE_BUILD_CONFIG_SUFFIX,
        targets=frozenset(
            {
                names.TAG_PROJECT,
                names.GENERATE_PROJECT_CHANGELOG,
                *names.VERIFIERS,
            }
        ),
    )


def dev_pre_build_rule() -> NamingRule:
    return NamingRule(
        name="dev-pre-build",
        exact=names.PRE_DEV_RELEASE_BUILD,
        targets=frozenset({names.GENERATE_GENERIC_CHANGELOG}),
    )


def default_rules(flags: BuildFlags) -> list[NamingRule]:
    """The rule set for a build; ``ignoreChecks`` drops the pre-release rule."""
    rules: list[NamingRule] = []
    if not flags.ignore_checks:
        rules.append(pre_release_config_rule())
    rules.append(dev_pre_build_rule())
    return rules


def _empty_matches() -> dict[str, list[str]]:
    return {}


@dataclass
class RuleEngine:
    """Applies ``rules`` to every task of ``registry``.

    Attributes:
        registry: The registry to watch
        rules: Rules evaluated, in order, for each task
        matches: Task name -> names of the rules that fired for it
    """

    registry: TaskRegistry
    rules: Sequence[NamingRule]
    matches: dict[str, list[str]] = field(default_factory=_empty_matches)

    def install(self) -> None:
        """Check that every rule target exists, then subscribe.

        Raises:
            ConfigurationFault: If a target is not registered yet.
        """
        missing = sorted(t for t in self._targets() if t not in self.registry)
        if missing:
            raise ConfigurationFault(
                f"rule targets not registered: {', '.join(missing)}",
                hint="Register the plugin tasks before installing the rules",
            )
        self.registry.subscribe(self.on_task_registered)

    def on_task_registered(self, task: Task) -> None:
        for rule in self.rules:
            if not rule.matches(task.name):
                continue
            self.registry.add_dependencies(task.name, rule.targets)
            fired = self.matches.setdefault(task.name, [])
            if rule.name not in fired:
                fired.append(rule.name)

    def _targets(self) -> Iterable[str]:
        for rule in self.rules:
            yield from rule.targets
