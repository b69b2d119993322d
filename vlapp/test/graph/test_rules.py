"""Tests for graph/rules.py."""

from __future__ import annotations

import pytest

from vlapp.core.config import BuildFlags
from vlapp.core.errors import ConfigurationFault
from vlapp.graph.registry import TaskRegistry
from vlapp.graph.rules import (
    NamingRule,
    RuleEngine,
    default_rules,
    dev_pre_build_rule,
    pre_release_config_rule,
)
from vlapp.tasks import names

RULE_A_TARGETS = {
    "tagProject",
    "generateProjectChangeLog",
    "verifyBuildServer",
    "verifyVersionControl",
    "verifyNoStageUrl",
}


def _registry_with_targets() -> TaskRegistry:
    registry = TaskRegistry()
    for name in (
        *names.VERIFIERS,
        names.GENERATE_PROJECT_CHANGELOG,
        names.GENERATE_GENERIC_CHANGELOG,
        names.TAG_PROJECT,
    ):
        registry.register(name)
    return registry


def _engine(flags: BuildFlags | None = None) -> RuleEngine:
    engine = RuleEngine(_registry_with_targets(), default_rules(flags or BuildFlags()))
    engine.install()
    return engine


class TestNamingRule:
    def test_prefix_and_suffix(self) -> None:
        rule = pre_release_config_rule()
        assert rule.matches("generateFreeReleaseBuildConfig")
        assert rule.matches("generateReleaseBuildConfig")
        assert not rule.matches("generateFreeDebugBuildConfig")
        assert not rule.matches("compileFreeReleaseBuildConfig")

    def test_case_sensitive(self) -> None:
        rule = pre_release_config_rule()
        assert not rule.matches("GenerateFreeReleaseBuildConfig")
        assert not rule.matches("generateFreeReleasebuildconfig")

    def test_exact(self) -> None:
        rule = dev_pre_build_rule()
        assert rule.matches("preDevReleaseBuild")
        assert not rule.matches("preDevReleaseBuildX")
        assert not rule.matches("prePreDevReleaseBuild")

    def test_targets(self) -> None:
        assert pre_release_config_rule().targets == RULE_A_TARGETS
        assert dev_pre_build_rule().targets == {"generateGenericChangeLog"}


class TestDefaultRules:
    def test_both_rules_by_default(self) -> None:
        assert [r.name for r in default_rules(BuildFlags())] == ["pre-release-config", "dev-pre-build"]

    def test_ignore_checks_drops_rule_a(self) -> None:
        flags = BuildFlags(values={"ignoreChecks": ""})
        assert [r.name for r in default_rules(flags)] == ["dev-pre-build"]


class TestRuleEngine:
    def test_rule_a_adds_five_edges(self) -> None:
        engine = _engine()
        task = engine.registry.register("generateFreeReleaseBuildConfig")

        assert task.dependencies == RULE_A_TARGETS
        assert engine.matches["generateFreeReleaseBuildConfig"] == ["pre-release-config"]

    @pytest.mark.parametrize(
        "name",
        [
            "generateFreeDebugBuildConfig",
            "assembleFreeRelease",
            "generateReleaseResources",
            "preDevDebugBuild",
        ],
    )
    def test_non_matching_tasks_get_no_edges(self, name: str) -> None:
        engine = _engine()
        task = engine.registry.register(name)

        assert task.dependencies == frozenset()
        assert name not in engine.matches

    def test_replayed_notification_adds_no_duplicates(self) -> None:
        engine = _engine()
        task = engine.registry.register("generateFreeReleaseBuildConfig")

        engine.on_task_registered(task)
        engine.on_task_registered(task)

        assert task.dependencies == RULE_A_TARGETS
        assert len(task.dependencies) == 5
        assert engine.matches[task.name] == ["pre-release-config"]

    def test_ignore_checks(self) -> None:
        engine = _engine(BuildFlags(values={"ignoreChecks": "true"}))
        task = engine.registry.register("generateFreeReleaseBuildConfig")

        assert task.dependencies == frozenset()

    def test_rule_b(self) -> None:
        engine = _engine()
        task = engine.registry.register("preDevReleaseBuild")

        assert task.dependencies == {"generateGenericChangeLog"}

    def test_rule_b_still_fires_with_ignore_checks(self) -> None:
        engine = _engine(BuildFlags(values={"ignoreChecks": ""}))
        task = engine.registry.register("preDevReleaseBuild")

        assert task.dependencies == {"generateGenericChangeLog"}

    def test_tasks_registered_before_install_are_wired(self) -> None:
        registry = _registry_with_targets()
        early = registry.register("generateProReleaseBuildConfig")

        RuleEngine(registry, default_rules(BuildFlags())).install()

        assert early.dependencies == RULE_A_TARGETS

    def test_install_without_targets_is_fault(self) -> None:
        registry = TaskRegistry()
        registry.register(names.TAG_PROJECT)
        engine = RuleEngine(registry, default_rules(BuildFlags()))

        with pytest.raises(ConfigurationFault, match="generateProjectChangeLog"):
            engine.install()

    def test_custom_rule(self) -> None:
        registry = TaskRegistry()
        registry.register("lint")
        rule = NamingRule(name="lint-first", prefix="assemble", suffix="", targets=frozenset({"lint"}))
        RuleEngine(registry, [rule]).install()

        assert registry.register("assembleDebug").dependencies == {"lint"}
        assert registry.register("bundleDebug").dependencies == frozenset()
