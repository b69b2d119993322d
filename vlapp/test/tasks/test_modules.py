"""Tests for tasks/modules.py."""

from __future__ import annotations

from pathlib import Path

from vlapp.context import BuildContext
from vlapp.core.config import BuildFlags, Config, ModulesConfig
from vlapp.core.errors import ErrorCode
from vlapp.core.result import Err, Ok
from vlapp.output.console import MockConsole
from vlapp.tasks.modules import MODULES, add_module_dependency, add_module_task, flavors_task, list_flavors

BUILD_GRADLE = """\
buildscript {
    dependencies {
        classpath 'com.android.tools.build:gradle:8.5.0'
    }
}

android {
    productFlavors {
        free {
            applicationIdSuffix ".free"
            buildConfigField "String", "BASE_URL", "\\"https://api.example.com\\""
        }
        paid {
            resValue "string", "app_name", "Paid"
        }
    }
}

dependencies {
    implementation "androidx.core:core-ktx:1.13.1"
}
"""


class TestModuleSpecs:
    def test_task_names_are_unique(self) -> None:
        names = [spec.task_name for spec in MODULES]
        assert len(names) == len(set(names)) == 10

    def test_coordinate(self) -> None:
        spec = MODULES[0]
        assert spec.coordinate(ModulesConfig(group="com.example", version="2.0")) == "com.example:adtech:2.0"


class TestAddModuleDependency:
    def test_inserts_into_top_level_block(self, tmp_path: Path) -> None:
        path = tmp_path / "build.gradle"
        path.write_text(BUILD_GRADLE, encoding="utf-8")

        assert add_module_dependency(path, "com.visiolink.app:dfp:+") == Ok(True)

        text = path.read_text(encoding="utf-8")
        assert 'dependencies {\n    implementation "com.visiolink.app:dfp:+"\n    implementation "androidx' in text
        assert text.count("com.visiolink.app:dfp") == 1

    def test_second_run_is_noop(self, tmp_path: Path) -> None:
        path = tmp_path / "build.gradle"
        path.write_text(BUILD_GRADLE, encoding="utf-8")
        add_module_dependency(path, "com.visiolink.app:dfp:+")
        before = path.read_text(encoding="utf-8")

        assert add_module_dependency(path, "com.visiolink.app:dfp:1.2") == Ok(False)
        assert path.read_text(encoding="utf-8") == before

    def test_appends_block_when_missing(self, tmp_path: Path) -> None:
        path = tmp_path / "build.gradle"
        path.write_text("android {\n}\n", encoding="utf-8")

        assert add_module_dependency(path, "com.visiolink.app:kindle:+") == Ok(True)
        assert path.read_text(encoding="utf-8").endswith(
            'dependencies {\n    implementation "com.visiolink.app:kindle:+"\n}\n'
        )

    def test_missing_build_file(self, tmp_path: Path) -> None:
        result = add_module_dependency(tmp_path / "build.gradle", "com.visiolink.app:kindle:+")
        assert isinstance(result, Err)
        assert result.error.kind == "build_file_invalid"


class TestListFlavors:
    def test_flavor_names_in_order(self, tmp_path: Path) -> None:
        path = tmp_path / "build.gradle"
        path.write_text(BUILD_GRADLE, encoding="utf-8")
        assert list_flavors(path) == Ok(["free", "paid"])

    def test_no_flavors(self, tmp_path: Path) -> None:
        path = tmp_path / "build.gradle"
        path.write_text("android {\n}\n", encoding="utf-8")
        assert list_flavors(path) == Ok([])

    def test_unbalanced_block(self, tmp_path: Path) -> None:
        path = tmp_path / "build.gradle"
        path.write_text("android {\n    productFlavors {\n        free {\n", encoding="utf-8")

        result = list_flavors(path)

        assert isinstance(result, Err)
        assert "unbalanced" in result.error.message


class TestModuleTasks:
    def _ctx(self, tmp_path: Path) -> BuildContext:
        build_file = tmp_path / "app" / "build.gradle"
        build_file.parent.mkdir()
        build_file.write_text(BUILD_GRADLE, encoding="utf-8")
        return BuildContext(project_root=tmp_path, config=Config(), flags=BuildFlags(), console=MockConsole())

    def test_add_module_task_reports(self, tmp_path: Path) -> None:
        ctx = self._ctx(tmp_path)
        spec = next(s for s in MODULES if s.task_name == "addCxenseModule")
        console = ctx.console
        assert isinstance(console, MockConsole)

        assert add_module_task(ctx, spec)() == Ok("com.visiolink.app:cxense:+")
        assert console.find("added Cxense module")

        add_module_task(ctx, spec)()
        assert console.find("Cxense module already present")

    def test_flavors_task_prints_each_flavor(self, tmp_path: Path) -> None:
        ctx = self._ctx(tmp_path)
        console = ctx.console
        assert isinstance(console, MockConsole)

        assert flavors_task(ctx, "getFlavors")() == Ok("free,paid")
        assert console.messages[-2:] == ["free", "paid"]

    def test_missing_build_file_is_config_error(self, tmp_path: Path) -> None:
        ctx = BuildContext(project_root=tmp_path, config=Config(), flags=BuildFlags(), console=MockConsole())

        result = flavors_task(ctx, "getFlavors")()

        assert isinstance(result, Err)
        assert result.error.code == ErrorCode.CONFIG_ERROR
