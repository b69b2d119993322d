"""Scaffolding tasks that add optional feature modules to the app.

Each ``add*Module`` task inserts its module's dependency into the top-level
``dependencies { }`` block of the app build file. Running a task twice leaves
the file unchanged. ``getFlavors`` lists the declared product flavors.

None of these tasks takes part in the release ordering rules.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from vlapp.core.config import ModulesConfig
from vlapp.core.result import Err, Ok, Result
from vlapp.graph.task import TaskAction, TaskFailure
from vlapp.platform.files import write_text_atomic

from .errors import ReleaseError, to_task_failure

if TYPE_CHECKING:
    from vlapp.context import BuildContext


@dataclass(frozen=True, slots=True)
class ModuleSpec:
    task_name: str
    artifact: str
    title: str

    def coordinate(self, modules: ModulesConfig) -> str:
        return f"{modules.group}:{self.artifact}:{modules.version}"


MODULES: tuple[ModuleSpec, ...] = (
    ModuleSpec("addAdtechModule", "adtech", "Adtech"),
    ModuleSpec("addAndroidTvModule", "androidtv", "Android TV"),
    ModuleSpec("addCxenseModule", "cxense", "Cxense"),
    ModuleSpec("addDfpModule", "dfp", "DFP"),
    ModuleSpec("addInfosoftModule", "infosoft", "Infosoft"),
    ModuleSpec("addKindleModule", "kindle", "Kindle"),
    ModuleSpec("addSpidModule", "spid", "SPiD"),
    ModuleSpec("addTnsDkModule", "tns-gallup-dk", "TNS Gallup DK"),
    ModuleSpec("addTnsNoModule", "tns-gallup-no", "TNS Gallup NO"),
    ModuleSpec("addComScoreModule", "comscore", "comScore"),
)

# top-level block only; the buildscript's dependencies block is indented
_DEPENDENCIES_RE = re.compile(r"(?m)^dependencies\s*\{[ \t]*$")
_PRODUCT_FLAVORS_RE = re.compile(r"\bproductFlavors\s*\{")
_BLOCK_OPEN_RE = re.compile(r"(?m)^\s*([A-Za-z_]\w*)\s*\{")


def _read_build_file(path: Path) -> Result[str, ReleaseError]:
    try:
        return Ok(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        return Err(
            ReleaseError(
                kind="build_file_invalid",
                message=f"cannot read build file: {e}",
                hint=str(path),
            )
        )


def add_module_dependency(path: Path, coordinate: str) -> Result[bool, ReleaseError]:
    """Add ``implementation "<coordinate>"`` to the build file.

    Returns Ok(False) when the module (any version) is already declared.
    """
    text = _read_build_file(path)
    if isinstance(text, Err):
        return text

    group_artifact = coordinate.rsplit(":", 1)[0] + ":"
    if group_artifact in text.value:
        return Ok(False)

    line = f'    implementation "{coordinate}"'
    m = _DEPENDENCIES_RE.search(text.value)
    if m is None:
        updated = text.value.rstrip("\n") + f"\n\ndependencies {{\n{line}\n}}\n"
    else:
        updated = text.value[: m.end()] + "\n" + line + text.value[m.end() :]

    try:
        write_text_atomic(path, updated)
    except OSError as e:
        return Err(ReleaseError(kind="write_failed", message=f"failed to write build file: {e}", hint=str(path)))
    return Ok(True)


def _block_body(text: str, open_brace: int) -> str | None:
    """Text between ``text[open_brace]`` and its matching closing brace."""
    depth = 0
    for i in range(open_brace, len(text)):
        if text[i] == "{":
            depth += 1
        elif text[i] == "}":
            depth -= 1
            if depth == 0:
                return text[open_brace + 1 : i]
    return None


def list_flavors(path: Path) -> Result[list[str], ReleaseError]:
    """Product flavor names declared in the build file, in file order."""
    text = _read_build_file(path)
    if isinstance(text, Err):
        return text

    m = _PRODUCT_FLAVORS_RE.search(text.value)
    if m is None:
        return Ok([])

    body = _block_body(text.value, m.end() - 1)
    if body is None:
        return Err(
            ReleaseError(
                kind="build_file_invalid",
                message="unbalanced braces in productFlavors block",
                hint=str(path),
            )
        )

    flavors: list[str] = []
    for block in _BLOCK_OPEN_RE.finditer(body):
        before = body[: block.start()]
        if before.count("{") == before.count("}"):
            flavors.append(block.group(1))
    return Ok(flavors)


def add_module_task(ctx: BuildContext, spec: ModuleSpec) -> TaskAction:
    def action() -> Result[str, TaskFailure]:
        coordinate = spec.coordinate(ctx.config.modules)
        match add_module_dependency(ctx.build_file, coordinate):
            case Err(error):
                return Err(to_task_failure(spec.task_name, error))
            case Ok(True):
                ctx.console.success(f"added {spec.title} module ({coordinate})")
                return Ok(coordinate)
            case Ok(_):
                ctx.console.info(f"{spec.title} module already present")
                return Ok(coordinate)

    return action


def flavors_task(ctx: BuildContext, task_name: str) -> TaskAction:
    def action() -> Result[str, TaskFailure]:
        match list_flavors(ctx.build_file):
            case Err(error):
                return Err(to_task_failure(task_name, error))
            case Ok(flavors):
                for flavor in flavors:
                    ctx.console.print(flavor)
                return Ok(",".join(flavors))

    return action
