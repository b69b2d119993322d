"""A named unit of work in the host build graph."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeAlias

from vlapp.core.errors import ErrorCode
from vlapp.core.result import Ok, Result

if TYPE_CHECKING:
    from .registry import TaskRegistry

__all__ = ["Task", "TaskAction", "TaskFailure"]


@dataclass(frozen=True, slots=True)
class TaskFailure:
    """Why a task action failed.

    Attributes:
        task: Name of the failed task
        message: Human-readable reason
        hint: Optional fix suggestion
        code: Exit code the CLI reports for this failure
    """

    task: str
    message: str
    hint: str | None = None
    code: ErrorCode = ErrorCode.COMMAND_ERROR


TaskAction: TypeAlias = Callable[[], Result[str, TaskFailure]]


class Task:
    """A registered task.

    The name never changes once registered. Edges live in the owning
    registry, which validates them; they are sets and only grow.
    """

    __slots__ = ("_name", "_registry", "action", "description", "group")

    def __init__(
        self,
        name: str,
        registry: TaskRegistry,
        *,
        action: TaskAction | None = None,
        description: str | None = None,
        group: str | None = None,
    ) -> None:
        self._name = name
        self._registry = registry
        self.action = action
        self.description = description
        self.group = group

    @property
    def name(self) -> str:
        return self._name

    @property
    def dependencies(self) -> frozenset[str]:
        """Tasks that must run, and succeed, before this one (depends-on)."""
        return self._registry.dependencies_of(self._name)

    @property
    def predecessors(self) -> frozenset[str]:
        """Tasks this one runs after when both are scheduled (must-run-after)."""
        return self._registry.predecessors_of(self._name)

    def depends_on(self, *names: str | Iterable[str]) -> Task:
        self._registry.add_dependencies(self._name, _flatten(names))
        return self

    def must_run_after(self, *names: str | Iterable[str]) -> Task:
        self._registry.add_predecessors(self._name, _flatten(names))
        return self

    def run(self) -> Result[str, TaskFailure]:
        """Execute this task's action alone, without its dependencies."""
        if self.action is None:
            return Ok("nothing to do")
        return self.action()

    def __repr__(self) -> str:
        return f"Task({self._name!r})"


def _flatten(names: tuple[str | Iterable[str], ...]) -> list[str]:
    out: list[str] = []
    for item in names:
        if isinstance(item, str):
            out.append(item)
        else:
            out.extend(item)
    return out
