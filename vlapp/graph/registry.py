"""Append-only task registry with registration listeners.

The host build description registers tasks by name and declares edges
between them. Listeners (the rule engine) are told about every task:

- ``subscribe`` first replays the tasks registered so far, in registration
  order, then delivers each later registration.
- Every listener sees every task exactly once.
- A registration made from inside a listener is queued and delivered once
  the current notification returns, still within the outermost
  ``register`` call. Order is preserved and nothing is dropped.
- A listener that raises aborts the outermost ``register`` or ``subscribe``:
  the tasks and subscriptions it added are removed, together with every
  edge pointing at those tasks, and the exception propagates.

Edges are resolved eagerly: both ends must already be registered. An edge
that would close a cycle (over depends-on and must-run-after combined) is a
``ConfigurationFault``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import TypeAlias

from vlapp.core.errors import ConfigurationFault

from .task import Task, TaskAction

__all__ = ["TaskListener", "TaskRegistry"]

TaskListener: TypeAlias = Callable[[Task], None]


@dataclass(slots=True)
class _Subscription:
    listener: TaskListener
    # index of the next task in registration order to deliver
    cursor: int = 0


class TaskRegistry:
    """Named tasks, their edges, and the listeners watching registrations."""

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._order: list[Task] = []
        self._dependencies: dict[str, set[str]] = {}
        self._predecessors: dict[str, set[str]] = {}
        self._subscriptions: list[_Subscription] = []
        self._dispatching = False

    def register(
        self,
        name: str,
        action: TaskAction | None = None,
        *,
        description: str | None = None,
        group: str | None = None,
    ) -> Task:
        """Register a new task and notify listeners.

        Raises:
            ConfigurationFault: If the name is blank or already registered.
            Exception: Whatever a listener raises; the task is then removed.
        """
        if not name or name != name.strip():
            raise ConfigurationFault(f"invalid task name: {name!r}")
        if name in self._tasks:
            raise ConfigurationFault(f"task already registered: {name}")

        task = Task(name, self, action=action, description=description, group=group)
        mark = (len(self._order), len(self._subscriptions))
        self._tasks[name] = task
        self._order.append(task)
        self._dependencies[name] = set()
        self._predecessors[name] = set()
        self._dispatch_or_rollback(mark)
        return task

    def subscribe(self, listener: TaskListener) -> None:
        """Deliver every registered task, past and future, to ``listener``."""
        mark = (len(self._order), len(self._subscriptions))
        self._subscriptions.append(_Subscription(listener))
        self._dispatch_or_rollback(mark)

    def get(self, name: str) -> Task | None:
        return self._tasks.get(name)

    def require(self, name: str) -> Task:
        """Return the task called ``name``.

        Raises:
            ConfigurationFault: If no such task is registered.
        """
        task = self._tasks.get(name)
        if task is None:
            raise ConfigurationFault(
                f"task not registered: {name}",
                hint="Register edge targets before the tasks that reference them",
            )
        return task

    def names(self) -> list[str]:
        """Task names in registration order."""
        return [t.name for t in self._order]

    def dependencies_of(self, name: str) -> frozenset[str]:
        self.require(name)
        return frozenset(self._dependencies[name])

    def predecessors_of(self, name: str) -> frozenset[str]:
        self.require(name)
        return frozenset(self._predecessors[name])

    def add_dependencies(self, name: str, targets: Iterable[str]) -> None:
        """Declare that ``name`` depends on each of ``targets``."""
        self._link(name, targets, self._dependencies)

    def add_predecessors(self, name: str, targets: Iterable[str]) -> None:
        """Declare that ``name`` must run after each of ``targets``."""
        self._link(name, targets, self._predecessors)

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._order))

    def __len__(self) -> int:
        return len(self._order)

    def _link(self, name: str, targets: Iterable[str], edges: dict[str, set[str]]) -> None:
        self.require(name)
        # validate everything first so a bad target leaves no partial edges
        wanted = [t for t in dict.fromkeys(targets) if t not in edges[name]]
        for target in wanted:
            self.require(target)
            if target == name:
                raise ConfigurationFault(f"task cannot be ordered after itself: {name}")
            if self._reaches(target, name):
                raise ConfigurationFault(f"cycle between {name} and {target}")
        edges[name].update(wanted)

    def _reaches(self, start: str, goal: str) -> bool:
        """True if ``goal`` is reachable from ``start`` over any edge kind."""
        seen: set[str] = set()
        stack = [start]
        while stack:
            current = stack.pop()
            if current == goal:
                return True
            if current in seen:
                continue
            seen.add(current)
            stack.extend(self._dependencies[current])
            stack.extend(self._predecessors[current])
        return False

    def _dispatch(self) -> None:
        if self._dispatching:
            # the outer dispatch loop picks up new tasks and subscriptions
            return

        self._dispatching = True
        try:
            delivered = True
            while delivered:
                delivered = False
                for sub in list(self._subscriptions):
                    if sub.cursor < len(self._order):
                        task = self._order[sub.cursor]
                        sub.cursor += 1
                        sub.listener(task)
                        delivered = True
        finally:
            self._dispatching = False

    def _dispatch_or_rollback(self, mark: tuple[int, int]) -> None:
        if self._dispatching:
            # the outermost call delivers it and undoes it on failure
            return
        try:
            self._dispatch()
        except Exception:
            self._rollback(*mark)
            raise

    def _rollback(self, task_count: int, subscription_count: int) -> None:
        """Forget tasks and subscriptions added after the given counts."""
        removed = {t.name for t in self._order[task_count:]}
        del self._order[task_count:]
        del self._subscriptions[subscription_count:]
        for name in removed:
            del self._tasks[name]
            del self._dependencies[name]
            del self._predecessors[name]
        for edges in (self._dependencies, self._predecessors):
            for targets in edges.values():
                targets -= removed
        for sub in self._subscriptions:
            sub.cursor = min(sub.cursor, task_count)
