"""Task graph: the registry the host populates and the rules that wire it."""

from .registry import TaskListener, TaskRegistry
from .rules import NamingRule, RuleEngine, default_rules
from .task import Task, TaskAction, TaskFailure

__all__ = [
    "NamingRule",
    "RuleEngine",
    "Task",
    "TaskAction",
    "TaskFailure",
    "TaskListener",
    "TaskRegistry",
    "default_rules",
]
