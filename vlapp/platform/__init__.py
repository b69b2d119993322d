"""Operating system boundary: subprocesses and files."""

from .files import write_text_atomic
from .process import ProcessError, run

__all__ = ["ProcessError", "run", "write_text_atomic"]
