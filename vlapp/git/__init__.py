"""Git access for the verification, changelog and tagging tasks."""

from .repository import GitError, GitStatus, Repository, StatusEntry

__all__ = ["GitError", "GitStatus", "Repository", "StatusEntry"]
