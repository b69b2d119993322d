"""Release-management tasks for an Android app build graph."""

__version__ = "0.1.0"
