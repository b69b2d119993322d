"""Release-management tasks: verification, changelog, version, tagging, modules."""
