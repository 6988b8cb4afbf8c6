"""External API collaborators for prnotifier."""
