"""Package dependency graph."""
