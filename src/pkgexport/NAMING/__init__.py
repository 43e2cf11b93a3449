"""Image naming policies."""
