"""Build roots, image builders and built image handles."""
