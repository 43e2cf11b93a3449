"""Engine invocation, progress output and filesystem helpers."""
