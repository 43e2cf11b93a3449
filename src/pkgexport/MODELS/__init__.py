"""Data models for build contexts and package identifiers."""
