"""
User-facing progress output.
"""
from enum import Enum
import click


class Status(str, Enum):
    """
    Kinds of progress lines emitted around each risky step.
    """
    CREATING = "Creating"
    CREATED = "Created"
    UPLOADING = "Uploading"
    UPLOADED = "Uploaded"
    DELETING = "Deleting"
    DELETED = "Deleted"
    DESTROYING = "Destroying"


_SYMBOLS = {
    Status.CREATING: "Ω",
    Status.CREATED: "✓",
    Status.UPLOADING: "↑",
    Status.UPLOADED: "✓",
    Status.DELETING: "☒",
    Status.DELETED: "✓",
    Status.DESTROYING: "☒",
}


class UI:
    """
    Writes progress lines to stderr so stdout stays free for machine output.
    """
    def __init__(self, quiet: bool = False):
        self.quiet = quiet

    def _emit(self, line: str):
        if not self.quiet:
            click.echo(line, err=True)

    def begin(self, message: str):
        """Announce the start of a multi-step operation."""
        self._emit(f"» {message}")

    def status(self, status: Status, message: str):
        """Report a single step."""
        self._emit(f"{_SYMBOLS[status]} {status.value} {message}")

    def end(self, message: str):
        """Announce the successful end of a multi-step operation."""
        self._emit(f"★ {message}")
