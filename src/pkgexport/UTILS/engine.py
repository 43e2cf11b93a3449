"""
Invocation of the external container engine.
"""
import logging
import shlex
import subprocess
from typing import List, Optional, Sequence

from ..config import ExportSettings

logger = logging.getLogger(__name__)


def docker_cmd(settings: Optional[ExportSettings] = None) -> List[str]:
    """
    The command prefix used to reach the engine, e.g. ['docker'] or ['podman'].
    """
    settings = settings or ExportSettings.from_env()
    return shlex.split(settings.docker_cmd)


class Engine:
    """
    Runs engine subcommands synchronously. Every call blocks until the
    subprocess exits; there are no timeouts or retries.
    """

    def __init__(self, command: Optional[Sequence[str]] = None):
        """
        Args:
            command: Engine command prefix. Defaults to the configured docker command.
        """
        self.command = list(command) if command else docker_cmd()

    def _argv(self, args: Sequence[str]) -> List[str]:
        argv = self.command + list(args)
        logger.debug("Running: %s", " ".join(shlex.quote(a) for a in argv))
        return argv

    def run(self, args: Sequence[str], cwd: Optional[str] = None) -> int:
        """
        Run a subcommand with inherited stdout/stderr.

        Returns:
            The process exit status.
        """
        return subprocess.run(self._argv(args), cwd=cwd).returncode

    def output(self, args: Sequence[str], cwd: Optional[str] = None) -> str:
        """
        Run a subcommand and capture its standard output as text.
        """
        result = subprocess.run(self._argv(args), cwd=cwd, capture_output=True, text=True)
        return result.stdout
