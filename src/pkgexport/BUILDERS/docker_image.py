# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.


"""
Handle to a container image that exists in the local engine.
"""
import json
import logging
from pathlib import Path
from typing import List, Optional

from .identifiers import Identified
from .templates import BUILD_REPORT, render
from ..MODELS.build_context import Credentials
from ..UTILS.engine import Engine
from ..UTILS.fs import write_file
from ..UTILS.ui import UI, Status
from ..errors import HandleConsumedError, PushImageFailed, RemoveImageFailed

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = "https://index.docker.io/v1/"
DOCKER_CONFIG_FILE = "config.json"
BUILD_REPORT_FILE = "last_docker_export.env"


class DockerImage(Identified):
    """
    A built image which exists locally.

    The handle owns `workdir` and reuses it for registry configuration.
    `rm` consumes the handle; using it afterwards raises HandleConsumedError.
    """

    def __init__(self, id: str, name: str, tags: List[str], workdir, engine: Optional[Engine] = None):
        self.id = id
        self.name = name
        self.tags = list(tags)
        self.workdir = Path(workdir)
        self.engine = engine or Engine()
        self._consumed = False

    def __repr__(self) -> str:
        return f"DockerImage(id={self.id!r}, name={self.name!r}, tags={self.tags!r})"

    def _ensure_usable(self):
        if self._consumed:
            raise HandleConsumedError(f"Docker image '{self.name}' has already been removed")

    def push(self, ui: UI, credentials: Credentials, registry_url: Optional[str] = None):
        """
        Pushes the image, with all tags, to a remote registry.

        Tags are pushed in order and the first failure stops the push.
        Identifiers pushed before the failure stay on the registry.

        Raises:
            OSError: If the registry config file cannot be written.
            PushImageFailed: If pushing one of the identifiers fails.
        """
        self._ensure_usable()
        ui.begin(f"Pushing Docker image '{self.name}' with all tags to remote registry")
        ui.status(Status.CREATING, f"registry config in {self.workdir}")
        config = self.create_docker_config_file(credentials, registry_url)
        ui.status(Status.CREATED, f"registry config {config}")

        for image_tag in self.expanded_identifiers():
            ui.status(Status.UPLOADING, f"image '{image_tag}' to remote registry")
            exit_status = self.engine.run(["--config", str(self.workdir), "push", image_tag])
            if exit_status != 0:
                raise PushImageFailed(exit_status)
            ui.status(Status.UPLOADED, f"image '{image_tag}'")

        ui.end(f"Docker image '{self.name}' published with tags: {', '.join(self.tags)}")

    def rm(self, ui: UI):
        """
        Removes the image and all its tags from the local engine.

        The handle is consumed whether or not removal succeeds.

        Raises:
            RemoveImageFailed: If one of the identifiers cannot be removed.
        """
        self._ensure_usable()
        self._consumed = True
        ui.begin(f"Cleaning up local Docker image '{self.name}' with all tags")

        for image_tag in self.expanded_identifiers():
            ui.status(Status.DELETING, f"local image '{image_tag}'")
            exit_status = self.engine.run(["rmi", image_tag])
            if exit_status != 0:
                raise RemoveImageFailed(exit_status)
            ui.status(Status.DELETED, f"local image '{image_tag}'")

        ui.end(f"Local Docker image '{self.name}' with tags: {', '.join(self.tags)} cleaned up")

    def create_report(self, ui: UI, dst) -> Path:
        """
        Writes a build report with the image's metadata into `dst`.

        Raises:
            OSError: If the directory cannot be created or the file written.
        """
        self._ensure_usable()
        dst = Path(dst)
        report = dst / BUILD_REPORT_FILE
        ui.status(Status.CREATING, f"build report {report}")
        dst.mkdir(parents=True, exist_ok=True)
        name_tags = [f"{self.name}:{tag}" for tag in self.tags]
        content = render(
            BUILD_REPORT,
            id=self.id,
            name=self.name,
            tags=",".join(self.tags),
            name_tags=",".join(name_tags),
        )
        write_file(report, content)
        ui.status(Status.CREATED, f"build report {report}")
        return report

    def create_docker_config_file(self, credentials: Credentials, registry_url: Optional[str] = None) -> Path:
        """
        Writes the engine's registry auth file into `workdir`, replacing any
        existing one.
        """
        self._ensure_usable()
        self.workdir.mkdir(parents=True, exist_ok=True)
        registry = registry_url or DEFAULT_REGISTRY_URL
        logger.debug("Using registry: %s", registry)
        config = {"auths": {registry: {"auth": credentials.token}}}
        return write_file(self.workdir / DOCKER_CONFIG_FILE, json.dumps(config, separators=(",", ":")))
